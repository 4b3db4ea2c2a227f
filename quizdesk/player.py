"""Quiz attempt state and answer evaluation."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Sequence

from quizdesk.i18n import Translator, TranslateFn
from quizdesk.models import (
    Choice,
    MatchingQuestion,
    MultipleChoiceQuestion,
    Pair,
    Question,
    Quiz,
    TrueFalseQuestion,
)

log = logging.getLogger("quizdesk.player")


def pair_key(pair: Pair, index: int) -> str:
    return pair.id if isinstance(pair.id, str) and pair.id.strip() else f"pair_{index}"


def choice_key(choice: Choice, question_index: int, choice_index: int) -> str:
    return choice.id if isinstance(choice.id, str) and choice.id.strip() else f"choice_{question_index}_{choice_index}"


def generate_matching_options(
    questions: Sequence[Question], rng: random.Random | None = None
) -> dict[int, list[str]]:
    """Shuffled, de-duplicated right-hand values per matching question index."""
    rng = rng or random.Random()
    options: dict[int, list[str]] = {}
    for index, question in enumerate(questions):
        if not isinstance(question, MatchingQuestion):
            continue
        rights = [p.right for p in question.pairs if p.right.strip()]
        unique = list(dict.fromkeys(rights))
        rng.shuffle(unique)
        options[index] = unique
    return options


@dataclass
class QuestionResult:
    type: str
    correct: bool
    explanation: str = ""


@dataclass
class MultipleChoiceResult(QuestionResult):
    selected_choice: Choice | None = None
    correct_choice: Choice | None = None


@dataclass
class TrueFalseResult(QuestionResult):
    selected_answer: Any = None
    correct_answer: bool = True


@dataclass
class PairResult:
    key: str
    selected_value: str
    correct: bool
    pair: Pair


@dataclass
class MatchingResult(QuestionResult):
    pairs: list[PairResult] = field(default_factory=list)


@dataclass
class Result:
    total: int
    correct: int
    breakdown: list[QuestionResult] = field(default_factory=list)

    def score_text(self) -> str:
        return f"{self.correct}/{self.total}"


def _normalize(value: Any) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def evaluate_question(question: Question, index: int, answer: Any) -> QuestionResult:
    if isinstance(question, MultipleChoiceQuestion):
        selected = None
        for ci, choice in enumerate(question.choices):
            if answer is not None and choice_key(choice, index, ci) == answer:
                selected = choice
                break
        return MultipleChoiceResult(
            type=question.type,
            correct=bool(selected is not None and selected.is_correct),
            explanation=question.explanation,
            selected_choice=selected,
            correct_choice=question.correct_choice(),
        )

    if isinstance(question, TrueFalseQuestion):
        expected = question.resolved_answer()
        return TrueFalseResult(
            type=question.type,
            correct=isinstance(answer, bool) and answer == expected,
            explanation=question.explanation,
            selected_answer=answer,
            correct_answer=expected,
        )

    if isinstance(question, MatchingQuestion):
        selections = answer if isinstance(answer, dict) else {}
        evaluated = []
        for pi, pair in enumerate(question.pairs):
            key = pair_key(pair, pi)
            selected_value = selections.get(key) or ""
            if not isinstance(selected_value, str):
                selected_value = ""
            evaluated.append(PairResult(
                key=key,
                selected_value=selected_value,
                correct=_normalize(selected_value) == _normalize(pair.right),
                pair=pair,
            ))
        return MatchingResult(
            type=question.type,
            correct=all(p.correct for p in evaluated),
            explanation=question.explanation,
            pairs=evaluated,
        )

    return QuestionResult(type=question.type, correct=False, explanation=question.explanation)


def evaluate(questions: Sequence[Question], answers: dict[int, Any]) -> Result | None:
    """Score *answers* (keyed by question index) against *questions*.

    Returns None for an empty quiz.
    """
    if not questions:
        return None
    breakdown = [evaluate_question(q, i, answers.get(i)) for i, q in enumerate(questions)]
    return Result(
        total=len(questions),
        correct=sum(1 for entry in breakdown if entry.correct),
        breakdown=breakdown,
    )


class QuizAttempt:
    """One learner's pass through a quiz."""

    def __init__(self, quiz: Quiz, rng: random.Random | None = None):
        self.quiz = quiz
        self._rng = rng or random.Random()
        self.answers: dict[int, Any] = {}
        self.submitted = False
        self.result: Result | None = None
        self.current_index = 0
        self.matching_options = generate_matching_options(quiz.questions, self._rng)

    @property
    def questions(self) -> list[Question]:
        return self.quiz.questions

    @property
    def total(self) -> int:
        return len(self.quiz.questions)

    def load(self, quiz: Quiz) -> None:
        """Swap in a (re)fetched quiz; answers survive only for the same quiz id."""
        same_quiz = quiz.id == self.quiz.id
        self.quiz = quiz
        if same_quiz:
            self.matching_options = generate_matching_options(quiz.questions, self._rng)
        else:
            self.reset()

    def record_answer(self, question_index: int, value: Any, pair_key: str | None = None) -> None:
        if self.submitted:
            return
        if not 0 <= question_index < self.total:
            log.debug("Ignoring answer for out-of-range question %d", question_index)
            return
        question = self.questions[question_index]
        if isinstance(question, MatchingQuestion):
            update = {pair_key: value} if pair_key is not None else value
            if not isinstance(update, dict):
                return
            current = self.answers.get(question_index)
            merged = dict(current) if isinstance(current, dict) else {}
            merged.update(update)
            self.answers[question_index] = merged
        else:
            self.answers[question_index] = value

    def submit(self) -> Result | None:
        if not self.total:
            return None
        if self.submitted:
            return self.result
        self.result = evaluate(self.questions, self.answers)
        self.submitted = True
        log.info("Quiz %s scored %s", self.quiz.id, self.result.score_text())
        return self.result

    def reset(self) -> None:
        self.answers = {}
        self.submitted = False
        self.result = None
        self.current_index = 0
        self.matching_options = generate_matching_options(self.quiz.questions, self._rng)

    def options_for(self, question_index: int) -> list[str]:
        if question_index in self.matching_options:
            return self.matching_options[question_index]
        question = self.questions[question_index] if 0 <= question_index < self.total else None
        if not isinstance(question, MatchingQuestion):
            return []
        return [p.right for p in question.pairs if p.right.strip()]

    # -- navigation ----------------------------------------------------

    @property
    def current_question(self) -> Question | None:
        if not self.total:
            return None
        return self.questions[min(self.current_index, self.total - 1)]

    def go_previous(self) -> None:
        self.current_index = max(self.current_index - 1, 0)

    def go_next(self) -> None:
        self.current_index = max(min(self.current_index + 1, self.total - 1), 0)

    def progress_text(self, t: TranslateFn | None = None) -> str:
        t = t or Translator().t
        return t(
            "quizPlayer.progress",
            "Question {{current}} of {{total}}",
            current=self.current_index + 1,
            total=self.total,
        )
