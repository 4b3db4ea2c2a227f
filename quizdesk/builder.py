"""Editable quiz draft: question editing, validation and payload building."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from quizdesk.api_client import ApiError
from quizdesk.i18n import Translator, TranslateFn
from quizdesk.models import (
    MATCHING,
    MULTIPLE_CHOICE,
    QUESTION_TYPES,
    TRUE_FALSE,
    Choice,
    MatchingQuestion,
    MultipleChoiceQuestion,
    Pair,
    Question,
    Quiz,
    TrueFalseQuestion,
    new_id,
)

if TYPE_CHECKING:
    from quizdesk.api_client import QuizzesAPI

log = logging.getLogger("quizdesk.builder")

MIN_CHOICES = 2
MAX_CHOICES = 6

TYPE_LABELS = {
    MULTIPLE_CHOICE: ("quiz.type.multiple_choice", "Multiple Choice"),
    TRUE_FALSE: ("quiz.type.true_false", "True or False"),
    MATCHING: ("quiz.type.matching", "Matching"),
}


def create_question(qtype: str = MULTIPLE_CHOICE) -> Question:
    """New question of *qtype* with its default payload."""
    if qtype == MULTIPLE_CHOICE:
        return MultipleChoiceQuestion(choices=[Choice(is_correct=True), Choice()])
    if qtype == TRUE_FALSE:
        return TrueFalseQuestion(correct_answer=True)
    if qtype == MATCHING:
        return MatchingQuestion(pairs=[Pair()])
    raise ValueError(f"Unknown question type: {qtype}")


def normalize_question(question: Question) -> Question:
    """Bring a stored question into an editable shape."""
    if isinstance(question, MultipleChoiceQuestion):
        choices = list(question.choices)
        while len(choices) < MIN_CHOICES:
            choices.append(Choice())
        normalized = [
            Choice(
                id=c.id or new_id(),
                text=c.text,
                is_correct=c.is_correct if isinstance(c.is_correct, bool) else i == 0,
            )
            for i, c in enumerate(choices)
        ]
        return MultipleChoiceQuestion(
            id=question.id or new_id(),
            order=question.order,
            prompt=question.prompt,
            explanation=question.explanation,
            choices=normalized,
        )
    if isinstance(question, TrueFalseQuestion):
        answer = question.correct_answer
        return TrueFalseQuestion(
            id=question.id or new_id(),
            order=question.order,
            prompt=question.prompt,
            explanation=question.explanation,
            correct_answer=answer if isinstance(answer, bool) else True,
        )
    if isinstance(question, MatchingQuestion):
        pairs = [Pair(id=p.id or new_id(), left=p.left, right=p.right) for p in question.pairs]
        return MatchingQuestion(
            id=question.id or new_id(),
            order=question.order,
            prompt=question.prompt,
            explanation=question.explanation,
            pairs=pairs or [Pair()],
        )
    fresh = create_question(MULTIPLE_CHOICE)
    fresh.id = question.id or fresh.id
    fresh.order = question.order
    fresh.prompt = question.prompt
    fresh.explanation = question.explanation
    return fresh


def question_payload(question: Question, position: int) -> dict:
    """Normalized submission dict for one question at 1-based *position*."""
    payload: dict[str, Any] = {
        "order": position,
        "type": question.type,
        "prompt": question.prompt.strip(),
    }
    explanation = (question.explanation or "").strip()
    if explanation:
        payload["explanation"] = explanation

    if isinstance(question, MultipleChoiceQuestion):
        choices = list(question.choices)
        while len(choices) < MIN_CHOICES:
            choices.append(Choice())
        flags = [
            c.is_correct if isinstance(c.is_correct, bool) else i == 0
            for i, c in enumerate(choices)
        ]
        correct_index = flags.index(True) if True in flags else 0
        payload["choices"] = [
            {"id": c.id or new_id(), "text": c.text.strip(), "isCorrect": i == correct_index}
            for i, c in enumerate(choices)
        ]
    elif isinstance(question, TrueFalseQuestion):
        payload["correctAnswer"] = question.correct_answer is not False
    elif isinstance(question, MatchingQuestion):
        payload["pairs"] = [
            {"id": p.id or new_id(), "left": p.left.strip(), "right": p.right.strip()}
            for p in question.pairs
        ]
    return payload


def summarize_question_types(quiz: Quiz, t: TranslateFn | None = None) -> str:
    """Distinct known question types of *quiz* as a display string."""
    t = t or Translator().t
    seen: list[str] = []
    for q in quiz.questions:
        if q.type in TYPE_LABELS and q.type not in seen:
            seen.append(q.type)
    return " • ".join(t(*TYPE_LABELS[qtype]) for qtype in seen)


class QuizBuilder:
    """In-memory quiz draft edited through explicit mutation methods."""

    def __init__(self, translator: Translator | None = None):
        self.translator = translator or Translator()
        self.quiz_id: str | None = None
        self.title = ""
        self.training_only = True
        self.is_active = True
        self.questions: list[Question] = [create_question()]

    @classmethod
    def from_quiz(cls, quiz: Quiz, translator: Translator | None = None, normalize: bool = True) -> QuizBuilder:
        """Load *quiz* for editing.

        With normalize=False the stored questions are kept as parsed, so
        validate() reports problems in the stored data itself.
        """
        builder = cls(translator)
        builder.quiz_id = quiz.id
        builder.title = quiz.display_title(builder.translator.language)
        builder.training_only = quiz.training_only
        builder.is_active = quiz.is_active
        if quiz.questions:
            builder.questions = [normalize_question(q) if normalize else q for q in quiz.questions]
        return builder

    @property
    def editing(self) -> bool:
        return self.quiz_id is not None

    def set_title(self, title: str) -> None:
        self.title = title

    def set_training_only(self, value: bool) -> None:
        self.training_only = bool(value)

    def set_active(self, value: bool) -> None:
        self.is_active = bool(value)

    # -- questions -----------------------------------------------------

    def get_question(self, question_id: str) -> Question | None:
        return next((q for q in self.questions if q.id == question_id), None)

    def add_question(self) -> Question:
        question = create_question()
        self.questions.append(question)
        return question

    def remove_question(self, question_id: str) -> None:
        if len(self.questions) <= 1:
            return
        self.questions = [q for q in self.questions if q.id != question_id]

    def change_question_type(self, question_id: str, new_type: str) -> None:
        for i, old in enumerate(self.questions):
            if old.id != question_id:
                continue
            fresh = create_question(new_type)
            fresh.id = old.id
            fresh.order = old.order
            fresh.prompt = old.prompt
            fresh.explanation = old.explanation
            self.questions[i] = fresh
            return

    def update_question(self, question_id: str, prompt: str | None = None, explanation: str | None = None) -> None:
        question = self.get_question(question_id)
        if question is None:
            return
        if prompt is not None:
            question.prompt = prompt
        if explanation is not None:
            question.explanation = explanation

    def set_true_false_answer(self, question_id: str, value: bool) -> None:
        question = self.get_question(question_id)
        if isinstance(question, TrueFalseQuestion):
            question.correct_answer = bool(value)

    # -- choices -------------------------------------------------------

    def _multiple_choice(self, question_id: str) -> MultipleChoiceQuestion | None:
        question = self.get_question(question_id)
        return question if isinstance(question, MultipleChoiceQuestion) else None

    def add_choice(self, question_id: str) -> Choice | None:
        question = self._multiple_choice(question_id)
        if question is None or len(question.choices) >= MAX_CHOICES:
            return None
        choice = Choice()
        question.choices.append(choice)
        return choice

    def remove_choice(self, question_id: str, choice_id: str) -> None:
        question = self._multiple_choice(question_id)
        if question is None or len(question.choices) <= MIN_CHOICES:
            return
        remaining = [c for c in question.choices if c.id != choice_id]
        if remaining and not any(c.is_correct for c in remaining):
            remaining[0].is_correct = True
        question.choices = remaining

    def update_choice(self, question_id: str, choice_id: str, text: str) -> None:
        question = self._multiple_choice(question_id)
        if question is None:
            return
        for choice in question.choices:
            if choice.id == choice_id:
                choice.text = text

    def set_correct_choice(self, question_id: str, choice_id: str) -> None:
        question = self._multiple_choice(question_id)
        if question is None or not any(c.id == choice_id for c in question.choices):
            return
        for choice in question.choices:
            choice.is_correct = choice.id == choice_id

    # -- pairs ---------------------------------------------------------

    def _matching(self, question_id: str) -> MatchingQuestion | None:
        question = self.get_question(question_id)
        return question if isinstance(question, MatchingQuestion) else None

    def add_pair(self, question_id: str) -> Pair | None:
        question = self._matching(question_id)
        if question is None:
            return None
        pair = Pair()
        question.pairs.append(pair)
        return pair

    def remove_pair(self, question_id: str, pair_id: str) -> None:
        question = self._matching(question_id)
        if question is None or len(question.pairs) <= 1:
            return
        question.pairs = [p for p in question.pairs if p.id != pair_id]

    def update_pair(self, question_id: str, pair_id: str, left: str | None = None, right: str | None = None) -> None:
        question = self._matching(question_id)
        if question is None:
            return
        for pair in question.pairs:
            if pair.id != pair_id:
                continue
            if left is not None:
                pair.left = left
            if right is not None:
                pair.right = right

    # -- validation & payload -----------------------------------------

    def validate(self) -> str | None:
        """First violated rule as a display message, or None."""
        t = self.translator.t
        if not self.title.strip():
            return t("chapterQuizzes.error.title", "Quiz title is required.")
        if not self.questions:
            return t("chapterQuizzes.error.questionsRequired", "Please add at least one question.")

        for q in self.questions:
            if q.type not in QUESTION_TYPES:
                return t("chapterQuizzes.error.typeRequired", "Each question needs a quiz type.")
            if not q.prompt.strip():
                return t("chapterQuizzes.error.questionPrompt", "Each question needs a prompt.")

            if isinstance(q, MultipleChoiceQuestion):
                if len(q.choices) < MIN_CHOICES:
                    return t(
                        "chapterQuizzes.error.choiceCount",
                        "Multiple choice questions need at least two choices.",
                    )
                if any(not c.text.strip() for c in q.choices):
                    return t("chapterQuizzes.error.choiceText", "All choices must have text.")
                if sum(1 for c in q.choices if c.is_correct is True) != 1:
                    return t(
                        "chapterQuizzes.error.correctChoice",
                        "Please mark exactly one correct choice for each multiple choice question.",
                    )
            elif isinstance(q, MatchingQuestion):
                if not q.pairs or any(not p.left.strip() or not p.right.strip() for p in q.pairs):
                    return t("chapterQuizzes.error.matchingPairs", "Matching questions need complete pairs.")
            elif isinstance(q, TrueFalseQuestion):
                if not isinstance(q.correct_answer, bool):
                    return t(
                        "chapterQuizzes.error.trueFalseAnswer",
                        "True/False questions need a correct answer.",
                    )
        return None

    def build_submission_payload(self) -> list[dict]:
        return [question_payload(q, i + 1) for i, q in enumerate(self.questions)]

    def build_payload(self, chapter_id: str | None = None) -> dict:
        payload = {
            "title": self.title.strip(),
            "trainingOnly": self.training_only is not False,
            "isActive": self.is_active is not False,
            "questions": self.build_submission_payload(),
        }
        if chapter_id is not None:
            payload["chapter"] = chapter_id
        return payload

    async def submit(self, api: QuizzesAPI, chapter_id: str | None = None) -> str | None:
        """Validate and persist the draft.

        Returns an error message on failure, None on success. The draft is
        never modified here, so a failed submission can simply be retried.
        """
        error = self.validate()
        if error:
            log.info("Draft rejected: %s", error)
            return error

        payload = self.build_payload(chapter_id)
        log.debug("Submitting quiz payload: %s", payload)
        try:
            if self.editing:
                saved = await api.update(self.quiz_id, payload)
            else:
                saved = await api.create(payload)
        except ApiError as e:
            log.warning("Failed to save quiz: %s", e.payload or e)
            return e.server_message() or self.translator.t(
                "chapterQuizzes.error.save", "Failed to save the quiz."
            )

        if saved is not None and saved.id is not None:
            self.quiz_id = saved.id
        log.info("Saved quiz %s (%d questions)", self.quiz_id, len(self.questions))
        return None
