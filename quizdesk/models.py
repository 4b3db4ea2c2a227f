"""Quiz data model: questions as an explicit tagged union."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from quizdesk.i18n import localized_text

MULTIPLE_CHOICE = "multiple_choice"
TRUE_FALSE = "true_false"
MATCHING = "matching"

QUESTION_TYPES = (MULTIPLE_CHOICE, TRUE_FALSE, MATCHING)


def new_id() -> str:
    """Short id used to key choices, pairs and draft questions."""
    return uuid.uuid4().hex[:8]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class Choice:
    id: str = field(default_factory=new_id)
    text: str = ""
    is_correct: bool | None = False  # None when the stored flag was not a boolean

    @classmethod
    def from_dict(cls, data: dict) -> Choice:
        flag = data.get("isCorrect")
        return cls(
            id=_text(data.get("id")),
            text=_text(data.get("text")),
            is_correct=flag if isinstance(flag, bool) else None,
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "isCorrect": bool(self.is_correct)}


@dataclass
class Pair:
    id: str = field(default_factory=new_id)
    left: str = ""
    right: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Pair:
        return cls(
            id=_text(data.get("id")),
            left=_text(data.get("left")),
            right=_text(data.get("right")),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "left": self.left, "right": self.right}


@dataclass
class BaseQuestion:
    id: str = field(default_factory=new_id)
    order: int = 0
    prompt: str = ""
    explanation: str = ""

    def _base_dict(self) -> dict:
        return {
            "id": self.id,
            "order": self.order,
            "type": self.type,
            "prompt": self.prompt,
            "explanation": self.explanation,
        }


@dataclass
class MultipleChoiceQuestion(BaseQuestion):
    type: ClassVar[str] = MULTIPLE_CHOICE
    choices: list[Choice] = field(default_factory=list)

    def correct_choice(self) -> Choice | None:
        return next((c for c in self.choices if c.is_correct), None)

    def to_dict(self) -> dict:
        d = self._base_dict()
        d["choices"] = [c.to_dict() for c in self.choices]
        return d


@dataclass
class TrueFalseQuestion(BaseQuestion):
    type: ClassVar[str] = TRUE_FALSE
    # Kept as stored; anything but a literal False resolves to True.
    correct_answer: Any = True

    def resolved_answer(self) -> bool:
        return self.correct_answer is not False

    def to_dict(self) -> dict:
        d = self._base_dict()
        d["correctAnswer"] = self.correct_answer
        return d


@dataclass
class MatchingQuestion(BaseQuestion):
    type: ClassVar[str] = MATCHING
    pairs: list[Pair] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = self._base_dict()
        d["pairs"] = [p.to_dict() for p in self.pairs]
        return d


@dataclass
class UnknownQuestion(BaseQuestion):
    """A stored question whose type is not recognised. Never scores."""

    type: str = ""
    raw: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return self._base_dict()


Question = Union[MultipleChoiceQuestion, TrueFalseQuestion, MatchingQuestion, UnknownQuestion]


def question_from_dict(data: dict, position: int = 1) -> Question:
    """Build a question variant from an API dict, degrading on bad shapes."""
    qtype = data.get("type")
    order = data.get("order")
    common = {
        "id": _text(data.get("id")),
        "order": order if isinstance(order, int) and order > 0 else position,
        "prompt": _text(data.get("prompt")),
        "explanation": _text(data.get("explanation")),
    }
    if qtype == MULTIPLE_CHOICE:
        raw = data.get("choices")
        choices = [Choice.from_dict(c) for c in raw if isinstance(c, dict)] if isinstance(raw, list) else []
        return MultipleChoiceQuestion(choices=choices, **common)
    if qtype == TRUE_FALSE:
        return TrueFalseQuestion(correct_answer=data.get("correctAnswer"), **common)
    if qtype == MATCHING:
        raw = data.get("pairs")
        pairs = [Pair.from_dict(p) for p in raw if isinstance(p, dict)] if isinstance(raw, list) else []
        return MatchingQuestion(pairs=pairs, **common)
    return UnknownQuestion(type=_text(qtype), raw=dict(data), **common)


@dataclass
class Quiz:
    id: str | None = None
    title: str = ""
    training_only: bool = True
    is_active: bool = True
    questions: list[Question] = field(default_factory=list)
    chapter: Any = None
    title_multilingual: dict[str, str] | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Quiz:
        raw_title = data.get("title")
        multilingual = data.get("titleMultilingual")
        if isinstance(raw_title, dict):
            multilingual = multilingual or raw_title
            raw_title = localized_text(raw_title, "en")
        raw_questions = data.get("questions")
        if not isinstance(raw_questions, list):
            raw_questions = []
        questions = [
            question_from_dict(q, i + 1)
            for i, q in enumerate(raw_questions)
            if isinstance(q, dict)
        ]
        quiz_id = data.get("_id", data.get("id"))
        return cls(
            id=str(quiz_id) if quiz_id is not None else None,
            title=_text(raw_title),
            training_only=data.get("trainingOnly") is not False,
            is_active=data.get("isActive") is not False,
            questions=questions,
            chapter=data.get("chapter"),
            title_multilingual=multilingual if isinstance(multilingual, dict) else None,
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    def display_title(self, language: str = "en") -> str:
        return localized_text(self.title_multilingual or self.title, language, self.title)

    def chapter_id(self) -> str | None:
        if isinstance(self.chapter, dict):
            ref = self.chapter.get("_id", self.chapter.get("id"))
            return str(ref) if ref is not None else None
        return str(self.chapter) if self.chapter is not None else None

    def to_dict(self) -> dict:
        d = {
            "title": self.title,
            "trainingOnly": self.training_only,
            "isActive": self.is_active,
            "questions": [q.to_dict() for q in self.questions],
        }
        if self.id is not None:
            d["_id"] = self.id
        if self.chapter is not None:
            d["chapter"] = self.chapter_id()
        return d
