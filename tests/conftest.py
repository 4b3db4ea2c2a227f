"""Shared test fixtures."""
from __future__ import annotations

import random

import pytest
from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse

from quizdesk.i18n import Translator
from quizdesk.models import (
    Choice,
    MatchingQuestion,
    MultipleChoiceQuestion,
    Pair,
    Quiz,
    TrueFalseQuestion,
)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def mc_question():
    """2+2? with the correct choice second."""
    return MultipleChoiceQuestion(
        id="q-mc",
        order=1,
        prompt="2+2?",
        explanation="Basic addition.",
        choices=[
            Choice(id="a", text="2", is_correct=False),
            Choice(id="b", text="4", is_correct=True),
        ],
    )


@pytest.fixture
def tf_question():
    return TrueFalseQuestion(id="q-tf", order=2, prompt="The sun is cold.", correct_answer=False)


@pytest.fixture
def matching_question():
    """Animal sounds; pairs have no ids so keys fall back to pair_<index>."""
    return MatchingQuestion(
        id="q-match",
        order=3,
        prompt="Match the animal to its sound.",
        pairs=[
            Pair(id="", left="Dog", right="Bark"),
            Pair(id="", left="Cat", right="Meow"),
        ],
    )


@pytest.fixture
def sample_quiz(mc_question, tf_question, matching_question):
    return Quiz(
        id="quiz-1",
        title="Week 1 Review",
        training_only=True,
        is_active=True,
        questions=[mc_question, tf_question, matching_question],
        chapter="chapter-1",
    )


@pytest.fixture
def sample_quiz_dict():
    """A quiz as the backend returns it."""
    return {
        "_id": "quiz-1",
        "title": "Week 1 Review",
        "chapter": {"_id": "chapter-1", "title": "Numbers"},
        "trainingOnly": True,
        "isActive": True,
        "createdAt": "2026-09-01T10:00:00Z",
        "updatedAt": "2026-09-02T10:00:00Z",
        "questions": [
            {
                "order": 1,
                "type": "multiple_choice",
                "prompt": "2+2?",
                "choices": [
                    {"id": "a", "text": "2", "isCorrect": False},
                    {"id": "b", "text": "4", "isCorrect": True},
                ],
            },
            {"order": 2, "type": "true_false", "prompt": "The sun is cold.", "correctAnswer": False},
            {
                "order": 3,
                "type": "matching",
                "prompt": "Match the animal to its sound.",
                "pairs": [
                    {"left": "Dog", "right": "Bark"},
                    {"left": "Cat", "right": "Meow"},
                ],
            },
        ],
    }


@pytest.fixture
def translator():
    return Translator(
        {
            "chapterQuizzes.error.title": "Le titre est obligatoire.",
            "quizPlayer.progress": "Question {{current}} sur {{total}}",
        },
        language="fr",
    )


class FakeBackend:
    """In-memory stand-in for the quiz REST backend."""

    def __init__(self):
        self.quizzes: dict[str, dict] = {}
        self.translations = {"quiz.type.matching": "Appariement"}
        self.requests: list[tuple[str, str]] = []
        self._next_id = 1
        self.app = self._build_app()

    def add(self, quiz: dict) -> dict:
        quiz = dict(quiz)
        quiz.setdefault("_id", f"quiz-{self._next_id}")
        self._next_id += 1
        self.quizzes[quiz["_id"]] = quiz
        return quiz

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        backend = self

        @app.middleware("http")
        async def record(request, call_next):
            backend.requests.append((request.method, request.url.path))
            return await call_next(request)

        def not_found():
            return JSONResponse(status_code=404, content={"success": False, "message": "Quiz not found"})

        @app.get("/api/quizzes")
        def list_quizzes(chapter: str | None = None, isActive: str | None = None):
            items = list(backend.quizzes.values())
            if chapter:
                items = [q for q in items if q.get("chapter") == chapter]
            if isActive == "true":
                items = [q for q in items if q.get("isActive") is not False]
            return {"success": True, "data": items}

        @app.get("/api/quizzes/chapter/{chapter_id}")
        def by_chapter(chapter_id: str):
            return {"success": True, "data": [q for q in backend.quizzes.values() if q.get("chapter") == chapter_id]}

        @app.get("/api/quizzes/{quiz_id}")
        def get_quiz(quiz_id: str):
            quiz = backend.quizzes.get(quiz_id)
            return {"success": True, "data": quiz} if quiz else not_found()

        @app.post("/api/quizzes", status_code=201)
        def create_quiz(payload: dict = Body(...)):
            if not payload.get("questions"):
                return JSONResponse(status_code=400, content={"message": "Quiz must include at least one question"})
            return {"success": True, "data": backend.add(payload)}

        @app.put("/api/quizzes/{quiz_id}")
        def update_quiz(quiz_id: str, payload: dict = Body(...)):
            if quiz_id not in backend.quizzes:
                return not_found()
            backend.quizzes[quiz_id] = {**payload, "_id": quiz_id}
            return {"success": True, "data": backend.quizzes[quiz_id]}

        @app.patch("/api/quizzes/{quiz_id}/status")
        def update_status(quiz_id: str, payload: dict = Body(...)):
            if quiz_id not in backend.quizzes:
                return not_found()
            backend.quizzes[quiz_id]["isActive"] = payload.get("isActive")
            return {"success": True, "data": backend.quizzes[quiz_id]}

        @app.delete("/api/quizzes/{quiz_id}")
        def delete_quiz(quiz_id: str):
            if backend.quizzes.pop(quiz_id, None) is None:
                return not_found()
            return {"success": True, "message": "Quiz deleted"}

        @app.get("/api/translations")
        def translations(language: str = "en"):
            return {"success": True, "data": backend.translations}

        return app


@pytest.fixture
def backend():
    return FakeBackend()
