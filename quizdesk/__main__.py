"""CLI entry point for quizdesk.

Usage:
  python -m quizdesk validate FILE
  python -m quizdesk payload FILE [--chapter ID]
  python -m quizdesk grade QUIZ_FILE ANSWERS_FILE
  python -m quizdesk show QUIZ_ID
  python -m quizdesk config
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

from quizdesk.api_client import ApiError, QuizzesAPI, create_client
from quizdesk.builder import QuizBuilder, summarize_question_types
from quizdesk.config import load_settings
from quizdesk.models import Quiz
from quizdesk.player import MatchingResult, evaluate


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")
    args = sys.argv[1:] if argv is None else argv
    command = args[0] if args else ""

    if command == "validate" and len(args) >= 2:
        return _validate(args[1])
    elif command == "payload" and len(args) >= 2:
        return _payload(args[1], _parse_flag(args[2:], "--chapter", None))
    elif command == "grade" and len(args) >= 3:
        return _grade(args[1], args[2])
    elif command == "show" and len(args) >= 2:
        return asyncio.run(_show(args[1]))
    elif command == "config":
        print(json.dumps(load_settings().to_dict(), indent=4))
        return 0
    print(f"Unknown command: {' '.join(args) or '(none)'}")
    print("Commands: validate, payload, grade, show, config")
    return 1


def _parse_flag(args: list[str], name: str, default: str | None) -> str | None:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _load_quiz(path: str) -> Quiz:
    return Quiz.from_dict(json.loads(Path(path).read_text()))


def _validate(path: str) -> int:
    # Check the stored questions as they are, before editor normalization.
    error = QuizBuilder.from_quiz(_load_quiz(path), normalize=False).validate()
    if error:
        print(error)
        return 1
    print("OK")
    return 0


def _payload(path: str, chapter_id: str | None) -> int:
    builder = QuizBuilder.from_quiz(_load_quiz(path))
    print(json.dumps(builder.build_payload(chapter_id), indent=2, ensure_ascii=False))
    return 0


def _grade(quiz_path: str, answers_path: str) -> int:
    quiz = _load_quiz(quiz_path)
    raw = json.loads(Path(answers_path).read_text())
    try:
        answers = {int(k): v for k, v in raw.items()}
    except ValueError:
        print("Error: answer keys must be question indexes (0, 1, 2, ...).")
        return 1
    result = evaluate(quiz.questions, answers)
    if result is None:
        print("This quiz does not have any questions yet.")
        return 1

    print(f"Score: {result.score_text()}")
    for i, entry in enumerate(result.breakdown, 1):
        mark = "correct" if entry.correct else "wrong"
        line = f"  {i}. [{entry.type}] {mark}"
        if isinstance(entry, MatchingResult):
            matched = sum(1 for p in entry.pairs if p.correct)
            line += f" ({matched}/{len(entry.pairs)} pairs)"
        print(line)
    return 0


async def _show(quiz_id: str) -> int:
    settings = load_settings()
    async with create_client(settings) as client:
        try:
            quiz = await QuizzesAPI(client).get_by_id(quiz_id, {"lang": settings.language})
        except ApiError as e:
            print(f"Error: {e.server_message() or e}")
            return 1
    if quiz is None:
        print("Quiz not found.")
        return 1

    status = "active" if quiz.is_active else "inactive"
    kind = "training" if quiz.training_only else "graded"
    print(f"{quiz.display_title(settings.language)} ({status}, {kind})")
    print(f"  {len(quiz.questions)} questions: {summarize_question_types(quiz)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
