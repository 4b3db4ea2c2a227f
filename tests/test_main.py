"""Tests for the command-line entry point."""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from quizdesk.__main__ import main


@pytest.fixture
def quiz_file(tmp_path, sample_quiz_dict):
    path = tmp_path / "quiz.json"
    path.write_text(json.dumps(sample_quiz_dict))
    return path


@pytest.fixture(autouse=True)
def isolated_config(tmp_path):
    with patch("quizdesk.config.CONFIG_PATH", tmp_path / "config.json"):
        yield


class TestValidate:
    def test_ok(self, quiz_file, capsys):
        assert main(["validate", str(quiz_file)]) == 0
        assert capsys.readouterr().out.strip() == "OK"

    def test_error(self, tmp_path, sample_quiz_dict, capsys):
        sample_quiz_dict["title"] = ""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(sample_quiz_dict))
        assert main(["validate", str(path)]) == 1
        assert "title is required" in capsys.readouterr().out


class TestPayload:
    def test_prints_payload(self, quiz_file, capsys):
        assert main(["payload", str(quiz_file), "--chapter", "c7"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["chapter"] == "c7"
        assert [q["order"] for q in payload["questions"]] == [1, 2, 3]


class TestGrade:
    def test_score(self, tmp_path, quiz_file, capsys):
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps({"0": "b", "1": True, "2": {"pair_0": "bark", "pair_1": "Meow"}}))
        assert main(["grade", str(quiz_file), str(answers)]) == 0
        out = capsys.readouterr().out
        assert "Score: 2/3" in out
        assert "(2/2 pairs)" in out

    def test_empty_quiz(self, tmp_path, capsys):
        quiz = tmp_path / "empty.json"
        quiz.write_text(json.dumps({"title": "Empty", "questions": []}))
        answers = tmp_path / "answers.json"
        answers.write_text("{}")
        assert main(["grade", str(quiz), str(answers)]) == 1


class TestDispatch:
    def test_unknown_command(self, capsys):
        assert main(["explode"]) == 1
        assert "Commands:" in capsys.readouterr().out

    def test_missing_argument(self):
        assert main(["validate"]) == 1

    def test_config(self, capsys, monkeypatch):
        monkeypatch.delenv("QUIZDESK_API_URL", raising=False)
        assert main(["config"]) == 0
        assert json.loads(capsys.readouterr().out)["api_url"] == "http://localhost:5000/api"


class TestShow:
    def _client(self, backend):
        import httpx

        return httpx.AsyncClient(transport=httpx.ASGITransport(app=backend.app), base_url="http://test/api")

    def test_summary(self, backend, sample_quiz_dict, capsys):
        backend.add(sample_quiz_dict)
        with patch("quizdesk.__main__.create_client", return_value=self._client(backend)):
            assert main(["show", "quiz-1"]) == 0
        out = capsys.readouterr().out
        assert "Week 1 Review (active, training)" in out
        assert "3 questions: Multiple Choice • True or False • Matching" in out

    def test_not_found(self, backend, capsys):
        with patch("quizdesk.__main__.create_client", return_value=self._client(backend)):
            assert main(["show", "missing"]) == 1
        assert "Quiz not found" in capsys.readouterr().out


class TestValidateStoredData:
    def _write(self, tmp_path, questions):
        path = tmp_path / "stored.json"
        path.write_text(json.dumps({"title": "Stored", "questions": questions}))
        return str(path)

    def test_unknown_type_reported(self, tmp_path, capsys):
        path = self._write(tmp_path, [{"type": "essay", "prompt": "Discuss."}])
        assert main(["validate", path]) == 1
        assert capsys.readouterr().out.strip() == "Each question needs a quiz type."

    def test_true_false_without_answer_reported(self, tmp_path, capsys):
        path = self._write(tmp_path, [{"type": "true_false", "prompt": "Water is wet."}])
        assert main(["validate", path]) == 1
        assert capsys.readouterr().out.strip() == "True/False questions need a correct answer."

    def test_payload_still_normalizes(self, tmp_path, capsys):
        path = self._write(tmp_path, [{"type": "true_false", "prompt": "Water is wet."}])
        assert main(["payload", path]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["questions"][0]["correctAnswer"] is True


class TestGradeBadAnswers:
    def test_non_numeric_key(self, tmp_path, quiz_file, capsys):
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps({"first": "b"}))
        assert main(["grade", str(quiz_file), str(answers)]) == 1
        assert "question indexes" in capsys.readouterr().out
