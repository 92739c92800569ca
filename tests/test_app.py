"""
Tests for the Streamlit app, using streamlit's AppTest harness.
"""

from pathlib import Path

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

import config
from pipeline.schemas import QuizDocument, ScoredQuestion
from pipeline.session import ExamTimer, QuizSession, SessionStatus
from ui import app

APP_PATH = (Path(__file__).resolve().parent.parent / "ui" / "app.py").as_posix()


class BrokenSecrets:
    """Stands in for st.secrets when secrets.toml cannot be parsed."""

    def get(self, key, default=None):
        raise ValueError("Error parsing secrets file")


@pytest.fixture
def document() -> QuizDocument:
    return QuizDocument(
        title="Geography",
        questions=[
            ScoredQuestion(question_number=1, question_text="Capital of France?",
                           options=["a) Paris", "b) Rome"], correct_answer="a"),
            ScoredQuestion(question_number=2, question_text="Capital of Italy?",
                           options=["a) Paris", "b) Rome"], correct_answer="b"),
        ],
    )


@pytest.fixture
def app_test(monkeypatch, tmp_path) -> AppTest:
    monkeypatch.setattr(config, "DATABASE_PATH", tmp_path / "saved.db")
    st.cache_resource.clear()
    return AppTest.from_file(APP_PATH, default_timeout=30)


def _finished(document: QuizDocument, answers: dict) -> QuizSession:
    session = QuizSession()
    session.start_saved(document)
    for number, option in answers.items():
        session.answer(number, option)
    session.submit()
    return session


class TestApiKeyLookup:
    """Tests for _get_gemini_api_key."""

    def test_env_var(self, monkeypatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        assert app._get_gemini_api_key() == "from-env"

    def test_unreadable_secrets(self, monkeypatch, tmp_path) -> None:
        """A broken secrets file falls back to 'no key' instead of crashing."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setattr(app.st, "secrets", BrokenSecrets())
        monkeypatch.setattr(app, "Path", lambda *args: tmp_path / "ui" / "app.py")  # no .env
        assert app._get_gemini_api_key() is None


class TestResultsScreen:
    """Tests for the results screen."""

    def test_all_correct_with_incorrect_filter(self, app_test, document) -> None:
        app_test.session_state["session"] = _finished(document, {1: "a) Paris", 2: "b) Rome"})
        app_test.run()
        assert not app_test.exception

        app_test.toggle[0].set_value(True).run()

        assert [s.value for s in app_test.success] == ["You answered all questions correctly."]
        assert len(app_test.expander) == 0

    def test_incorrect_filter_lists_misses(self, app_test, document) -> None:
        app_test.session_state["session"] = _finished(document, {1: "a) Paris", 2: "a) Paris"})
        app_test.run()
        app_test.toggle[0].set_value(True).run()

        assert len(app_test.success) == 0
        assert len(app_test.expander) == 1
        assert "Capital of Italy?" in app_test.expander[0].label

    def test_score_metric(self, app_test, document) -> None:
        app_test.session_state["session"] = _finished(document, {1: "a) Paris"})
        app_test.run()
        assert app_test.metric[0].value == "50%"


class TestQuizScreen:
    """Tests for the timed quiz screen."""

    def test_expired_timer_submits(self, app_test, document) -> None:
        now = [0.0]
        session = QuizSession(timer_factory=lambda: ExamTimer(duration_seconds=60, clock=lambda: now[0]))
        session.start_saved(document)
        session.answer(1, "a) Paris")
        now[0] = 61.0

        app_test.session_state["session"] = session
        app_test.run()

        assert not app_test.exception
        session = app_test.session_state["session"]
        assert session.status is SessionStatus.RESULTS
        assert session.report.score == 1
