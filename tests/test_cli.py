"""
Tests for the extract_pdf.py command line entry point.
"""

import json

import pytest

import extract_pdf
from database import SavedQuizzes, SQLiteQuizStore
from pipeline.schemas import QuizDocument, ScoredQuestion


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "saved.db"


@pytest.fixture
def pdf_file(tmp_path, pdf_bytes):
    path = tmp_path / "Chemistry.pdf"
    path.write_bytes(pdf_bytes)
    return path


@pytest.fixture
def fake_gemini(monkeypatch, make_client):
    """Replace GeminiClient in the CLI with a canned client."""
    def install(*responses):
        client = make_client(*responses)
        monkeypatch.setattr(extract_pdf, "GeminiClient", lambda api_key=None: client)
        monkeypatch.setattr(extract_pdf.PDFLoader, "get_page_count", lambda self, data: 1)
        return client
    return install


QUIZ_RESPONSE = {
    "questions": [
        {"questionNumber": 1, "questionText": "H2O is?", "options": ["a) water", "b) salt"], "correctAnswer": "a"},
    ],
    "accuracyAssessment": "Clear.",
}


class TestSavedQuizCommands:
    """Tests for --list and --delete."""

    def test_list(self, db_path, capsys) -> None:
        SavedQuizzes(SQLiteQuizStore(db_path)).save(QuizDocument(
            title="Stored",
            questions=[ScoredQuestion(question_number=1, question_text="Q", options=["A"])],
        ))
        assert extract_pdf.main(["--list", "--db", str(db_path)]) == 0
        out = capsys.readouterr().out
        assert "1 saved quiz(zes)" in out
        assert "Stored (1 questions)" in out

    def test_delete_missing(self, db_path, capsys) -> None:
        assert extract_pdf.main(["--delete", "Nope", "--db", str(db_path)]) == 1
        assert "[ERROR]" in capsys.readouterr().out

    def test_pdf_required(self, db_path) -> None:
        with pytest.raises(SystemExit):
            extract_pdf.main(["--db", str(db_path)])


class TestExtractCommand:
    """Tests for extracting a quiz from the command line."""

    def test_missing_api_key(self, monkeypatch, pdf_file, db_path, capsys) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert extract_pdf.main([str(pdf_file), "--db", str(db_path)]) == 1
        assert "GEMINI_API_KEY not set" in capsys.readouterr().out

    def test_not_a_pdf(self, monkeypatch, tmp_path, db_path, capsys) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        path = tmp_path / "notes.pdf"
        path.write_bytes(b"plain text")
        assert extract_pdf.main([str(path), "--db", str(db_path)]) == 1
        assert "Invalid file type" in capsys.readouterr().out

    def test_extract_and_save(self, monkeypatch, fake_gemini, pdf_file, db_path, capsys) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        fake_gemini(QUIZ_RESPONSE)

        assert extract_pdf.main([str(pdf_file), "--save", "--db", str(db_path)]) == 0

        out = capsys.readouterr().out
        assert "Q1. H2O is?" in out
        assert "Quiz saved: Chemistry.pdf" in out
        stored = SavedQuizzes(SQLiteQuizStore(db_path)).load("Chemistry.pdf")
        assert stored.questions[0].correct_answer == "a"

    def test_exam_with_answer_key_json(self, monkeypatch, fake_gemini, tmp_path, pdf_file, pdf_bytes,
                                       db_path, capsys) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        key_file = tmp_path / "key.pdf"
        key_file.write_bytes(pdf_bytes)
        fake_gemini(
            {"questions": [{"questionNumber": 1, "questionText": "Q", "options": ["A", "B"]}]},
            {"answers": [{"questionNumber": 1, "correctAnswer": "B"}]},
        )

        code = extract_pdf.main([
            str(pdf_file), "--exam", "--answer-key", str(key_file), "--json", "--db", str(db_path),
        ])

        assert code == 0
        out = capsys.readouterr().out
        document = json.loads(out[out.index("{"):])
        assert document["questions"][0]["correctAnswer"] == "B"
        assert document["accuracyAssessment"] == "Answer key matched 1 of 1 questions."

    def test_single_kind(self, monkeypatch, fake_gemini, pdf_file, db_path, capsys) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        fake_gemini({"answers": [{"questionNumber": 1, "correctAnswer": "C"}, {"questionNumber": 0}]})

        assert extract_pdf.main([str(pdf_file), "--kind", "answerKey", "--db", str(db_path)]) == 0

        out = capsys.readouterr().out
        payload = json.loads(out[out.index("{"):])
        assert payload == {
            "kind": "answerKey",
            "records": [{"questionNumber": 1, "correctAnswer": "C"}],
            "dropped": 1,
        }

    def test_extraction_error(self, monkeypatch, fake_gemini, pdf_file, db_path, capsys) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        fake_gemini("")

        assert extract_pdf.main([str(pdf_file), "--db", str(db_path)]) == 1
        assert "[ERROR] The AI model returned an empty response." in capsys.readouterr().out
