"""
Unit tests for the pydantic schemas and data URI handling.
"""

import base64

import pytest
from pydantic import ValidationError

from pipeline.schemas import AnswerRecord, ExtractionRequest, ExtractedQuestion, QuizDocument, ScoredQuestion
from utils.gemini_client import data_uri_to_inline


class TestDataUri:
    """Tests for data_uri_to_inline and ExtractionRequest.from_data_uri."""

    def test_split(self) -> None:
        inline = data_uri_to_inline("data:application/pdf;base64,JVBERi0=")
        assert inline == {"mime_type": "application/pdf", "data": "JVBERi0="}

    @pytest.mark.parametrize("uri", [
        "not a data uri",
        "data:application/pdf;base64,",
        "data:;base64,JVBERi0=",
        "JVBERi0=",
    ])
    def test_invalid(self, uri) -> None:
        with pytest.raises(ValueError, match="Invalid data URI format."):
            data_uri_to_inline(uri)

    def test_request_from_data_uri(self, pdf_bytes) -> None:
        uri = "data:application/pdf;base64," + base64.b64encode(pdf_bytes).decode("ascii")
        request = ExtractionRequest.from_data_uri(uri)
        assert request.document_bytes == pdf_bytes
        assert request.mime_type == "application/pdf"

    def test_request_bad_base64(self) -> None:
        with pytest.raises(ValueError, match="Invalid data URI format."):
            ExtractionRequest.from_data_uri("data:application/pdf;base64,@@@")

    def test_request_requires_bytes(self) -> None:
        with pytest.raises(ValidationError):
            ExtractionRequest(document_bytes=b"", mime_type="application/pdf")


class TestRecords:
    """Tests for record models and their JSON aliases."""

    def test_answer_record_aliases(self) -> None:
        record = AnswerRecord.model_validate({"questionNumber": 3, "correctAnswer": "C"})
        assert record.question_number == 3
        assert record.model_dump(by_alias=True) == {"questionNumber": 3, "correctAnswer": "C"}

    def test_records_are_frozen(self) -> None:
        record = AnswerRecord(question_number=1, correct_answer="A")
        with pytest.raises(ValidationError):
            record.correct_answer = "B"

    def test_question_rejects_blank_text(self) -> None:
        with pytest.raises(ValidationError):
            ExtractedQuestion(question_number=1, question_text="  ", options=["A"])

    def test_scored_question_default_answer(self) -> None:
        question = ScoredQuestion.model_validate({"questionNumber": 1, "questionText": "Q", "options": ["A"]})
        assert question.correct_answer == ""

    def test_quiz_document_round_trip(self) -> None:
        data = {
            "title": "Chemistry",
            "questions": [{"questionNumber": 1, "questionText": "Q", "options": ["A"], "correctAnswer": "A"}],
            "accuracyAssessment": "",
        }
        document = QuizDocument.model_validate(data)
        assert document.model_dump(mode="json", by_alias=True) == data
