"""
Pydantic schemas for extracted questions, answer keys and quiz documents.

JSON produced by the model (and stored on disk) uses camelCase keys such as
``questionNumber``; the Python attributes are snake_case. Dump with
``model_dump(mode="json", by_alias=True)`` to get the wire shape back.
"""

import base64
import binascii
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _reject_bool(value: Any) -> Any:
    # bool is an int subclass; true/false from the model is never a question number
    if isinstance(value, bool):
        raise ValueError("question number must be an integer, not a boolean")
    return value


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


class _ValueModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ─── Input ────────────────────────────────────────────────────────────────────

class ExtractionRequest(_ValueModel):
    """One uploaded document, ready to send to the model."""
    document_bytes: bytes = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1)

    @classmethod
    def from_data_uri(cls, data_uri: str) -> "ExtractionRequest":
        """Build a request from ``data:<mimetype>;base64,<data>``."""
        from utils.gemini_client import data_uri_to_inline

        inline = data_uri_to_inline(data_uri)
        try:
            document_bytes = base64.b64decode(inline["data"], validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("Invalid data URI format.")
        return cls(document_bytes=document_bytes, mime_type=inline["mime_type"])


# ─── Records ──────────────────────────────────────────────────────────────────

class AnswerRecord(_ValueModel):
    """One entry of an answer key."""
    question_number: int = Field(..., alias="questionNumber", ge=1)
    correct_answer: str = Field(..., alias="correctAnswer")

    @field_validator("question_number", mode="before")
    @classmethod
    def check_number_type(cls, value: Any) -> Any:
        return _reject_bool(value)

    @field_validator("correct_answer")
    @classmethod
    def check_answer(cls, value: str) -> str:
        return _require_text(value)


class ExtractedQuestion(_ValueModel):
    """A question as extracted from the PDF, without its answer."""
    question_number: int = Field(..., alias="questionNumber", ge=1)
    question_text: str = Field(..., alias="questionText")
    options: List[str]

    @field_validator("question_number", mode="before")
    @classmethod
    def check_number_type(cls, value: Any) -> Any:
        return _reject_bool(value)

    @field_validator("question_text")
    @classmethod
    def check_text(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("options")
    @classmethod
    def drop_blank_options(cls, options: List[str]) -> List[str]:
        kept = [option for option in options if option.strip()]
        if not kept:
            raise ValueError("at least one non-empty option is required")
        return kept


class ScoredQuestion(ExtractedQuestion):
    """A question with its correct answer ("" when no key was supplied)."""
    correct_answer: str = Field("", alias="correctAnswer")


class QuizDocument(_ValueModel):
    """A playable quiz: title, scored questions and the extraction assessment."""
    title: str
    questions: List[ScoredQuestion]
    accuracy_assessment: str = Field("", alias="accuracyAssessment")


# ─── Response envelopes ───────────────────────────────────────────────────────
# Records are typed Any here; each one is validated separately so that a bad
# record is dropped instead of failing the whole response.

class AnswerKeyEnvelope(BaseModel):
    answers: List[Any]


class QuestionsEnvelope(BaseModel):
    questions: List[Any]


class QuizEnvelope(QuestionsEnvelope):
    model_config = ConfigDict(populate_by_name=True)

    accuracy_assessment: Optional[str] = Field(None, alias="accuracyAssessment")
