"""
PDF quiz extraction pipeline.

Modules:
- schemas: question, answer and quiz document models
- errors: extraction error taxonomy
- tasks: prompt + schema descriptor per extraction kind
- normalizer: model text -> validated records
- extraction: the extraction flows
- assembly: answer merge and scoring
- pdf_loader: PDF input checks
- session: quiz session state and exam timer
"""

from .errors import ExtractionError
from .extraction import extract, extract_quiz_document
from .normalizer import normalize
from .schemas import AnswerRecord, ExtractedQuestion, QuizDocument, ScoredQuestion
from .tasks import ExtractionKind

__all__ = [
    "ExtractionError",
    "extract",
    "extract_quiz_document",
    "normalize",
    "AnswerRecord",
    "ExtractedQuestion",
    "QuizDocument",
    "ScoredQuestion",
    "ExtractionKind",
]
