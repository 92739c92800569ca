"""
Extraction flows: one PDF in, validated records out.

All three kinds (answer key, exam questions, quiz questions) run through the
same pipeline; only the task descriptor differs.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Protocol, Tuple

from pydantic import BaseModel

from config import PDF_MIME_TYPE
from pipeline.assembly import build_quiz_document
from pipeline.errors import ContentBlocked, EmptyResultSet, ExtractionError
from pipeline.normalizer import normalize
from pipeline.schemas import AnswerRecord, ExtractedQuestion, QuizDocument, ScoredQuestion
from pipeline.tasks import ExtractionKind, get_task

if TYPE_CHECKING:
    from utils.gemini_client import RawModelResponse

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    def invoke(self, prompt: str, document_bytes: bytes, mime_type: str) -> "RawModelResponse":
        ...


@dataclass(frozen=True)
class ExtractionResult:
    """Records extracted from one document."""
    kind: ExtractionKind
    records: Tuple[BaseModel, ...]
    dropped: int = 0
    accuracy_assessment: Optional[str] = None

    def __len__(self) -> int:
        return len(self.records)


def extract(
    kind,
    document_bytes: bytes,
    client: ModelClient,
    mime_type: str = PDF_MIME_TYPE,
) -> ExtractionResult:
    """
    Run one extraction against the model.

    Args:
        kind: ExtractionKind (or its string value) selecting prompt and schema
        document_bytes: The uploaded document
        client: Anything with GeminiClient's ``invoke`` signature
        mime_type: Media type of the document

    Returns:
        ExtractionResult with at least one record

    Raises:
        ExtractionError: any failure; ``user_message`` is safe to display.
            The attempt is not retried.
    """
    task = get_task(kind)
    logger.info(
        "Extracting %s from %d-byte %s document",
        task.kind.value, len(document_bytes), mime_type,
    )

    response = client.invoke(task.prompt, document_bytes, mime_type)
    if response.blocked:
        logger.warning("Model blocked %s extraction: %s", task.kind.value, response.block_reason)
        raise ContentBlocked(response.block_reason)

    try:
        payload = normalize(response.text, task)
    except ExtractionError as e:
        logger.error("%s extraction failed: %s", task.kind.value, e.kind)
        raise

    if not payload.records:
        raise EmptyResultSet(
            f"Could not extract any {task.record_noun} from the PDF. "
            "Please check the file format."
        )

    logger.info(
        "Extracted %d %s (%d dropped)",
        len(payload.records), task.record_noun, payload.dropped,
    )
    return ExtractionResult(
        kind=task.kind,
        records=payload.records,
        dropped=payload.dropped,
        accuracy_assessment=payload.accuracy_assessment,
    )


def extract_answer_key(document_bytes: bytes, client: ModelClient,
                       mime_type: str = PDF_MIME_TYPE) -> List[AnswerRecord]:
    return list(extract(ExtractionKind.ANSWER_KEY, document_bytes, client, mime_type).records)


def extract_exam_questions(document_bytes: bytes, client: ModelClient,
                           mime_type: str = PDF_MIME_TYPE) -> List[ExtractedQuestion]:
    return list(extract(ExtractionKind.EXAM_QUESTIONS, document_bytes, client, mime_type).records)


def extract_quiz_questions(document_bytes: bytes, client: ModelClient,
                           mime_type: str = PDF_MIME_TYPE) -> Tuple[List[ScoredQuestion], str]:
    """Extract questions with their answers; also returns the model's accuracy assessment."""
    result = extract(ExtractionKind.QUIZ_QUESTIONS, document_bytes, client, mime_type)
    return list(result.records), result.accuracy_assessment or ""


def extract_quiz_document(
    title: str,
    document_bytes: bytes,
    client: ModelClient,
    includes_answers: bool = True,
    answer_key_bytes: Optional[bytes] = None,
    mime_type: str = PDF_MIME_TYPE,
) -> QuizDocument:
    """
    Extract a playable quiz from an upload and an optional separate answer key.

    Args:
        title: Quiz title (the uploaded filename)
        document_bytes: The questions PDF
        client: Model client
        includes_answers: The questions PDF carries its own answer key
        answer_key_bytes: A separate answer key PDF, merged by question number
        mime_type: Media type of both documents
    """
    if includes_answers:
        questions, assessment = extract_quiz_questions(document_bytes, client, mime_type)
    else:
        questions, assessment = extract_exam_questions(document_bytes, client, mime_type), None

    answers = None
    if answer_key_bytes:
        answers = extract_answer_key(answer_key_bytes, client, mime_type)

    return build_quiz_document(title, questions, answers, assessment)
