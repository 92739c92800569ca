"""
Task descriptors for the three extraction kinds.

A descriptor bundles everything that differs between extractions: the prompt,
the envelope schema for the whole response, the schema each record must
satisfy, and the key under which the records live.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type

from pydantic import BaseModel

from config import ANSWER_KEY_PROMPT, EXAM_QUESTIONS_PROMPT, QUIZ_QUESTIONS_PROMPT
from pipeline.schemas import (
    AnswerKeyEnvelope,
    AnswerRecord,
    ExtractedQuestion,
    QuestionsEnvelope,
    QuizEnvelope,
    ScoredQuestion,
)


class ExtractionKind(str, Enum):
    ANSWER_KEY = "answerKey"
    EXAM_QUESTIONS = "examQuestions"
    QUIZ_QUESTIONS = "quizQuestions"


@dataclass(frozen=True)
class TaskDescriptor:
    kind: ExtractionKind
    prompt: str
    envelope: Type[BaseModel]
    record_model: Type[BaseModel]
    collection_key: str
    # Used in user-facing messages: "Could not extract any <noun> ..."
    record_noun: str


TASKS: Dict[ExtractionKind, TaskDescriptor] = {
    ExtractionKind.ANSWER_KEY: TaskDescriptor(
        kind=ExtractionKind.ANSWER_KEY,
        prompt=ANSWER_KEY_PROMPT,
        envelope=AnswerKeyEnvelope,
        record_model=AnswerRecord,
        collection_key="answers",
        record_noun="answers",
    ),
    ExtractionKind.EXAM_QUESTIONS: TaskDescriptor(
        kind=ExtractionKind.EXAM_QUESTIONS,
        prompt=EXAM_QUESTIONS_PROMPT,
        envelope=QuestionsEnvelope,
        record_model=ExtractedQuestion,
        collection_key="questions",
        record_noun="questions",
    ),
    ExtractionKind.QUIZ_QUESTIONS: TaskDescriptor(
        kind=ExtractionKind.QUIZ_QUESTIONS,
        prompt=QUIZ_QUESTIONS_PROMPT,
        envelope=QuizEnvelope,
        record_model=ScoredQuestion,
        collection_key="questions",
        record_noun="questions",
    ),
}


def get_task(kind) -> TaskDescriptor:
    """Look up a descriptor by ExtractionKind or its string value."""
    try:
        return TASKS[ExtractionKind(kind)]
    except ValueError:
        valid = ", ".join(k.value for k in ExtractionKind)
        raise ValueError(f"Unknown extraction kind: {kind!r} (expected one of {valid})")
