"""
Response normalizer: raw model text -> validated records.

Steps, in order:
1. strip Markdown code fences
2. parse strictly, falling back to json_repair
3. validate the response envelope
4. validate each record on its own and drop the ones that fail

A response that is structurally unusable fails as a whole; a bad record
inside an otherwise usable response is dropped and the rest are kept.
Math markup ($...$, $$...$$) is passed through untouched.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import json_repair
from pydantic import BaseModel, ValidationError

from pipeline.errors import EmptyResponse, MalformedJson, SchemaViolation
from pipeline.tasks import TaskDescriptor, get_task

logger = logging.getLogger(__name__)

# ```json / ```JSON / ``` at the very start of the text
_OPEN_FENCE = re.compile(r"\A```[\w+-]*[ \t]*\n?")
_CLOSE_FENCE = re.compile(r"\n?[ \t]*```\s*\Z")
# A fenced block somewhere inside explanatory prose; closing fence optional (truncation)
_EMBEDDED_FENCE = re.compile(r"```[\w+-]*[ \t]*\n(.*?)(?:```|\Z)", re.DOTALL)

_RAW_PREVIEW_CHARS = 500


@dataclass(frozen=True)
class NormalizedPayload:
    """Validated records from one model response."""
    task: TaskDescriptor
    records: Tuple[BaseModel, ...]
    dropped: int = 0
    accuracy_assessment: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        """Return the payload in its JSON wire shape."""
        data: Dict[str, Any] = {
            self.task.collection_key: [
                record.model_dump(mode="json", by_alias=True) for record in self.records
            ]
        }
        if self.accuracy_assessment is not None:
            data["accuracyAssessment"] = self.accuracy_assessment
        return data


def strip_fences(raw_text: Optional[str]) -> str:
    """Remove Markdown code fences and surrounding whitespace."""
    text = (raw_text or "").strip()
    if text.startswith("```"):
        text = _OPEN_FENCE.sub("", text, count=1)
        text = _CLOSE_FENCE.sub("", text)
    elif not text.startswith(("{", "[")):
        match = _EMBEDDED_FENCE.search(text)
        if match:
            text = match.group(1)
    return text.strip()


def parse_json(text: str) -> Any:
    """
    Parse JSON text, repairing it if the strict parse fails.

    Handles trailing commas, unquoted keys, single quotes and strings or
    brackets left open by a truncated completion.

    Raises:
        MalformedJson: neither the strict parse nor the repair produced an
            object or array
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Strict JSON parse failed (%s), attempting repair", e)
    except RecursionError:
        # Nesting deeper than the interpreter allows; repair would recurse too
        logger.warning("Model response nested too deeply to parse (%d chars)", len(text))
        raise MalformedJson(text)

    # Skip any prose in front of the payload; the tail is left alone so a
    # truncated payload can still be closed by the repair pass.
    starts = [i for i in (text.find("{"), text.find("[")) if i >= 0]
    candidate = text[min(starts):] if starts else text

    try:
        repaired = json_repair.loads(candidate)
    except (ValueError, RecursionError) as e:
        logger.warning("JSON repair raised %s", e)
        repaired = None

    if not isinstance(repaired, (dict, list)):
        logger.warning(
            "Could not parse model response as JSON: %r",
            text[:_RAW_PREVIEW_CHARS],
        )
        raise MalformedJson(text)

    return repaired


def normalize(raw_text: Optional[str], task) -> NormalizedPayload:
    """
    Turn a model completion into validated records for ``task``.

    Args:
        raw_text: Completion text, possibly fenced or malformed
        task: TaskDescriptor, ExtractionKind or kind string

    Returns:
        NormalizedPayload with the surviving records in their original order

    Raises:
        EmptyResponse: nothing left after fence stripping
        MalformedJson: the text could not be parsed or repaired
        SchemaViolation: the parsed value does not have the expected shape
    """
    if not isinstance(task, TaskDescriptor):
        task = get_task(task)

    text = strip_fences(raw_text)
    if not text:
        raise EmptyResponse()

    data = parse_json(text)

    # A bare array is taken as the record collection itself
    if isinstance(data, list):
        data = {task.collection_key: data}

    try:
        envelope = task.envelope.model_validate(data)
    except ValidationError as e:
        logger.warning("Response does not match %s schema: %s", task.kind.value, e)
        raise SchemaViolation(str(e)) from e

    records = []
    dropped = 0
    for index, item in enumerate(getattr(envelope, task.collection_key)):
        try:
            records.append(task.record_model.model_validate(item))
        except ValidationError as e:
            dropped += 1
            logger.debug("Dropping %s record #%d: %s", task.kind.value, index, e)

    if dropped:
        logger.info(
            "Kept %d of %d %s records",
            len(records), len(records) + dropped, task.kind.value,
        )

    return NormalizedPayload(
        task=task,
        records=tuple(records),
        dropped=dropped,
        accuracy_assessment=getattr(envelope, "accuracy_assessment", None),
    )
