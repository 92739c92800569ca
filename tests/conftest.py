import json
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add project root to sys.path so flat modules (config, database, pipeline) import
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from utils.gemini_client import RawModelResponse  # noqa: E402


class FakeModelClient:
    """Stands in for GeminiClient; replays canned responses in order."""

    def __init__(self, responses: List[RawModelResponse]):
        self.responses = list(responses)
        self.calls = []

    def invoke(self, prompt: str, document_bytes: bytes, mime_type: str) -> RawModelResponse:
        self.calls.append({"prompt": prompt, "document_bytes": document_bytes, "mime_type": mime_type})
        return self.responses.pop(0)


@pytest.fixture
def make_client():
    """Build a FakeModelClient from texts, dicts or RawModelResponse objects."""
    def _make(*responses, block_reason: Optional[str] = None) -> FakeModelClient:
        raw = []
        for response in responses:
            if isinstance(response, RawModelResponse):
                raw.append(response)
            elif isinstance(response, str):
                raw.append(RawModelResponse(text=response, block_reason=block_reason))
            else:
                raw.append(RawModelResponse(text=json.dumps(response), block_reason=block_reason))
        return FakeModelClient(raw)
    return _make


@pytest.fixture
def pdf_bytes() -> bytes:
    """Bytes that pass the PDF header check."""
    return b"%PDF-1.4\n%fake test document\n"


@pytest.fixture
def question_payload() -> dict:
    return {
        "questions": [
            {"questionNumber": 1, "questionText": "What is $2 + 2$?", "options": ["3", "4", "5"]},
            {"questionNumber": 2, "questionText": "Capital of France?", "options": ["Paris", "Rome"]},
        ]
    }
