"""
Gemini API client for PDF question extraction.

Sends one prompt plus the PDF bytes inline to a Gemini vision model and hands
back the raw completion text. Parsing the text is the normalizer's job.
"""

import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from google import genai
from google.genai import errors, types

from config import DEFAULT_MODEL, PDF_MIME_TYPE, REQUEST_DELAY, REQUEST_TIMEOUT_SECONDS
from pipeline.errors import ExtractionTimeout, TransportError

logger = logging.getLogger(__name__)

# Finish reasons that mean the provider refused to answer
BLOCKING_FINISH_REASONS = {
    "SAFETY",
    "PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
    "RECITATION",
    "IMAGE_SAFETY",
}


@dataclass
class RawModelResponse:
    """Raw completion from Gemini."""
    text: str
    block_reason: Optional[str] = None
    finish_reason: Optional[str] = None

    @property
    def blocked(self) -> bool:
        return self.block_reason is not None


def _enum_name(value) -> Optional[str]:
    if value is None:
        return None
    return str(getattr(value, "value", value))


def data_uri_to_inline(data_uri: str) -> Dict[str, str]:
    """
    Split a base64 data URI into its media type and payload.

    Args:
        data_uri: ``data:<mimetype>;base64,<encoded_data>``

    Returns:
        Dict with "mime_type" and base64 "data"
    """
    header, _, data = data_uri.partition(",")
    match = re.match(r"data:(.*?);", header)
    mime_type = match.group(1) if match else None

    if not mime_type or not data:
        raise ValueError("Invalid data URI format.")

    return {"mime_type": mime_type, "data": data}


class GeminiClient:
    """Client for extracting quiz content from PDFs using the Gemini API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        request_delay: float = REQUEST_DELAY,
        timeout: Optional[float] = REQUEST_TIMEOUT_SECONDS,
        client: Optional[genai.Client] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key. If not provided, reads from GEMINI_API_KEY env var.
            model: Model to use (default: gemini-2.0-flash)
            request_delay: Minimum seconds between requests (free tier rate limit)
            timeout: Per-request timeout in seconds, None to wait indefinitely
            client: Pre-built genai.Client, mainly for tests
        """
        self.model_name = model
        self.request_delay = request_delay
        self.timeout = timeout
        self.last_request_time = 0.0

        if client is not None:
            self.client = client
            return

        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "Gemini API key required. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter. Get a free key at: "
                "https://aistudio.google.com/app/apikey"
            )

        http_options = None
        if timeout is not None:
            # HttpOptions.timeout is in milliseconds
            http_options = types.HttpOptions(timeout=int(timeout * 1000))
        self.client = genai.Client(api_key=self.api_key, http_options=http_options)

    def _rate_limit(self):
        """Enforce rate limiting for free tier."""
        elapsed = time.time() - self.last_request_time
        if elapsed < self.request_delay:
            sleep_time = self.request_delay - elapsed
            logger.info("Rate limit: waiting %.1fs", sleep_time)
            time.sleep(sleep_time)
        self.last_request_time = time.time()

    def invoke(
        self,
        prompt: str,
        document_bytes: bytes,
        mime_type: str = PDF_MIME_TYPE,
    ) -> RawModelResponse:
        """
        Send the prompt and the inline document to Gemini.

        Args:
            prompt: Task instruction
            document_bytes: Raw document content
            mime_type: Media type of document_bytes

        Returns:
            RawModelResponse with the completion text and any block signal

        Raises:
            TransportError: network or provider failure
            ExtractionTimeout: the request exceeded the configured timeout
        """
        self._rate_limit()

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=[
                    types.Part.from_bytes(data=document_bytes, mime_type=mime_type),
                    prompt,
                ],
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                ),
            )
        except httpx.TimeoutException as e:
            raise ExtractionTimeout() from e
        except errors.APIError as e:
            if e.code == 504:
                raise ExtractionTimeout() from e
            raise TransportError(f"AI model request failed: {e.message or e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"AI model request failed: {e}") from e

        return self._to_raw_response(response)

    def _to_raw_response(self, response) -> RawModelResponse:
        block_reason = None
        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and feedback.block_reason:
            block_reason = _enum_name(feedback.block_reason)

        finish_reason = None
        if response.candidates:
            finish_reason = _enum_name(response.candidates[0].finish_reason)
            if block_reason is None and finish_reason in BLOCKING_FINISH_REASONS:
                block_reason = finish_reason

        return RawModelResponse(
            text=response.text or "",
            block_reason=block_reason,
            finish_reason=finish_reason,
        )

    def test_connection(self) -> bool:
        """Test if API connection works."""
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents="Reply with just 'OK' if you can read this."
            )
            return "OK" in (response.text or "").upper()
        except (errors.APIError, httpx.HTTPError) as e:
            logger.warning("Connection test failed: %s", e)
            return False


def create_client(api_key: Optional[str] = None) -> GeminiClient:
    """Factory function to create a GeminiClient."""
    return GeminiClient(api_key=api_key)
