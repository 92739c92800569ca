"""
Error taxonomy for the extraction pipeline.

Every failure of an extraction attempt is an ExtractionError carrying a
``kind`` and a ``user_message`` that is safe to show to the end user.
Diagnostic payloads (raw model text, validation detail) are kept on the
exception for logging and never placed in ``user_message``.
"""

from typing import Optional


class ExtractionError(Exception):
    """Base class for terminal failures of one extraction attempt."""

    kind = "ExtractionError"
    default_message = "Failed to process the document. Please try another PDF."

    def __init__(self, user_message: Optional[str] = None):
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class TransportError(ExtractionError):
    """Network or provider failure while calling the model."""

    kind = "TransportError"
    default_message = "Could not reach the AI model."


class ExtractionTimeout(ExtractionError):
    kind = "Timeout"
    default_message = (
        "The AI model took too long to respond. Please try again, "
        "or upload a shorter document."
    )


class ContentBlocked(ExtractionError):
    """The provider refused to answer for safety or policy reasons."""

    kind = "ContentBlocked"

    def __init__(self, block_reason: str):
        self.block_reason = block_reason
        super().__init__(
            f"The AI model blocked this document (reason: {block_reason}). "
            "Please try a different PDF."
        )


class NormalizationError(ExtractionError):
    """Raised by the normalizer when a completion cannot be salvaged."""

    kind = "NormalizationError"


class EmptyResponse(NormalizationError):
    kind = "EmptyResponse"
    default_message = "The AI model returned an empty response. Please try again."


class MalformedJson(NormalizationError):
    kind = "MalformedJson"
    default_message = (
        "Invalid response from the AI model, could not parse the extracted data. "
        "Please try again."
    )

    def __init__(self, raw_text: str):
        self.raw_text = raw_text
        super().__init__()


class SchemaViolation(NormalizationError):
    kind = "SchemaViolation"
    default_message = "Failed to extract valid data from the PDF."

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__()


class EmptyResultSet(ExtractionError):
    """The response parsed, but no usable records survived filtering."""

    kind = "EmptyResultSet"
    default_message = (
        "Could not extract any records from the PDF. Please check the file format."
    )
