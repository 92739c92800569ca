"""
Utility modules for the PDF Quiz Extractor.
"""

from .gemini_client import GeminiClient, RawModelResponse, data_uri_to_inline

__all__ = [
    "GeminiClient",
    "RawModelResponse",
    "data_uri_to_inline",
]
