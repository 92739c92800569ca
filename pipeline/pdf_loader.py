"""
PDF input handling: read, check and describe uploaded documents.
"""

import io
from pathlib import Path
from typing import List, Optional

import pdfplumber

from config import PDF_MIME_TYPE
from pipeline.schemas import ExtractionRequest

PDF_MAGIC = b"%PDF-"


def is_pdf(data: bytes) -> bool:
    """Check the PDF header; some writers put a few junk bytes before it."""
    return PDF_MAGIC in data[:1024]


class PDFLoader:
    """Loads PDFs into extraction requests."""

    def from_bytes(self, data: bytes, filename: Optional[str] = None) -> ExtractionRequest:
        """
        Wrap uploaded bytes in an ExtractionRequest.

        Raises:
            ValueError: the bytes are not a PDF
        """
        if not data or not is_pdf(data):
            name = f" ({filename})" if filename else ""
            raise ValueError(f"Invalid file type{name}. Please upload a PDF file.")
        return ExtractionRequest(document_bytes=data, mime_type=PDF_MIME_TYPE)

    def load(self, pdf_path: Path) -> ExtractionRequest:
        """Read a PDF from disk."""
        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF not found: {pdf_path}")
        return self.from_bytes(pdf_path.read_bytes(), pdf_path.name)

    def get_page_count(self, data: bytes) -> int:
        """Number of pages, for progress reporting."""
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                return len(pdf.pages)
        except Exception as e:
            raise ValueError(f"Could not read PDF: {e}") from e


def quiz_title_from_filename(filename: str) -> str:
    """Saved quizzes are keyed by title; the upload's filename is the title."""
    return Path(filename).name.strip() or "Untitled quiz"


def list_pdfs(directory: Path) -> List[Path]:
    """List all PDF files in a directory."""
    return sorted(Path(directory).glob("*.pdf"))
