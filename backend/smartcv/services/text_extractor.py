"""
Text Extractor - turns uploaded CV documents into plain text.

Dispatches on the declared MIME type: PDFs go through pdfplumber, Word
documents through python-docx. Extraction is deterministic, so failures are
reported immediately and never retried.
"""

import io

import docx
import pdfplumber

from smartcv.core.errors import ExtractionFailure, UnsupportedType

PDF_MIME_TYPE = "application/pdf"
DOC_MIME_TYPE = "application/msword"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

WORD_MIME_TYPES = (DOC_MIME_TYPE, DOCX_MIME_TYPE)
SUPPORTED_MIME_TYPES = (PDF_MIME_TYPE,) + WORD_MIME_TYPES


def _extract_text_from_pdf(file_bytes: bytes) -> str:
    text_parts = []

    with pdfplumber.open(io.BytesIO(file_bytes)) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)

    return "\n".join(text_parts)


def _extract_text_from_word(file_bytes: bytes) -> str:
    document = docx.Document(io.BytesIO(file_bytes))
    parts: list[str] = []
    for paragraph in document.paragraphs:
        text = paragraph.text.strip()
        if text:
            parts.append(text)

    # Many CV templates lay out sections in tables
    for table in document.tables:
        for row in table.rows:
            for cell in row.cells:
                text = cell.text.strip()
                if text:
                    parts.append(text)

    return "\n".join(parts)


def extract_text(file_bytes: bytes, mime_type: str) -> str:
    """
    Extract plain text from an uploaded document.

    Args:
        file_bytes: Raw contents of the uploaded file
        mime_type: MIME type declared by the client

    Returns:
        The extracted text (may be empty for a document without text)

    Raises:
        UnsupportedType: mime_type is not PDF, DOC or DOCX
        ExtractionFailure: the parser could not read the document
    """
    if mime_type == PDF_MIME_TYPE:
        extractor = _extract_text_from_pdf
    elif mime_type in WORD_MIME_TYPES:
        extractor = _extract_text_from_word
    else:
        raise UnsupportedType(f"Unsupported file type: {mime_type}")

    try:
        return extractor(file_bytes)
    except Exception as e:
        raise ExtractionFailure(f"Text extraction failed: {e}") from e


class DocumentTextExtractor:
    """Injectable wrapper around :func:`extract_text`."""

    def extract_text(self, file_bytes: bytes, mime_type: str) -> str:
        return extract_text(file_bytes, mime_type)
