"""
Plain-text extraction from stored student files.

Text files are decoded directly, PDFs are read page by page from their text
layer, and anything else is described by its filename only.
"""

import io
import logging
import os
from typing import List

import PyPDF2

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".markdown", ".csv"}
PAGE_SEPARATOR = "\n\n"


def placeholder_context(file_name: str) -> str:
    """Stand-in text for files whose content cannot be read."""
    return (
        f"Study material from file: {file_name}. "
        "The file content could not be extracted; generate educational material "
        "based on the subject matter suggested by the filename."
    )


def is_text_file(media_type: str, file_name: str) -> bool:
    ext = os.path.splitext(file_name or "")[1].lower()
    return "text/" in (media_type or "").lower() or ext in TEXT_EXTENSIONS


def is_pdf_file(media_type: str, file_name: str) -> bool:
    ext = os.path.splitext(file_name or "")[1].lower()
    return "application/pdf" in (media_type or "").lower() or ext == ".pdf"


def extract_pdf_pages(data: bytes) -> List[str]:
    """
    Extract text per page, in page order.

    A page whose extraction fails contributes an empty string; the rest of the
    document is still read.
    """
    reader = PyPDF2.PdfReader(io.BytesIO(data))
    pages = []
    for page_num, page in enumerate(reader.pages):
        try:
            page_text = page.extract_text() or ""
        except Exception as e:
            logger.warning(f"Text extraction failed on page {page_num + 1}: {e}")
            page_text = ""
        pages.append(page_text)
    return pages


def extract_text(data: bytes, media_type: str, file_name: str) -> str:
    """
    Produce a plain-text representation of a stored file.

    Args:
        data: Raw file bytes from storage.
        media_type: Declared MIME type of the upload.
        file_name: Display name, used for extension checks and placeholders.

    Returns:
        Extracted text. Empty only when a text-bearing file is genuinely empty.
    """
    if is_text_file(media_type, file_name):
        text = data.decode("utf-8", errors="replace")
        logger.info(f"Read {len(text)} characters from text file {file_name}")
        return text

    if is_pdf_file(media_type, file_name):
        try:
            pages = extract_pdf_pages(data)
        except Exception as e:
            logger.warning(f"Could not open PDF {file_name}, using filename context: {e}")
            return placeholder_context(file_name)
        text = PAGE_SEPARATOR.join(p for p in pages if p.strip())
        logger.info(f"Extracted {len(text)} characters from {len(pages)} pages of {file_name}")
        return text

    logger.warning(f"Unsupported file type {media_type!r} for {file_name}, using filename context")
    return placeholder_context(file_name)
