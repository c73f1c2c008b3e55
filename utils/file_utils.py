"""
File helpers: upload reading, MIME detection and download naming.
"""
import os
from typing import Optional, Tuple
from urllib.parse import quote

from fastapi import UploadFile

from core.constants import (
    EXTENSION_MIME_TYPES,
    PDF_MIME_TYPE,
    SUPPORTED_IMAGE_TYPES
)
from core.exceptions import InvalidInputError, UnsupportedFileTypeError


async def read_upload(upload: UploadFile, max_bytes: Optional[int] = None) -> bytes:
    """
    Read an uploaded file fully into memory.

    Args:
        upload: FastAPI UploadFile
        max_bytes: Optional size limit

    Returns:
        File contents

    Raises:
        InvalidInputError: If the file is empty or over the limit
    """
    content = await upload.read()
    if not content:
        raise InvalidInputError(f"Uploaded file '{upload.filename}' is empty")
    if max_bytes is not None and len(content) > max_bytes:
        raise InvalidInputError(
            f"Uploaded file '{upload.filename}' exceeds {max_bytes} bytes"
        )
    return content


def detect_mime_type(filename: Optional[str], declared: Optional[str] = None) -> str:
    """
    Resolve the MIME type of an upload.

    The declared content type wins when it is a PDF or an image;
    otherwise the file extension decides.
    """
    if declared:
        declared = declared.split(';')[0].strip().lower()
        if declared == PDF_MIME_TYPE or declared.startswith('image/'):
            return declared
    ext = os.path.splitext(filename or '')[1].lower()
    return EXTENSION_MIME_TYPES.get(ext, declared or 'application/octet-stream')


def is_pdf(mime_type: str) -> bool:
    return mime_type == PDF_MIME_TYPE


def is_image(mime_type: str) -> bool:
    return mime_type.startswith('image/')


def ensure_pdf(mime_type: str):
    """Reject anything that is not a PDF."""
    if not is_pdf(mime_type):
        raise UnsupportedFileTypeError(mime_type, "Please select a valid PDF file.")


def ensure_insertable(mime_type: str):
    """Only PDFs and PNG/JPEG images can be inserted as pages."""
    if is_pdf(mime_type) or mime_type in SUPPORTED_IMAGE_TYPES:
        return
    raise UnsupportedFileTypeError(mime_type, "Unsupported file type for adding page.")


def base_name(filename: str) -> str:
    """Strip a trailing .pdf extension."""
    if filename.lower().endswith('.pdf'):
        return filename[:-4]
    return filename


def split_filenames(filename: str, split_page: int, total_pages: int) -> Tuple[str, str]:
    """
    Names for the two halves of a split.

    Args:
        filename: Original filename
        split_page: Last page of the first half (1-based)
        total_pages: Page count of the original

    Returns:
        ('{base}_1-{s}.pdf', '{base}_{s+1}-{N}.pdf')
    """
    base = base_name(filename)
    return (
        f"{base}_1-{split_page}.pdf",
        f"{base}_{split_page + 1}-{total_pages}.pdf"
    )


def content_disposition(filename: str) -> str:
    """Content-Disposition header value for a download."""
    ascii_name = filename.encode('ascii', 'replace').decode().replace('"', '')
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
