"""
PDF Service - Page-level mutations on raw PDF bytes.

Every function takes bytes, loads them, applies one mutation and returns
freshly serialized bytes. Input bytes are never modified, so a failure
leaves the caller's document untouched.

Page numbers are 1-based at this interface; the libraries are 0-based.
"""
import math
from io import BytesIO
from typing import Iterable, List

import fitz  # PyMuPDF
from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError

from core.constants import (
    DEFAULT_PAGE_SIZE,
    JPEG_MIME_TYPE,
    PNG_MIME_TYPE,
    TEXT_EDIT_COVER_COLOR,
    TEXT_EDIT_FONT,
    TEXT_EDIT_FONT_SIZE_RATIO,
    TEXT_EDIT_TEXT_COLOR
)
from core.exceptions import (
    InvalidInputError,
    InvalidPageError,
    LastPageRemovalError,
    UnsupportedFileTypeError
)
from core.models import SplitResult, TextEdit
from utils.image_utils import prepare_image_for_embedding
from utils.logging import get_logger

logger = get_logger(__name__)


def _read(pdf_bytes: bytes) -> PdfReader:
    try:
        return PdfReader(BytesIO(pdf_bytes))
    except (PdfReadError, ValueError) as e:
        raise InvalidInputError(f"Could not read PDF: {e}") from e


def _serialize(writer: PdfWriter) -> bytes:
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def _copy_pages(reader: PdfReader, indices: Iterable[int]) -> bytes:
    writer = PdfWriter()
    for index in indices:
        writer.add_page(reader.pages[index])
    return _serialize(writer)


def _open_fitz(pdf_bytes: bytes) -> fitz.Document:
    try:
        return fitz.open(stream=pdf_bytes, filetype="pdf")
    except (fitz.FileDataError, RuntimeError) as e:
        raise InvalidInputError(f"Could not read PDF: {e}") from e


def _save_fitz(doc: fitz.Document) -> bytes:
    return doc.tobytes(garbage=3, deflate=True)


def validate_page_number(page_number: int, page_count: int):
    """
    Guard clause for a 1-based page number.

    Raises:
        InvalidPageError: If page_number is outside [1, page_count]
    """
    if page_number < 1 or page_number > page_count:
        raise InvalidPageError(
            f"Invalid page number {page_number}: document has {page_count} page(s)."
        )


def validate_insert_position(insert_after_page: int, page_count: int):
    """Insert positions range over [0, page_count] (0 = before the first page)."""
    if insert_after_page < 0 or insert_after_page > page_count:
        raise InvalidPageError(
            f"Invalid insert position {insert_after_page}: document has {page_count} page(s)."
        )


def get_page_count(pdf_bytes: bytes) -> int:
    """Number of pages in a PDF."""
    reader = _read(pdf_bytes)
    try:
        return len(reader.pages)
    except (PdfReadError, KeyError, ValueError) as e:
        raise InvalidInputError(f"Could not read PDF: {e}") from e


def normalize_pdf(pdf_bytes: bytes) -> bytes:
    """Load and re-serialize a PDF without changing its pages."""
    reader = _read(pdf_bytes)
    return _copy_pages(reader, range(len(reader.pages)))


def split_pdf(pdf_bytes: bytes, split_page: int) -> SplitResult:
    """
    Split a PDF after split_page.

    Args:
        pdf_bytes: Source PDF
        split_page: Last page (1-based) of the first half

    Returns:
        SplitResult with pages [1, split_page] and [split_page + 1, N]

    Raises:
        InvalidPageError: Unless 1 <= split_page < N
    """
    reader = _read(pdf_bytes)
    total_pages = len(reader.pages)

    if split_page <= 0 or split_page >= total_pages:
        raise InvalidPageError('Invalid split page number.')

    first_half = _copy_pages(reader, range(split_page))
    second_half = _copy_pages(reader, range(split_page, total_pages))

    logger.debug("pdf_split", split_page=split_page, total_pages=total_pages)
    return SplitResult(first_half=first_half, second_half=second_half)


def add_image_to_pdf(
    pdf_bytes: bytes,
    image_bytes: bytes,
    image_type: str,
    insert_after_page: int
) -> bytes:
    """
    Insert a new page holding an image.

    The new page has the default page size; the image is scaled to fit
    and centered.

    Args:
        pdf_bytes: Source PDF
        image_bytes: PNG or JPEG bytes
        image_type: 'image/png' or 'image/jpeg'
        insert_after_page: Number of pages before the new one

    Returns:
        Updated PDF bytes
    """
    if image_type not in (PNG_MIME_TYPE, JPEG_MIME_TYPE):
        raise UnsupportedFileTypeError(image_type, 'Unsupported image type.')

    image_bytes, img_width, img_height = prepare_image_for_embedding(image_bytes, image_type)
    if img_width <= 0 or img_height <= 0:
        raise InvalidInputError('Image has no pixels.')

    doc = _open_fitz(pdf_bytes)
    try:
        validate_insert_position(insert_after_page, doc.page_count)

        page_width, page_height = DEFAULT_PAGE_SIZE
        pno = insert_after_page if insert_after_page < doc.page_count else -1
        page = doc.new_page(pno=pno, width=page_width, height=page_height)

        scale = min(page_width / img_width, page_height / img_height)
        width = img_width * scale
        height = img_height * scale
        x0 = (page_width - width) / 2
        y0 = (page_height - height) / 2

        page.insert_image(
            fitz.Rect(x0, y0, x0 + width, y0 + height),
            stream=image_bytes,
            keep_proportion=False
        )
        return _save_fitz(doc)
    finally:
        doc.close()


def add_pdf_to_pdf(original_pdf_bytes: bytes, new_pdf_bytes: bytes, insert_after_page: int) -> bytes:
    """
    Insert every page of another PDF, in order, after insert_after_page.

    Args:
        original_pdf_bytes: Document being edited
        new_pdf_bytes: Document whose pages are inserted
        insert_after_page: Number of original pages before the inserted ones

    Returns:
        Updated PDF bytes
    """
    original = _read(original_pdf_bytes)
    inserted = _read(new_pdf_bytes)
    validate_insert_position(insert_after_page, len(original.pages))

    writer = PdfWriter()
    for page in original.pages:
        writer.add_page(page)
    for offset, page in enumerate(inserted.pages):
        writer.insert_page(page, insert_after_page + offset)

    return _serialize(writer)


def apply_drawing_to_pdf(pdf_bytes: bytes, page_num: int, drawing_png: bytes) -> bytes:
    """
    Stamp a transparent PNG drawing over a whole page.

    Args:
        pdf_bytes: Source PDF
        page_num: 1-based page number
        drawing_png: PNG with the same aspect ratio as the page

    Returns:
        Updated PDF bytes
    """
    doc = _open_fitz(pdf_bytes)
    try:
        validate_page_number(page_num, doc.page_count)
        page = doc.load_page(page_num - 1)
        page.insert_image(page.rect, stream=drawing_png, keep_proportion=False, overlay=True)
        return _save_fitz(doc)
    finally:
        doc.close()


def _validate_edit(edit: TextEdit, page_rect: fitz.Rect):
    if not all(math.isfinite(value) for value in (edit.x, edit.y, edit.width, edit.height)):
        raise InvalidInputError("Text edit box has non-finite coordinates")
    if edit.x < 0 or edit.y < 0:
        raise InvalidInputError(f"Text edit box has negative coordinates: ({edit.x}, {edit.y})")
    if edit.width <= 0 or edit.height <= 0:
        raise InvalidInputError(f"Text edit box has no area: {edit.width}x{edit.height}")
    if edit.x >= page_rect.width or edit.y >= page_rect.height:
        raise InvalidInputError(f"Text edit box starts outside the page: ({edit.x}, {edit.y})")


def apply_text_edit_to_pdf(pdf_bytes: bytes, page_num: int, edits: List[TextEdit]) -> bytes:
    """
    Replace text regions on a page.

    Each box is covered with a white rectangle and the new text is drawn
    in Helvetica with its baseline on the bottom edge of the box.

    Args:
        pdf_bytes: Source PDF
        page_num: 1-based page number
        edits: Boxes in PDF points, top-left origin

    Returns:
        Updated PDF bytes
    """
    doc = _open_fitz(pdf_bytes)
    try:
        validate_page_number(page_num, doc.page_count)
        page = doc.load_page(page_num - 1)

        for edit in edits:
            _validate_edit(edit, page.rect)
            rect = fitz.Rect(edit.x, edit.y, edit.x + edit.width, edit.y + edit.height) & page.rect

            page.draw_rect(rect, color=None, fill=TEXT_EDIT_COVER_COLOR, overlay=True)

            # Simplified fitting: size follows the box height only
            page.insert_text(
                fitz.Point(edit.x, edit.y + edit.height),
                edit.text,
                fontname=TEXT_EDIT_FONT,
                fontsize=edit.height * TEXT_EDIT_FONT_SIZE_RATIO,
                color=TEXT_EDIT_TEXT_COLOR
            )

        return _save_fitz(doc)
    finally:
        doc.close()


def remove_page_from_pdf(pdf_bytes: bytes, page_to_remove: int) -> bytes:
    """
    Remove one page.

    Args:
        pdf_bytes: Source PDF
        page_to_remove: 1-based page number

    Returns:
        Updated PDF bytes

    Raises:
        InvalidPageError: If the page does not exist
        LastPageRemovalError: If it is the only page
    """
    reader = _read(pdf_bytes)
    total_pages = len(reader.pages)

    if page_to_remove <= 0 or page_to_remove > total_pages:
        raise InvalidPageError('Invalid page number to remove.')

    if total_pages == 1:
        raise LastPageRemovalError()

    return _copy_pages(reader, (i for i in range(total_pages) if i != page_to_remove - 1))
