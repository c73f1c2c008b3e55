"""
Render Service - Page bitmaps for the viewer and thumbnails.
"""
from typing import List, Tuple

import fitz  # PyMuPDF

from core.constants import (
    DEFAULT_RENDER_SCALE,
    EXTRACTION_JPEG_QUALITY,
    JPEG_MIME_TYPE,
    PNG_MIME_TYPE,
    THUMBNAIL_SCALE
)
from core.exceptions import InvalidInputError
from core.models import RenderedPage
from utils.image_utils import render_pdf_page
from .pdf_service import get_page_count, validate_page_number


def page_sizes(pdf_bytes: bytes) -> List[Tuple[float, float]]:
    """
    Intrinsic page sizes.

    Args:
        pdf_bytes: Raw PDF bytes

    Returns:
        List of (width, height) in points, one per page
    """
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return [(page.rect.width, page.rect.height) for page in doc]
    finally:
        doc.close()


def fit_to_width_scale(page_width: float, container_width: float) -> float:
    """Render scale that makes a page exactly container_width pixels wide."""
    if page_width <= 0 or container_width <= 0:
        raise InvalidInputError("Page and container widths must be positive")
    return container_width / page_width


def render_page(
    pdf_bytes: bytes,
    page_number: int,
    scale: float = DEFAULT_RENDER_SCALE,
    image_format: str = 'png',
    quality: int = EXTRACTION_JPEG_QUALITY
) -> RenderedPage:
    """
    Render a page at a given scale.

    Pixel dimensions are the page size in points multiplied by scale.

    Args:
        pdf_bytes: Raw PDF bytes
        page_number: 1-indexed page number
        scale: Render scale
        image_format: 'png' or 'jpeg'
        quality: JPEG quality

    Returns:
        RenderedPage with encoded image data
    """
    if scale <= 0:
        raise InvalidInputError(f"Render scale must be positive, got {scale}")
    if image_format not in ('png', 'jpeg'):
        raise InvalidInputError(f"Unsupported render format: {image_format}")

    validate_page_number(page_number, get_page_count(pdf_bytes))

    data, width, height = render_pdf_page(
        pdf_bytes,
        page_number,
        scale,
        image_format=image_format,
        jpg_quality=quality
    )
    return RenderedPage(
        page_number=page_number,
        scale=scale,
        width=width,
        height=height,
        mime_type=JPEG_MIME_TYPE if image_format == 'jpeg' else PNG_MIME_TYPE,
        data=data
    )


def render_thumbnail(pdf_bytes: bytes, page_number: int, scale: float = THUMBNAIL_SCALE) -> RenderedPage:
    """Render a small PNG preview of a page."""
    return render_page(pdf_bytes, page_number, scale=scale)
