"""
Image utilities for the PDF editor.

Handles page rendering, data URLs and image preparation for embedding.
"""
import base64
import re
from io import BytesIO
from typing import Tuple

import fitz  # PyMuPDF
from PIL import Image, ImageOps

from core.constants import PNG_MIME_TYPE, JPEG_MIME_TYPE

EXIF_ORIENTATION_TAG = 0x0112

DATA_URL_PATTERN = re.compile(r'^data:(?P<mime>[\w/+.-]+)?(;base64)?,(?P<data>.*)$', re.DOTALL)


def render_pdf_page(
    pdf_bytes: bytes,
    page_num: int,
    scale: float,
    image_format: str = 'png',
    jpg_quality: int = 90
) -> Tuple[bytes, int, int]:
    """
    Render a PDF page to an encoded image.

    Args:
        pdf_bytes: Raw PDF bytes
        page_num: 1-indexed page number
        scale: Render scale (pixels per point)
        image_format: 'png' or 'jpeg'
        jpg_quality: JPEG quality (ignored for PNG)

    Returns:
        Tuple of (encoded image bytes, width, height)
    """
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        page = doc.load_page(page_num - 1)  # 0-indexed
        mat = fitz.Matrix(scale, scale)
        pix = page.get_pixmap(matrix=mat, alpha=False)
        if image_format == 'jpeg':
            data = pix.tobytes("jpg", jpg_quality=jpg_quality)
        else:
            data = pix.tobytes("png")
        return data, pix.width, pix.height
    finally:
        doc.close()


def image_to_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Encode raw image bytes as a base64 data URL."""
    encoded = base64.b64encode(image_bytes).decode()
    return f"data:{mime_type};base64,{encoded}"


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    Decode a base64 data URL.

    Args:
        data_url: String such as 'data:image/png;base64,iVBOR...'

    Returns:
        Tuple of (mime type, raw bytes)

    Raises:
        ValueError: If the string is not a base64 data URL
    """
    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        raise ValueError("Not a data URL")
    mime_type = match.group('mime') or 'text/plain'
    try:
        data = base64.b64decode(match.group('data'), validate=True)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid base64 payload in data URL: {e}") from e
    return mime_type, data


def decode_image(image_bytes: bytes) -> Image.Image:
    """
    Decode image bytes to PIL Image.

    Args:
        image_bytes: Encoded image bytes

    Returns:
        PIL Image object
    """
    return Image.open(BytesIO(image_bytes))


def get_image_dimensions(image_bytes: bytes) -> Tuple[int, int]:
    """Get image dimensions (width, height)."""
    with decode_image(image_bytes) as img:
        return img.size


def prepare_image_for_embedding(image_bytes: bytes, mime_type: str) -> Tuple[bytes, int, int]:
    """
    Apply EXIF orientation and return bytes ready to embed in a PDF page.

    Images without an orientation tag are returned unchanged.

    Args:
        image_bytes: PNG or JPEG bytes
        mime_type: 'image/png' or 'image/jpeg'

    Returns:
        Tuple of (image bytes, width, height)
    """
    img = decode_image(image_bytes)
    orientation = img.getexif().get(EXIF_ORIENTATION_TAG, 1)
    if orientation == 1:
        return image_bytes, img.size[0], img.size[1]

    transposed = ImageOps.exif_transpose(img)
    buf = BytesIO()
    if mime_type == JPEG_MIME_TYPE:
        if transposed.mode in ('RGBA', 'LA', 'P'):
            transposed = transposed.convert('RGB')
        transposed.save(buf, format='JPEG', quality=95)
    else:
        transposed.save(buf, format='PNG')
    return buf.getvalue(), transposed.size[0], transposed.size[1]


def is_png(image_bytes: bytes) -> bool:
    return image_bytes[:8] == b'\x89PNG\r\n\x1a\n'


def sniff_image_mime_type(image_bytes: bytes) -> str:
    """Guess PNG or JPEG from magic bytes; empty string when unknown."""
    if is_png(image_bytes):
        return PNG_MIME_TYPE
    if image_bytes[:3] == b'\xff\xd8\xff':
        return JPEG_MIME_TYPE
    return ''
