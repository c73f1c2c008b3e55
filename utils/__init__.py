"""Utilities package - Helper functions for images, coordinates and files."""

from .image_utils import (
    render_pdf_page,
    image_to_data_url,
    decode_data_url,
    decode_image,
    get_image_dimensions,
    prepare_image_for_embedding
)

from .coordinate_utils import (
    unscale_bounding_box,
    scale_bounding_box,
    rescale_bounding_box,
    clamp_bounding_box,
    build_text_edits,
    to_bottom_left_origin
)

from .file_utils import (
    detect_mime_type,
    ensure_pdf,
    ensure_insertable,
    split_filenames,
    content_disposition
)

__all__ = [
    # Image utils
    'render_pdf_page',
    'image_to_data_url',
    'decode_data_url',
    'decode_image',
    'get_image_dimensions',
    'prepare_image_for_embedding',

    # Coordinate utils
    'unscale_bounding_box',
    'scale_bounding_box',
    'rescale_bounding_box',
    'clamp_bounding_box',
    'build_text_edits',
    'to_bottom_left_origin',

    # File utils
    'detect_mime_type',
    'ensure_pdf',
    'ensure_insertable',
    'split_filenames',
    'content_disposition'
]
