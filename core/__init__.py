"""Core package - Domain models, constants and errors."""

from .models import (
    BoundingBox,
    TextBlock,
    TextEdit,
    SplitResult,
    RenderedPage,
    PageExtraction
)
from .constants import (
    DEFAULT_RENDER_SCALE,
    THUMBNAIL_SCALE,
    DEFAULT_PAGE_SIZE,
    EDITOR_TOOLS,
    PDF_MIME_TYPE,
    SUPPORTED_IMAGE_TYPES,
    TEXT_EXTRACTION_PROMPT
)
from .exceptions import (
    PdfEditorError,
    InvalidInputError,
    InvalidPageError,
    LastPageRemovalError,
    UnsupportedFileTypeError,
    DocumentNotFound,
    DocumentBusyError,
    TextExtractionError
)

__all__ = [
    'BoundingBox',
    'TextBlock',
    'TextEdit',
    'SplitResult',
    'RenderedPage',
    'PageExtraction',
    'DEFAULT_RENDER_SCALE',
    'THUMBNAIL_SCALE',
    'DEFAULT_PAGE_SIZE',
    'EDITOR_TOOLS',
    'PDF_MIME_TYPE',
    'SUPPORTED_IMAGE_TYPES',
    'TEXT_EXTRACTION_PROMPT',
    'PdfEditorError',
    'InvalidInputError',
    'InvalidPageError',
    'LastPageRemovalError',
    'UnsupportedFileTypeError',
    'DocumentNotFound',
    'DocumentBusyError',
    'TextExtractionError'
]
