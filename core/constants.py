"""
Constants and configuration values for the PDF editor.
"""

# Render scales (ratio of pixel size to page size in points)
DEFAULT_RENDER_SCALE = 1.5
THUMBNAIL_SCALE = 0.2

# JPEG quality used for page images sent to the text extraction model
EXTRACTION_JPEG_QUALITY = 90

# Default size for pages created from images (A4, in points)
DEFAULT_PAGE_SIZE = (595.28, 841.89)

# Text replacement drawing
TEXT_EDIT_FONT = 'helv'           # Helvetica (base-14)
TEXT_EDIT_FONT_SIZE_RATIO = 0.8   # font size = box height * ratio
TEXT_EDIT_COVER_COLOR = (1, 1, 1)
TEXT_EDIT_TEXT_COLOR = (0, 0, 0)

# Editor tools
EDITOR_TOOLS = ('view', 'draw', 'edit')
DEFAULT_TOOL = 'view'

# MIME types
PDF_MIME_TYPE = 'application/pdf'
PNG_MIME_TYPE = 'image/png'
JPEG_MIME_TYPE = 'image/jpeg'
SUPPORTED_IMAGE_TYPES = (PNG_MIME_TYPE, JPEG_MIME_TYPE)

EXTENSION_MIME_TYPES = {
    '.pdf': PDF_MIME_TYPE,
    '.png': PNG_MIME_TYPE,
    '.jpg': JPEG_MIME_TYPE,
    '.jpeg': JPEG_MIME_TYPE,
}

# Text extraction prompt
TEXT_EXTRACTION_PROMPT = (
    "Analyze the provided image of a document page.\n"
    "Extract all text blocks.\n"
    "For each text block, provide the text content and its bounding box "
    "coordinates (x, y, width, height) in pixels.\n"
    "The origin (0,0) is the top-left corner of the image.\n"
    "Respond with a JSON array only, where every item has the form "
    '{"text": string, "boundingBox": {"x": number, "y": number, '
    '"width": number, "height": number}}.'
)

# Default text extraction parameters
DEFAULT_EXTRACTION_PARAMS = {
    'max_tokens': 4096,
    'temperature': 0.0,
}

BOUNDING_BOX_KEYS = ('x', 'y', 'width', 'height')
