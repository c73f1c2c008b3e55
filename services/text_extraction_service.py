"""
Text Extraction Service - Detects text blocks on a page image via a
multimodal chat model.

The page image goes out as a single JPEG frame; the model answers with a
JSON array of {text, boundingBox{x, y, width, height}} in pixel space,
origin at the top-left corner of the image.
"""
import json
import math
import re
from typing import Any, List, Optional

from fastapi.concurrency import run_in_threadpool

from core.constants import (
    BOUNDING_BOX_KEYS,
    DEFAULT_EXTRACTION_PARAMS,
    DEFAULT_RENDER_SCALE,
    EXTRACTION_JPEG_QUALITY,
    JPEG_MIME_TYPE,
    TEXT_EXTRACTION_PROMPT
)
from core.exceptions import TextExtractionError
from core.models import BoundingBox, PageExtraction, TextBlock
from utils.coordinate_utils import clamp_bounding_box
from utils.image_utils import get_image_dimensions, image_to_data_url
from utils.logging import get_logger
from .render_service import render_page

logger = get_logger(__name__)

FAILURE_MESSAGE = 'Failed to extract text from image using the AI model.'


def get_json_content(response: str) -> str:
    """
    Strip markdown code fences around a JSON payload.

    Args:
        response: Response text that may contain ```json ... ``` blocks

    Returns:
        Extracted JSON string
    """
    response = response.strip()
    fenced = re.match(r'^```(?:json)?\s*(.*?)\s*```$', response, re.DOTALL)
    if fenced:
        return fenced.group(1)
    return response


def parse_text_blocks(content: str) -> List[TextBlock]:
    """
    Parse the model's answer into text blocks.

    Args:
        content: Raw response text

    Returns:
        List of TextBlock

    Raises:
        TextExtractionError: If the answer is not a JSON array of blocks
    """
    try:
        parsed = json.loads(get_json_content(content))
    except json.JSONDecodeError as e:
        raise TextExtractionError(f"AI response is not valid JSON: {e}") from e

    if not isinstance(parsed, list):
        raise TextExtractionError("AI response is not a valid array.")

    return [_parse_block(item, index) for index, item in enumerate(parsed)]


def _parse_block(item: Any, index: int) -> TextBlock:
    if not isinstance(item, dict) or 'text' not in item or 'boundingBox' not in item:
        raise TextExtractionError(f"Text block {index} is missing 'text' or 'boundingBox'")

    box = item['boundingBox']
    if not isinstance(box, dict) or any(key not in box for key in BOUNDING_BOX_KEYS):
        raise TextExtractionError(f"Text block {index} has an incomplete bounding box")

    try:
        bounding_box = BoundingBox.from_dict(box)
    except (TypeError, ValueError) as e:
        raise TextExtractionError(f"Text block {index} has non-numeric coordinates") from e

    if not all(math.isfinite(value) for value in bounding_box.to_dict().values()):
        raise TextExtractionError(f"Text block {index} has non-finite coordinates")

    return TextBlock(text=str(item['text']), bounding_box=bounding_box)


class TextExtractionService:
    """Service for AI text extraction using an OpenAI-compatible endpoint."""

    def __init__(
        self,
        client,
        model: str,
        max_tokens: int = DEFAULT_EXTRACTION_PARAMS['max_tokens'],
        temperature: float = DEFAULT_EXTRACTION_PARAMS['temperature']
    ):
        """
        Initialize text extraction service.

        Args:
            client: AsyncOpenAI client instance
            model: Multimodal model name
            max_tokens: Completion token limit
            temperature: Sampling temperature
        """
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def extract_text_from_image(
        self,
        image_bytes: bytes,
        mime_type: str = JPEG_MIME_TYPE,
        prompt: Optional[str] = None
    ) -> List[TextBlock]:
        """
        Detect text blocks in one image.

        Args:
            image_bytes: Encoded image
            mime_type: MIME type of the image
            prompt: Custom instruction (default: TEXT_EXTRACTION_PROMPT)

        Returns:
            Text blocks clipped to the image bounds

        Raises:
            TextExtractionError: On API failure or malformed answer
        """
        data_url = image_to_data_url(image_bytes, mime_type)
        width, height = get_image_dimensions(image_bytes)

        try:
            content = await self._call_model(data_url, prompt or TEXT_EXTRACTION_PROMPT)
        except Exception as e:
            logger.exception("text_extraction_request_failed", model=self.model)
            raise TextExtractionError(FAILURE_MESSAGE) from e

        if not content:
            logger.error("text_extraction_empty_response", model=self.model)
            raise TextExtractionError(FAILURE_MESSAGE)

        try:
            blocks = parse_text_blocks(content)
        except TextExtractionError as e:
            logger.error("text_extraction_bad_response", model=self.model, error=str(e), preview=content[:200])
            raise TextExtractionError(f"{FAILURE_MESSAGE} {e}") from e

        return self._sanitize(blocks, width, height)

    async def extract_text_from_page(
        self,
        pdf_bytes: bytes,
        page_number: int,
        scale: float = DEFAULT_RENDER_SCALE,
        quality: int = EXTRACTION_JPEG_QUALITY
    ) -> PageExtraction:
        """
        Render a page and detect its text blocks.

        Args:
            pdf_bytes: Raw PDF bytes
            page_number: 1-indexed page number
            scale: Render scale for the image sent to the model
            quality: JPEG quality

        Returns:
            PageExtraction whose boxes are in pixels at `scale`
        """
        rendered = await run_in_threadpool(
            render_page, pdf_bytes, page_number, scale=scale, image_format='jpeg', quality=quality
        )
        blocks = await self.extract_text_from_image(rendered.data, rendered.mime_type)

        logger.info("text_extracted", page=page_number, blocks=len(blocks), scale=scale)
        return PageExtraction(
            page_number=page_number,
            render_scale=scale,
            image_width=rendered.width,
            image_height=rendered.height,
            blocks=blocks,
            model=self.model
        )

    async def _call_model(self, data_url: str, prompt: str) -> Optional[str]:
        """Call the chat completions API with image and prompt."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": data_url}}
                ]
            }],
            max_tokens=self.max_tokens,
            temperature=self.temperature
        )
        return response.choices[0].message.content

    def _sanitize(self, blocks: List[TextBlock], width: int, height: int) -> List[TextBlock]:
        """Clip boxes to the image and drop those left without area."""
        result = []
        for block in blocks:
            box = clamp_bounding_box(block.bounding_box, width, height)
            if box.width <= 0 or box.height <= 0:
                logger.debug("text_block_dropped", text=block.text[:40], box=block.bounding_box.to_dict())
                continue
            result.append(TextBlock(text=block.text, bounding_box=box))
        return result
