"""
Coordinate conversion between rendered page pixels and PDF points.

Pixel boxes come from images rendered at a known render scale, so
points = pixels / render_scale and pixels = points * render_scale.
"""
from typing import Dict, List, Sequence

from core.models import BoundingBox, TextBlock, TextEdit


def _check_scale(render_scale: float):
    if render_scale <= 0:
        raise ValueError(f"Render scale must be positive, got {render_scale}")


def unscale_bounding_box(box: BoundingBox, render_scale: float) -> BoundingBox:
    """
    Convert a pixel-space box back to PDF points.

    Args:
        box: Box measured on an image rendered at render_scale
        render_scale: Scale used for that render

    Returns:
        Box in PDF points, top-left origin
    """
    _check_scale(render_scale)
    return BoundingBox(
        x=box.x / render_scale,
        y=box.y / render_scale,
        width=box.width / render_scale,
        height=box.height / render_scale
    )


def scale_bounding_box(box: BoundingBox, render_scale: float) -> BoundingBox:
    """Convert a box in PDF points to pixels at render_scale."""
    _check_scale(render_scale)
    return BoundingBox(
        x=box.x * render_scale,
        y=box.y * render_scale,
        width=box.width * render_scale,
        height=box.height * render_scale
    )


def rescale_bounding_box(box: BoundingBox, from_scale: float, to_scale: float) -> BoundingBox:
    """Move a pixel box from one render scale to another."""
    return scale_bounding_box(unscale_bounding_box(box, from_scale), to_scale)


def clamp_bounding_box(box: BoundingBox, max_width: float, max_height: float) -> BoundingBox:
    """Clip a box to [0, max_width] x [0, max_height]."""
    x = min(max(box.x, 0.0), max_width)
    y = min(max(box.y, 0.0), max_height)
    right = min(max(box.right, x), max_width)
    bottom = min(max(box.bottom, y), max_height)
    return BoundingBox(x=x, y=y, width=right - x, height=bottom - y)


def build_text_edits(
    blocks: Sequence[TextBlock],
    updated_texts: Dict[int, str],
    render_scale: float
) -> List[TextEdit]:
    """
    Build text edits in PDF points for blocks whose text changed.

    Args:
        blocks: Blocks as detected on the rendered image
        updated_texts: New text keyed by block index
        render_scale: Scale the blocks were detected at

    Returns:
        One TextEdit per changed block, in block order
    """
    edits = []
    for index, block in enumerate(blocks):
        new_text = updated_texts.get(index)
        if new_text is None or new_text == block.text:
            continue
        box = unscale_bounding_box(block.bounding_box, render_scale)
        edits.append(TextEdit(
            x=box.x,
            y=box.y,
            width=box.width,
            height=box.height,
            text=new_text
        ))
    return edits


def to_bottom_left_origin(edit: TextEdit, page_height: float) -> BoundingBox:
    """
    Flip a top-left-origin box to bottom-left origin.

    The returned y is the lower edge of the box.
    """
    return BoundingBox(
        x=edit.x,
        y=page_height - edit.y - edit.height,
        width=edit.width,
        height=edit.height
    )
