"""
Core domain models for the PDF editor.

These are pure data structures without business logic.
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class BoundingBox:
    """Bounding box in pixel space, top-left origin."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        """Calculate area."""
        return self.width * self.height

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BoundingBox":
        return cls(
            x=float(data['x']),
            y=float(data['y']),
            width=float(data['width']),
            height=float(data['height'])
        )


@dataclass
class TextBlock:
    """A text block detected on a rendered page image."""
    text: str
    bounding_box: BoundingBox

    def to_dict(self) -> dict:
        """Convert to the wire format returned by the extraction model."""
        return {
            'text': self.text,
            'boundingBox': self.bounding_box.to_dict()
        }


@dataclass
class TextEdit:
    """Replacement text for a box given in PDF points, top-left origin."""
    x: float
    y: float
    width: float
    height: float
    text: str


@dataclass
class SplitResult:
    """Both halves of a split document."""
    first_half: bytes
    second_half: bytes


@dataclass
class RenderedPage:
    """A page rendered to an encoded bitmap."""
    page_number: int
    scale: float
    width: int
    height: int
    mime_type: str
    data: bytes = b""


@dataclass
class PageExtraction:
    """Text blocks found on one page and the render scale they refer to."""
    page_number: int
    render_scale: float
    image_width: int
    image_height: int
    blocks: List[TextBlock] = field(default_factory=list)
    model: Optional[str] = None
