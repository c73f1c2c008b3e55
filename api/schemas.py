"""
Pydantic schemas for API request/response validation.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class DocumentResponse(BaseModel):
    """Response for document metadata."""
    id: str
    filename: str
    total_pages: int
    current_page: int
    active_tool: str
    size_bytes: int
    is_processing: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SplitRequest(BaseModel):
    """Split after this page (1-based)."""
    split_page: int


class SplitResponse(BaseModel):
    """The two documents created by a split."""
    first: DocumentResponse
    second: DocumentResponse


class CurrentPageRequest(BaseModel):
    page: int


class ToolRequest(BaseModel):
    tool: str


class BoundingBoxModel(BaseModel):
    """Pixel box, top-left origin."""
    x: float
    y: float
    width: float
    height: float


class TextBlockResponse(BaseModel):
    """A stored text block from AI extraction."""
    id: str
    page_number: int
    text: str
    bounding_box: BoundingBoxModel
    render_scale: float
    sequence_order: Optional[int] = None


class TextExtractionResponse(BaseModel):
    document_id: str
    page_number: int
    render_scale: float
    blocks: List[TextBlockResponse]


class TextEditRequest(BaseModel):
    """New text keyed by text block id."""
    edits: Dict[str, str] = Field(default_factory=dict)


class DrawingRequest(BaseModel):
    """Drawing as a PNG data URL, e.g. from canvas.toDataURL()."""
    data_url: str
