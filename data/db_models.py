"""
Database models for editor sessions.

Stores the document being edited (current bytes plus viewer state) and
the text blocks of the last AI extraction per page.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Float, Text, DateTime, ForeignKey, LargeBinary
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def generate_uuid():
    """Generate UUID string for primary keys."""
    return str(uuid.uuid4())


class Document(Base):
    """A PDF open in the editor."""

    __tablename__ = 'documents'

    id = Column(String, primary_key=True, default=generate_uuid)
    filename = Column(String, nullable=False)
    content = Column(LargeBinary, nullable=False)
    total_pages = Column(Integer, nullable=False)

    # Viewer state
    current_page = Column(Integer, nullable=False, default=1)
    active_tool = Column(String, nullable=False, default='view')  # 'view', 'draw' or 'edit'

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    text_blocks = relationship(
        "TextBlockRecord",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="TextBlockRecord.sequence_order"
    )

    def __repr__(self):
        return f"<Document(id={self.id}, filename={self.filename}, pages={self.total_pages})>"

    @property
    def size_bytes(self) -> int:
        return len(self.content or b"")

    def to_dict(self):
        """Convert to dictionary for API responses."""
        return {
            'id': self.id,
            'filename': self.filename,
            'total_pages': self.total_pages,
            'current_page': self.current_page,
            'active_tool': self.active_tool,
            'size_bytes': self.size_bytes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }


class TextBlockRecord(Base):
    """Text block detected by the AI model, in pixels at render_scale."""

    __tablename__ = 'text_blocks'

    id = Column(String, primary_key=True, default=generate_uuid)
    document_id = Column(String, ForeignKey('documents.id'), nullable=False)
    page_number = Column(Integer, nullable=False)

    text_content = Column(Text, nullable=False)

    # Pixel coordinates, top-left origin
    bbox_x = Column(Float, nullable=False)
    bbox_y = Column(Float, nullable=False)
    bbox_width = Column(Float, nullable=False)
    bbox_height = Column(Float, nullable=False)

    # Scale of the render the model saw
    render_scale = Column(Float, nullable=False)

    # Order returned by the model
    sequence_order = Column(Integer)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    document = relationship("Document", back_populates="text_blocks")

    def __repr__(self):
        return (
            f"<TextBlockRecord(id={self.id}, page={self.page_number}, "
            f"bbox=({self.bbox_x},{self.bbox_y},{self.bbox_width},{self.bbox_height}))>"
        )

    def to_dict(self):
        """Convert to dictionary for API responses."""
        return {
            'id': self.id,
            'page_number': self.page_number,
            'text': self.text_content,
            'bounding_box': {
                'x': self.bbox_x,
                'y': self.bbox_y,
                'width': self.bbox_width,
                'height': self.bbox_height
            },
            'render_scale': self.render_scale,
            'sequence_order': self.sequence_order
        }
