"""
Document Storage Service

Handles CRUD operations for edited documents and extracted text blocks.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from core.constants import EDITOR_TOOLS
from core.exceptions import DocumentNotFound, InvalidInputError
from core.models import BoundingBox, PageExtraction, TextBlock
from data.db_models import Document, TextBlockRecord
from services.pdf_service import validate_page_number


class DocumentStorageService:
    """Service for storing and retrieving editor documents."""

    def __init__(self, session: Session):
        """
        Initialize storage service.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session

    def create_document(
        self,
        filename: str,
        content: bytes,
        total_pages: int
    ) -> Document:
        """
        Create a new document entry.

        Args:
            filename: Name used for downloads
            content: PDF bytes
            total_pages: Total number of pages

        Returns:
            Created Document object
        """
        document = Document(
            filename=filename,
            content=content,
            total_pages=total_pages,
            current_page=1,
            active_tool='view'
        )
        self.session.add(document)
        self.session.commit()
        self.session.refresh(document)
        return document

    def get_document(self, document_id: str) -> Optional[Document]:
        """
        Retrieve a document by ID.

        Args:
            document_id: Document ID

        Returns:
            Document object or None
        """
        return self.session.query(Document).filter(
            Document.id == document_id
        ).first()

    def require_document(self, document_id: str) -> Document:
        """Like get_document, but raises DocumentNotFound."""
        document = self.get_document(document_id)
        if document is None:
            raise DocumentNotFound(f"Document '{document_id}' not found")
        return document

    def list_documents(self, limit: int = 50, offset: int = 0) -> List[Document]:
        """
        List documents, most recent first.

        Args:
            limit: Maximum number of documents
            offset: Number of documents to skip

        Returns:
            List of Document objects
        """
        return self.session.query(Document).order_by(
            Document.created_at.desc()
        ).limit(limit).offset(offset).all()

    def delete_document(self, document_id: str) -> bool:
        """
        Delete a document and its text blocks.

        Returns:
            True if deleted, False if not found
        """
        document = self.get_document(document_id)
        if not document:
            return False

        self.session.delete(document)
        self.session.commit()
        return True

    def replace_content(self, document: Document, content: bytes, total_pages: int) -> Document:
        """
        Swap in a new revision of the document bytes.

        The current page is clamped into the new page range and stored
        text blocks are discarded since they describe the old pages.
        """
        document.content = content
        document.total_pages = total_pages
        document.current_page = min(max(document.current_page, 1), total_pages)
        self.session.query(TextBlockRecord).filter(
            TextBlockRecord.document_id == document.id
        ).delete(synchronize_session=False)
        self.session.commit()
        self.session.refresh(document)
        return document

    def set_current_page(self, document: Document, page_number: int) -> Document:
        """Move the viewer to a page (1-based)."""
        validate_page_number(page_number, document.total_pages)
        document.current_page = page_number
        self.session.commit()
        return document

    def set_active_tool(self, document: Document, tool: str) -> Document:
        """Switch the active tool ('view', 'draw' or 'edit')."""
        if tool not in EDITOR_TOOLS:
            raise InvalidInputError(
                f"Unknown tool '{tool}'. Supported tools: {', '.join(EDITOR_TOOLS)}"
            )
        document.active_tool = tool
        self.session.commit()
        return document

    def save_text_blocks(self, document: Document, extraction: PageExtraction) -> List[TextBlockRecord]:
        """
        Store the result of a text extraction, replacing earlier blocks
        for the same page.

        Args:
            document: Parent document
            extraction: Blocks and the render scale they refer to

        Returns:
            Created TextBlockRecord objects in model order
        """
        self.session.query(TextBlockRecord).filter(
            TextBlockRecord.document_id == document.id,
            TextBlockRecord.page_number == extraction.page_number
        ).delete(synchronize_session=False)

        records = []
        for idx, block in enumerate(extraction.blocks):
            box = block.bounding_box
            record = TextBlockRecord(
                document_id=document.id,
                page_number=extraction.page_number,
                text_content=block.text,
                bbox_x=box.x,
                bbox_y=box.y,
                bbox_width=box.width,
                bbox_height=box.height,
                render_scale=extraction.render_scale,
                sequence_order=idx
            )
            self.session.add(record)
            records.append(record)

        self.session.commit()
        for record in records:
            self.session.refresh(record)
        return records

    def get_text_blocks(self, document_id: str, page_number: int) -> List[TextBlockRecord]:
        """
        Get stored text blocks for a page.

        Args:
            document_id: Document ID
            page_number: 1-based page number

        Returns:
            List of TextBlockRecord in model order
        """
        return self.session.query(TextBlockRecord).filter(
            TextBlockRecord.document_id == document_id,
            TextBlockRecord.page_number == page_number
        ).order_by(TextBlockRecord.sequence_order).all()

    @staticmethod
    def to_text_block(record: TextBlockRecord) -> TextBlock:
        """Convert a stored record back to a domain TextBlock."""
        return TextBlock(
            text=record.text_content,
            bounding_box=BoundingBox(
                x=record.bbox_x,
                y=record.bbox_y,
                width=record.bbox_width,
                height=record.bbox_height
            )
        )
