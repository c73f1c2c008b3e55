"""
Editor Service

Runs editor operations against stored documents: every mutation loads the
current bytes, calls one pure function from services.pdf_service and, on
success only, stores the result as the new current revision.
"""
from typing import Dict, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from config.settings import settings
from core.exceptions import InvalidInputError, TextExtractionError
from core.models import RenderedPage
from data.db_models import Document, TextBlockRecord
from services import pdf_service, render_service
from services.text_extraction_service import TextExtractionService
from utils.coordinate_utils import build_text_edits
from utils.file_utils import ensure_insertable, ensure_pdf, is_pdf, split_filenames
from utils.logging import get_logger
from .processing_guard import ProcessingGuard, processing_guard
from .storage_service import DocumentStorageService

logger = get_logger(__name__)


class EditorService:
    """Document editing workflow on top of storage and the PDF functions."""

    def __init__(
        self,
        storage: DocumentStorageService,
        guard: ProcessingGuard = processing_guard,
        extraction_service: Optional[TextExtractionService] = None
    ):
        """
        Initialize editor service.

        Args:
            storage: Storage service bound to a database session
            guard: Single in-flight guard
            extraction_service: AI text extraction (needed for extract_text only)
        """
        self.storage = storage
        self.guard = guard
        self.extraction_service = extraction_service

    def is_processing(self, document_id: str) -> bool:
        return self.guard.is_busy(document_id)

    async def open_document(self, filename: str, content: bytes, mime_type: str) -> Document:
        """
        Register an uploaded PDF.

        Raises:
            UnsupportedFileTypeError: If the upload is not a PDF
            InvalidInputError: If the PDF cannot be read
        """
        ensure_pdf(mime_type)
        try:
            total_pages = await run_in_threadpool(pdf_service.get_page_count, content)
        except InvalidInputError as e:
            logger.exception("pdf_load_failed", file_name=filename)
            raise InvalidInputError("Failed to load PDF. Please try another file.") from e

        if total_pages == 0:
            raise InvalidInputError("Failed to load PDF. Please try another file.")

        document = self.storage.create_document(filename, content, total_pages)
        logger.info("document_opened", document_id=document.id, file_name=filename, pages=total_pages)
        return document

    async def _mutate(self, document: Document, operation: str, func, *args) -> Document:
        """Run one mutation under the guard and store its result."""
        with self.guard.hold(document.id):
            try:
                content = await run_in_threadpool(func, document.content, *args)
                total_pages = await run_in_threadpool(pdf_service.get_page_count, content)
            except InvalidInputError:
                raise
            except Exception:
                logger.exception("document_mutation_failed", document_id=document.id, operation=operation)
                raise
            document = self.storage.replace_content(document, content, total_pages)

        logger.info("document_mutated", document_id=document.id, operation=operation, pages=total_pages)
        return document

    async def split(self, document_id: str, split_page: int) -> Tuple[Document, Document]:
        """
        Split into two new documents; the source stays as it is.

        Returns:
            (first half, second half) as new stored documents
        """
        document = self.storage.require_document(document_id)
        if split_page <= 0 or split_page >= document.total_pages:
            raise InvalidInputError(
                f"Invalid split page. Must be between 1 and {document.total_pages - 1}"
            )

        with self.guard.hold(document.id):
            try:
                result = await run_in_threadpool(pdf_service.split_pdf, document.content, split_page)
            except InvalidInputError:
                raise
            except Exception:
                logger.exception("pdf_split_failed", document_id=document.id, split_page=split_page)
                raise

        first_name, second_name = split_filenames(document.filename, split_page, document.total_pages)
        first = self.storage.create_document(first_name, result.first_half, split_page)
        second = self.storage.create_document(
            second_name, result.second_half, document.total_pages - split_page
        )
        logger.info("document_split", document_id=document.id, first=first.id, second=second.id)
        return first, second

    async def insert_file(
        self,
        document_id: str,
        content: bytes,
        mime_type: str,
        insert_after_page: Optional[int] = None
    ) -> Document:
        """
        Insert an image page or the pages of another PDF.

        Args:
            document_id: Document to edit
            content: Uploaded file bytes
            mime_type: 'application/pdf', 'image/png' or 'image/jpeg'
            insert_after_page: Pages before the insertion (default: current page)
        """
        document = self.storage.require_document(document_id)
        ensure_insertable(mime_type)
        after = document.current_page if insert_after_page is None else insert_after_page
        pdf_service.validate_insert_position(after, document.total_pages)

        if is_pdf(mime_type):
            return await self._mutate(document, "insert_pdf", pdf_service.add_pdf_to_pdf, content, after)
        return await self._mutate(
            document, "insert_image", pdf_service.add_image_to_pdf, content, mime_type, after
        )

    async def remove_page(self, document_id: str, page_number: int) -> Document:
        """Remove one page; the last remaining page cannot be removed."""
        document = self.storage.require_document(document_id)
        return await self._mutate(document, "remove_page", pdf_service.remove_page_from_pdf, page_number)

    async def apply_drawing(self, document_id: str, page_number: int, drawing_png: bytes) -> Document:
        """Stamp a drawing on a page, then return to the view tool."""
        document = self.storage.require_document(document_id)
        try:
            pdf_service.validate_page_number(page_number, document.total_pages)
            return await self._mutate(
                document, "apply_drawing", pdf_service.apply_drawing_to_pdf, page_number, drawing_png
            )
        finally:
            self.storage.set_active_tool(document, 'view')

    async def extract_text(
        self,
        document_id: str,
        page_number: int,
        scale: Optional[float] = None
    ) -> List[TextBlockRecord]:
        """
        Run AI text extraction on a page and store the blocks.

        The page is rendered at `scale` (default: settings.render_scale) and
        sent as a JPEG at settings.jpeg_quality.

        Raises:
            TextExtractionError: If no extraction service is configured or the model fails
        """
        if self.extraction_service is None:
            raise TextExtractionError("Text extraction is not configured")

        document = self.storage.require_document(document_id)
        pdf_service.validate_page_number(page_number, document.total_pages)

        with self.guard.hold(document.id):
            extraction = await self.extraction_service.extract_text_from_page(
                document.content,
                page_number,
                scale=scale or settings.render_scale,
                quality=settings.jpeg_quality
            )

        return self.storage.save_text_blocks(document, extraction)

    async def apply_text_edits(
        self,
        document_id: str,
        page_number: int,
        updated_texts: Dict[str, str]
    ) -> Document:
        """
        Replace the text of previously extracted blocks.

        Args:
            document_id: Document to edit
            page_number: Page the blocks were extracted from
            updated_texts: New text keyed by block id

        Raises:
            InvalidInputError: If a block id is unknown for this page
        """
        document = self.storage.require_document(document_id)
        try:
            pdf_service.validate_page_number(page_number, document.total_pages)
            records = self.storage.get_text_blocks(document.id, page_number)
            index_by_id = {record.id: idx for idx, record in enumerate(records)}

            unknown = [block_id for block_id in updated_texts if block_id not in index_by_id]
            if unknown:
                raise InvalidInputError(f"Unknown text block(s): {', '.join(unknown)}")

            if not records:
                return document

            # One extraction per page, so all blocks share its render scale
            edits = build_text_edits(
                [self.storage.to_text_block(record) for record in records],
                {index_by_id[block_id]: text for block_id, text in updated_texts.items()},
                records[0].render_scale
            )
            if not edits:
                return document

            return await self._mutate(
                document, "apply_text_edits", pdf_service.apply_text_edit_to_pdf, page_number, edits
            )
        finally:
            self.storage.set_active_tool(document, 'view')

    async def render(
        self,
        document_id: str,
        page_number: int,
        scale: Optional[float] = None,
        container_width: Optional[int] = None
    ) -> RenderedPage:
        """
        Render a page as PNG.

        With container_width the scale is chosen so the page fits that width.
        """
        document = self.storage.require_document(document_id)
        pdf_service.validate_page_number(page_number, document.total_pages)

        if container_width is not None:
            width, _ = render_service.page_sizes(document.content)[page_number - 1]
            scale = render_service.fit_to_width_scale(width, container_width)

        return await run_in_threadpool(
            render_service.render_page, document.content, page_number, scale or settings.render_scale
        )

    async def thumbnail(
        self,
        document_id: str,
        page_number: int,
        scale: Optional[float] = None
    ) -> RenderedPage:
        document = self.storage.require_document(document_id)
        return await run_in_threadpool(
            render_service.render_thumbnail, document.content, page_number, scale or settings.thumbnail_scale
        )
