"""
Editor API for the browser PDF editor.

Provides endpoints for:
- Opening, listing and downloading documents
- Page rendering and thumbnails for the viewer
- Split / insert / remove pages
- Drawing overlays
- AI text extraction and text replacement
"""
from typing import List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from api.dependencies import get_editor_service, get_storage
from api.schemas import (
    CurrentPageRequest,
    DocumentResponse,
    DrawingRequest,
    SplitRequest,
    SplitResponse,
    TextBlockResponse,
    TextEditRequest,
    TextExtractionResponse,
    ToolRequest
)
from config.settings import settings
from core.constants import PDF_MIME_TYPE, PNG_MIME_TYPE
from core.exceptions import (
    DocumentBusyError,
    DocumentNotFound,
    InvalidInputError,
    PdfEditorError,
    TextExtractionError
)
from data.database import init_database
from data.db_models import Document
from utils.file_utils import content_disposition, detect_mime_type, read_upload
from utils.image_utils import decode_data_url, is_png
from utils.logging import configure_logging, get_logger
from .editor_service import EditorService
from .storage_service import DocumentStorageService

logger = get_logger(__name__)


def _to_http(error: Exception, failure_message: str) -> HTTPException:
    """Translate an editor error into an HTTP error."""
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, DocumentNotFound):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InvalidInputError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, DocumentBusyError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, TextExtractionError):
        return HTTPException(status_code=502, detail=str(error))
    if not isinstance(error, PdfEditorError):
        logger.error("request_failed", error=repr(error), detail=failure_message)
    return HTTPException(status_code=500, detail=failure_message)


def _document_response(document: Document, editor: EditorService) -> DocumentResponse:
    return DocumentResponse(
        **document.to_dict(),
        is_processing=editor.is_processing(document.id)
    )


def _image_response(rendered) -> Response:
    return Response(
        content=rendered.data,
        media_type=rendered.mime_type,
        headers={
            "X-Render-Scale": str(rendered.scale),
            "X-Image-Width": str(rendered.width),
            "X-Image-Height": str(rendered.height)
        }
    )


# Create FastAPI app
editor_app = FastAPI(
    title="PDF Editor API",
    description="View, annotate, split, merge and AI-edit PDF documents",
    version="1.0.0"
)


# Initialize logging and database on startup
@editor_app.on_event("startup")
async def startup_event():
    """Initialize logging and database tables on startup."""
    configure_logging(settings.log_level, json_output=settings.log_json)
    init_database()
    logger.info("editor_api_started")


@editor_app.post("/documents", response_model=DocumentResponse)
async def open_document(
    file: UploadFile = File(...),
    editor: EditorService = Depends(get_editor_service)
):
    """
    Open a PDF for editing.

    Args:
        file: PDF file
        editor: Editor service

    Returns:
        Document metadata
    """
    try:
        mime_type = detect_mime_type(file.filename, file.content_type)
        content = await read_upload(file, settings.max_upload_bytes)
        document = await editor.open_document(file.filename or "document.pdf", content, mime_type)
        return _document_response(document, editor)
    except Exception as e:
        raise _to_http(e, "Failed to load PDF. Please try another file.")


@editor_app.get("/documents", response_model=List[DocumentResponse])
async def list_documents(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    editor: EditorService = Depends(get_editor_service)
):
    """List open documents, most recent first."""
    documents = editor.storage.list_documents(limit=limit, offset=offset)
    return [_document_response(doc, editor) for doc in documents]


@editor_app.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    editor: EditorService = Depends(get_editor_service)
):
    """Retrieve document metadata and viewer state."""
    try:
        document = editor.storage.require_document(document_id)
        return _document_response(document, editor)
    except Exception as e:
        raise _to_http(e, "Failed to load document.")


@editor_app.delete("/documents/{document_id}")
async def delete_document(
    document_id: str,
    storage: DocumentStorageService = Depends(get_storage)
):
    """Close a document and discard it."""
    if not storage.delete_document(document_id):
        raise HTTPException(status_code=404, detail="Document not found")
    return {"deleted": document_id}


@editor_app.get("/documents/{document_id}/download")
async def download_document(
    document_id: str,
    storage: DocumentStorageService = Depends(get_storage)
):
    """
    Download the current revision.

    Returns:
        PDF bytes named after the document
    """
    document = storage.get_document(document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")

    return Response(
        content=document.content,
        media_type=PDF_MIME_TYPE,
        headers={"Content-Disposition": content_disposition(document.filename)}
    )


@editor_app.put("/documents/{document_id}/current-page", response_model=DocumentResponse)
async def set_current_page(
    document_id: str,
    request: CurrentPageRequest,
    editor: EditorService = Depends(get_editor_service)
):
    """Move the viewer to another page."""
    try:
        document = editor.storage.require_document(document_id)
        editor.storage.set_current_page(document, request.page)
        return _document_response(document, editor)
    except Exception as e:
        raise _to_http(e, "Failed to change page.")


@editor_app.put("/documents/{document_id}/tool", response_model=DocumentResponse)
async def set_tool(
    document_id: str,
    request: ToolRequest,
    editor: EditorService = Depends(get_editor_service)
):
    """Switch between the view, draw and edit tools."""
    try:
        document = editor.storage.require_document(document_id)
        editor.storage.set_active_tool(document, request.tool)
        return _document_response(document, editor)
    except Exception as e:
        raise _to_http(e, "Failed to change tool.")


@editor_app.get("/documents/{document_id}/pages/{page_number}/render")
async def render_page(
    document_id: str,
    page_number: int,
    scale: Optional[float] = Query(None, gt=0, le=10, description="Render scale"),
    width: Optional[int] = Query(None, gt=0, le=10000, description="Fit page to this width in pixels"),
    editor: EditorService = Depends(get_editor_service)
):
    """
    Render a page as PNG.

    The render scale used is returned in the X-Render-Scale header.
    """
    try:
        rendered = await editor.render(document_id, page_number, scale=scale, container_width=width)
        return _image_response(rendered)
    except Exception as e:
        raise _to_http(e, "Failed to render page.")


@editor_app.get("/documents/{document_id}/pages/{page_number}/thumbnail")
async def render_thumbnail(
    document_id: str,
    page_number: int,
    editor: EditorService = Depends(get_editor_service)
):
    """Render a small PNG preview of a page."""
    try:
        rendered = await editor.thumbnail(document_id, page_number, scale=settings.thumbnail_scale)
        return _image_response(rendered)
    except Exception as e:
        raise _to_http(e, "Failed to render thumbnail.")


@editor_app.post("/documents/{document_id}/split", response_model=SplitResponse)
async def split_document(
    document_id: str,
    request: SplitRequest,
    editor: EditorService = Depends(get_editor_service)
):
    """
    Split a document into two new documents.

    Args:
        document_id: Source document (left unchanged)
        request: Last page of the first half

    Returns:
        Both new documents, named '{base}_1-{s}.pdf' and '{base}_{s+1}-{N}.pdf'
    """
    try:
        first, second = await editor.split(document_id, request.split_page)
        return SplitResponse(
            first=_document_response(first, editor),
            second=_document_response(second, editor)
        )
    except Exception as e:
        raise _to_http(e, "Failed to split PDF.")


@editor_app.post("/documents/{document_id}/pages", response_model=DocumentResponse)
async def add_page(
    document_id: str,
    file: UploadFile = File(...),
    after: Optional[int] = Query(None, ge=0, description="Insert after this page (default: current page)"),
    editor: EditorService = Depends(get_editor_service)
):
    """Insert an image (PNG/JPEG) as a new page, or all pages of a PDF."""
    try:
        mime_type = detect_mime_type(file.filename, file.content_type)
        content = await read_upload(file, settings.max_upload_bytes)
        document = await editor.insert_file(document_id, content, mime_type, insert_after_page=after)
        return _document_response(document, editor)
    except Exception as e:
        raise _to_http(e, "Failed to add page from file.")


@editor_app.delete("/documents/{document_id}/pages/{page_number}", response_model=DocumentResponse)
async def remove_page(
    document_id: str,
    page_number: int,
    editor: EditorService = Depends(get_editor_service)
):
    """Remove a page. The only page of a document cannot be removed."""
    try:
        document = await editor.remove_page(document_id, page_number)
        return _document_response(document, editor)
    except Exception as e:
        raise _to_http(e, f"Failed to remove page: {e}")


@editor_app.post("/documents/{document_id}/pages/{page_number}/drawing", response_model=DocumentResponse)
async def save_drawing(
    document_id: str,
    page_number: int,
    request: DrawingRequest,
    editor: EditorService = Depends(get_editor_service)
):
    """
    Stamp a freehand drawing onto a page.

    The drawing is a transparent PNG data URL covering the whole page.
    """
    try:
        try:
            mime_type, drawing = decode_data_url(request.data_url)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e
        if mime_type != PNG_MIME_TYPE or not is_png(drawing):
            raise InvalidInputError("Drawing must be a PNG data URL")

        document = await editor.apply_drawing(document_id, page_number, drawing)
        return _document_response(document, editor)
    except Exception as e:
        raise _to_http(e, "Failed to save drawing.")


@editor_app.post(
    "/documents/{document_id}/pages/{page_number}/extract-text",
    response_model=TextExtractionResponse
)
async def extract_text(
    document_id: str,
    page_number: int,
    scale: float = Query(settings.render_scale, gt=0, le=10, description="Render scale of the image sent to the model"),
    editor: EditorService = Depends(get_editor_service)
):
    """
    Detect text blocks on a page with the AI model.

    Boxes are in pixels of a render at `scale`, origin top-left.
    """
    try:
        records = await editor.extract_text(document_id, page_number, scale=scale)
        return TextExtractionResponse(
            document_id=document_id,
            page_number=page_number,
            render_scale=scale,
            blocks=[TextBlockResponse(**record.to_dict()) for record in records]
        )
    except Exception as e:
        raise _to_http(e, "Failed to extract text from page.")


@editor_app.get(
    "/documents/{document_id}/pages/{page_number}/text-blocks",
    response_model=List[TextBlockResponse]
)
async def get_text_blocks(
    document_id: str,
    page_number: int,
    storage: DocumentStorageService = Depends(get_storage)
):
    """Text blocks from the last extraction of a page."""
    if not storage.get_document(document_id):
        raise HTTPException(status_code=404, detail="Document not found")
    return [TextBlockResponse(**record.to_dict()) for record in storage.get_text_blocks(document_id, page_number)]


@editor_app.post(
    "/documents/{document_id}/pages/{page_number}/text-edits",
    response_model=DocumentResponse
)
async def save_text_edits(
    document_id: str,
    page_number: int,
    request: TextEditRequest,
    editor: EditorService = Depends(get_editor_service)
):
    """
    Replace the text of extracted blocks.

    Only blocks whose text differs from the extraction are redrawn.
    """
    try:
        document = await editor.apply_text_edits(document_id, page_number, request.edits)
        return _document_response(document, editor)
    except Exception as e:
        raise _to_http(e, "Failed to save text edits.")


@editor_app.get("/")
async def root():
    """API root endpoint."""
    return {
        "name": "PDF Editor API",
        "version": "1.0.0",
        "endpoints": {
            "open_document": "POST /documents",
            "list_documents": "GET /documents",
            "download": "GET /documents/{document_id}/download",
            "render_page": "GET /documents/{document_id}/pages/{page_number}/render",
            "split": "POST /documents/{document_id}/split",
            "add_page": "POST /documents/{document_id}/pages",
            "remove_page": "DELETE /documents/{document_id}/pages/{page_number}",
            "save_drawing": "POST /documents/{document_id}/pages/{page_number}/drawing",
            "extract_text": "POST /documents/{document_id}/pages/{page_number}/extract-text",
            "save_text_edits": "POST /documents/{document_id}/pages/{page_number}/text-edits"
        }
    }


# Export app for uvicorn
app = editor_app
