"""
API Dependencies - Dependency injection for FastAPI.

Provides reusable dependencies for storage, the AI client and services.
"""
from fastapi import Depends
from openai import AsyncOpenAI
from sqlalchemy.orm import Session

from config.settings import settings
from data.database import get_db
from serving.editor_service import EditorService
from serving.processing_guard import processing_guard
from serving.storage_service import DocumentStorageService
from services.text_extraction_service import TextExtractionService


def get_ai_client() -> AsyncOpenAI:
    """
    Dependency for the text extraction model client.

    Returns:
        AsyncOpenAI client configured from settings
    """
    return AsyncOpenAI(
        api_key=settings.ai_api_key or "not-set",
        base_url=settings.ai_base_url
    )


def get_text_extraction_service(
    client: AsyncOpenAI = Depends(get_ai_client)
) -> TextExtractionService:
    """
    Dependency for text extraction service.

    Args:
        client: AsyncOpenAI client

    Returns:
        TextExtractionService instance
    """
    return TextExtractionService(
        client=client,
        model=settings.ai_model,
        max_tokens=settings.ai_max_tokens,
        temperature=settings.ai_temperature
    )


def get_storage(db: Session = Depends(get_db)) -> DocumentStorageService:
    return DocumentStorageService(db)


def get_editor_service(
    storage: DocumentStorageService = Depends(get_storage),
    extraction_service: TextExtractionService = Depends(get_text_extraction_service)
) -> EditorService:
    """Dependency for the editor workflow service."""
    return EditorService(
        storage=storage,
        guard=processing_guard,
        extraction_service=extraction_service
    )
