"""
Configuration management using Pydantic Settings.

Environment variables:
- AI_API_KEY: API key for the text extraction model endpoint
- AI_BASE_URL: Base URL of the OpenAI-compatible endpoint
- AI_MODEL: Multimodal model used for text extraction
- DATABASE_URL: SQLAlchemy database URL
- RENDER_SCALE: Default render scale for page images and AI extraction
- THUMBNAIL_SCALE: Render scale for page thumbnails
- JPEG_QUALITY: JPEG quality of the page image sent to the AI model
- LOG_LEVEL: Root log level
"""
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Text extraction model
    ai_api_key: str = Field(default="", env="AI_API_KEY")
    ai_base_url: Optional[str] = Field(default=None, env="AI_BASE_URL")
    ai_model: str = Field(default="gpt-4o-mini", env="AI_MODEL")
    ai_max_tokens: int = Field(default=4096, env="AI_MAX_TOKENS")
    ai_temperature: float = Field(default=0.0, env="AI_TEMPERATURE")

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///pdf_editor.db",
        env="DATABASE_URL"
    )

    # Rendering
    render_scale: float = Field(default=1.5, env="RENDER_SCALE")
    thumbnail_scale: float = Field(default=0.2, env="THUMBNAIL_SCALE")
    jpeg_quality: int = Field(default=90, env="JPEG_QUALITY")

    # Uploads
    max_upload_mb: int = Field(default=50, env="MAX_UPLOAD_MB")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_json: bool = Field(default=True, env="LOG_JSON")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def max_upload_bytes(self) -> int:
        """Upload size limit in bytes."""
        return self.max_upload_mb * 1024 * 1024


# Global settings instance
settings = Settings()
