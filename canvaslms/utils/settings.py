"""
Canvas Client Configuration Settings.

Uses Pydantic Settings for type-safe configuration with environment variable support.

Optional environment variables (with defaults):
- CANVAS_BASE_URL: Canvas instance URL (default: 'https://canvas.instructure.com')
- CANVAS_API_VERSION: REST API version segment (default: 'v1')
- CANVAS_PER_PAGE: Results requested per page (default: 10)
- CANVAS_MAX_CONCURRENCY: Page requests allowed in flight at once, 0 for no limit (default: 8)
- CANVAS_PAGE_TIMEOUT: Seconds allowed for a single page request (default: unset)
- CANVAS_TOKEN: Access token sent as a Bearer authorization header (default: unset)
- CANVAS_DEBUG: Enable debug logging (default: false)
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from canvaslms.utils.validation import MAX_PER_PAGE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    # API settings
    base_url: str = Field(default='https://canvas.instructure.com', alias='CANVAS_BASE_URL')
    api_version: str = Field(default='v1', alias='CANVAS_API_VERSION')

    # Pagination settings
    per_page: int = Field(default=10, ge=1, le=MAX_PER_PAGE, alias='CANVAS_PER_PAGE')
    max_concurrency: int = Field(default=8, ge=0, alias='CANVAS_MAX_CONCURRENCY')
    page_timeout: float | None = Field(default=None, gt=0, alias='CANVAS_PAGE_TIMEOUT')

    # Debug settings
    # Auth settings
    token: str | None = Field(default=None, alias='CANVAS_TOKEN')

    debug: bool = Field(default=False, alias='CANVAS_DEBUG')

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/{self.api_version}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
