from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

DEFAULT_API_URL = "https://api.crawl4ai.com"


class Settings(BaseSettings):
    """Environment-driven configuration for the MCP server."""

    # Crawl4AI backend
    CRAWL4AI_API_KEY: str | None = None
    CRAWL4AI_API_URL: str = DEFAULT_API_URL
    # Outbound request timeout in seconds; unset means the transport decides.
    CRAWL4AI_HTTP_TIMEOUT: float | None = None

    # "production" keeps error logs to kind + message, anything else logs tracebacks.
    ENVIRONMENT: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )

    # Server-side caps applied to crawl4ai_crawl requests
    MAX_CRAWL_DEPTH: int = 3
    MAX_CRAWL_PAGES: int = 100

    # HTTP transport
    MCP_HOST: str = "127.0.0.1"
    MCP_PORT: int = 8787

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def crawl_limits(self) -> dict[str, int]:
        return {
            "max_crawl_depth": self.MAX_CRAWL_DEPTH,
            "max_crawl_pages": self.MAX_CRAWL_PAGES,
        }


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
