"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_ORIGIN = "https://api.wisdomchurchhq.org"
API_PREFIX = "/api/v1"


def normalize_origin(raw: str | None) -> str:
    """Strip trailing slashes and a trailing /api/v1 from an origin."""
    base = (raw or "").strip().rstrip("/")
    if base.endswith(API_PREFIX):
        base = base[: -len(API_PREFIX)]
    return base


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    VERSION: str = "0.1.0"

    # Direct API origin (tried after the proxy)
    API_ORIGIN: str = DEFAULT_API_ORIGIN

    # Same-origin proxy in front of the API, e.g. http://localhost:3000
    PUBLIC_PROXY_URL: str = ""

    # Upstream the proxy app forwards to
    API_PROXY_ORIGIN: str = ""

    # Schema fetch
    FETCH_TIMEOUT_SECONDS: float = 12.0
    RETRY_BASE_SECONDS: float = 1.2
    RETRY_MAX_SECONDS: float = 6.0

    # Submission
    SUBMIT_TIMEOUT_SECONDS: float = 30.0

    # Image uploads
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    @property
    def fetch_origins(self) -> list[str]:
        """Origins tried for schema fetches, proxy first."""
        origins: list[str] = []
        for raw in (self.PUBLIC_PROXY_URL, self.API_ORIGIN):
            origin = normalize_origin(raw)
            if origin and origin not in origins:
                origins.append(origin)
        return origins

    @property
    def proxy_upstream(self) -> str:
        return normalize_origin(self.API_PROXY_ORIGIN or self.API_ORIGIN)


settings = Settings()
