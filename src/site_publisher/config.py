import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import redis
from dotenv import load_dotenv

load_dotenv()


def _is_production() -> bool:
    return (
        os.getenv("CI", "").lower() == "true"
        or os.getenv("SITE_ENV", "development").lower() == "production"
    )


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Gateway
    mesh_gateway_url: str | None = os.getenv("MESH_GATEWAY_URL")
    mesh_api_key: str | None = os.getenv("MESH_API_KEY")
    gateway_timeout: float = float(os.getenv("GATEWAY_TIMEOUT", "30"))
    gateway_min_delay_ms: int = int(os.getenv("GATEWAY_MIN_DELAY_MS", "100"))
    gateway_sql_tool: str = os.getenv("GATEWAY_SQL_TOOL", "execute_sql")

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Enrichment cache
    enrichment_cache_key: str = os.getenv("ENRICHMENT_CACHE_KEY", "bookmark-content-cache")
    enrichment_cache_version: int = int(os.getenv("ENRICHMENT_CACHE_VERSION", "1"))
    enrichment_cache_ttl: int = int(os.getenv("ENRICHMENT_CACHE_TTL", "604800"))  # 7 days default

    # Build layout (relative paths resolve against site_root)
    site_root: str = os.getenv("SITE_ROOT", ".")
    build_dir: str = os.getenv("BUILD_DIR", ".build")
    dist_dir: str = os.getenv("DIST_DIR", "dist")
    bundle_dir: str = os.getenv("BUNDLE_DIR", ".build/bundle")
    context_dir: str = os.getenv("CONTEXT_DIR", "context")
    fingerprint_length: int = int(os.getenv("FINGERPRINT_LENGTH", "8"))

    # Site
    site_base_url: str = os.getenv("SITE_BASE_URL", "https://example.com")
    site_name: str = os.getenv("SITE_NAME", "example.com")
    production: bool = _is_production()

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "4001"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    @property
    def gateway_configured(self) -> bool:
        """Check whether both the gateway URL and API key are present."""
        return bool(self.mesh_gateway_url and self.mesh_api_key)

    def resolve(self, path: str) -> Path:
        """Resolve a configured directory against the site root.

        Args:
            path: Absolute path, or a path relative to ``site_root``

        Returns:
            The resolved path
        """
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return Path(self.site_root) / candidate

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.gateway_timeout <= 0:
            raise ValueError("GATEWAY_TIMEOUT must be a positive number of seconds")

        if self.gateway_min_delay_ms < 0:
            raise ValueError("GATEWAY_MIN_DELAY_MS must not be negative")

        if self.fingerprint_length < 8 or self.fingerprint_length > 64:
            raise ValueError(
                f"FINGERPRINT_LENGTH must be between 8 and 64 hex characters, "
                f"got {self.fingerprint_length}"
            )

        if self.enrichment_cache_ttl <= 0:
            raise ValueError("ENRICHMENT_CACHE_TTL must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client(redis_settings: Settings | None = None) -> redis.Redis:
    """Create a Redis client instance."""
    redis_settings = redis_settings or settings
    return redis.from_url(
        redis_settings.redis_url,
        password=redis_settings.redis_password,
        decode_responses=False,
    )
