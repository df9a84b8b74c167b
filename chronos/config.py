"""Simplified configuration management."""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


def _load_env_file() -> None:
    """Load .env from the current directory if present."""
    env_path = Path.cwd() / ".env"
    if not env_path.is_file():
        return
    try:
        lines = env_path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#") and "=" in stripped:
            key, value = stripped.split("=", 1)
            key, value = key.strip(), value.strip().strip("'\"")
            if key and value and key not in os.environ:
                os.environ[key] = value


_load_env_file()


DEFAULT_APP_NAME = "Chronos Sync Server"
DEFAULT_APP_VERSION = "1.0.0"
DEFAULT_AGENT_NAME = "claude-code"


def _env_float(name: str, fallback: float) -> float:
    try:
        return float(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


def _get_port() -> int:
    """Get server port, checking the platform PORT first, then CHRONOS_PORT."""
    port = os.getenv("PORT") or os.getenv("CHRONOS_PORT")
    if port:
        try:
            return int(port)
        except ValueError:
            pass
    return 3000


class Settings(BaseModel):
    """Application settings with lightweight env fallbacks."""

    # App metadata
    app_name: str = Field(default=DEFAULT_APP_NAME)
    app_version: str = Field(default=DEFAULT_APP_VERSION)

    # Server runtime
    server_host: str = Field(default_factory=lambda: os.getenv("CHRONOS_HOST", "0.0.0.0"))
    server_port: int = Field(default_factory=_get_port)
    data_dir: Path = Field(default_factory=lambda: Path(os.getenv("CHRONOS_DATA_DIR", ".chronos-data")))

    # Local tracker
    agent_name: str = Field(default_factory=lambda: os.getenv("CHRONOS_AGENT", DEFAULT_AGENT_NAME))
    state_dir_name: str = Field(default_factory=lambda: os.getenv("CHRONOS_STATE_DIR", ".cognitive"))

    # Sync client
    sync_url: Optional[str] = Field(default_factory=lambda: os.getenv("CHRONOS_SYNC_URL"))
    sync_timeout: float = Field(default_factory=lambda: _env_float("CHRONOS_SYNC_TIMEOUT", 10.0))

    # HTTP behaviour
    cors_allow_origins_raw: str = Field(default_factory=lambda: os.getenv("CHRONOS_CORS_ALLOW_ORIGINS", "*"))
    enable_docs: bool = Field(default_factory=lambda: os.getenv("CHRONOS_ENABLE_DOCS", "1") != "0")
    docs_url: Optional[str] = Field(default_factory=lambda: os.getenv("CHRONOS_DOCS_URL", "/docs"))

    @property
    def cors_allow_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_allow_origins_raw.strip() in {"", "*"}:
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins_raw.split(",") if origin.strip()]

    @property
    def resolved_docs_url(self) -> Optional[str]:
        """Return documentation URL when docs are enabled."""
        return (self.docs_url or "/docs") if self.enable_docs else None

    @property
    def aggregate_path(self) -> Path:
        """Location of the aggregator's merged store."""
        return self.data_dir / "aggregated-states.json"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
