"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


_PROVIDER_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    redis_url: str = "redis://localhost:6379/0"
    catalog_path: str = "data/catalog.xlsx"

    results_ttl_seconds: int = 60 * 20
    rationale_ttl_seconds: int = 60 * 60 * 24 * 3
    job_marker_ttl_seconds: int = 60 * 60

    enrichment_max_retries: int = 3
    enrichment_retry_backoff: int = 5
    worker_concurrency: int = 4

    ai_provider: str = "gemini"
    ai_api_key: str = ""
    ai_model: str = ""
    ai_base_url: str = ""
    ai_request_timeout: float = 20.0


def _provider_api_key(provider: str) -> str:
    explicit = os.getenv("AI_API_KEY", "")
    if explicit:
        return explicit
    env_name = _PROVIDER_KEY_ENV.get(provider)
    return os.getenv(env_name, "") if env_name else ""


def _build_settings() -> Settings:
    _load_env_file()

    provider = os.getenv("AI_PROVIDER", "gemini").strip().lower()
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        catalog_path=os.getenv("CATALOG_PATH", "data/catalog.xlsx"),
        results_ttl_seconds=int(os.getenv("RESULTS_TTL_SECONDS", str(60 * 20))),
        rationale_ttl_seconds=int(os.getenv("RATIONALE_TTL_SECONDS", str(60 * 60 * 24 * 3))),
        job_marker_ttl_seconds=int(os.getenv("JOB_MARKER_TTL_SECONDS", str(60 * 60))),
        enrichment_max_retries=int(os.getenv("ENRICHMENT_MAX_RETRIES", "3")),
        enrichment_retry_backoff=int(os.getenv("ENRICHMENT_RETRY_BACKOFF", "5")),
        worker_concurrency=int(os.getenv("WORKER_CONCURRENCY", "4")),
        ai_provider=provider,
        ai_api_key=_provider_api_key(provider),
        ai_model=os.getenv("AI_MODEL", ""),
        ai_base_url=os.getenv("AI_BASE_URL", ""),
        ai_request_timeout=float(os.getenv("AI_REQUEST_TIMEOUT", "20")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
