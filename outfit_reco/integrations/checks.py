"""Connectivity checks for the cache/broker and the text-generation provider."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from outfit_reco.cache.store import create_redis
from outfit_reco.config.settings import get_settings
from outfit_reco.nlp.providers import ProviderConfig, build_provider


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except Exception as exc:  # pragma: no cover
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_redis() -> IntegrationCheckResult:
    """Ping the Redis instance used for caches and the job queue."""

    settings = get_settings()

    def _ping() -> bool:
        client = create_redis(settings.redis_url)
        try:
            return bool(client.ping())
        finally:
            client.close()

    return await _run_check(
        name="Redis",
        factory=lambda: asyncio.to_thread(_ping),
        success_message="Redis is reachable.",
    )


async def check_text_provider() -> IntegrationCheckResult:
    """Ping the configured text-generation provider and return the result."""

    settings = get_settings()

    def _ping() -> bool:
        provider = build_provider(ProviderConfig.from_settings(settings))
        try:
            return provider.ping()
        finally:
            provider.close()

    return await _run_check(
        name=f"Text provider ({settings.ai_provider})",
        factory=lambda: asyncio.to_thread(_ping),
        success_message="Text-generation provider is reachable.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(await asyncio.gather(check_redis(), check_text_provider()))
