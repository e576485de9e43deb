"""Text-generation providers and the configuration that selects one."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol

import httpx

from outfit_reco.config.settings import Settings
from outfit_reco.errors import ProviderError, ProviderErrorKind
from outfit_reco.nlp.chatgpt_client import ChatGPTClient
from outfit_reco.nlp.response_parser import parse_rationale_text

logger = logging.getLogger(__name__)


class TextGenerationProvider(Protocol):
    """Anything that turns a prompt into a ``{paragraph, bullets}`` object."""

    name: str

    def generate(self, prompt: str) -> dict[str, Any]: ...

    def ping(self) -> bool: ...

    def close(self) -> None: ...


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Explicit provider selection handed to the worker at construction time."""

    name: str
    api_key: str
    model: str = ""
    base_url: str = ""
    timeout: float = 20.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        return cls(
            name=settings.ai_provider,
            api_key=settings.ai_api_key,
            model=settings.ai_model,
            base_url=settings.ai_base_url,
            timeout=settings.ai_request_timeout,
        )


def _status_error(provider: str, exc: httpx.HTTPStatusError) -> ProviderError:
    status_code = exc.response.status_code
    if status_code in (401, 402, 403):
        kind = ProviderErrorKind.AUTH
    elif status_code == 429:
        kind = ProviderErrorKind.RATE_LIMIT
    elif status_code >= 500:
        kind = ProviderErrorKind.NETWORK
    else:
        kind = ProviderErrorKind.MALFORMED
    return ProviderError(
        f"{provider} API error {status_code}: {exc.response.text[:200]}",
        kind,
        status_code,
    )


class _HTTPProvider:
    name = "http"

    def __init__(
        self,
        config: ProviderConfig,
        *,
        base_url: str,
        headers: Mapping[str, str],
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not config.api_key:
            raise ProviderError(f"{self.name} API key is not configured.", ProviderErrorKind.AUTH)
        self._config = config
        self._client = httpx.Client(
            base_url=(config.base_url or base_url).rstrip("/"),
            timeout=config.timeout,
            headers={"Content-Type": "application/json", **headers},
            transport=transport,
        )

    def _post(self, endpoint: str, body: Mapping[str, Any], params: Mapping[str, str] | None = None) -> dict[str, Any]:
        try:
            response = self._client.post(endpoint, json=body, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            raise ProviderError(f"{self.name} request timed out", ProviderErrorKind.NETWORK) from exc
        except httpx.HTTPStatusError as exc:
            raise _status_error(self.name, exc) from exc
        except httpx.TransportError as exc:
            raise ProviderError(f"{self.name} request failed: {exc}", ProviderErrorKind.NETWORK) from exc
        except ValueError as exc:
            raise ProviderError(f"{self.name} returned non-JSON body", ProviderErrorKind.MALFORMED) from exc
        if not isinstance(payload, dict):
            raise ProviderError(f"{self.name} returned a non-object JSON body", ProviderErrorKind.MALFORMED)
        return payload

    def close(self) -> None:
        self._client.close()


class GeminiProvider(_HTTPProvider):
    """Google Gemini ``generateContent`` over REST."""

    name = "gemini"
    default_model = "gemini-1.5-flash"

    def __init__(self, config: ProviderConfig, transport: httpx.BaseTransport | None = None) -> None:
        super().__init__(
            config,
            base_url="https://generativelanguage.googleapis.com/v1beta",
            headers={},
            transport=transport,
        )
        self._model = config.model or self.default_model

    def _body(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": 0.7,
                "maxOutputTokens": 1024,
                "topP": 0.95,
                "topK": 40,
            },
        }

    def generate(self, prompt: str) -> dict[str, Any]:
        payload = self._post(
            f"/models/{self._model}:generateContent",
            self._body(prompt),
            params={"key": self._config.api_key},
        )
        candidates = payload.get("candidates") or []
        if not candidates:
            raise ProviderError("No candidates in Gemini response", ProviderErrorKind.MALFORMED)

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        if finish_reason == "MAX_TOKENS":
            raise ProviderError("Gemini response was truncated", ProviderErrorKind.TRUNCATED)
        if finish_reason == "SAFETY":
            raise ProviderError("Gemini response was blocked by safety filters", ProviderErrorKind.MALFORMED)

        parts = (candidate.get("content") or {}).get("parts") or [{}]
        return parse_rationale_text(parts[0].get("text", ""))

    def ping(self) -> bool:
        try:
            response = self._client.get("/models", params={"key": self._config.api_key})
        except httpx.HTTPError:
            return False
        return response.status_code == 200


class AnthropicProvider(_HTTPProvider):
    """Anthropic Messages API over REST."""

    name = "anthropic"
    default_model = "claude-3-haiku-20240307"

    def __init__(self, config: ProviderConfig, transport: httpx.BaseTransport | None = None) -> None:
        super().__init__(
            config,
            base_url="https://api.anthropic.com/v1",
            headers={"x-api-key": config.api_key, "anthropic-version": "2023-06-01"},
            transport=transport,
        )
        self._model = config.model or self.default_model

    def generate(self, prompt: str) -> dict[str, Any]:
        payload = self._post(
            "/messages",
            {
                "model": self._model,
                "max_tokens": 250,
                "messages": [{"role": "user", "content": prompt}],
            },
        )
        if payload.get("stop_reason") == "max_tokens":
            raise ProviderError("Anthropic response was truncated", ProviderErrorKind.TRUNCATED)
        content = payload.get("content") or [{}]
        return parse_rationale_text(content[0].get("text", ""))

    def ping(self) -> bool:
        try:
            response = self._client.get("/models")
        except httpx.HTTPError:
            return False
        return response.status_code == 200


def _openai(config: ProviderConfig) -> TextGenerationProvider:
    return ChatGPTClient(
        api_key=config.api_key,
        model=config.model or "gpt-3.5-turbo",
        base_url=config.base_url or None,
        timeout=config.timeout,
    )


def _deepseek(config: ProviderConfig) -> TextGenerationProvider:
    return ChatGPTClient(
        api_key=config.api_key,
        model=config.model or "deepseek-chat",
        base_url=config.base_url or "https://api.deepseek.com/v1",
        timeout=config.timeout,
        name="deepseek",
    )


PROVIDER_FACTORIES: Mapping[str, Callable[[ProviderConfig], TextGenerationProvider]] = {
    "gemini": GeminiProvider,
    "openai": _openai,
    "anthropic": AnthropicProvider,
    "claude": AnthropicProvider,
    "deepseek": _deepseek,
}


def build_provider(config: ProviderConfig) -> TextGenerationProvider:
    """Instantiate the provider named in ``config``."""

    factory = PROVIDER_FACTORIES.get(config.name.lower())
    if factory is None:
        available = ", ".join(sorted(PROVIDER_FACTORIES))
        raise ValueError(f"Unknown AI provider: {config.name}. Available providers: {available}")
    logger.info("Using %s text-generation provider", config.name)
    return factory(config)
