"""Tests for provider selection and HTTP error mapping."""

from __future__ import annotations

import json

import httpx
import pytest

from outfit_reco.config.settings import get_settings
from outfit_reco.errors import ProviderError, ProviderErrorKind
from outfit_reco.nlp.providers import (
    AnthropicProvider,
    GeminiProvider,
    ProviderConfig,
    build_provider,
)

REPLY = json.dumps(
    {
        "paragraph": "A relaxed tee with straight denim and clean sneakers reads effortless.",
        "bullets": ["Style: relaxed", "Color: neutral base", "Occasion: weekend"],
    }
)


def _gemini(handler) -> GeminiProvider:
    config = ProviderConfig(name="gemini", api_key="test-key", model="gemini-test")
    return GeminiProvider(config, transport=httpx.MockTransport(handler))


def test_unknown_provider_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown AI provider"):
        build_provider(ProviderConfig(name="mystery", api_key="x"))


def test_missing_api_key_is_an_auth_error() -> None:
    with pytest.raises(ProviderError) as exc_info:
        build_provider(ProviderConfig(name="gemini", api_key=""))

    assert exc_info.value.kind is ProviderErrorKind.AUTH


def test_config_from_settings_uses_provider_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AI_PROVIDER", "Anthropic")
    monkeypatch.delenv("AI_API_KEY", raising=False)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
    get_settings.cache_clear()
    try:
        config = ProviderConfig.from_settings(get_settings())
    finally:
        get_settings.cache_clear()

    assert config.name == "anthropic"
    assert config.api_key == "sk-ant-test"


def test_gemini_success_is_parsed() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = {"candidates": [{"finishReason": "STOP", "content": {"parts": [{"text": f"```json\n{REPLY}\n```"}]}}]}
        return httpx.Response(200, json=body)

    provider = _gemini(handler)
    result = provider.generate("prompt")
    provider.close()

    assert result["bullets"][0] == "Style: relaxed"
    assert seen[0].url.path.endswith("/models/gemini-test:generateContent")
    assert seen[0].url.params["key"] == "test-key"


@pytest.mark.parametrize(
    ("status_code", "kind"),
    [
        (401, ProviderErrorKind.AUTH),
        (429, ProviderErrorKind.RATE_LIMIT),
        (503, ProviderErrorKind.NETWORK),
        (400, ProviderErrorKind.MALFORMED),
    ],
)
def test_gemini_status_codes_are_classified(status_code: int, kind: ProviderErrorKind) -> None:
    provider = _gemini(lambda request: httpx.Response(status_code, text="nope"))

    with pytest.raises(ProviderError) as exc_info:
        provider.generate("prompt")

    assert exc_info.value.kind is kind
    assert exc_info.value.status_code == status_code


def test_gemini_max_tokens_is_truncated() -> None:
    body = {"candidates": [{"finishReason": "MAX_TOKENS", "content": {"parts": [{"text": '{"paragraph": "cut'}]}}]}
    provider = _gemini(lambda request: httpx.Response(200, json=body))

    with pytest.raises(ProviderError) as exc_info:
        provider.generate("prompt")

    assert exc_info.value.kind is ProviderErrorKind.TRUNCATED


def test_transport_failure_is_a_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderError) as exc_info:
        _gemini(handler).generate("prompt")

    assert exc_info.value.kind is ProviderErrorKind.NETWORK


def test_anthropic_sends_key_header_and_parses_reply() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"stop_reason": "end_turn", "content": [{"type": "text", "text": REPLY}]})

    config = ProviderConfig(name="anthropic", api_key="sk-ant-test")
    provider = AnthropicProvider(config, transport=httpx.MockTransport(handler))

    assert provider.generate("prompt")["paragraph"].startswith("A relaxed tee")
    assert seen[0].headers["x-api-key"] == "sk-ant-test"
    assert json.loads(seen[0].content)["model"] == AnthropicProvider.default_model


def test_non_object_body_is_malformed() -> None:
    provider = _gemini(lambda request: httpx.Response(200, json=["unexpected", "list"]))

    with pytest.raises(ProviderError) as exc_info:
        provider.generate("prompt")

    assert exc_info.value.kind is ProviderErrorKind.MALFORMED
