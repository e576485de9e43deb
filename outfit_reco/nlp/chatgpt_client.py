"""Client for rationale generation via OpenAI-compatible chat completions."""

from __future__ import annotations

import logging
from typing import Any

import openai
from openai import OpenAI

from outfit_reco.errors import ProviderError, ProviderErrorKind
from outfit_reco.nlp.prompt_builder import SYSTEM_PROMPT
from outfit_reco.nlp.response_parser import parse_rationale_text

logger = logging.getLogger(__name__)


class ChatGPTClient:
    """Thin client for OpenAI and OpenAI-compatible proxies such as DeepSeek."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout: float = 20.0,
        max_tokens: int = 250,
        name: str = "openai",
    ) -> None:
        if not api_key:
            raise ProviderError(f"{name} API key is not configured.", ProviderErrorKind.AUTH)

        self.name = name
        self._model = model
        self._max_tokens = max_tokens
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url.rstrip("/") if base_url else None,
            timeout=timeout,
            max_retries=0,
        )

    def generate(self, prompt: str) -> dict[str, Any]:
        """Send the prompt and return the parsed ``{paragraph, bullets}`` object."""

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.7,
                max_tokens=self._max_tokens,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise ProviderError(f"{self.name} rejected the API key", ProviderErrorKind.AUTH, exc.status_code) from exc
        except openai.RateLimitError as exc:
            raise ProviderError(f"{self.name} rate limit exceeded", ProviderErrorKind.RATE_LIMIT, 429) from exc
        except openai.APIStatusError as exc:
            kind = ProviderErrorKind.MALFORMED if exc.status_code < 500 else ProviderErrorKind.NETWORK
            raise ProviderError(f"{self.name} API error {exc.status_code}", kind, exc.status_code) from exc
        except openai.APIError as exc:
            raise ProviderError(f"{self.name} request failed: {exc}", ProviderErrorKind.NETWORK) from exc

        if not response.choices:
            raise ProviderError(f"{self.name} returned no choices", ProviderErrorKind.MALFORMED)
        choice = response.choices[0]
        if choice.finish_reason == "length":
            raise ProviderError(f"{self.name} reply was truncated", ProviderErrorKind.TRUNCATED)
        return parse_rationale_text(choice.message.content or "")

    def ping(self) -> bool:
        """Return ``True`` if the upstream service responds to a model listing call."""

        models = self._client.models.list()
        return bool(models.data)

    def close(self) -> None:
        """Release HTTP resources."""

        self._client.close()
