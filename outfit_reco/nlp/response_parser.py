"""Turn raw model output into a validated rationale."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from outfit_reco.cache.store import Rationale
from outfit_reco.errors import ProviderError, ProviderErrorKind, RationaleValidationError

MIN_RESPONSE_CHARS = 50
MIN_PARAGRAPH_CHARS = 20

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip())).strip()


def parse_rationale_text(text: str) -> dict[str, Any]:
    """Extract the JSON object from a model reply.

    Raises :class:`ProviderError` with kind ``truncated`` when the reply was cut off and
    ``malformed`` when no JSON object can be recovered.
    """

    cleaned = strip_code_fences(text or "")

    if len(cleaned) < MIN_RESPONSE_CHARS:
        raise ProviderError(
            f"Model reply too short ({len(cleaned)} chars); expected JSON with paragraph and bullets",
            ProviderErrorKind.TRUNCATED,
        )

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if cleaned.startswith("{") and not cleaned.endswith("}"):
        if end < start or end - start < 20:
            raise ProviderError("Model reply contains incomplete JSON", ProviderErrorKind.TRUNCATED)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        if start < 0 or end <= start:
            raise ProviderError("No JSON object found in model reply", ProviderErrorKind.MALFORMED) from None
        try:
            payload = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError as exc:
            raise ProviderError(
                f"Failed to parse JSON from model reply: {exc.msg}",
                ProviderErrorKind.MALFORMED,
            ) from exc

    if not isinstance(payload, dict):
        raise ProviderError("Model reply JSON is not an object", ProviderErrorKind.MALFORMED)
    return payload


def validate_rationale(payload: Any) -> Rationale:
    """Check a parsed reply before it is allowed into the rationale cache."""

    if not isinstance(payload, Mapping):
        raise RationaleValidationError("Rationale payload is not an object")

    paragraph = payload.get("paragraph")
    if not isinstance(paragraph, str) or not paragraph.strip():
        raise RationaleValidationError("Rationale has no paragraph content")

    paragraph = paragraph.strip()
    # a paragraph that opens like JSON means the model echoed its own payload
    if paragraph[0] in "{[":
        raise RationaleValidationError("Rationale paragraph contains raw JSON")
    if len(paragraph) < MIN_PARAGRAPH_CHARS:
        raise RationaleValidationError("Rationale paragraph is too short, likely incomplete")

    bullets = payload.get("bullets")
    if not isinstance(bullets, list):
        bullets = []
    return Rationale(paragraph=paragraph, bullets=[str(bullet).strip() for bullet in bullets])
