# core/normalizer.py
import json
import math
from typing import Any
from model.verdict import VerdictResult, VerdictStatus
from util.enums import BackendName
import logging

logger = logging.getLogger(__name__)


def _json_object_span(raw: str) -> str | None:
    # Backends wrap JSON in prose or code fences; take first "{" to last "}"
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return raw[start : end + 1]


def _status(value: Any) -> VerdictStatus:
    if isinstance(value, str) and value.lower() == VerdictStatus.PASS.value:
        return VerdictStatus.PASS
    return VerdictStatus.FAIL


def _text(value: Any, fallback: str) -> str:
    if not value:
        return fallback
    return value if isinstance(value, str) else str(value)


def _confidence(value: Any, fallback: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    try:
        number = float(value)
    except OverflowError:
        # ints past float range still clamp by sign
        return 100 if value > 0 else 0
    if not math.isfinite(number):
        return fallback
    # round half up, then clamp to 0..100
    return max(0, min(100, math.floor(number + 0.5)))


def normalize(raw: str, fallback: VerdictResult, source: BackendName) -> VerdictResult:
    """
    Turn raw backend text into a verdict without ever raising.

    - No brace pair, or the span is not a JSON object: `fallback` unchanged.
    - status: "pass" (any case) passes; anything else, including missing, fails.
    - evidence/reasoning/confidence: backend value when usable, else fallback's.
    - rule always comes from `fallback`.
    """
    span = _json_object_span(raw or "")
    if span is None:
        logger.info("normalize.no_object source=%s", source)
        return fallback
    try:
        parsed = json.loads(span)
    except ValueError:
        logger.info("normalize.parse_error source=%s", source)
        return fallback
    if not isinstance(parsed, dict):
        return fallback

    return VerdictResult(
        rule=fallback.rule,
        status=_status(parsed.get("status")),
        evidence=_text(parsed.get("evidence"), fallback.evidence),
        reasoning=_text(parsed.get("reasoning"), fallback.reasoning),
        confidence=_confidence(parsed.get("confidence"), fallback.confidence),
        source=source,
    )
