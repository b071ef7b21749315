# cancelflow/utils/validation.py
from __future__ import annotations

import re
from typing import Any

CANCELLATION_REASONS: tuple[str, ...] = (
    "Too expensive",
    "Not using it enough",
    "Found a better alternative",
    "Technical issues",
    "Customer service problems",
    "Other",
)

MAX_SUBSCRIPTION_ID_LEN = 100
MAX_INPUT_LEN = 1000

UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
TAG_RE = re.compile(r"</?[A-Za-z!][^<>]*>")


def validate_user_id(user_id: Any) -> bool:
    return isinstance(user_id, str) and UUID_RE.fullmatch(user_id) is not None


def validate_subscription_id(subscription_id: Any) -> bool:
    return isinstance(subscription_id, str) and 0 < len(subscription_id) <= MAX_SUBSCRIPTION_ID_LEN


def validate_cancellation_reason(reason: Any) -> bool:
    return reason in CANCELLATION_REASONS


def sanitize_input(value: Any) -> str:
    """
    Strips markup before storage: whole tags first, then any stray ``<``/``>``,
    then surrounding whitespace. The result is capped at MAX_INPUT_LEN chars.
    Empty / None input gives an empty string.
    """
    if not value:
        return ""
    text = TAG_RE.sub("", str(value))
    text = text.replace("<", "").replace(">", "")
    return text.strip()[:MAX_INPUT_LEN]
