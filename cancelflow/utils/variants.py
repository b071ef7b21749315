# cancelflow/utils/variants.py
from __future__ import annotations

import hashlib
import secrets
from typing import Literal

Variant = Literal["A", "B"]

DETERMINISTIC = "deterministic"
RANDOM = "random"


def deterministic_variant(user_id: str) -> Variant:
    """
    sha256(user_id), last hex digit: even -> A, odd -> B.
    Same user, same variant, across restarts and retries.
    """
    digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()
    return "A" if int(digest[-1], 16) % 2 == 0 else "B"


def random_variant() -> Variant:
    return secrets.choice(("A", "B"))


def assign_variant(user_id: str, policy: str = DETERMINISTIC) -> Variant:
    if policy == DETERMINISTIC:
        return deterministic_variant(user_id)
    if policy == RANDOM:
        return random_variant()
    raise ValueError(f"unknown variant policy: {policy!r}")
