# cancelflow/repositories/memory.py
"""
In-memory stand-ins for the SQL repositories (local development, tests).
Everything lives in process dicts; the purge job wipes them on an interval.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from cancelflow.models.subscription import STATUS_ACTIVE, STATUS_PENDING_CANCELLATION
from cancelflow.repositories.cancellation_repo import UPDATABLE

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CancellationRecord:
    user_id: str
    subscription_id: str
    downsell_variant: str
    reason: Optional[str] = None
    accepted_downsell: bool = False
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_now)


@dataclass
class SubscriptionRecord:
    id: str
    user_id: str
    monthly_price: int
    status: str = STATUS_ACTIVE


class MemoryCancellationStore:
    def __init__(self) -> None:
        self._by_user: Dict[str, CancellationRecord] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._by_user)

    async def find_by_user(self, user_id: str) -> Optional[CancellationRecord]:
        return self._by_user.get(user_id)

    async def find(self, cancellation_id: str) -> Optional[CancellationRecord]:
        for rec in self._by_user.values():
            if rec.id == cancellation_id:
                return rec
        return None

    async def insert(
        self,
        *,
        user_id: str,
        subscription_id: str,
        downsell_variant: str,
    ) -> CancellationRecord:
        async with self._lock:
            existing = self._by_user.get(user_id)
            if existing is not None:
                return existing
            rec = CancellationRecord(
                user_id=user_id,
                subscription_id=subscription_id,
                downsell_variant=downsell_variant,
            )
            self._by_user[user_id] = rec
            return rec

    async def update(self, cancellation_id: str, values: dict[str, Any]) -> Optional[CancellationRecord]:
        rec = await self.find(cancellation_id)
        if rec is None:
            return None
        for k, v in values.items():
            if k not in UPDATABLE:
                raise ValueError(f"field {k!r} is not updatable")
            setattr(rec, k, v)
        return rec

    def clear(self) -> int:
        n = len(self._by_user)
        self._by_user.clear()
        return n


class MemorySubscriptionStore:
    def __init__(self, *subscriptions: SubscriptionRecord) -> None:
        self._items: Dict[str, SubscriptionRecord] = {s.id: s for s in subscriptions}

    def get_for_user(self, user_id: str) -> Optional[SubscriptionRecord]:
        for s in self._items.values():
            if s.user_id == user_id:
                return s
        return None

    async def mark_pending_cancellation(self, user_id: str) -> int:
        n = 0
        for s in self._items.values():
            if s.user_id == user_id and s.status == STATUS_ACTIVE:
                s.status = STATUS_PENDING_CANCELLATION
                n += 1
        return n

    def reset(self) -> None:
        for s in self._items.values():
            s.status = STATUS_ACTIVE
