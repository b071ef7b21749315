"""Store interfaces the cancellation service is written against.

Both the SQLAlchemy repositories and the in-memory stores satisfy these, so
the service never knows which backend it runs on.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol


class CancellationLike(Protocol):
    id: str
    user_id: str
    subscription_id: str
    downsell_variant: str
    reason: Optional[str]
    accepted_downsell: bool
    created_at: datetime


class CancellationStore(Protocol):
    async def find_by_user(self, user_id: str) -> Optional[CancellationLike]: ...

    async def find(self, cancellation_id: str) -> Optional[CancellationLike]: ...

    async def insert(
        self, *, user_id: str, subscription_id: str, downsell_variant: str
    ) -> CancellationLike:
        """Create the record, or return the user's existing one on conflict."""
        ...

    async def update(self, cancellation_id: str, values: dict[str, Any]) -> Optional[CancellationLike]: ...


class SubscriptionStore(Protocol):
    async def mark_pending_cancellation(self, user_id: str) -> int:
        """Returns how many subscriptions were touched."""
        ...
