from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cancelflow.models.cancellation import Cancellation

logger = logging.getLogger(__name__)

UPDATABLE = frozenset({"reason", "accepted_downsell"})


class CancellationRepo:
    def __init__(self, s: AsyncSession) -> None:
        self.s = s

    async def find_by_user(self, user_id: str) -> Optional[Cancellation]:
        q = await self.s.execute(
            select(Cancellation).where(Cancellation.user_id == user_id).limit(1)
        )
        return q.scalar_one_or_none()

    async def find(self, cancellation_id: str) -> Optional[Cancellation]:
        return await self.s.get(Cancellation, cancellation_id)

    async def insert(
        self,
        *,
        user_id: str,
        subscription_id: str,
        downsell_variant: str,
    ) -> Cancellation:
        c = Cancellation(
            user_id=user_id,
            subscription_id=subscription_id,
            downsell_variant=downsell_variant,
            reason=None,
            accepted_downsell=False,
        )
        self.s.add(c)
        try:
            await self.s.commit()
        except IntegrityError:
            # a concurrent create for the same user won the unique(user_id) race
            await self.s.rollback()
            existing = await self.find_by_user(user_id)
            if existing is None:
                raise
            logger.info("insert conflict, returning existing cancellation id=%s", existing.id)
            return existing
        await self.s.refresh(c)
        return c

    async def update(self, cancellation_id: str, values: dict[str, Any]) -> Optional[Cancellation]:
        c = await self.find(cancellation_id)
        if c is None:
            return None
        for k, v in values.items():
            if k not in UPDATABLE:
                raise ValueError(f"field {k!r} is not updatable")
            setattr(c, k, v)
        await self.s.commit()
        await self.s.refresh(c)
        return c
