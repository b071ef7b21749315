from __future__ import annotations

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cancelflow.models.subscription import Subscription, STATUS_ACTIVE, STATUS_PENDING_CANCELLATION


class SubscriptionRepo:
    def __init__(self, s: AsyncSession) -> None:
        self.s = s

    async def get_for_user(self, user_id: str) -> Optional[Subscription]:
        q = await self.s.execute(
            select(Subscription).where(Subscription.user_id == user_id).limit(1)
        )
        return q.scalar_one_or_none()

    async def mark_pending_cancellation(self, user_id: str) -> int:
        res = await self.s.execute(
            update(Subscription)
            .where(
                Subscription.user_id == user_id,
                Subscription.status == STATUS_ACTIVE,
            )
            .values(status=STATUS_PENDING_CANCELLATION)
        )
        await self.s.commit()
        return res.rowcount or 0
