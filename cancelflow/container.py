# cancelflow/container.py
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from cancelflow.config import Settings
from cancelflow.models.base import Base
from cancelflow.models.subscription import STATUS_ACTIVE, Subscription
from cancelflow.repositories.cancellation_repo import CancellationRepo
from cancelflow.repositories.memory import (
    MemoryCancellationStore,
    MemorySubscriptionStore,
    SubscriptionRecord,
)
from cancelflow.repositories.subscription_repo import SubscriptionRepo
from cancelflow.services.cancellation_service import CancellationService


@dataclass
class MemoryStores:
    cancellations: MemoryCancellationStore
    subscriptions: MemorySubscriptionStore


async def init_db(engine: AsyncEngine) -> None:
    """
    Dev-only DB init: creates the tables if they are missing.
    In production run `alembic upgrade head`.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_demo_subscription(session: AsyncSession, cfg: Settings) -> Subscription:
    """Makes sure the demo user owns an active subscription row."""
    sub = await session.get(Subscription, cfg.DEMO_SUBSCRIPTION_ID)
    if sub is None:
        sub = Subscription(
            id=cfg.DEMO_SUBSCRIPTION_ID,
            user_id=cfg.DEMO_USER_ID,
            monthly_price=cfg.DEMO_MONTHLY_PRICE_CENTS,
            status=STATUS_ACTIVE,
        )
        session.add(sub)
        await session.commit()
        await session.refresh(sub)
    return sub


def build_memory_stores(cfg: Settings) -> MemoryStores:
    """In-memory stores, seeded with the demo user's subscription."""
    demo = SubscriptionRecord(
        id=cfg.DEMO_SUBSCRIPTION_ID,
        user_id=cfg.DEMO_USER_ID,
        monthly_price=cfg.DEMO_MONTHLY_PRICE_CENTS,
    )
    return MemoryStores(
        cancellations=MemoryCancellationStore(),
        subscriptions=MemorySubscriptionStore(demo),
    )


def build_db_service(session: AsyncSession, cfg: Settings) -> CancellationService:
    return CancellationService(
        CancellationRepo(session),
        SubscriptionRepo(session),
        variant_policy=cfg.VARIANT_POLICY,
    )


def build_memory_service(stores: MemoryStores, cfg: Settings) -> CancellationService:
    return CancellationService(
        stores.cancellations,
        stores.subscriptions,
        variant_policy=cfg.VARIANT_POLICY,
    )
