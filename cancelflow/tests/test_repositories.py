"""Tests for the SQLAlchemy repositories against a throwaway SQLite database."""
import pytest
import pytest_asyncio
from sqlalchemy import func, select

from cancelflow.container import build_db_service, init_db, seed_demo_subscription
from cancelflow.db import make_engine, make_sessionmaker
from cancelflow.models.cancellation import Cancellation
from cancelflow.models.subscription import STATUS_PENDING_CANCELLATION, Subscription
from cancelflow.repositories.cancellation_repo import CancellationRepo
from cancelflow.repositories.subscription_repo import SubscriptionRepo

from conftest import SUBSCRIPTION_ID, USER_A, USER_B


@pytest_asyncio.fixture
async def sessionmaker(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'cancelflow.db'}")
    await init_db(engine)
    yield make_sessionmaker(engine)
    await engine.dispose()


class TestCancellationRepo:
    @pytest.mark.asyncio
    async def test_insert_and_find(self, sessionmaker) -> None:
        async with sessionmaker() as s:
            repo = CancellationRepo(s)
            c = await repo.insert(user_id=USER_A, subscription_id=SUBSCRIPTION_ID, downsell_variant="A")

            assert c.id
            assert c.accepted_downsell is False
            assert c.reason is None
            assert (await repo.find(c.id)).user_id == USER_A
            assert (await repo.find_by_user(USER_A)).id == c.id
            assert await repo.find("missing") is None
            assert await repo.find_by_user(USER_B) is None

    @pytest.mark.asyncio
    async def test_duplicate_user_returns_existing_row(self, sessionmaker) -> None:
        async with sessionmaker() as s1:
            first = await CancellationRepo(s1).insert(
                user_id=USER_A, subscription_id=SUBSCRIPTION_ID, downsell_variant="A"
            )
        # a second session skips the lookup and collides on unique(user_id)
        async with sessionmaker() as s2:
            second = await CancellationRepo(s2).insert(
                user_id=USER_A, subscription_id="sub_other", downsell_variant="B"
            )
            count = await s2.scalar(select(func.count()).select_from(Cancellation))

        assert second.id == first.id
        assert second.downsell_variant == "A"
        assert count == 1

    @pytest.mark.asyncio
    async def test_update_partial(self, sessionmaker) -> None:
        async with sessionmaker() as s:
            repo = CancellationRepo(s)
            c = await repo.insert(user_id=USER_B, subscription_id=SUBSCRIPTION_ID, downsell_variant="B")

            updated = await repo.update(c.id, {"reason": "Other"})
            assert updated.reason == "Other"
            assert updated.accepted_downsell is False

            updated = await repo.update(c.id, {"accepted_downsell": True})
            assert updated.reason == "Other"
            assert updated.accepted_downsell is True

            assert await repo.update("missing", {"reason": "Other"}) is None

    @pytest.mark.asyncio
    async def test_update_rejects_other_columns(self, sessionmaker) -> None:
        async with sessionmaker() as s:
            repo = CancellationRepo(s)
            c = await repo.insert(user_id=USER_A, subscription_id=SUBSCRIPTION_ID, downsell_variant="A")
            with pytest.raises(ValueError):
                await repo.update(c.id, {"downsell_variant": "B"})


class TestSubscriptionRepo:
    @pytest.mark.asyncio
    async def test_mark_pending_cancellation(self, sessionmaker, cfg) -> None:
        async with sessionmaker() as s:
            await seed_demo_subscription(s, cfg)
            repo = SubscriptionRepo(s)

            assert await repo.mark_pending_cancellation(USER_A) == 1
            # already pending, nothing left to mark
            assert await repo.mark_pending_cancellation(USER_A) == 0
            assert await repo.mark_pending_cancellation(USER_B) == 0

            s.expire_all()
            sub = await repo.get_for_user(USER_A)
            assert sub.status == STATUS_PENDING_CANCELLATION

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, sessionmaker, cfg) -> None:
        async with sessionmaker() as s:
            await seed_demo_subscription(s, cfg)
            await seed_demo_subscription(s, cfg)
            count = await s.scalar(select(func.count()).select_from(Subscription))
        assert count == 1


class TestServiceOnDatabase:
    @pytest.mark.asyncio
    async def test_full_lifecycle(self, sessionmaker, cfg) -> None:
        async with sessionmaker() as s:
            await seed_demo_subscription(s, cfg)
            svc = build_db_service(s, cfg)

            created = await svc.create(USER_A, SUBSCRIPTION_ID)
            again = await svc.create(USER_A, SUBSCRIPTION_ID)
            assert again.id == created.id
            assert created.downsell_variant == "A"

            updated = await svc.update(created.id, {"reason": "Technical issues"})
            assert updated.reason == "Technical issues"
            assert updated.accepted_downsell is False
