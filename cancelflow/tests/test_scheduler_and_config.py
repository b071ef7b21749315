"""Tests for the memory-store purge job and the Settings validators."""
import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pydantic import ValidationError

from cancelflow.config import Settings
from cancelflow.models.subscription import STATUS_ACTIVE
from cancelflow.scheduler.jobs import PURGE_JOB_ID, purge_memory_store_job, setup_scheduler

from conftest import SUBSCRIPTION_ID, USER_A, USER_B


class TestPurgeJob:
    @pytest.mark.asyncio
    async def test_clears_records_and_resets_subscriptions(self, service, stores) -> None:
        await service.create(USER_A, SUBSCRIPTION_ID)
        await service.create(USER_B, "sub_002")

        removed = await purge_memory_store_job(stores.cancellations, stores.subscriptions)

        assert removed == 2
        assert len(stores.cancellations) == 0
        assert stores.subscriptions.get_for_user(USER_A).status == STATUS_ACTIVE

    @pytest.mark.asyncio
    async def test_new_record_after_purge(self, service, stores) -> None:
        first = await service.create(USER_A, SUBSCRIPTION_ID)
        await purge_memory_store_job(stores.cancellations, stores.subscriptions)

        second = await service.create(USER_A, SUBSCRIPTION_ID)

        assert second.id != first.id
        assert second.downsell_variant == first.downsell_variant

    def test_disabled_interval(self, stores) -> None:
        scheduler = AsyncIOScheduler()
        assert setup_scheduler(scheduler, stores.cancellations, stores.subscriptions, minutes=0) is False
        assert scheduler.get_jobs() == []

    def test_job_registered_once(self, stores) -> None:
        scheduler = AsyncIOScheduler()
        for _ in range(2):
            assert setup_scheduler(scheduler, stores.cancellations, stores.subscriptions, minutes=5)

        jobs = scheduler.get_jobs()
        assert [j.id for j in jobs] == [PURGE_JOB_ID]
        assert jobs[0].kwargs["cancellations"] is stores.cancellations


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("POSTGRES_DSN", raising=False)
        s = Settings(_env_file=None)

        assert s.DATABASE_URL.startswith("postgresql+asyncpg://")
        assert s.VARIANT_POLICY == "deterministic"
        assert s.DOWNSELL_DISCOUNT_CENTS == 1000
        assert s.SPECIAL_DISCOUNT_PERCENT == 50

    def test_postgres_dsn_alias(self, monkeypatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("POSTGRES_DSN", "postgresql+asyncpg://u:p@db:5432/x")
        assert Settings(_env_file=None).DATABASE_URL == "postgresql+asyncpg://u:p@db:5432/x"

    def test_backend_normalized(self) -> None:
        assert Settings(_env_file=None, STORAGE_BACKEND=" Memory ").STORAGE_BACKEND == "memory"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"STORAGE_BACKEND": "redis"},
            {"VARIANT_POLICY": "round-robin"},
            {"SPECIAL_DISCOUNT_PERCENT": 150},
        ],
    )
    def test_rejects_bad_values(self, kwargs) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **kwargs)
