# cancelflow/services/cancellation_service.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from sqlalchemy.exc import SQLAlchemyError

from cancelflow.core.errors import (
    CancellationError,
    NotFoundError,
    PersistenceError,
    UnexpectedError,
    ValidationError,
)
from cancelflow.repositories.protocols import (
    CancellationLike,
    CancellationStore,
    SubscriptionStore,
)
from cancelflow.utils.validation import (
    sanitize_input,
    validate_subscription_id,
    validate_user_id,
)
from cancelflow.utils.variants import DETERMINISTIC, assign_variant

logger = logging.getLogger(__name__)


class CancellationService:
    """
    Create / update of the per-user cancellation record.

    Every failure leaving this class is a CancellationError subclass:
      - ValidationError / NotFoundError for caller mistakes
      - PersistenceError when SQLAlchemy fails
      - UnexpectedError for anything else
    """

    def __init__(
        self,
        cancellations: CancellationStore,
        subscriptions: SubscriptionStore,
        *,
        variant_policy: str = DETERMINISTIC,
    ) -> None:
        self.cancellations = cancellations
        self.subscriptions = subscriptions
        self.variant_policy = variant_policy

    # -------- helpers --------

    @contextmanager
    def _boundary(self, op: str) -> Iterator[None]:
        try:
            yield
        except CancellationError:
            raise
        except SQLAlchemyError as e:
            logger.exception("%s: persistence failure", op)
            raise PersistenceError(f"{op} failed: storage unavailable") from e
        except Exception as e:
            logger.exception("%s: unexpected failure", op)
            raise UnexpectedError(f"{op} failed") from e

    # -------- public API --------

    async def create(self, user_id: Any, subscription_id: Any) -> CancellationLike:
        """
        Starts (or resumes) a cancellation for the user.
        Returns the stored record; the web layer exposes only id + variant.
        """
        if not validate_user_id(user_id):
            logger.info("create: invalid user id %r", user_id)
            raise ValidationError("Invalid user ID format")
        if not validate_subscription_id(subscription_id):
            logger.info("create: invalid subscription id %r", subscription_id)
            raise ValidationError("Invalid subscription ID")

        uid = sanitize_input(user_id)
        sid = sanitize_input(subscription_id)

        with self._boundary("create"):
            existing = await self.cancellations.find_by_user(uid)
            if existing is not None:
                # a failed earlier attempt may have stored the record without the mark
                await self.subscriptions.mark_pending_cancellation(uid)
                logger.info(
                    "create: existing cancellation reused",
                    extra={"user_id": uid, "cancellation_id": existing.id},
                )
                return existing

            variant = assign_variant(uid, self.variant_policy)
            record = await self.cancellations.insert(
                user_id=uid,
                subscription_id=sid,
                downsell_variant=variant,
            )
            touched = await self.subscriptions.mark_pending_cancellation(uid)
            if not touched:
                logger.warning("create: no active subscription to mark pending", extra={"user_id": uid})

            logger.info(
                "create: cancellation created variant=%s policy=%s",
                record.downsell_variant,
                self.variant_policy,
                extra={"user_id": uid, "cancellation_id": record.id},
            )
            return record

    async def update(self, cancellation_id: Any, fields: Mapping[str, Any]) -> CancellationLike:
        """
        Partial update: only keys present in ``fields`` are applied.
        Recognised keys are ``reason`` and ``accepted_downsell``.
        """
        if not cancellation_id:
            raise ValidationError("Cancellation ID is required")

        changes: dict[str, Any] = {}
        if "reason" in fields:
            changes["reason"] = sanitize_input(fields["reason"])
        if "accepted_downsell" in fields:
            changes["accepted_downsell"] = bool(fields["accepted_downsell"])

        with self._boundary("update"):
            cid = str(cancellation_id)
            record = await self.cancellations.find(cid)
            if record is None:
                logger.info("update: not found", extra={"cancellation_id": cid})
                raise NotFoundError("Cancellation not found")

            if changes:
                record = await self.cancellations.update(cid, changes)
                if record is None:
                    raise NotFoundError("Cancellation not found")

            logger.info(
                "update: applied fields=%s",
                sorted(changes),
                extra={"cancellation_id": cid},
            )
            return record
