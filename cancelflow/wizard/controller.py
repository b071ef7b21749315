# cancelflow/wizard/controller.py
"""Step-by-step cancellation wizard.

confirm -> (variant A) reason | (variant B) downsell
downsell -> accept: leave to the account page | decline: reason
reason -> "Too expensive" / "Found a better alternative": special-discount
       -> anything else: complete
special-discount -> accept: leave to the account page | decline: complete
complete -> leave to the home page
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from cancelflow.utils.pricing import (
    DOWNSELL_DISCOUNT_CENTS,
    SPECIAL_DISCOUNT_PERCENT,
    downsell_price,
    special_discount_price,
)
from cancelflow.utils.validation import CANCELLATION_REASONS
from cancelflow.wizard.client import CancellationApi, CancellationApiError

logger = logging.getLogger(__name__)


class WizardStep(str, Enum):
    CONFIRM = "confirm"
    DOWNSELL = "downsell"
    REASON = "reason"
    SPECIAL_DISCOUNT = "special-discount"
    COMPLETE = "complete"


class WizardExit(str, Enum):
    HOME = "home"
    ACCOUNT = "account"


SPECIAL_DISCOUNT_REASONS = frozenset({"Too expensive", "Found a better alternative"})


class InvalidTransition(Exception):
    """Action does not belong to the current step (or the wizard already exited)."""


@dataclass(frozen=True)
class WizardUser:
    user_id: str
    subscription_id: str
    monthly_price: int  # cents


class CancellationWizard:
    def __init__(
        self,
        api: CancellationApi,
        user: WizardUser,
        *,
        downsell_discount: int = DOWNSELL_DISCOUNT_CENTS,
        special_discount_percent: int = SPECIAL_DISCOUNT_PERCENT,
    ) -> None:
        self.api = api
        self.user = user
        self.downsell_discount = downsell_discount
        self.special_discount_percent = special_discount_percent

        self.step = WizardStep.CONFIRM
        self.exit: Optional[WizardExit] = None
        self.variant: Optional[str] = None
        self.cancellation_id: Optional[str] = None
        self.selected_reason: Optional[str] = None
        self.is_loading = False
        self.last_error: Optional[CancellationApiError] = None

    # -------- read-only views --------

    @property
    def finished(self) -> bool:
        return self.exit is not None

    @property
    def current_price(self) -> int:
        return self.user.monthly_price

    @property
    def downsell_price(self) -> int:
        return downsell_price(self.user.monthly_price, self.downsell_discount)

    @property
    def special_discount_price(self) -> int:
        return special_discount_price(self.user.monthly_price, self.special_discount_percent)

    # -------- helpers --------

    def _require(self, step: WizardStep, action: str) -> None:
        if self.exit is not None:
            raise InvalidTransition(f"{action}: wizard already exited to {self.exit.value}")
        if self.step is not step:
            raise InvalidTransition(f"{action}: not allowed on step {self.step.value}")

    def _go(self, step: WizardStep) -> WizardStep:
        logger.info("wizard: %s -> %s", self.step.value, step.value,
                    extra={"cancellation_id": self.cancellation_id or "-"})
        self.step = step
        return step

    def _leave(self, where: WizardExit) -> WizardStep:
        logger.info("wizard: %s -> exit(%s)", self.step.value, where.value,
                    extra={"cancellation_id": self.cancellation_id or "-"})
        self.exit = where
        return self.step

    async def _call(self, action: str, fn: Callable[[], Awaitable[Any]]) -> tuple[bool, Any]:
        """
        One server call at a time. While it runs the wizard is loading and
        every action, sync ones included, is ignored. Failures are logged, never retried.
        """
        self.is_loading = True
        try:
            result = await fn()
        except CancellationApiError as e:
            self.last_error = e
            logger.warning("wizard: %s failed on step %s: %s", action, self.step.value, e,
                           extra={"cancellation_id": self.cancellation_id or "-"})
            return False, None
        finally:
            self.is_loading = False
        self.last_error = None
        return True, result

    def _busy(self, action: str) -> bool:
        if self.is_loading:
            logger.debug("wizard: %s ignored, request in flight", action)
            return True
        return False

    # -------- confirm --------

    def abort(self) -> WizardStep:
        """Keep the subscription: leave without touching the server."""
        self._require(WizardStep.CONFIRM, "abort")
        if self._busy("abort"):
            return self.step
        return self._leave(WizardExit.HOME)

    async def confirm(self) -> WizardStep:
        self._require(WizardStep.CONFIRM, "confirm")
        if self._busy("confirm"):
            return self.step

        ok, created = await self._call(
            "confirm",
            lambda: self.api.create(self.user.user_id, self.user.subscription_id),
        )
        if not ok:
            return self.step

        self.cancellation_id = created.id
        self.variant = created.downsell_variant
        if self.variant == "A":
            return self._go(WizardStep.REASON)
        return self._go(WizardStep.DOWNSELL)

    # -------- downsell (variant B) --------

    async def accept_downsell(self) -> WizardStep:
        self._require(WizardStep.DOWNSELL, "accept_downsell")
        if self._busy("accept_downsell"):
            return self.step

        ok, _ = await self._call(
            "accept_downsell",
            lambda: self.api.update(self.cancellation_id, {"accepted_downsell": True}),
        )
        if not ok:
            return self.step
        return self._leave(WizardExit.ACCOUNT)

    def decline_downsell(self) -> WizardStep:
        self._require(WizardStep.DOWNSELL, "decline_downsell")
        if self._busy("decline_downsell"):
            return self.step
        return self._go(WizardStep.REASON)

    # -------- reason --------

    def select_reason(self, reason: str) -> None:
        self._require(WizardStep.REASON, "select_reason")
        if self._busy("select_reason"):
            return
        if reason not in CANCELLATION_REASONS:
            raise ValueError(f"unknown cancellation reason: {reason!r}")
        self.selected_reason = reason

    async def submit_reason(self) -> WizardStep:
        self._require(WizardStep.REASON, "submit_reason")
        if not self.selected_reason or self._busy("submit_reason"):
            return self.step

        reason = self.selected_reason
        ok, _ = await self._call(
            "submit_reason",
            lambda: self.api.update(self.cancellation_id, {"reason": reason}),
        )
        if not ok:
            return self.step
        if reason in SPECIAL_DISCOUNT_REASONS:
            return self._go(WizardStep.SPECIAL_DISCOUNT)
        return self._go(WizardStep.COMPLETE)

    # -------- special discount --------

    def special_discount_note(self) -> str:
        return f"{self.selected_reason} (accepted {self.special_discount_percent}% discount offer)"

    async def accept_special_discount(self) -> WizardStep:
        self._require(WizardStep.SPECIAL_DISCOUNT, "accept_special_discount")
        if self._busy("accept_special_discount"):
            return self.step

        fields = {"accepted_downsell": True, "reason": self.special_discount_note()}
        ok, _ = await self._call(
            "accept_special_discount",
            lambda: self.api.update(self.cancellation_id, fields),
        )
        if not ok:
            return self.step
        return self._leave(WizardExit.ACCOUNT)

    def decline_special_discount(self) -> WizardStep:
        self._require(WizardStep.SPECIAL_DISCOUNT, "decline_special_discount")
        if self._busy("decline_special_discount"):
            return self.step
        return self._go(WizardStep.COMPLETE)

    # -------- complete --------

    def finish(self) -> WizardStep:
        self._require(WizardStep.COMPLETE, "finish")
        if self._busy("finish"):
            return self.step
        return self._leave(WizardExit.HOME)
