# cancelflow/scripts/walkthrough.py
"""
Walks the cancellation wizard end to end against a running API.
Run next to the web app:
    python -m cancelflow.scripts.walkthrough --reason "Too expensive" --decline-offers
"""
from __future__ import annotations

import argparse
import asyncio
import sys

from cancelflow.config import settings
from cancelflow.core.logging import setup_logging
from cancelflow.utils.pricing import format_price
from cancelflow.utils.validation import CANCELLATION_REASONS
from cancelflow.wizard.client import HttpCancellationClient
from cancelflow.wizard.controller import CancellationWizard, WizardStep, WizardUser


def _parse(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Scripted run of the cancellation wizard")
    p.add_argument("--base-url", default=settings.API_BASE_URL)
    p.add_argument("--user-id", default=settings.DEMO_USER_ID)
    p.add_argument("--subscription-id", default=settings.DEMO_SUBSCRIPTION_ID)
    p.add_argument("--price-cents", type=int, default=settings.DEMO_MONTHLY_PRICE_CENTS)
    p.add_argument("--reason", choices=CANCELLATION_REASONS, default="Other")
    p.add_argument("--decline-offers", action="store_true", help="say no to every discount")
    p.add_argument("--abort", action="store_true", help="keep the subscription on the first step")
    return p.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    user = WizardUser(args.user_id, args.subscription_id, args.price_cents)

    async with HttpCancellationClient(args.base_url, timeout=settings.HTTP_TIMEOUT_SECONDS) as api:
        wizard = CancellationWizard(
            api,
            user,
            downsell_discount=settings.DOWNSELL_DISCOUNT_CENTS,
            special_discount_percent=settings.SPECIAL_DISCOUNT_PERCENT,
        )
        print("[step]", wizard.step.value, "price:", format_price(wizard.current_price))

        if args.abort:
            wizard.abort()
            print("[exit]", wizard.exit.value)
            return 0

        while not wizard.finished:
            step = wizard.step
            if step is WizardStep.CONFIRM:
                await wizard.confirm()
                print("[variant]", wizard.variant, "id:", wizard.cancellation_id)
            elif step is WizardStep.DOWNSELL:
                print("[offer]", format_price(wizard.current_price), "->", format_price(wizard.downsell_price))
                if args.decline_offers:
                    wizard.decline_downsell()
                else:
                    await wizard.accept_downsell()
            elif step is WizardStep.REASON:
                wizard.select_reason(args.reason)
                await wizard.submit_reason()
            elif step is WizardStep.SPECIAL_DISCOUNT:
                print("[offer]", format_price(wizard.current_price), "->", format_price(wizard.special_discount_price))
                if args.decline_offers:
                    wizard.decline_special_discount()
                else:
                    await wizard.accept_special_discount()
            else:
                wizard.finish()

            if wizard.last_error is not None:
                print("[error]", wizard.last_error)
                return 1
            print("[step]", wizard.step.value)

        print("[exit]", wizard.exit.value)
        return 0


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    return asyncio.run(run(_parse(argv)))


if __name__ == "__main__":
    sys.exit(main())
