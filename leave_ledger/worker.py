"""Worker process for the daily accrual batch.

Runs an asyncio loop that brings every employee's accruals (and with
them the year-opening carryover) up to date once per interval.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from leave_ledger.config import get_settings
from leave_ledger.db import get_session_factory

logger = logging.getLogger(__name__)


async def run_accrual_once(today: date | None = None) -> None:
    """Run a single accrual batch in its own session."""
    from leave_ledger.services.accrual import run_accruals_for_all_employees

    if today is None:
        today = date.today()
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await run_accruals_for_all_employees(session, today.year, today=today)
    logger.info(
        "Accrual run complete for %s: processed=%d succeeded=%d errors=%d",
        today,
        result.processed,
        result.succeeded,
        result.errors,
    )


async def run_accrual_loop() -> None:
    """Main worker loop."""
    interval = get_settings().accrual_interval_seconds
    logger.info("Accrual worker started (interval %ss)", interval)

    while True:
        today = date.today()
        try:
            await run_accrual_once(today)
        except Exception:
            logger.exception("Accrual run failed for %s", today)

        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker process."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(run_accrual_loop())


if __name__ == "__main__":
    main()
