"""
Reconcile the cached leave balance of every ACTIVE employee.

Safe to run at any time (writes only where the cache drifted); typically scheduled
right after January 1st so that debt carry-over and seniority bonuses are applied.
Usage: python -m app.scripts.sync_leave_balances
"""

import asyncio
import logging

from app.api.v1.leaves.balance import sync_all_active_balances
from app.core.config import settings
from app.db.session import AsyncSessionLocal


async def sync_leave_balances() -> int:
    async with AsyncSessionLocal() as session:
        return await sync_all_active_balances(session)


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    count = asyncio.run(sync_leave_balances())
    print(f"Done. Reconciled {count} employee(s).")


if __name__ == "__main__":
    main()
