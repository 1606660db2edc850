"""
Auto-approve requests that a DEPT_HEAD / SERVICE_HEAD left unanswered for longer than
DEPT_HEAD_VALIDATION_DAYS. The pending-queue endpoint already does this for the viewer;
this job covers managers who never open their queue.
Usage: python -m app.scripts.auto_approve_overdue [delay_days]
"""

import asyncio
import logging
import sys
from typing import Optional

from app.api.v1.leaves.service import reconcile_all_overdue
from app.core.config import settings
from app.db.session import AsyncSessionLocal


async def auto_approve_overdue(delay_days: Optional[float] = None) -> int:
    async with AsyncSessionLocal() as session:
        return await reconcile_all_overdue(session, delay_days)


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    delay_days = float(sys.argv[1]) if len(sys.argv) > 1 else None
    count = asyncio.run(auto_approve_overdue(delay_days))
    print(f"Done. Auto-approved {count} leave request(s).")


if __name__ == "__main__":
    main()
