"""
Delete ALL works, distribution records and events of one user.

Run inside docker (recommended):
  docker exec -i doukeeper-api sh -lc "cd /app && PYTHONPATH=/app uv run python scripts/reset_ledger.py you@example.com"
"""

from __future__ import annotations

import asyncio
import sys

from sqlalchemy import delete, select

from db.database import async_session_maker
from db.distribution import DistributionRecord
from db.event import Event
from db.ledger_version import LedgerVersion
from db.users import User
from db.work import Work


async def main(email: str) -> int:
    async with async_session_maker() as db:
        res = await db.execute(select(User).where(User.email == email))
        user = res.scalar_one_or_none()
        if not user:
            print(f"No user with email {email}")
            return 1

        # Delete children first (FK)
        res_records = await db.execute(delete(DistributionRecord).where(DistributionRecord.user_id == user.id))
        res_works = await db.execute(delete(Work).where(Work.user_id == user.id))
        res_events = await db.execute(delete(Event).where(Event.user_id == user.id))
        # Sessions that loaded the old ledger can no longer save over the reset
        await db.execute(delete(LedgerVersion).where(LedgerVersion.user_id == user.id))
        await db.commit()

        records_n = int(getattr(res_records, "rowcount", 0) or 0)
        works_n = int(getattr(res_works, "rowcount", 0) or 0)
        events_n = int(getattr(res_events, "rowcount", 0) or 0)
        print(f"Deleted distribution_records: {records_n}, works: {works_n}, events: {events_n}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: reset_ledger.py EMAIL")
        raise SystemExit(2)
    raise SystemExit(asyncio.run(main(sys.argv[1])))
