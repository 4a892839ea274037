"""
Import a legacy browser-storage export into a user's ledger.

The first version of the app kept everything in the browser under the
`doukeeper-storage` key. Export that value to a JSON file and run:

  uv run python scripts/import_local_storage.py --email you@example.com --file doukeeper-storage.json

The user's existing ledger is replaced. Use --dry-run to only report what
would be imported.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select

from core.snapshot import reassign_ids, state_from_snapshot
from db.database import async_session_maker
from db.repository import LedgerRepository
from db.users import User


async def main(email: str, file: Path, dry_run: bool) -> int:
    data = json.loads(file.read_text(encoding="utf-8"))

    async with async_session_maker() as db:
        res = await db.execute(select(User).where(User.email == email))
        user = res.scalar_one_or_none()
        if not user:
            print(f"No user with email {email}")
            return 1

        state = reassign_ids(state_from_snapshot(data, user_id=user.id))
        print(
            f"Parsed {len(state.works)} works, {len(state.distribution_records)} distribution records, "
            f"{len(state.events)} events"
        )
        if dry_run:
            return 0

        await LedgerRepository(db, user.id).save(state)
        print(f"Imported ledger for {email}")
    return 0


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    ap.add_argument("--email", required=True)
    ap.add_argument("--file", required=True, type=Path)
    ap.add_argument("--dry-run", action="store_true")
    args = ap.parse_args()
    raise SystemExit(asyncio.run(main(args.email, args.file, args.dry_run)))
