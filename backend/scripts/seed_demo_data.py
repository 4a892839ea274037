import asyncio
import sys
from pathlib import Path

"""
Seed a demo account with a small ledger (works, events, distributions).

Everything goes through the ledger operations, so the stock counters end up
exactly as they would from the UI.

This script can be run from either:
- backend/: `uv run python scripts/seed_demo_data.py`
- repo root: `uv run python backend/scripts/seed_demo_data.py`
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from core.store import LedgerStore
from db.database import async_session_maker, create_db_and_tables
from db.repository import LedgerRepository
from db.users import User

from fastapi_users.password import PasswordHelper


password_helper = PasswordHelper()

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo-password"


async def get_or_create_user(session, email: str, password: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        return user

    user = User(
        email=email,
        hashed_password=password_helper.hash(password),
        is_active=True,
        is_superuser=False,
        is_verified=True,
    )
    session.add(user)
    await session.flush()
    return user


def build_demo_ledger(store: LedgerStore) -> None:
    today = datetime.now(timezone.utc).replace(hour=10, minute=0, second=0, microsecond=0)

    spring = store.add_event("Spring Doujin Fair", date=today - timedelta(days=30), location="Hall A")
    summer = store.add_event("Summer Market", date=today + timedelta(days=45), location="East Hall")

    zine = store.add_work("Night Train Zine", 50, price=500, memo="Riso print, 24p")
    artbook = store.add_work("Seaside Artbook", 30, price=1500)
    stickers = store.add_work("Sticker Set", 100)

    store.register_distribution(zine.id, 18, event_id=spring.id, distributed_at=today - timedelta(days=30))
    store.register_distribution(artbook.id, 12, event_id=spring.id, distributed_at=today - timedelta(days=30))
    store.register_distribution(stickers.id, 40, event_id=spring.id, memo="Free with artbook")
    store.restock(zine.id, 20)
    store.register_distribution(zine.id, 5, memo="Mail order", distributed_at=today - timedelta(days=3))

    store.update_event(summer.id, {"memo": "Table E-12"})


async def seed() -> None:
    await create_db_and_tables()
    async with async_session_maker() as session:
        user = await get_or_create_user(session, DEMO_EMAIL, DEMO_PASSWORD)
        await session.commit()

        repo = LedgerRepository(session, user.id)
        state = await repo.load()
        if state.works:
            print(f"Demo ledger for {DEMO_EMAIL} already has {len(state.works)} works, skipping")
            return

        store = LedgerStore(state)
        build_demo_ledger(store)
        await repo.save(store.state)
        print(
            f"Seeded {len(store.state.works)} works, {len(store.state.events)} events, "
            f"{len(store.state.distribution_records)} distribution records for {DEMO_EMAIL}"
        )


if __name__ == "__main__":
    asyncio.run(seed())
