import asyncio
import sys
from pathlib import Path

# Add project root to sys.path
project_root = Path(__file__).resolve().parent.parent
sys.path.append(str(project_root))

from posada.api.dependencies import DEMO_ROOMS  # noqa: E402
from posada.api.deps import AsyncSessionLocal, engine  # noqa: E402
from posada.infrastructure.db.repositories.reservation_store_sql import ReservationStoreSQL  # noqa: E402
from posada.infrastructure.db.tables import metadata  # noqa: E402


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        print("Created missing tables.")

    store = ReservationStoreSQL(AsyncSessionLocal)
    for room in DEMO_ROOMS:
        if await store.get_room(room.id) is None:
            await store.add_room(room)
            print(f"Seeded room {room.id}")
        else:
            print(f"Room {room.id} already present")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
