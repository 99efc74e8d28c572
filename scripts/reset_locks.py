"""Remove processing locks so announcements become eligible again.

Usage:
    python scripts/reset_locks.py              # remove every lock
    python scripts/reset_locks.py 15880798     # remove the lock of one announcement
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from bidbot.core.container import ApplicationContainer
from bidbot.core.logging import setup_logging
from bidbot.settings import load_settings


async def reset_locks(announce_ids: list[str]) -> None:
    """Delete the given processing locks, or all of them.

    Args:
        announce_ids: Announcement ids; empty means every lock
    """
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    container = ApplicationContainer.create(settings)

    try:
        if settings.dedup_backend == "memory":
            print("Dedup backend is in-memory; locks only live inside a running monitor.")
            return

        if not announce_ids:
            removed = await container.monitor.reset_processed_announcements()
            print(f"Removed {removed} processing locks.")
            return

        for announce_id in announce_ids:
            await container.monitor.remove_lock(announce_id)
            print(f"Removed lock for announcement {announce_id}")
    finally:
        await container.aclose()


if __name__ == "__main__":
    asyncio.run(reset_locks(sys.argv[1:]))
