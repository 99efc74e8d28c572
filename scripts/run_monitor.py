#!/usr/bin/env python
"""
Entry point for the favorites monitor.

Polls the portal favorites list, starts applications for announcements
that are accepting bids and reports every attempt to Telegram.

Usage:
    python scripts/run_monitor.py           # run until interrupted
    python scripts/run_monitor.py --once    # run a single cycle
    python scripts/run_monitor.py --interval 60
"""
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from bidbot.core.constants import SEPARATOR_LINE
from bidbot.core.container import ApplicationContainer
from bidbot.core.logging import setup_logging
from bidbot.settings import load_settings


async def _run(once: bool, interval: float | None) -> int:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    container = ApplicationContainer.create(settings)
    scheduler = container.scheduler(interval)

    try:
        if once:
            stats = await scheduler.run_once()
            return 0 if stats is not None and stats.errors == 0 else 1
        await scheduler.run_forever()
        return 0
    finally:
        await container.aclose()


def main():
    """Run the favorites monitor."""
    once = "--once" in sys.argv
    interval = None
    if "--interval" in sys.argv:
        idx = sys.argv.index("--interval")
        if idx + 1 < len(sys.argv):
            interval = float(sys.argv[idx + 1])

    print(SEPARATOR_LINE)
    print("FAVORITES MONITOR")
    print(SEPARATOR_LINE)

    try:
        return asyncio.run(_run(once, interval))
    except KeyboardInterrupt:
        print("Stopped.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
