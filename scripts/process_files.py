#!/usr/bin/env python
"""
Process a batch of documents: resolve → download → sign → upload.

The tasks file is a JSON list of objects with id, url, method,
requestData, uploadUrl, uploadMethod and uploadData (at most 9 tasks).

Usage:
    python scripts/process_files.py tasks.json
    python scripts/process_files.py --cleanup   # empty the temp directory
"""
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from bidbot.core.constants import SEPARATOR_LINE
from bidbot.core.container import ApplicationContainer
from bidbot.core.logging import setup_logging
from bidbot.settings import load_settings


async def _run(tasks_file: Path | None, cleanup: bool) -> int:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    container = ApplicationContainer.create(settings)

    try:
        if cleanup:
            response = await container.file_processor.cleanup()
            print(response.message)
            return 0 if response.success else 1

        raw_tasks = json.loads(tasks_file.read_text(encoding="utf-8"))
        response = await container.file_processor.process_files_parallel(raw_tasks)
    finally:
        await container.aclose()

    if not response.success:
        print(f"Rejected: {response.message}")
        return 1

    print(SEPARATOR_LINE)
    print("SUMMARY")
    print(SEPARATOR_LINE)
    print(f"  Total:       {response.summary.total}")
    print(f"  Successful:  {response.summary.successful}")
    print(f"  Failed:      {response.summary.failed}")
    for result in response.results:
        status = "OK " if result.success else "ERR"
        print(f"  [{status}] {result.task_id} {result.error or result.signed_file_path}")

    return 0 if response.summary.failed == 0 else 1


def main():
    cleanup = "--cleanup" in sys.argv
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]

    if not cleanup and not args:
        print(__doc__)
        return 2

    tasks_file = Path(args[0]) if args else None
    return asyncio.run(_run(tasks_file, cleanup))


if __name__ == "__main__":
    sys.exit(main())
