"""Naming of per-task temporary files."""

import re
import time
from typing import Optional


def temp_file_name(task_id: str, ext: str, label: Optional[str] = None) -> str:
    """Build `<taskId>[-<label>]-<ms timestamp><ext>`.

    Path separators and whitespace in the task id are replaced so the
    name always stays inside the working directory.
    """
    stem = re.sub(r"[\\/:\s]+", "_", task_id)
    if label:
        stem = f"{stem}-{label}"
    return f"{stem}-{int(time.time() * 1000)}{ext}"
