"""All-or-nothing file persistence for manifests and generated sources."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def atomic_write(path: Path, content: str) -> None:
    """
    Write ``content`` to ``path`` through a temp file in the same directory.

    Parent directories are created. A crash leaves either the old file or
    the new one, never a partial write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as handle:
        handle.write(content)
        temp_path = handle.name

    try:
        os.replace(temp_path, path)
    except OSError:
        os.unlink(temp_path)
        raise
