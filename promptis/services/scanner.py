"""Recursive discovery of prompt files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from promptis.models import FileDescriptor, ScanResult

logger = logging.getLogger(__name__)


def scan(root_path: Path | str) -> ScanResult:
    """Return every regular file under ``root_path``.

    Files of a directory are listed before those of its subdirectories, in
    the order the filesystem enumerates them. Symbolic links are neither
    returned nor followed. Any I/O error fails the whole scan.
    """

    root = Path(root_path)
    try:
        files = _walk(root)
    except OSError as exc:
        logger.error(
            "Failed to read directory",
            extra={"root": str(root), "error": str(exc)},
        )
        return ScanResult(root=root, error=str(exc))

    logger.debug("Directory scanned", extra={"root": str(root), "files": len(files)})
    return ScanResult(root=root, files=files)


def _walk(root: Path) -> list[FileDescriptor]:
    files: list[FileDescriptor] = []
    pending = [root]
    while pending:
        directory = pending.pop()
        subdirectories: list[Path] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_symlink():
                    continue
                if entry.is_dir(follow_symlinks=False):
                    subdirectories.append(Path(entry.path))
                elif entry.is_file(follow_symlinks=False):
                    files.append(
                        FileDescriptor(parent_directory=directory.absolute(), name=entry.name)
                    )
        # depth-first, subdirectories in enumeration order
        pending.extend(reversed(subdirectories))
    return files
