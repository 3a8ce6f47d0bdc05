"""Filesystem helpers used to build playlists and delete viewed files.

Everything here blocks; the window calls these from worker threads.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable, List

from chanplayer.core.media_kind import extension_of, is_media_file
from chanplayer.core.playlist import PlaylistItem

logger = logging.getLogger(__name__)

DELETE_RETRY_DELAY = 1.0


def list_entries(path: Path | str) -> List[str]:
    """Return entry names of a directory sorted case-insensitively.

    Raises ``OSError`` when the directory cannot be read.
    """
    return sorted(os.listdir(path), key=str.lower)


def is_directory(path: Path | str) -> bool:
    return Path(path).is_dir()


def file_exists(path: Path | str) -> bool:
    return Path(path).exists()


def delete_file(
    path: Path | str,
    *,
    retry_delay: float = DELETE_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Unlink ``path``, retrying once after ``retry_delay`` seconds.

    A player may still hold the file open right after switching away from it,
    so the first attempt is allowed to fail.
    """
    target = Path(path)
    try:
        target.unlink()
        logger.info("Deleted %s", target)
        return True
    except FileNotFoundError:
        logger.warning("File already gone: %s", target)
        return False
    except OSError as exc:
        logger.debug("First delete attempt for %s failed: %s", target, exc)
    sleep(retry_delay)
    try:
        target.unlink()
    except OSError as exc:
        logger.error("Could not delete %s: %s", target, exc)
        return False
    logger.info("Deleted %s after retry", target)
    return True


def build_item(path: Path) -> PlaylistItem:
    return PlaylistItem(
        path=str(path.resolve()),
        name=path.name,
        metadata={"ext": extension_of(path.name)},
    )


def collect_media_items(folder: Path | str, *, recursive: bool = False) -> tuple[list[PlaylistItem], int]:
    """Build playlist items for media files in ``folder``.

    Returns the items (sorted by name, directories walked depth-first when
    ``recursive``) and the number of skipped non-media files.
    """
    root = Path(folder)
    items: list[PlaylistItem] = []
    skipped = 0
    for name in list_entries(root):
        candidate = root / name
        if candidate.is_dir():
            if recursive:
                try:
                    nested, nested_skipped = collect_media_items(candidate, recursive=True)
                except OSError as exc:
                    logger.warning("Skipping unreadable folder %s: %s", candidate, exc)
                    continue
                items.extend(nested)
                skipped += nested_skipped
            continue
        if is_media_file(name):
            items.append(build_item(candidate))
        else:
            skipped += 1
    logger.debug("Collected %d media files from %s (%d skipped)", len(items), root, skipped)
    return items, skipped
