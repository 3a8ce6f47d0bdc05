"""Media kind classification by file extension."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import PurePath
from typing import Optional

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "flv", "mov"})
STILL_IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg"})
ANIMATED_IMAGE_EXTENSIONS = frozenset({"gif", "webp"})
MEDIA_EXTENSIONS = VIDEO_EXTENSIONS | STILL_IMAGE_EXTENSIONS | ANIMATED_IMAGE_EXTENSIONS

DEFAULT_ANIMATED_MARKER = "@"


class MediaKind(Enum):
    VIDEO = "video"
    STATIC_IMAGE = "static_image"
    ANIMATED_IMAGE = "animated_image"
    UNKNOWN = "unknown"

    @property
    def is_image(self) -> bool:
        return self is not MediaKind.VIDEO


def extension_of(name: str) -> Optional[str]:
    suffix = PurePath(name.strip()).suffix
    if len(suffix) <= 1:
        return None
    return suffix[1:].lower()


def classify(ext: Optional[str], locator: str = "", *, animated_marker: str = DEFAULT_ANIMATED_MARKER) -> MediaKind:
    """Return the rendering behaviour for a file extension.

    Still image formats are treated as animated when ``locator`` contains
    ``animated_marker`` (an empty marker disables the check).
    """

    normalized = (ext or "").strip().lstrip(".").lower()
    if normalized in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    if normalized in STILL_IMAGE_EXTENSIONS:
        if animated_marker and animated_marker in locator:
            return MediaKind.ANIMATED_IMAGE
        return MediaKind.STATIC_IMAGE
    if normalized in ANIMATED_IMAGE_EXTENSIONS:
        return MediaKind.ANIMATED_IMAGE
    logger.info("Unrecognised media extension %r for %s, treating as still image", ext, locator or "<unknown>")
    return MediaKind.UNKNOWN


def is_media_file(name: str) -> bool:
    return extension_of(name) in MEDIA_EXTENSIONS
