"""Fit calculations for media shown inside the viewport."""

from __future__ import annotations

from chanplayer.media.types import Size


def fit_within(intrinsic: Size, container: Size) -> Size:
    """Scale ``intrinsic`` to the largest size fitting ``container`` with the same aspect ratio.

    Small media is scaled up as well. Empty sizes are returned unchanged.
    """
    if intrinsic.is_empty or container.is_empty:
        return intrinsic
    ratio = min(container.height / intrinsic.height, container.width / intrinsic.width)
    return Size(
        width=max(1, round(intrinsic.width * ratio)),
        height=max(1, round(intrinsic.height * ratio)),
    )
