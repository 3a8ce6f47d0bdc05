from __future__ import annotations

import logging

import pytest

from chanplayer.core.media_kind import MediaKind, classify, extension_of, is_media_file


@pytest.mark.parametrize(
    "ext, expected",
    [
        ("mp4", MediaKind.VIDEO),
        ("WEBM", MediaKind.VIDEO),
        (".mov", MediaKind.VIDEO),
        ("flv", MediaKind.VIDEO),
        ("png", MediaKind.STATIC_IMAGE),
        ("jpeg", MediaKind.STATIC_IMAGE),
        ("gif", MediaKind.ANIMATED_IMAGE),
        ("webp", MediaKind.ANIMATED_IMAGE),
    ],
)
def test_classify_known_extensions(ext: str, expected: MediaKind) -> None:
    assert classify(ext, "/media/file") is expected


def test_classify_marker_turns_still_image_into_animation() -> None:
    assert classify("jpg", "/media/@loop.jpg") is MediaKind.ANIMATED_IMAGE
    assert classify("jpg", "/media/loop.jpg") is MediaKind.STATIC_IMAGE
    assert classify("jpg", "/media/@loop.jpg", animated_marker="") is MediaKind.STATIC_IMAGE
    assert classify("mp4", "/media/@clip.mp4") is MediaKind.VIDEO


def test_classify_unknown_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="chanplayer.core.media_kind"):
        assert classify("txt", "/media/notes.txt") is MediaKind.UNKNOWN
        assert classify(None) is MediaKind.UNKNOWN
    assert "notes.txt" in caplog.text
    assert MediaKind.UNKNOWN.is_image
    assert not MediaKind.VIDEO.is_image


def test_extension_helpers() -> None:
    assert extension_of("Clip.MP4") == "mp4"
    assert extension_of("archive.") is None
    assert extension_of("README") is None
    assert is_media_file("photo.JPG")
    assert not is_media_file("notes.txt")
