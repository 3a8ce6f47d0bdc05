"""Rendering, timer and input capability definitions.

The session controller only talks to these protocols; ``chanplayer.ui``
implements them with wxPython and ``chanplayer.media.mock_backend`` with
plain Python objects for tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from chanplayer.core.media_kind import MediaKind
from chanplayer.core.playlist import PlaylistItem


class SurfaceError(RuntimeError):
    """A rendering prerequisite is missing or the platform refused a request."""


class Rotation(Enum):
    NONE = "none"
    CLOCKWISE = "clockwise"
    COUNTER_CLOCKWISE = "counter_clockwise"


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class ViewState:
    compact: bool = False
    rotation: Rotation = Rotation.NONE


@dataclass(frozen=True)
class KeyPress:
    key: str
    ctrl: bool = False
    shift: bool = False


KeyHandler = Callable[[KeyPress], bool]


class MediaNode(Protocol):
    item: PlaylistItem
    kind: MediaKind

    @property
    def supports_volume(self) -> bool: ...

    @property
    def volume(self) -> float: ...

    @volume.setter
    def volume(self, value: float) -> None: ...

    @property
    def loop(self) -> bool: ...

    @loop.setter
    def loop(self, value: bool) -> None: ...

    def is_paused(self) -> bool: ...

    def play(self) -> bool: ...

    def pause(self) -> None: ...

    def intrinsic_size(self) -> Optional[Size]: ...

    def set_display_size(self, size: Optional[Size]) -> None: ...

    def set_finished_callback(self, callback: Optional[Callable[[], None]]) -> None: ...

    def set_ready_callback(self, callback: Optional[Callable[[], None]]) -> None: ...

    def destroy(self) -> None: ...


class PresentationSurface(Protocol):
    def create_node(self, item: PlaylistItem, kind: MediaKind) -> MediaNode: ...

    def attach(self, node: MediaNode) -> None: ...

    def detach(self, node: MediaNode) -> None: ...

    def viewport_size(self) -> Size: ...

    def set_visible(self, visible: bool) -> None: ...

    def set_fullscreen(self, fullscreen: bool) -> bool: ...

    def apply_view_state(self, state: ViewState) -> None: ...

    def set_double_click_handler(self, handler: Optional[Callable[[], None]]) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class KeySource(Protocol):
    def subscribe(self, handler: KeyHandler) -> None: ...

    def unsubscribe(self, handler: KeyHandler) -> None: ...
