"""wx widgets presenting a single media item."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import wx
import wx.adv

try:  # wx.media needs a platform backend (GStreamer, DirectShow, AVFoundation)
    import wx.media as wxmedia
except ImportError:  # pragma: no cover - depends on the wx build
    wxmedia = None

from chanplayer.core.media_kind import MediaKind
from chanplayer.core.playlist import PlaylistItem
from chanplayer.media.geometry import fit_within
from chanplayer.media.types import Rotation, Size, SurfaceError, ViewState

logger = logging.getLogger(__name__)


def media_backend_available() -> bool:
    return wxmedia is not None


def _to_size(value: wx.Size) -> Optional[Size]:
    size = Size(int(value.GetWidth()), int(value.GetHeight()))
    return None if size.is_empty else size


class WxNode:
    """Shared state of the wx-backed nodes.

    Subclasses own exactly one child window of the surface panel and lay it
    out in ``layout``.
    """

    def __init__(self, parent: wx.Window, item: PlaylistItem, kind: MediaKind) -> None:
        self.item = item
        self.kind = kind
        self._parent = parent
        self._window: wx.Window | None = None
        self._loop = False
        self._display_size: Size | None = None
        self._on_finished: Callable[[], None] | None = None
        self._on_ready: Callable[[], None] | None = None
        self._destroyed = False

    @property
    def window(self) -> wx.Window | None:
        return self._window

    @property
    def supports_volume(self) -> bool:
        return False

    @property
    def volume(self) -> float:
        return 0.0

    @volume.setter
    def volume(self, value: float) -> None:
        logger.debug("Volume ignored by %s node", self.kind.value)

    @property
    def loop(self) -> bool:
        return self._loop

    @loop.setter
    def loop(self, value: bool) -> None:
        self._loop = bool(value)

    def is_paused(self) -> bool:
        return True

    def play(self) -> bool:
        return False

    def pause(self) -> None:
        return None

    def intrinsic_size(self) -> Optional[Size]:
        return None

    def set_display_size(self, size: Optional[Size]) -> None:
        self._display_size = size
        if self._parent and hasattr(self._parent, "relayout"):
            self._parent.relayout()

    def set_finished_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._on_finished = callback

    def set_ready_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._on_ready = callback

    def layout(self, viewport: Size, state: ViewState) -> None:
        window = self._window
        if window is None or viewport.is_empty:
            return
        natural = self.intrinsic_size()
        if self._display_size is not None:
            target = self._display_size
        elif natural is not None:
            target = fit_within(natural, viewport)
        else:
            target = viewport
        self._place(window, target, viewport)

    @staticmethod
    def _place(window: wx.Window, target: Size, viewport: Size) -> None:
        width = min(target.width, viewport.width)
        height = min(target.height, viewport.height)
        window.SetSize(
            (viewport.width - width) // 2,
            (viewport.height - height) // 2,
            width,
            height,
        )

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._on_finished = None
        self._on_ready = None
        window = self._window
        self._window = None
        if window:
            window.Destroy()


class VideoNode(WxNode):
    """Video element on ``wx.media.MediaCtrl``."""

    def __init__(self, parent: wx.Window, item: PlaylistItem) -> None:
        super().__init__(parent, item, MediaKind.VIDEO)
        if wxmedia is None:
            raise SurfaceError("wx.media is not available in this wxPython build")
        self._volume = 1.0
        self._loaded = False
        self._play_requested = False
        self._ctrl = wxmedia.MediaCtrl(parent, style=wx.BORDER_NONE)
        self._ctrl.Hide()
        self._window = self._ctrl
        self._ctrl.Bind(wxmedia.EVT_MEDIA_LOADED, self._handle_loaded)
        self._ctrl.Bind(wxmedia.EVT_MEDIA_FINISHED, self._handle_finished)
        if not self._ctrl.Load(item.path):
            logger.warning("Unable to load video %s", item.path)

    @property
    def supports_volume(self) -> bool:
        return True

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = float(value)
        if self._loaded:
            self._ctrl.SetVolume(self._volume)

    def is_paused(self) -> bool:
        if self._destroyed:
            return True
        if not self._loaded:
            return not self._play_requested
        return self._ctrl.GetState() != wxmedia.MEDIASTATE_PLAYING

    def play(self) -> bool:
        if self._destroyed:
            return False
        if not self._loaded:
            self._play_requested = True
            return True
        return bool(self._ctrl.Play())

    def pause(self) -> None:
        self._play_requested = False
        if self._loaded and not self._destroyed:
            self._ctrl.Pause()

    def intrinsic_size(self) -> Optional[Size]:
        if not self._loaded or self._destroyed:
            return None
        return _to_size(self._ctrl.GetBestSize())

    def _handle_loaded(self, event: wx.Event) -> None:
        if self._destroyed:
            return
        self._loaded = True
        self._ctrl.SetVolume(self._volume)
        if hasattr(self._parent, "relayout"):
            self._parent.relayout()
        if self._play_requested:
            self._play_requested = False
            if not self._ctrl.Play():
                logger.warning("Video %s did not start after loading", self.item.name)
        event.Skip()

    def _handle_finished(self, event: wx.Event) -> None:
        if self._destroyed:
            return
        if self._loop:
            self._ctrl.Seek(0)
            self._ctrl.Play()
            return
        callback = self._on_finished
        if callback is not None:
            callback()


class ImageNode(WxNode):
    """Still image on ``wx.StaticBitmap``, rotated and scaled on layout."""

    def __init__(self, parent: wx.Window, item: PlaylistItem, kind: MediaKind = MediaKind.STATIC_IMAGE) -> None:
        super().__init__(parent, item, kind)
        self._image = wx.Image()
        if not self._image.LoadFile(item.path):
            logger.warning("Unable to decode image %s", item.path)
        self._bitmap = wx.StaticBitmap(parent)
        self._bitmap.Hide()
        self._window = self._bitmap
        self._rendered: tuple[Size, Rotation] | None = None

    def intrinsic_size(self) -> Optional[Size]:
        if not self._image.IsOk():
            return None
        return Size(self._image.GetWidth(), self._image.GetHeight())

    def layout(self, viewport: Size, state: ViewState) -> None:
        if self._window is None or viewport.is_empty or not self._image.IsOk():
            return
        image = self._image
        if state.rotation is Rotation.CLOCKWISE:
            image = image.Rotate90(True)
        elif state.rotation is Rotation.COUNTER_CLOCKWISE:
            image = image.Rotate90(False)
        natural = Size(image.GetWidth(), image.GetHeight())
        target = self._display_size or natural
        if target.width > viewport.width or target.height > viewport.height:
            target = fit_within(target, viewport)
        if self._rendered != (target, state.rotation):
            scaled = image.Scale(target.width, target.height, wx.IMAGE_QUALITY_HIGH)
            self._bitmap.SetBitmap(wx.Bitmap(scaled))
            self._rendered = (target, state.rotation)
        self._place(self._bitmap, target, viewport)


class AnimatedNode(WxNode):
    """Animated GIF on ``wx.adv.AnimationCtrl``.

    Formats the animation handler cannot decode are shown as a still frame.
    The ready callback fires from the event loop once the file is loaded.
    """

    def __init__(self, parent: wx.Window, item: PlaylistItem) -> None:
        super().__init__(parent, item, MediaKind.ANIMATED_IMAGE)
        self._fallback: ImageNode | None = None
        self._ctrl: wx.adv.AnimationCtrl | None = None
        animation = wx.adv.Animation()
        if animation.LoadFile(item.path):
            self._ctrl = wx.adv.AnimationCtrl(parent, anim=animation)
            self._ctrl.Hide()
            self._window = self._ctrl
            self._ctrl.Play()
        else:
            logger.info("Animation handler rejected %s, showing a still frame", item.name)
            self._fallback = ImageNode(parent, item, MediaKind.ANIMATED_IMAGE)
            self._window = self._fallback.window
        wx.CallAfter(self._notify_ready)

    def _notify_ready(self) -> None:
        if self._destroyed:
            return
        callback = self._on_ready
        if callback is not None:
            callback()

    def intrinsic_size(self) -> Optional[Size]:
        if self._fallback is not None:
            return self._fallback.intrinsic_size()
        if self._ctrl is None:
            return None
        return _to_size(self._ctrl.GetAnimation().GetSize())

    def set_display_size(self, size: Optional[Size]) -> None:
        if self._fallback is not None:
            self._fallback._display_size = size
        super().set_display_size(size)

    def layout(self, viewport: Size, state: ViewState) -> None:
        if self._fallback is not None:
            self._fallback.layout(viewport, state)
            return
        super().layout(viewport, state)

    def destroy(self) -> None:
        if self._ctrl is not None and not self._destroyed:
            self._ctrl.Stop()
        if self._fallback is not None:
            self._fallback.destroy()
            self._window = None
        super().destroy()
