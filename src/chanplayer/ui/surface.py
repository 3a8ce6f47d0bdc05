"""Viewport panel hosting the active media node."""

from __future__ import annotations

import logging
from typing import Callable

import wx

from chanplayer.core.media_kind import MediaKind
from chanplayer.core.playlist import PlaylistItem
from chanplayer.media.types import MediaNode, Size, SurfaceError, ViewState
from chanplayer.ui.nodes import AnimatedNode, ImageNode, VideoNode, WxNode, media_backend_available

logger = logging.getLogger(__name__)

# compact layout keeps a portrait 9:16 column in the middle of the viewport
COMPACT_ASPECT = 9 / 16


class WxSurface(wx.Panel):
    def __init__(self, parent: wx.Window, frame: wx.Frame) -> None:
        super().__init__(parent, style=wx.BORDER_NONE | wx.WANTS_CHARS)
        self._frame = frame
        self._node: WxNode | None = None
        self._state = ViewState()
        self._double_click: Callable[[], None] | None = None
        self.SetBackgroundColour(wx.BLACK)
        self.Bind(wx.EVT_SIZE, self._on_size)
        self.Bind(wx.EVT_LEFT_DCLICK, self._on_double_click)

    def create_node(self, item: PlaylistItem, kind: MediaKind) -> MediaNode:
        if not kind.is_image:
            if not media_backend_available():
                raise SurfaceError("Video playback needs wx.media")
            return VideoNode(self, item)
        if kind is MediaKind.ANIMATED_IMAGE:
            return AnimatedNode(self, item)
        return ImageNode(self, item, kind)

    def attach(self, node: MediaNode) -> None:
        if self._node is not None and self._node is not node:
            self.detach(self._node)
        if not isinstance(node, WxNode):
            raise SurfaceError(f"Unsupported node type {type(node).__name__}")
        self._node = node
        self.relayout()
        if node.window:
            node.window.Bind(wx.EVT_LEFT_DCLICK, self._on_double_click)
            node.window.Show()

    def detach(self, node: MediaNode) -> None:
        if node is not self._node:
            return
        self._node = None
        window = node.window if isinstance(node, WxNode) else None
        if window:
            window.Hide()

    def viewport_size(self) -> Size:
        width, height = self.GetClientSize()
        viewport = Size(int(width), int(height))
        if self._state.compact and not viewport.is_empty:
            viewport = Size(min(viewport.width, max(1, int(viewport.height * COMPACT_ASPECT))), viewport.height)
        return viewport

    def set_visible(self, visible: bool) -> None:
        self.Show(visible)
        parent = self.GetParent()
        if parent:
            parent.Layout()
        if visible:
            self.relayout()
            self.SetFocus()

    def set_fullscreen(self, fullscreen: bool) -> bool:
        if not self._frame:
            raise SurfaceError("Viewer window is gone")
        return bool(self._frame.ShowFullScreen(fullscreen, wx.FULLSCREEN_ALL))

    def apply_view_state(self, state: ViewState) -> None:
        if self._node is not None and self._node.kind is MediaKind.VIDEO and state.rotation != self._state.rotation:
            logger.info("Rotation is not applied to video output")
        self._state = state
        self.relayout()

    def set_double_click_handler(self, handler: Callable[[], None] | None) -> None:
        self._double_click = handler

    def relayout(self) -> None:
        node = self._node
        if node is None:
            return
        viewport = self.viewport_size()
        width, _height = self.GetClientSize()
        node.layout(viewport, self._state)
        offset = (int(width) - viewport.width) // 2
        window = node.window
        if offset > 0 and window:
            x, y = window.GetPosition()
            window.SetPosition((x + offset, y))

    def _on_size(self, event: wx.SizeEvent) -> None:
        self.relayout()
        event.Skip()

    def _on_double_click(self, event: wx.MouseEvent) -> None:
        handler = self._double_click
        if handler is None:
            event.Skip()
            return
        handler()
