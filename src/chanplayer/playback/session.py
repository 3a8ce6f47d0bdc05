"""Media session controller: one live node, auto-advance and key commands."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Sequence, TYPE_CHECKING

from chanplayer.core.media_kind import DEFAULT_ANIMATED_MARKER, MediaKind, classify
from chanplayer.core.playlist import PassPolicy, PlaylistItem, PlaylistWrapper, TraversalMode
from chanplayer.media.geometry import fit_within
from chanplayer.media.types import (
    KeyPress,
    KeySource,
    MediaNode,
    PresentationSurface,
    Rotation,
    Scheduler,
    SurfaceError,
    TimerHandle,
    ViewState,
)
from chanplayer.playback.commands import ViewerCommand, build_keymap, normalize_key

if TYPE_CHECKING:  # pragma: no cover - typing only
    from chanplayer.core.config import SettingsManager


logger = logging.getLogger(__name__)

IMAGE_DURATION_MS = 3000


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass
class SessionOptions:
    volume: float = 0.2
    volume_step: float = 0.1
    loop: bool = False
    shuffle: bool = True
    pass_policy: PassPolicy = PassPolicy.REPLAY
    image_duration_ms: int = IMAGE_DURATION_MS
    animated_marker: str = DEFAULT_ANIMATED_MARKER
    bindings: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: "SettingsManager") -> "SessionOptions":
        return cls(
            volume=settings.get_volume(),
            volume_step=settings.get_volume_step(),
            loop=settings.get_loop(),
            shuffle=settings.get_shuffle(),
            pass_policy=PassPolicy.RESHUFFLE if settings.get_reshuffle_on_pass_end() else PassPolicy.REPLAY,
            image_duration_ms=settings.get_image_duration_ms(),
            animated_marker=settings.get_animated_marker(),
            bindings=settings.get_scope_shortcuts("viewer"),
        )


def _clamp_volume(value: float) -> float:
    return round(min(1.0, max(0.0, float(value))), 4)


class MediaSessionController:
    """Owns the active media node of a viewing session.

    Every transition cancels the pending auto-advance timer, runs the pending
    ``before_change`` hook, detaches the old node and only then attaches the
    new one, so the surface never holds two nodes. Timers and node callbacks
    compare the node they were created for with the active node and do
    nothing when it has been replaced.
    """

    def __init__(
        self,
        items: Sequence[PlaylistItem],
        surface: PresentationSurface,
        scheduler: Scheduler,
        keys: KeySource | None = None,
        *,
        options: SessionOptions | None = None,
        rng: random.Random | None = None,
        confirm_delete: Callable[[PlaylistItem], bool] | None = None,
        delete_resource: Callable[[str], object] | None = None,
        on_item_changed: Callable[[PlaylistItem | None], None] | None = None,
    ) -> None:
        self._options = options or SessionOptions()
        self._surface = surface
        self._scheduler = scheduler
        self._keys = keys
        self._confirm_delete = confirm_delete
        self._delete_resource = delete_resource
        self._on_item_changed = on_item_changed
        self._rng = rng
        self._playlist = PlaylistWrapper(items, pass_policy=self._options.pass_policy, rng=rng)
        if self._options.shuffle:
            self._playlist.to_shuffle()
        self._keymap = build_keymap(self._options.bindings)

        self._node: MediaNode | None = None
        self._kind: MediaKind | None = None
        self._node_ready = False
        self._resume_video_on_show = False
        self._timer: TimerHandle | None = None
        self._before_change: Callable[[], None] | None = None
        self._volume = _clamp_volume(self._options.volume)
        self._loop = bool(self._options.loop)
        self._fullscreen = False
        self._visible = False
        self._view_state = ViewState()
        self._handling_input = False
        self._closed = False

        if self._keys is not None:
            self._keys.subscribe(self.handle_key)
        self._surface.set_double_click_handler(self.handle_double_click)

    # --- state ---
    @property
    def playlist(self) -> PlaylistWrapper:
        return self._playlist

    @property
    def active_node(self) -> MediaNode | None:
        return self._node

    @property
    def active_item(self) -> PlaylistItem | None:
        return self._node.item if self._node is not None else None

    @property
    def active_kind(self) -> MediaKind | None:
        return self._kind

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def loop_enabled(self) -> bool:
        return self._loop

    @property
    def is_fullscreen(self) -> bool:
        return self._fullscreen

    @property
    def is_visible(self) -> bool:
        return self._visible

    @property
    def view_state(self) -> ViewState:
        return self._view_state

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    # --- transitions ---
    def next(self) -> PlaylistItem | None:
        return self.advance(Direction.FORWARD)

    def previous(self) -> PlaylistItem | None:
        return self.advance(Direction.BACKWARD)

    def advance(self, direction: Direction) -> PlaylistItem | None:
        if self._closed:
            logger.debug("Ignoring %s on a closed session", direction.value)
            return None
        if direction is Direction.FORWARD:
            item = self._playlist.next()
        else:
            item = self._playlist.previous()
        if item is None:
            # nothing to switch to: the shown node keeps its timer and hook
            logger.debug("No %s item available", direction.value)
            return None
        self._cancel_timer()
        self._run_before_change()
        self._present(item)
        return item

    def load(self, items: Sequence[PlaylistItem]) -> None:
        """Replace the items of the session, keeping volume, loop and visibility.

        A visible viewer moves straight to the first item of the new list.
        """
        if self._closed:
            return
        self._cancel_timer()
        self._run_before_change()
        self._teardown_node()
        mode = self._playlist.mode
        self._playlist = PlaylistWrapper(items, pass_policy=self._options.pass_policy, rng=self._rng).set_mode(mode)
        logger.info("Session loaded with %d items", len(self._playlist))
        if not self._visible or self.next() is None:
            self._notify_item_changed(None)

    def set_traversal_mode(self, mode: TraversalMode) -> None:
        """Switch linear/shuffle; the shown item stays until the next transition."""

        if self._closed or mode is self._playlist.mode:
            return
        self._playlist.set_mode(mode)
        logger.info("Traversal mode set to %s", mode.value)

    def remove_current(self) -> PlaylistItem | None:
        """Drop the shown item from the traversal and move on to the following one."""

        if self._closed:
            return None
        item = self.active_item
        if item is None:
            return None
        self._cancel_timer()
        self._run_before_change()
        self._teardown_node()
        self._playlist.remove(item)
        if self.next() is None:
            self._notify_item_changed(None)
        return item

    def delete_current(self) -> PlaylistItem | None:
        item = self.active_item
        if item is None or self._delete_resource is None:
            return None
        if self._confirm_delete is not None and not self._confirm_delete(item):
            logger.info("Deletion of %s cancelled", item.path)
            return None
        removed = self.remove_current()
        if removed is not None:
            self._delete_resource(removed.path)
        return removed

    def _present(self, item: PlaylistItem) -> None:
        self._teardown_node()
        kind = classify(item.ext, item.path, animated_marker=self._options.animated_marker)
        node = self._surface.create_node(item, kind)
        if node.supports_volume:
            node.volume = self._volume
        node.loop = self._loop
        self._node = node
        self._kind = kind
        self._node_ready = False
        self._resume_video_on_show = False

        if kind is MediaKind.VIDEO:
            node.set_finished_callback(lambda: self._on_node_finished(node))
        elif kind is MediaKind.ANIMATED_IMAGE:
            node.set_ready_callback(lambda: self._on_node_ready(node))
        else:
            self._node_ready = True
            self._arm_timer(node)

        self._surface.attach(node)
        logger.debug("Showing %s (%s)", item.name, kind.value)

        if kind is MediaKind.VIDEO:
            self._node_ready = True
            if self._visible:
                self._start_video(node)
            else:
                self._resume_video_on_show = True
        self._notify_item_changed(item)

    def _teardown_node(self) -> None:
        node = self._node
        if node is None:
            return
        self._node = None
        self._kind = None
        self._node_ready = False
        node.set_finished_callback(None)
        node.set_ready_callback(None)
        self._surface.detach(node)
        node.destroy()

    def _run_before_change(self) -> None:
        hook = self._before_change
        self._before_change = None
        if hook is not None:
            hook()

    def _notify_item_changed(self, item: PlaylistItem | None) -> None:
        if self._on_item_changed is not None:
            self._on_item_changed(item)

    # --- node events and timers ---
    def _on_node_finished(self, node: MediaNode) -> None:
        if node is not self._node:
            logger.debug("Ignoring finish of replaced node %s", node.item.name)
            return
        self.next()

    def _on_node_ready(self, node: MediaNode) -> None:
        if node is not self._node:
            logger.debug("Ignoring ready signal of replaced node %s", node.item.name)
            return
        intrinsic = node.intrinsic_size()
        if intrinsic is not None and not intrinsic.is_empty:
            node.set_display_size(fit_within(intrinsic, self._surface.viewport_size()))
            self._before_change = lambda: node.set_display_size(None)
        else:
            logger.debug("No intrinsic size for %s, skipping fit", node.item.name)
        self._node_ready = True
        self._arm_timer(node)

    def _arm_timer(self, node: MediaNode) -> None:
        self._cancel_timer()
        if not self._visible:
            return
        self._timer = self._scheduler.call_later(
            self._options.image_duration_ms,
            lambda: self._on_timer(node),
        )

    def _on_timer(self, node: MediaNode) -> None:
        if node is not self._node:
            logger.debug("Stale auto-advance timer for %s", node.item.name)
            return
        self._timer = None
        self.next()

    def _cancel_timer(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()

    def _start_video(self, node: MediaNode) -> None:
        try:
            started = node.play()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Starting playback of %s failed: %s", node.item.name, exc)
            return
        if not started:
            logger.warning("Playback of %s did not start", node.item.name)

    # --- visibility ---
    def toggle_visibility(self) -> bool:
        if self._visible:
            self.hide()
        else:
            self.show()
        return self._visible

    def show(self) -> None:
        if self._closed or self._visible:
            return
        self._visible = True
        self._surface.set_visible(True)
        if self._node is not None:
            self._resume_active()
            return
        current = self._playlist.current()
        if current is None:
            self.next()
        else:
            self._present(current)

    def hide(self) -> None:
        if self._closed or not self._visible:
            return
        self._visible = False
        self._cancel_timer()
        node = self._node
        if node is not None and self._kind is MediaKind.VIDEO and not node.is_paused():
            node.pause()
            self._resume_video_on_show = True
        self._surface.set_visible(False)

    def _resume_active(self) -> None:
        node = self._node
        if node is None:
            return
        if self._kind is MediaKind.VIDEO:
            if self._resume_video_on_show:
                self._resume_video_on_show = False
                self._start_video(node)
        elif self._node_ready:
            self._arm_timer(node)

    # --- commands ---
    def handle_key(self, event: KeyPress) -> bool:
        """Run the command bound to ``event``; returns True when it was consumed."""

        if self._closed or event.ctrl:
            return False
        if self._handling_input:
            logger.debug("Key %r ignored while another key is handled", event.key)
            return False
        command = self._keymap.get(normalize_key(event.key))
        if command is None:
            return False
        if command is not ViewerCommand.VISIBILITY_TOGGLE and not self._visible:
            return False
        self._handling_input = True
        try:
            self.execute(command, shift=event.shift)
        finally:
            self._handling_input = False
        return True

    def handle_double_click(self) -> bool:
        if self._closed or not self._visible:
            return False
        self.toggle_fullscreen()
        return True

    def execute(self, command: ViewerCommand, *, shift: bool = False) -> None:
        if command is ViewerCommand.PREVIOUS:
            self.previous()
        elif command is ViewerCommand.NEXT:
            self.next()
        elif command is ViewerCommand.VOLUME_UP:
            self.change_volume(self._options.volume_step)
        elif command is ViewerCommand.VOLUME_DOWN:
            self.change_volume(-self._options.volume_step)
        elif command is ViewerCommand.LOOP_TOGGLE:
            self.toggle_loop()
        elif command is ViewerCommand.FULLSCREEN_TOGGLE:
            self.toggle_fullscreen()
        elif command is ViewerCommand.LAYOUT_TOGGLE:
            self.toggle_compact_layout()
        elif command is ViewerCommand.ROTATE_TOGGLE:
            self.toggle_rotation(negative=shift)
        elif command is ViewerCommand.PLAY_PAUSE:
            self.toggle_play_pause()
        elif command is ViewerCommand.VISIBILITY_TOGGLE:
            self.toggle_visibility()
        elif command is ViewerCommand.DELETE:
            self.delete_current()

    def set_volume(self, value: float) -> float:
        self._volume = _clamp_volume(value)
        node = self._node
        if node is not None and node.supports_volume:
            node.volume = self._volume
        return self._volume

    def change_volume(self, delta: float) -> float:
        return self.set_volume(self._volume + delta)

    def toggle_loop(self) -> bool:
        self._loop = not self._loop
        if self._node is not None:
            self._node.loop = self._loop
        return self._loop

    def toggle_fullscreen(self) -> bool:
        target = not self._fullscreen
        try:
            accepted = self._surface.set_fullscreen(target)
        except SurfaceError as exc:
            logger.warning("Fullscreen change refused: %s", exc)
            return self._fullscreen
        if not accepted:
            logger.warning("Fullscreen change to %s was not applied", target)
            return self._fullscreen
        self._fullscreen = target
        return self._fullscreen

    def toggle_compact_layout(self) -> bool:
        self._set_view_state(replace(self._view_state, compact=not self._view_state.compact))
        return self._view_state.compact

    def toggle_rotation(self, *, negative: bool = False) -> Rotation:
        current = self._view_state.rotation
        if negative:
            rotation = Rotation.NONE if current is Rotation.COUNTER_CLOCKWISE else Rotation.COUNTER_CLOCKWISE
        else:
            rotation = Rotation.CLOCKWISE if current is Rotation.NONE else Rotation.NONE
        self._set_view_state(replace(self._view_state, rotation=rotation))
        return rotation

    def _set_view_state(self, state: ViewState) -> None:
        self._view_state = state
        self._surface.apply_view_state(state)

    def toggle_play_pause(self) -> bool:
        node = self._node
        kind = self._kind
        if node is None or kind is None or kind.is_image:
            return False
        if node.is_paused():
            self._start_video(node)
        else:
            node.pause()
        return True

    # --- shutdown ---
    def close(self) -> None:
        if self._closed:
            return
        self._cancel_timer()
        if self._keys is not None:
            self._keys.unsubscribe(self.handle_key)
        self._surface.set_double_click_handler(None)
        self._before_change = None
        self._teardown_node()
        self._playlist.clear()
        self._closed = True
        logger.info("Media session closed")
