"""Session controller scenarios driven through the mock backend."""

from __future__ import annotations

import logging
import random
from typing import Callable, List

import pytest

from chanplayer.core.media_kind import MediaKind
from chanplayer.core.playlist import PlaylistItem, TraversalMode
from chanplayer.media.mock_backend import ManualScheduler, MockKeySource, MockNode, MockSurface
from chanplayer.media.types import KeyPress, Rotation, Size
from chanplayer.playback.session import MediaSessionController, SessionOptions


def _items(*names: str) -> list[PlaylistItem]:
    return [PlaylistItem(path=f"/media/{name}", name=name) for name in names]


class _LeakyHandle:
    def cancel(self) -> None:
        return None


class LeakyScheduler(ManualScheduler):
    """Scheduler whose handles ignore ``cancel`` so stale callbacks still fire."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _LeakyHandle:  # type: ignore[override]
        super().call_later(delay_ms, callback)
        return _LeakyHandle()


class Harness:
    def __init__(
        self,
        names: tuple[str, ...],
        *,
        options: SessionOptions | None = None,
        surface: MockSurface | None = None,
        scheduler: ManualScheduler | None = None,
        **kwargs,
    ) -> None:
        self.items = _items(*names)
        self.surface = surface or MockSurface()
        self.scheduler = scheduler or ManualScheduler()
        self.keys = MockKeySource()
        self.changes: List[PlaylistItem | None] = []
        kwargs.setdefault("on_item_changed", self.changes.append)
        self.controller = MediaSessionController(
            self.items,
            self.surface,
            self.scheduler,
            self.keys,
            options=options or SessionOptions(shuffle=False),
            rng=random.Random(7),
            **kwargs,
        )

    @property
    def node(self) -> MockNode:
        node = self.controller.active_node
        assert isinstance(node, MockNode)
        return node

    def show(self) -> None:
        assert self.keys.press("Escape") is True


def test_navigation_keys_do_nothing_while_hidden() -> None:
    harness = Harness(("a.png", "b.png"))

    assert harness.keys.press("ArrowRight") is False
    assert harness.keys.press("l") is False
    assert harness.surface.created == []
    assert harness.controller.active_item is None
    assert harness.controller.loop_enabled is False


def test_escape_shows_viewer_and_presents_first_item() -> None:
    harness = Harness(("a.png", "b.png"))
    harness.show()

    assert harness.surface.visible is True
    assert harness.controller.is_visible is True
    assert harness.controller.active_item is harness.items[0]
    assert harness.surface.children == [harness.node]
    assert len(harness.scheduler.pending) == 1
    assert harness.changes == [harness.items[0]]


def test_linear_session_walks_image_video_animation_and_wraps() -> None:
    harness = Harness(("a.png", "b.mp4", "c.gif"))
    a, b, c = harness.items
    harness.show()
    assert harness.controller.active_kind is MediaKind.STATIC_IMAGE

    assert harness.scheduler.advance(3000) == 1
    assert harness.controller.active_item is b
    video = harness.node
    assert video.kind is MediaKind.VIDEO
    assert video.is_paused() is False

    video.finish()
    assert harness.controller.active_item is c
    assert harness.scheduler.pending == []

    harness.node.load(Size(320, 240))
    assert harness.scheduler.advance(3000) == 1
    assert harness.controller.active_item is a
    assert harness.changes == [a, b, c, a]


def test_only_one_node_is_attached_across_transitions() -> None:
    harness = Harness(("a.png", "b.mp4", "c.gif"))
    harness.show()
    for _ in range(5):
        harness.keys.press("ArrowRight")
        assert len(harness.surface.children) == 1
    destroyed = [node for node in harness.surface.created if node.destroyed]
    assert len(destroyed) == len(harness.surface.created) - 1


def test_manual_advance_cancels_pending_timer() -> None:
    harness = Harness(("a.png", "b.png", "c.png"))
    harness.show()
    harness.scheduler.advance(2000)
    harness.keys.press("ArrowRight")
    assert harness.controller.active_item is harness.items[1]

    harness.scheduler.advance(1500)
    assert harness.controller.active_item is harness.items[1]
    harness.scheduler.advance(1500)
    assert harness.controller.active_item is harness.items[2]


def test_stale_timer_of_replaced_node_is_ignored() -> None:
    harness = Harness(("a.png", "b.png", "c.png"), scheduler=LeakyScheduler())
    harness.show()
    harness.scheduler.advance(1000)
    harness.keys.press("ArrowRight")
    assert harness.controller.active_item is harness.items[1]

    # first timer still fires at 3000 but belongs to the replaced node
    assert harness.scheduler.advance(2000) == 1
    assert harness.controller.active_item is harness.items[1]

    assert harness.scheduler.advance(1000) == 1
    assert harness.controller.active_item is harness.items[2]


def test_finished_signal_of_replaced_video_is_ignored() -> None:
    harness = Harness(("a.mp4", "b.png", "c.png"))
    harness.show()
    old = harness.node
    harness.keys.press("ArrowRight")

    old.finish()
    assert harness.controller.active_item is harness.items[1]
    assert old.destroyed is True


def test_volume_up_clamps_to_one_and_applies_to_video() -> None:
    harness = Harness(("a.mp4",), options=SessionOptions(volume=0.95, shuffle=False))
    harness.show()
    assert harness.node.volume == pytest.approx(0.95)

    harness.keys.press("ArrowUp")
    assert harness.controller.volume == 1.0
    assert harness.node.volume == 1.0
    harness.keys.press("ArrowUp")
    assert harness.controller.volume == 1.0


def test_volume_down_clamps_to_zero() -> None:
    harness = Harness(("a.mp4",), options=SessionOptions(volume=0.05, shuffle=False))
    harness.show()
    harness.keys.press("ArrowDown")
    assert harness.controller.volume == 0.0
    harness.keys.press("ArrowDown")
    assert harness.controller.volume == 0.0
    assert harness.node.volume == 0.0


def test_volume_survives_item_changes() -> None:
    harness = Harness(("a.mp4", "b.png", "c.webm"))
    harness.show()
    harness.keys.press("ArrowUp")
    harness.keys.press("ArrowUp")
    assert harness.controller.volume == pytest.approx(0.4)

    harness.keys.press("ArrowRight")
    harness.keys.press("ArrowRight")
    assert harness.controller.active_item is harness.items[2]
    assert harness.node.volume == pytest.approx(0.4)


def test_volume_is_not_pushed_to_images() -> None:
    harness = Harness(("a.png",))
    harness.show()
    harness.keys.press("ArrowUp")
    assert harness.controller.volume == pytest.approx(0.3)
    assert harness.node.volume == 1.0


def test_animated_image_is_fitted_and_restored_before_change() -> None:
    harness = Harness(("a.gif", "b.png"))
    harness.show()
    node = harness.node
    assert node.display_size is None
    assert harness.scheduler.pending == []

    node.load(Size(400, 400))
    assert node.display_size == Size(720, 720)
    assert len(harness.scheduler.pending) == 1

    harness.keys.press("ArrowRight")
    assert node.display_size is None
    assert node.destroyed is True


def test_marker_in_path_animates_still_images() -> None:
    harness = Harness(("@loop.jpg",))
    harness.show()
    assert harness.controller.active_kind is MediaKind.ANIMATED_IMAGE


def test_unknown_extension_is_shown_as_still_image_and_advances() -> None:
    harness = Harness(("notes.bmp", "b.png"))
    notes, b = harness.items
    harness.show()

    assert harness.controller.active_item is notes
    assert harness.controller.active_kind is MediaKind.UNKNOWN
    assert harness.node.kind.is_image is True
    assert len(harness.scheduler.pending) == 1
    assert harness.controller.toggle_play_pause() is False

    assert harness.scheduler.advance(3000) == 1
    assert harness.controller.active_item is b


def test_previous_at_start_of_shuffle_history_keeps_timer() -> None:
    harness = Harness(("a.png", "b.png", "c.png"), options=SessionOptions())
    harness.show()
    node = harness.node

    assert harness.keys.press("ArrowLeft") is True
    assert harness.node is node
    assert node.destroyed is False
    assert len(harness.scheduler.pending) == 1
    assert harness.controller.has_pending_timer is True

    assert harness.scheduler.advance(3000) == 1
    assert harness.controller.active_node is not node


def test_previous_without_history_keeps_animated_fit() -> None:
    harness = Harness(("a.gif",), options=SessionOptions())
    harness.show()
    node = harness.node
    node.load(Size(400, 400))
    assert node.display_size == Size(720, 720)

    harness.keys.press("ArrowLeft")
    assert harness.node is node
    assert node.display_size == Size(720, 720)
    assert len(harness.scheduler.pending) == 1

    harness.keys.press("ArrowRight")
    assert node.display_size is None
    assert node.destroyed is True


def test_loop_toggle_applies_to_current_and_later_nodes() -> None:
    harness = Harness(("a.mp4", "b.mp4"))
    harness.show()
    harness.keys.press("l")
    assert harness.controller.loop_enabled is True
    assert harness.node.loop is True

    harness.keys.press("ArrowRight")
    assert harness.node.loop is True
    harness.keys.press("L")
    assert harness.node.loop is False


def test_fullscreen_failure_keeps_flag() -> None:
    harness = Harness(("a.png",), surface=MockSurface(allow_fullscreen=False))
    harness.show()
    assert harness.keys.press("f") is True
    assert harness.controller.is_fullscreen is False


def test_fullscreen_toggles_when_accepted() -> None:
    harness = Harness(("a.png",))
    harness.show()
    harness.keys.press("f")
    assert harness.controller.is_fullscreen is True
    assert harness.surface.fullscreen is True
    harness.keys.press("f")
    assert harness.controller.is_fullscreen is False


def test_double_click_toggles_fullscreen_while_visible() -> None:
    harness = Harness(("a.png",))
    harness.surface.double_click()
    assert harness.controller.is_fullscreen is False

    harness.show()
    assert harness.surface.double_click() is True
    assert harness.controller.is_fullscreen is True
    assert harness.surface.fullscreen is True
    harness.surface.double_click()
    assert harness.controller.is_fullscreen is False


def test_refused_double_click_fullscreen_keeps_flag() -> None:
    harness = Harness(("a.png",), surface=MockSurface(allow_fullscreen=False))
    harness.show()
    harness.surface.double_click()
    assert harness.controller.is_fullscreen is False


def test_space_toggles_video_only() -> None:
    harness = Harness(("a.mp4", "b.png"))
    harness.show()
    video = harness.node
    harness.keys.press("Space")
    assert video.is_paused() is True
    harness.keys.press(" ")
    assert video.is_paused() is False
    assert video.play_calls == 2

    harness.keys.press("ArrowRight")
    harness.keys.press(" ")
    assert len(harness.scheduler.pending) == 1


def test_rejected_play_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    class RefusingSurface(MockSurface):
        def create_node(self, item: PlaylistItem, kind: MediaKind) -> MockNode:
            node = super().create_node(item, kind)
            node.play_result = False
            return node

    harness = Harness(("a.mp4",), surface=RefusingSurface())
    with caplog.at_level(logging.WARNING, logger="chanplayer.playback.session"):
        harness.show()
    assert harness.controller.active_item is harness.items[0]
    assert "did not start" in caplog.text


def test_ctrl_modified_keys_are_ignored() -> None:
    harness = Harness(("a.png", "b.png"))
    harness.show()
    assert harness.keys.press("ArrowRight", ctrl=True) is False
    assert harness.keys.press("Escape", ctrl=True) is False
    assert harness.controller.active_item is harness.items[0]
    assert harness.controller.is_visible is True


def test_unbound_keys_are_not_consumed() -> None:
    harness = Harness(("a.png",))
    harness.show()
    assert harness.keys.press("x") is False


def test_key_handling_is_not_reentrant() -> None:
    nested: List[bool] = []
    holder: dict[str, MediaSessionController] = {}

    def on_change(_item: PlaylistItem | None) -> None:
        nested.append(holder["controller"].handle_key(KeyPress("arrowright")))

    harness = Harness(("a.png", "b.png", "c.png"), on_item_changed=on_change)
    holder["controller"] = harness.controller
    harness.show()
    harness.keys.press("ArrowRight")

    assert nested == [False, False]
    assert harness.controller.active_item is harness.items[1]


def test_hide_pauses_video_and_show_resumes_it() -> None:
    harness = Harness(("a.mp4",))
    harness.show()
    video = harness.node
    assert video.is_paused() is False

    harness.keys.press("Escape")
    assert harness.surface.visible is False
    assert video.is_paused() is True

    harness.keys.press("Escape")
    assert video.is_paused() is False
    assert harness.node is video
    assert video.play_calls == 2


def test_hidden_viewer_does_not_auto_advance() -> None:
    harness = Harness(("a.png", "b.png"))
    harness.show()
    harness.scheduler.advance(1000)
    harness.keys.press("Escape")
    assert harness.scheduler.pending == []

    harness.scheduler.advance(10000)
    assert harness.controller.active_item is harness.items[0]

    harness.keys.press("Escape")
    assert len(harness.scheduler.pending) == 1
    harness.scheduler.advance(3000)
    assert harness.controller.active_item is harness.items[1]


def test_empty_session_shows_nothing() -> None:
    harness = Harness(())
    harness.show()
    assert harness.keys.press("ArrowRight") is True
    assert harness.surface.created == []
    assert harness.controller.active_item is None


def test_layout_and_rotation_commands_update_view_state() -> None:
    harness = Harness(("a.png",))
    harness.show()

    harness.keys.press("d")
    assert harness.surface.view_state.compact is True

    steps = [
        (False, Rotation.CLOCKWISE),
        (False, Rotation.NONE),
        (True, Rotation.COUNTER_CLOCKWISE),
        (True, Rotation.NONE),
        (False, Rotation.CLOCKWISE),
        (True, Rotation.COUNTER_CLOCKWISE),
        (False, Rotation.NONE),
    ]
    for shift, expected in steps:
        harness.keys.press("r", shift=shift)
        assert harness.controller.view_state.rotation is expected
    assert harness.surface.view_state.compact is True


def test_switching_traversal_keeps_current_node_until_next() -> None:
    harness = Harness(("a.png", "b.png", "c.png"))
    harness.show()
    node = harness.node

    harness.controller.set_traversal_mode(TraversalMode.SHUFFLE)
    assert harness.controller.playlist.mode is TraversalMode.SHUFFLE
    assert harness.node is node

    harness.keys.press("ArrowRight")
    assert harness.controller.active_item in harness.items
    assert node.destroyed is True


def test_custom_bindings_replace_defaults() -> None:
    harness = Harness(("a.png", "b.png"), options=SessionOptions(shuffle=False, bindings={"next": "n"}))
    harness.show()
    assert harness.keys.press("ArrowRight") is False
    assert harness.keys.press("N") is True
    assert harness.controller.active_item is harness.items[1]


def test_delete_removes_item_after_confirmation() -> None:
    deleted: List[str] = []
    answers = [False, True]
    harness = Harness(
        ("a.png", "b.png", "c.png"),
        confirm_delete=lambda _item: answers.pop(0),
        delete_resource=deleted.append,
    )
    a, b, c = harness.items
    harness.show()

    harness.keys.press("Delete")
    assert deleted == []
    assert harness.controller.active_item is a

    harness.keys.press("Delete")
    assert deleted == [a.path]
    assert harness.controller.playlist.items == (b, c)
    assert harness.controller.active_item is b


def test_deleting_last_item_clears_viewer() -> None:
    deleted: List[str] = []
    harness = Harness(("a.mp4",), delete_resource=deleted.append)
    harness.show()
    node = harness.node

    harness.keys.press("Delete")
    assert deleted == [harness.items[0].path]
    assert node.destroyed is True
    assert harness.controller.active_node is None
    assert harness.surface.children == []
    assert harness.changes[-1] is None


def test_delete_without_resource_callback_is_ignored() -> None:
    harness = Harness(("a.png", "b.png"))
    harness.show()
    harness.keys.press("Delete")
    assert len(harness.controller.playlist) == 2


def test_delete_after_traversal_switch_removes_shown_item() -> None:
    deleted: List[str] = []
    harness = Harness(("a.png", "b.png", "c.png"), delete_resource=deleted.append)
    a, b, c = harness.items
    harness.show()
    node = harness.node

    harness.controller.set_traversal_mode(TraversalMode.SHUFFLE)
    assert harness.keys.press("Delete") is True
    assert deleted == [a.path]
    assert harness.controller.playlist.items == (b, c)
    assert node.destroyed is True
    assert harness.controller.active_item in (b, c)


def test_load_replaces_items_and_keeps_viewer_visible() -> None:
    harness = Harness(("a.png", "b.png"))
    harness.show()
    harness.keys.press("l")
    old_node = harness.node
    fresh = _items("x.png", "y.mp4")

    harness.controller.load(fresh)
    assert old_node.destroyed is True
    assert harness.controller.is_visible is True
    assert harness.surface.visible is True
    assert harness.controller.active_item is fresh[0]
    assert harness.controller.loop_enabled is True
    assert len(harness.scheduler.pending) == 1
    assert harness.changes[-1] is fresh[0]


def test_load_while_hidden_waits_for_show() -> None:
    harness = Harness(("a.png",))
    fresh = _items("x.png")

    harness.controller.load(fresh)
    assert harness.surface.created == []
    assert harness.controller.active_item is None

    harness.show()
    assert harness.controller.active_item is fresh[0]


def test_close_releases_everything() -> None:
    harness = Harness(("a.gif", "b.png"))
    harness.show()
    node = harness.node
    node.load(Size(100, 100))

    harness.controller.close()
    assert harness.controller.is_closed is True
    assert harness.keys.handler_count == 0
    assert node.destroyed is True
    assert harness.surface.children == []
    assert harness.scheduler.pending == []
    assert len(harness.controller.playlist) == 0
    assert harness.controller.next() is None
    assert harness.controller.handle_key(KeyPress("arrowright")) is False
    assert harness.surface.double_click() is False

    harness.controller.close()


def test_options_from_settings(tmp_path) -> None:
    from chanplayer.core.config import SettingsManager
    from chanplayer.core.playlist import PassPolicy

    settings = SettingsManager(config_path=tmp_path / "settings.yaml")
    settings.set_volume(0.5)
    settings.set_loop(True)
    settings.set_shuffle(False)
    settings.set_shortcut("viewer", "next", "n")

    options = SessionOptions.from_settings(settings)
    assert options.volume == 0.5
    assert options.loop is True
    assert options.shuffle is False
    assert options.pass_policy is PassPolicy.REPLAY
    assert options.image_duration_ms == 3000
    assert options.bindings["next"] == "N"
