"""Main window of the chanplayer viewer."""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Thread
from typing import Any, Callable

import wx

from chanplayer.core.config import SettingsManager
from chanplayer.core.env import is_e2e_mode
from chanplayer.core.files import collect_media_items, delete_file
from chanplayer.core.i18n import gettext as _
from chanplayer.core.playlist import PlaylistItem, TraversalMode
from chanplayer.playback.session import MediaSessionController, SessionOptions
from chanplayer.ui.keys import WxKeySource
from chanplayer.ui.scheduler import WxScheduler
from chanplayer.ui.surface import WxSurface

logger = logging.getLogger(__name__)


class MainFrame(wx.Frame):
    """Black viewer window: one folder, one session at a time."""

    def __init__(self, settings: SettingsManager | None = None) -> None:
        super().__init__(None, title=_("chanplayer"), size=(1280, 720))
        self._settings = settings or SettingsManager()
        self._folder: Path | None = None
        self._controller: MediaSessionController | None = None
        self._scheduler = WxScheduler()

        self._surface = WxSurface(self, self)
        self._surface.Hide()
        sizer = wx.BoxSizer(wx.VERTICAL)
        sizer.Add(self._surface, 1, wx.EXPAND)
        self.SetSizer(sizer)
        self.SetBackgroundColour(wx.BLACK)

        self._keys = WxKeySource(self)
        self._create_menu()
        self.Bind(wx.EVT_CLOSE, self._on_close)
        self.CreateStatusBar()
        self.SetStatusText(_("Press Esc to show or hide the viewer"))

        wx.CallAfter(self._open_startup_folder)

    @property
    def controller(self) -> MediaSessionController | None:
        return self._controller

    def _create_menu(self) -> None:
        menu_bar = wx.MenuBar()
        file_menu = wx.Menu()
        open_item = file_menu.Append(wx.ID_OPEN, _("&Open folder...\tCtrl+O"))
        self._shuffle_item = file_menu.AppendCheckItem(wx.ID_ANY, _("&Shuffle\tCtrl+S"))
        self._shuffle_item.Check(self._settings.get_shuffle())
        file_menu.AppendSeparator()
        exit_item = file_menu.Append(wx.ID_EXIT, _("E&xit"))
        menu_bar.Append(file_menu, _("&File"))
        self.SetMenuBar(menu_bar)

        self.Bind(wx.EVT_MENU, self._on_open_folder, open_item)
        self.Bind(wx.EVT_MENU, self._on_toggle_shuffle, self._shuffle_item)
        self.Bind(wx.EVT_MENU, lambda _evt: self.Close(), exit_item)

    # --- folders ---
    def _open_startup_folder(self) -> None:
        folder = self._settings.get_last_folder()
        if folder and folder.is_dir():
            self.load_folder(folder)
            return
        if not is_e2e_mode():
            self._on_open_folder(None)

    def _on_open_folder(self, _event: wx.CommandEvent | None) -> None:
        default_path = str(self._folder or self._settings.get_last_folder() or "")
        dialog = wx.DirDialog(self, _("Select folder"), defaultPath=default_path, style=wx.DD_DIR_MUST_EXIST)
        try:
            if dialog.ShowModal() != wx.ID_OK:
                return
            selected = Path(dialog.GetPath())
        finally:
            dialog.Destroy()
        self.load_folder(selected)

    def load_folder(self, folder: Path) -> None:
        recursive = self._settings.get_recursive_scan()
        self._run_in_background(
            description=_("Loading folder %s...") % folder.name,
            worker=lambda: collect_media_items(folder, recursive=recursive),
            on_complete=lambda result: self._finalize_folder_load(folder, result),
        )

    def _finalize_folder_load(self, folder: Path, result: Any) -> None:
        if not isinstance(result, tuple):
            wx.MessageBox(_("Unable to read folder %s") % folder, _("Error"), parent=self)
            return
        items, skipped = result
        self._start_session(items)
        self._folder = folder
        self._settings.set_last_folder(folder)
        self.SetStatusText(_("Loaded %d files from %s") % (len(items), folder.name))
        if skipped:
            logger.info("Skipped %d unsupported files in %s", skipped, folder)

    def _start_session(self, items: list[PlaylistItem]) -> None:
        controller = self._controller
        if controller is not None and not controller.is_closed:
            controller.load(items)
            return
        options = SessionOptions.from_settings(self._settings)
        options.shuffle = self._shuffle_item.IsChecked()
        self._controller = MediaSessionController(
            items,
            self._surface,
            self._scheduler,
            self._keys,
            options=options,
            confirm_delete=self._confirm_delete if self._settings.get_confirm_delete() else None,
            delete_resource=self._delete_in_background,
            on_item_changed=self._on_item_changed,
        )

    def _on_toggle_shuffle(self, _event: wx.CommandEvent) -> None:
        shuffle = self._shuffle_item.IsChecked()
        self._settings.set_shuffle(shuffle)
        if self._controller is not None:
            self._controller.set_traversal_mode(TraversalMode.SHUFFLE if shuffle else TraversalMode.LINEAR)

    def _on_item_changed(self, item: PlaylistItem | None) -> None:
        if item is None:
            self.SetTitle(_("chanplayer"))
            return
        self.SetTitle(f"{item.name} - chanplayer")

    # --- deletion ---
    def _confirm_delete(self, item: PlaylistItem) -> bool:
        response = wx.MessageBox(
            _("Delete file %s?") % item.name,
            _("Confirm deletion"),
            style=wx.YES_NO | wx.NO_DEFAULT | wx.ICON_WARNING,
            parent=self,
        )
        return response == wx.YES

    def _delete_in_background(self, path: str) -> None:
        def report(deleted: Any) -> None:
            if deleted is True:
                self.SetStatusText(_("Deleted %s") % Path(path).name)
            else:
                self.SetStatusText(_("Could not delete %s") % Path(path).name)

        self._run_in_background(
            description=None,
            worker=lambda: delete_file(path),
            on_complete=report,
        )

    def _run_in_background(
        self,
        *,
        description: str | None,
        worker: Callable[[], Any],
        on_complete: Callable[[Any], None],
    ) -> None:
        busy = wx.BusyInfo(description, parent=self) if description else None
        holder: dict[str, wx.BusyInfo | None] = {"busy": busy}

        def task() -> None:
            try:
                result = worker()
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("Background task failed: %s", exc)
                result = None

            def finish() -> None:
                busy_obj = holder.pop("busy", None)
                if busy_obj is not None:
                    del busy_obj
                if self:
                    on_complete(result)

            wx.CallAfter(finish)

        Thread(target=task, daemon=True).start()

    # --- shutdown ---
    def _on_close(self, event: wx.CloseEvent) -> None:
        controller = self._controller
        if controller is not None:
            self._settings.set_volume(controller.volume)
            self._settings.set_loop(controller.loop_enabled)
            controller.close()
            self._controller = None
        self._settings.set_shuffle(self._shuffle_item.IsChecked())
        try:
            self._settings.save()
        except OSError as exc:
            logger.error("Failed to save settings: %s", exc)
        event.Skip()
