"""Entry point for the chanplayer viewer."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

import wx

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from chanplayer.core.config import SettingsManager
from chanplayer.core.env import is_e2e_mode
from chanplayer.core.i18n import set_language
from chanplayer.ui.main_frame import MainFrame

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _log_directories() -> list[Path]:
    temp_root = Path(tempfile.gettempdir())
    primary = temp_root / "chanplayer_e2e_logs" if is_e2e_mode() else Path.cwd() / "logs"
    return [primary, temp_root / "chanplayer_logs"]


def _configure_logging(level_override: Optional[str] = None) -> Optional[Path]:
    """Log to a timestamped file and stderr; returns the file path when one was opened."""
    level_name = (os.environ.get("LOGLEVEL") or level_override or "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    formatter = logging.Formatter(LOG_FORMAT)

    candidates = _log_directories()
    for position, directory in enumerate(candidates):
        log_path = directory / f"chanplayer-{datetime.now():%Y%m%d-%H%M%S}.log"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError:
            continue
        file_handler.setFormatter(formatter)
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logging.basicConfig(level=level, handlers=[file_handler, stream_handler])
        logger = logging.getLogger(__name__)
        logger.info("Writing log to %s", log_path)
        if position:
            logger.warning("Using fallback log directory %s", directory)
        return log_path

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(__name__).warning("No writable log directory, logging to stderr only")
    return None


def run() -> None:
    """Start the viewer window and the wxPython event loop."""
    settings = SettingsManager()
    _configure_logging(settings.get_diagnostics_log_level())
    if len(sys.argv) > 1:
        settings.set_last_folder(Path(sys.argv[1]).expanduser())
    app = wx.App()
    set_language(settings.get_language())
    frame = MainFrame(settings=settings)
    frame.Show()
    app.MainLoop()


if __name__ == "__main__":
    run()
