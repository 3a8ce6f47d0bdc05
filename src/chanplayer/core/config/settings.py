"""Application configuration management module."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from .defaults import DEFAULT_CONFIG, LOG_LEVELS
from .merge import deep_merge
from chanplayer.core.env import resolve_config_path

logger = logging.getLogger(__name__)


def _clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass
class SettingsManager:
    """YAML-backed settings with defaults for every key."""

    config_path: Path = Path("config/settings.yaml")

    def __post_init__(self) -> None:
        self.config_path = resolve_config_path(self.config_path)
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        user_config: Any = {}
        if self.config_path.exists():
            try:
                with self.config_path.open("r", encoding="utf-8") as file:
                    user_config = yaml.safe_load(file) or {}
            except yaml.YAMLError as exc:
                logger.warning("Ignoring unreadable settings file %s: %s", self.config_path, exc)
                user_config = {}
        if not isinstance(user_config, dict):
            user_config = {}
        self._data = deep_merge(DEFAULT_CONFIG, user_config)

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with self.config_path.open("w", encoding="utf-8") as file:
            yaml.safe_dump(self._data, file, allow_unicode=False, sort_keys=True)
        logger.debug("Settings saved to %s", self.config_path)

    def get_raw(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name)
        return section if isinstance(section, dict) else {}

    def _writable_section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name)
        if not isinstance(section, dict):
            section = {}
            self._data[name] = section
        return section

    def _playback_float(self, key: str, *, minimum: float = 0.0) -> float:
        default = DEFAULT_CONFIG["playback"][key]
        try:
            return max(minimum, float(self._section("playback").get(key, default)))
        except (TypeError, ValueError):
            return default

    # --- shortcuts ---
    def get_scope_shortcuts(self, scope: str) -> Dict[str, str]:
        defaults = DEFAULT_CONFIG["shortcuts"].get(scope, {}).copy()
        user_values = self._section("shortcuts").get(scope, {})
        if isinstance(user_values, dict):
            defaults.update(
                {key: str(value).strip().upper() for key, value in user_values.items() if isinstance(value, (str, int))}
            )
        return defaults

    def get_shortcut(self, scope: str, action: str) -> str:
        return self.get_scope_shortcuts(scope).get(action, "")

    def set_shortcut(self, scope: str, action: str, value: str) -> None:
        scope_dict = self._writable_section("shortcuts").setdefault(scope, {})
        scope_dict[action] = str(value).strip().upper()

    # --- playback ---
    def get_volume(self) -> float:
        return _clamp_unit(self._playback_float("volume"))

    def set_volume(self, volume: float) -> None:
        self._writable_section("playback")["volume"] = round(_clamp_unit(float(volume)), 4)

    def get_volume_step(self) -> float:
        step = self._playback_float("volume_step")
        return step if 0.0 < step <= 1.0 else DEFAULT_CONFIG["playback"]["volume_step"]

    def get_loop(self) -> bool:
        return bool(self._section("playback").get("loop", DEFAULT_CONFIG["playback"]["loop"]))

    def set_loop(self, enabled: bool) -> None:
        self._writable_section("playback")["loop"] = bool(enabled)

    def get_shuffle(self) -> bool:
        return bool(self._section("playback").get("shuffle", DEFAULT_CONFIG["playback"]["shuffle"]))

    def set_shuffle(self, enabled: bool) -> None:
        self._writable_section("playback")["shuffle"] = bool(enabled)

    def get_reshuffle_on_pass_end(self) -> bool:
        playback = self._section("playback")
        return bool(playback.get("reshuffle_on_pass_end", DEFAULT_CONFIG["playback"]["reshuffle_on_pass_end"]))

    def get_image_duration_ms(self) -> int:
        default = DEFAULT_CONFIG["playback"]["image_duration_ms"]
        try:
            value = int(self._section("playback").get("image_duration_ms", default))
        except (TypeError, ValueError):
            return default
        return value if value > 0 else default

    def get_animated_marker(self) -> str:
        value = self._section("playback").get("animated_marker", DEFAULT_CONFIG["playback"]["animated_marker"])
        return str(value) if value is not None else ""

    def get_confirm_delete(self) -> bool:
        return bool(self._section("playback").get("confirm_delete", DEFAULT_CONFIG["playback"]["confirm_delete"]))

    # --- library ---
    def get_last_folder(self) -> Path | None:
        value = self._section("library").get("last_folder")
        if not value:
            return None
        return Path(str(value))

    def set_last_folder(self, folder: Path | str | None) -> None:
        self._writable_section("library")["last_folder"] = str(folder) if folder else None

    def get_recursive_scan(self) -> bool:
        return bool(self._section("library").get("recursive", DEFAULT_CONFIG["library"]["recursive"]))

    # --- general / diagnostics ---
    def get_language(self) -> str:
        return str(self._section("general").get("language", DEFAULT_CONFIG["general"]["language"]))

    def set_language(self, language: str) -> None:
        self._writable_section("general")["language"] = str(language)

    def get_diagnostics_log_level(self) -> str:
        default = DEFAULT_CONFIG["diagnostics"]["log_level"]
        level = str(self._section("diagnostics").get("log_level", default)).upper()
        return level if level in LOG_LEVELS else default

    def set_diagnostics_log_level(self, level: str) -> None:
        self._writable_section("diagnostics")["log_level"] = str(level).upper()
