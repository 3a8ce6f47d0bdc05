"""gettext wrapper for the few user-facing strings of the viewer."""

from __future__ import annotations

import gettext as _gettext
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_DOMAIN = "chanplayer"
_LOCALE_DIR = Path(__file__).resolve().parent.parent / "locale"

_translation: _gettext.NullTranslations = _gettext.NullTranslations()


def set_language(language: str | None, *, localedir: Path | None = None) -> None:
    """Switch the active catalog; unknown languages fall back to the source strings."""

    global _translation
    _translation = _gettext.translation(
        _DOMAIN,
        localedir=str(localedir or _LOCALE_DIR),
        languages=[language] if language else None,
        fallback=True,
    )
    if isinstance(_translation, _gettext.GNUTranslations):
        logger.debug("Loaded %s catalog for %s", _DOMAIN, language)


def gettext(message: str) -> str:
    return _translation.gettext(message)


__all__ = ["set_language", "gettext"]
