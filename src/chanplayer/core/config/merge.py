"""Merge helpers for configuration dictionaries."""

from __future__ import annotations

import copy
from typing import Any, Dict


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``base`` overlaid with ``override``; nested mappings merge key by key."""

    result: Dict[str, Any] = copy.deepcopy(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            result[key] = deep_merge(current, value)
        elif value is not None or key not in result:
            result[key] = copy.deepcopy(value)
    return result
