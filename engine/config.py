"""Lightweight loader for placement and agent settings."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

_DEFAULT_PATH = Path(__file__).resolve().parent.parent / "configs" / "defaults.json"
_CONFIG_PATH: Path = _DEFAULT_PATH
_CONFIG_DATA: Optional[Dict[str, Any]] = None


def _load() -> Dict[str, Any]:
    try:
        with _CONFIG_PATH.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        print(f"[config] could not read {_CONFIG_PATH}: {exc}")
        return {}
    if not isinstance(data, dict):
        print(f"[config] {_CONFIG_PATH} is not a JSON object; ignoring")
        return {}
    return data


def _ensure_loaded() -> Dict[str, Any]:
    global _CONFIG_DATA
    if _CONFIG_DATA is None:
        _CONFIG_DATA = _load()
    return _CONFIG_DATA


def load(path: Optional[str] = None) -> Dict[str, Any]:
    """Switch to ``path`` (or back to the bundled defaults) and reload."""
    global _CONFIG_PATH, _CONFIG_DATA
    _CONFIG_PATH = Path(path) if path else _DEFAULT_PATH
    _CONFIG_DATA = None
    return _ensure_loaded()


def get(path: str, default: Any = None) -> Any:
    """Return a config value using dotted paths, or default when missing."""
    data = _ensure_loaded()
    if not path:
        return data

    current: Any = data
    for segment in path.split('.'):
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        else:
            return default
    return current


def get_float(path: str, default: float) -> float:
    value = get(path, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        print(f"[config] {path}={value!r} is not numeric; using {default}")
        return float(default)
