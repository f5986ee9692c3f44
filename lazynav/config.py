"""Persistent JSON settings for lazynav.

Three keys live in ``config.json`` under the platform config directory:
``hide_unix_style_hidden_items``, ``show_hidden`` and ``watch_poll_seconds``.
A missing file, bad JSON or a value of the wrong type reads as the default.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "lazynav"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_WATCH_POLL_SECONDS = 0.5
MIN_WATCH_POLL_SECONDS = 0.01
MAX_WATCH_POLL_SECONDS = 60.0


def load_config() -> dict[str, object]:
    """Return the stored settings object, or ``{}`` when none can be read."""
    try:
        raw = CONFIG_PATH.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        logger.warning("Could not read %s: %s", CONFIG_PATH, exc)
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed config at %s", CONFIG_PATH)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Write ``data`` as indented JSON; a failed write is logged, not raised."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except (OSError, TypeError) as exc:
        logger.warning("Could not write %s: %s", CONFIG_PATH, exc)


def _load_flag(key: str, default: bool) -> bool:
    value = load_config().get(key)
    return value if isinstance(value, bool) else default


def _store(key: str, value: object) -> None:
    data = load_config()
    data[key] = value
    save_config(data)


def load_hide_unix_style_hidden_items() -> bool:
    """Whether dot-prefixed names count as hidden (default ``True``)."""
    return _load_flag("hide_unix_style_hidden_items", True)


def save_hide_unix_style_hidden_items(hide: bool) -> None:
    _store("hide_unix_style_hidden_items", bool(hide))


def load_show_hidden() -> bool:
    """Whether hidden items are listed (default ``False``)."""
    return _load_flag("show_hidden", False)


def save_show_hidden(show_hidden: bool) -> None:
    _store("show_hidden", bool(show_hidden))


def load_watch_poll_seconds() -> float:
    """Read the watch poll interval; values outside ``(0, 60]`` read as the default."""
    value = load_config().get("watch_poll_seconds")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_WATCH_POLL_SECONDS
    if not 0 < value <= MAX_WATCH_POLL_SECONDS:
        return DEFAULT_WATCH_POLL_SECONDS
    return float(value)


def save_watch_poll_seconds(seconds: float) -> None:
    """Persist the poll interval clamped to ``[MIN, MAX]_WATCH_POLL_SECONDS``."""
    clamped = min(MAX_WATCH_POLL_SECONDS, max(MIN_WATCH_POLL_SECONDS, float(seconds)))
    _store("watch_poll_seconds", round(clamped, 3))
