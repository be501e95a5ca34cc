from __future__ import annotations

"""Configuration store for nodefilter.

Options are kept under flat, slash-separated keys such as
``defaults/lists/columns/size/type``. Listeners connected to the
``option-set`` and ``option-deleted`` signals are called with the key that
changed.
"""

from pathlib import Path
from typing import Any, Callable, Iterator, Mapping
import itertools
import os
import textwrap
import tomllib

from loguru import logger

__all__ = [
    "ConfigStore",
    "config_candidates",
    "load_config",
    "write_default_config",
    "DEFAULT_CONFIG_TOML",
    "SIGNAL_OPTION_SET",
    "SIGNAL_OPTION_DELETED",
]

SIGNAL_OPTION_SET = "option-set"
SIGNAL_OPTION_DELETED = "option-deleted"
_SIGNALS = (SIGNAL_OPTION_SET, SIGNAL_OPTION_DELETED)

DEFAULT_CONFIG_TOML = textwrap.dedent(
    """
    [defaults.lists.columns.name]
    type = "name"

    [defaults.lists.columns.size]
    type = "size"
    property = "size"

    [defaults.lists.columns.ext]
    type = "text"
    property = "ext"

    [defaults.lists.columns.location]
    type = "text"
    property = "location"

    [defaults.lists.columns.mtime]
    type = "time"
    property = "mtime"
    """
)

Listener = Callable[[str], None]


class ConfigStore:
    """In-memory option store emitting change notifications."""

    def __init__(self, options: Mapping[str, Any] | None = None):
        self._options: dict[str, Any] = dict(options or {})
        self._handlers: dict[int, tuple[str, Listener]] = {}
        self._ids = itertools.count(1)

    def __contains__(self, key: str) -> bool:
        return key in self._options

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def get(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)

    def get_string(self, key: str) -> str | None:
        value = self._options.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: Any) -> None:
        self._options[key] = value
        self._emit(SIGNAL_OPTION_SET, key)

    def delete(self, key: str) -> bool:
        if key not in self._options:
            return False
        del self._options[key]
        self._emit(SIGNAL_OPTION_DELETED, key)
        return True

    def connect(self, signal: str, callback: Listener) -> int:
        """Call ``callback(key)`` whenever ``signal`` is emitted; returns a handler id."""
        if signal not in _SIGNALS:
            raise ValueError(f"Unknown signal: {signal}")
        handler_id = next(self._ids)
        self._handlers[handler_id] = (signal, callback)
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        self._handlers.pop(handler_id, None)

    def _emit(self, signal: str, key: str) -> None:
        logger.debug(f"{signal}: {key}")
        # listeners may disconnect while being notified
        for sig, callback in list(self._handlers.values()):
            if sig == signal:
                callback(key)


def flatten_options(data: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Turn nested TOML tables into slash-separated keys."""
    flat: dict[str, Any] = {}
    for name, value in data.items():
        key = f"{prefix}{name}"
        if isinstance(value, Mapping):
            flat.update(flatten_options(value, key + "/"))
        else:
            flat[key] = value
    return flat


def config_candidates(config_path: str | Path | None = None) -> Iterator[Path]:
    """Yield the configuration files to try, most specific first.

    An explicit ``config_path`` comes first, then ``$NODEFILTER_CONFIG``,
    then ``~/.config/nodefilter/config.toml``.
    """
    for raw in (config_path, os.environ.get("NODEFILTER_CONFIG")):
        if raw:
            yield Path(raw).expanduser()
    yield Path.home() / ".config" / "nodefilter" / "config.toml"


def load_config(config_path: str | Path | None = None) -> ConfigStore:
    """Load the first existing candidate file, or the packaged defaults."""
    for candidate in config_candidates(config_path):
        if candidate.is_file():
            logger.debug(f"Loading configuration from {candidate}")
            return _config_from_toml(candidate.read_text(encoding="utf-8"))

    logger.debug("No configuration file found, using defaults")
    return _config_from_toml(DEFAULT_CONFIG_TOML)


def _config_from_toml(content: str) -> ConfigStore:
    return ConfigStore(flatten_options(tomllib.loads(content)))


def write_default_config(target_path: str | Path, overwrite: bool = False) -> Path:
    """Write the default configuration and return its absolute path.

    Raises:
        FileExistsError: If the file exists and ``overwrite`` is false
    """
    target = Path(target_path).expanduser()
    if target.exists() and not overwrite:
        raise FileExistsError(f"Configuration already exists: {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
    return target.resolve()
