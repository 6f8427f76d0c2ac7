# src/sitelens/core/managers/config_manager.py
import json
import logging
from functools import reduce
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from sitelens.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("1", "true", "yes", "on")


class ConfigManager:
    """
    Process-wide settings holder, loaded from the packaged settings.json.

    Readers always pass a default to `get_nested`, so an empty or missing
    settings file still yields a working analysis. Values changed through
    `set_nested` live in memory only; `reset()` rereads the file.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Looks up a dotted key such as 'retrieval.direct_timeout_ms'."""
        value = reduce(
            lambda node, key: node.get(key) if isinstance(node, dict) else None,
            key_path.split('.'),
            self._config
        )
        return default if value is None else value

    @staticmethod
    def _coerce(current: Any, value: Any, key_path: str) -> Any:
        """Casts `value` to the type of the scalar it replaces; containers and new keys take it as given."""
        if current is None or isinstance(current, (dict, list)):
            return value
        if isinstance(current, bool) and isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        try:
            return type(current)(value)
        except (ValueError, TypeError):
            logger.warning("Setting '%s' expects %s; keeping %r as given.", key_path, type(current).__name__, value)
            return value

    def set_nested(self, key_path: str, value: Any) -> bool:
        *parents, leaf = key_path.split('.')
        node = self._config
        for key in parents:
            node = node.setdefault(key, {})
            if not isinstance(node, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False
        node[leaf] = self._coerce(node.get(leaf), value, key_path)
        logger.info("Setting overridden: %s = %r", key_path, node[leaf])
        return True

    def apply_overrides(self, assignments: Iterable[str]) -> Tuple[str, ...]:
        """
        Applies 'key.path=value' strings from the command line.
        Returns the assignments that were malformed or rejected.
        """
        rejected = []
        for assignment in assignments:
            key_path, sep, value = assignment.partition('=')
            if not sep or not key_path.strip() or not self.set_nested(key_path.strip(), value.strip()):
                rejected.append(assignment)
        return tuple(rejected)

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        if not path.exists():
            logger.warning("settings.json not found at %s. Using built-in defaults.", path)
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load %s: %s", path, e, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.error("%s must hold a JSON object; ignoring it.", path)
            return {}
        return data

    def reset(self) -> None:
        """Drops in-memory overrides and rereads settings.json."""
        self._config = self._read(PathUtils.get_settings_file())
        logger.debug("Settings (re)loaded: sections %s", sorted(self._config))


# The global singleton instance that the entire application uses.
config_manager = ConfigManager()
