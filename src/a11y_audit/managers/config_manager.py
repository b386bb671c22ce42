# src/a11y_audit/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Optional

from ..utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


class ConfigManager:
    """
    Process-wide settings for the audit engine and its front ends.

    Defaults come from the packaged settings.json, one section per concern:
    'audit' (size cap, time budget, parser), 'fetch', 'store', 'server' and
    'debug'. Changes made through ``set_nested`` live in memory until ``reset``.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    def get_all(self) -> Dict[str, Any]:
        """The live settings tree, as printed by `config list`."""
        return self._config

    def get_section(self, name: str) -> Dict[str, Any]:
        """Returns a copy of one section, e.g. 'audit', or {} when it is absent."""
        section = self._config.get(name)
        return dict(section) if isinstance(section, dict) else {}

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Looks up a dotted key such as 'audit.time_budget_ms'."""
        value = self._config
        for key in key_path.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(key)
        return default if value is None else value

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a dotted key in memory, creating sections as needed.
        A string such as '800' is cast to the type of the value it replaces.
        """
        *parents, leaf = key_path.split('.')
        section = self._config
        for key in parents:
            section = section.setdefault(key, {})
            if not isinstance(section, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        current = section.get(leaf)
        if current is not None:
            try:
                value = self._cast_like(current, value)
            except (ValueError, TypeError):
                logger.warning(
                    "Value for '%s' is not a valid %s. Storing as string.",
                    key_path, type(current).__name__
                )

        section[leaf] = value
        logger.info("Configuration updated: %s = %s", key_path, value)
        return True

    @staticmethod
    def _cast_like(current: Any, value: Any) -> Any:
        if isinstance(current, bool) and isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_WORDS:
                return True
            if lowered in _FALSE_WORDS:
                return False
            raise ValueError(f"not a boolean: {value!r}")
        return type(current)(value)

    def reset(self):
        """Drops in-memory changes and reloads settings.json."""
        config_path = PathUtils.get_settings_file()
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            self._config = {}
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load %s: %s", config_path, e, exc_info=True)
            self._config = {}
            return

        logger.debug("Loaded settings sections: %s", ", ".join(sorted(self._config)))


# Shared by the controller, the CLI handlers and the API server.
config_manager = ConfigManager()
