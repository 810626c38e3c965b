# src/faleproxy/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Mapping, Optional

from faleproxy.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

TRUE_STRINGS = ("1", "true", "yes", "on")


class ConfigManager:
    """
    Process-wide proxy settings: settings.json, plus the overrides given on the
    command line (`faleproxy serve --port 8080`, `faleproxy fetch --target-word ...`).
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
        """Dotted lookup, e.g. 'substitution.target_word'."""
        value = self._config
        for key in key_path.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(key)
        return default if value is None else value

    @staticmethod
    def _coerce(value: Any, like: Any) -> Any:
        """Casts a command line string to the type of the value it replaces."""
        if like is None or isinstance(value, type(like)):
            return value
        if isinstance(like, bool):
            return str(value).lower() in TRUE_STRINGS
        return type(like)(value)

    def set_nested(self, key_path: str, value: Any) -> bool:
        """Sets a dotted key in memory; settings.json is never written."""
        *parents, leaf = key_path.split('.')
        section = self._config
        for key in parents:
            section = section.setdefault(key, {})
            if not isinstance(section, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        try:
            value = self._coerce(value, section.get(leaf))
        except (ValueError, TypeError):
            logger.warning(
                "Could not cast '%s' for '%s' to %s. Storing as given.",
                value, key_path, type(section.get(leaf)).__name__
            )

        section[leaf] = value
        logger.debug("Configuration override: %s = %r", key_path, value)
        return True

    def apply_overrides(self, overrides: Mapping[str, Any]) -> None:
        """Applies every override that was actually given (None means 'not given')."""
        for key_path, value in overrides.items():
            if value is not None:
                self.set_nested(key_path, value)

    def reset(self):
        """Reloads settings.json, dropping all overrides."""
        config_path = PathUtils.get_settings_file()
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            self._config = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings.json: %s", e, exc_info=True)
            self._config = {}


config_manager = ConfigManager()
