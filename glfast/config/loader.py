"""Configuration file loading for glfast."""
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from glfast.core.logger import get_logger
from glfast.models.config import ConfigValidationError, GlfastSettings

logger = get_logger(__name__)

CONFIG_ENV = "GLFAST_CONFIG"

# Environment variables overriding individual settings.
ENV_OVERRIDES = {
    "GL_TOKEN": ("gitlab", "token"),
    "GL_BASEURL": ("gitlab", "baseurl"),
}


def default_config_paths() -> List[Path]:
    """Search order used when no path is given explicitly."""
    return [
        Path("config.yaml"),
        Path.home() / ".glfast" / "config.yaml",
    ]


class ConfigLoader:
    """Loads ``config.yaml`` and validates it into ``GlfastSettings``."""

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        self.environ = os.environ if environ is None else environ
        self.config_path = self._resolve(config_path)
        self.raw_config: Dict[str, Any] = {}

    def _resolve(self, config_path: Optional[str]) -> Optional[Path]:
        if config_path:
            return Path(config_path)
        if env_path := self.environ.get(CONFIG_ENV):
            return Path(env_path)
        for candidate in default_config_paths():
            if candidate.exists():
                return candidate
        return None

    def _read(self) -> Dict[str, Any]:
        if self.config_path is None:
            logger.debug("No config file found, using defaults")
            return {}
        if not self.config_path.exists():
            raise ConfigValidationError(f"Config file not found: {self.config_path}")

        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigValidationError(f"{self.config_path} must contain a mapping at the top level")
        return data

    def _apply_env(self, data: Dict[str, Any]) -> Dict[str, Any]:
        for variable, (section, key) in ENV_OVERRIDES.items():
            value = self.environ.get(variable)
            if value:
                section_data = data.setdefault(section, {}) or {}
                section_data[key] = value
                data[section] = section_data
        return data

    def load(self) -> GlfastSettings:
        """Read, merge environment overrides and validate.

        Raises:
            ConfigValidationError: File missing (when given explicitly),
                malformed YAML, or values rejected by validation
        """
        self.raw_config = self._apply_env(self._read())
        try:
            settings = GlfastSettings.model_validate(self.raw_config)
        except ValidationError as e:
            source = self.config_path or "configuration"
            raise ConfigValidationError(f"Invalid configuration in {source}:\n{e}") from e

        if self.config_path is not None:
            logger.debug(f"Loaded configuration from {self.config_path}")
        return settings


def load_settings(config_path: Optional[str] = None) -> GlfastSettings:
    """Convenience wrapper around ``ConfigLoader(config_path).load()``."""
    return ConfigLoader(config_path).load()
