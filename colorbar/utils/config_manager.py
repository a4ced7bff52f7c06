import os
import logging
import yaml

from colorbar.core.errors import ConfigError
from colorbar.models.app_settings import AppSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


class ConfigManager:
    """Loads and saves AppSettings to a YAML config file."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config_path = config_path

    def load(self) -> AppSettings:
        """Load settings from YAML file. Returns defaults if file doesn't exist.

        A file that exists but cannot be parsed raises ConfigError: running
        without the intended reference is worse than not starting.
        """
        if not os.path.exists(self.config_path):
            logger.info("No config file at %s, using defaults", self.config_path)
            return AppSettings()
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config {self.config_path}: {e}") from e
        if data is None:
            return AppSettings()
        settings = AppSettings.from_dict(data)
        logger.info("Config loaded from %s", self.config_path)
        return settings

    def save(self, settings: AppSettings) -> None:
        """Save settings to YAML file."""
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                yaml.dump(settings.to_dict(), f, default_flow_style=False, allow_unicode=True)
            logger.info("Config saved to %s", self.config_path)
        except OSError as e:
            logger.error("Failed to save config: %s", e)
            raise
