"""Configuration manager for loading deployment settings."""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml

from ..models.deployment import DeployConfig
from ..utils.constants import CONFIG_FILE

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads the deployment configuration from a YAML file."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """Initialize the config manager.

        Args:
            config_file: Path to the YAML config, defaults to CONFIG_FILE
        """
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self.config = DeployConfig()

    def load_config(self) -> bool:
        """Load configuration from file.

        Returns:
            True if config loaded (an empty file loads the defaults),
            False if the file is missing or invalid
        """
        if not self.config_file.exists():
            logger.info(f"Config file {self.config_file} not found, using defaults")
            self._load_defaults()
            return False

        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f)

            if data is None:
                logger.warning("Empty config file, using defaults")
                self._load_defaults()
                return True

            if not self._validate_config(data):
                logger.error("Invalid config file, using defaults")
                self._load_defaults()
                return False

            self.config = DeployConfig.from_dict(data)
            logger.info(f"Loaded deployment config for {self.config.service_name} from {self.config_file}")
            return True

        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            self._load_defaults()
            return False
        except (ValueError, TypeError) as e:
            logger.error(f"Invalid config value: {e}")
            self._load_defaults()
            return False
        except OSError as e:
            logger.error(f"Failed to read config: {e}")
            self._load_defaults()
            return False

    def _validate_config(self, data) -> bool:
        """Validate configuration data structure.

        Args:
            data: Parsed YAML document

        Returns:
            True if valid, False otherwise
        """
        if not isinstance(data, dict):
            logger.error("Config must be a dictionary")
            return False

        if "version" not in data:
            logger.warning("Config missing version, assuming valid")

        if "packages" in data and not isinstance(data["packages"], list):
            logger.error("Packages must be a list")
            return False

        for key in ("update_package_index", "keep_backup"):
            if key in data and not isinstance(data[key], bool):
                logger.error(f"{key} must be true or false")
                return False

        timeout = data.get("command_timeout")
        if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float))):
            logger.error("command_timeout must be a number or null")
            return False

        return True

    def _load_defaults(self):
        """Load default configuration."""
        self.config = DeployConfig()
        logger.info("Loaded default configuration")
