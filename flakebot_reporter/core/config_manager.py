"""
Configuration management for the Flakebot reporter.

Loads the packaged defaults, merges an optional user YAML file over them,
applies environment variables and CLI overrides, and produces the single
ReporterConfig value passed through the whole pipeline.
"""
import importlib.resources as importlib_resources
import logging
import os
from typing import Mapping, Optional

import yaml

from flakebot_reporter.upload.exceptions import ConfigError, MissingAPIKeyError
from flakebot_reporter.upload.models import ReporterConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages reporter configuration loading and merging operations."""

    USER_CONFIG_FILE = ".flakebot.yaml"
    API_KEY_VAR = "FLAKEBOT_REPORTER_KEY"
    API_URL_VAR = "FLAKEBOT_API_URL"

    OPTIONAL_VARS = {
        "FLAKEBOT_REQUEST_TIMEOUT": ("request_timeout", int),
        "FLAKEBOT_UPLOAD_TIMEOUT": ("upload_timeout", int),
    }

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def load_config(self, path: str) -> dict:
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}

    def deep_merge(self, default: dict, user: dict) -> dict:
        """Deep merge user config into default config."""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self.deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def load_package_default_config(self) -> dict:
        """Load default config from package."""
        config_files = importlib_resources.files("flakebot_reporter.config")
        with (config_files / "default.yaml").open("r") as f:
            return yaml.safe_load(f)

    def discover_and_load_config(self, config_arg: Optional[str]) -> dict:
        """Discover config file with priority order."""
        default_config = self.load_package_default_config()

        # Priority 1: --config argument
        if config_arg:
            if not os.path.exists(config_arg):
                raise ConfigError(f"Config file not found: {config_arg}")
            return self.deep_merge(default_config, self.load_config(config_arg))

        # Priority 2: .flakebot.yaml in current directory
        if os.path.exists(self.USER_CONFIG_FILE):
            logger.debug(f"Using {self.USER_CONFIG_FILE} from current directory")
            return self.deep_merge(default_config, self.load_config(self.USER_CONFIG_FILE))

        # Priority 3: Package default config
        return default_config

    def build_reporter_config(
        self,
        api_url: Optional[str] = None,
        config_path: Optional[str] = None,
        require_key: bool = True,
    ) -> ReporterConfig:
        """Resolve the run configuration; CLI beats environment beats files.

        With ``require_key=False`` a missing key is left empty so the caller
        can validate the report path first and check the key afterwards.
        """
        api_key = self.environ.get(self.API_KEY_VAR, "")
        if require_key and not api_key:
            raise MissingAPIKeyError(self.API_KEY_VAR)

        config = self.discover_and_load_config(config_path)

        for var_name, (param, var_type) in self.OPTIONAL_VARS.items():
            env_value = self.environ.get(var_name)
            if not env_value:
                continue
            try:
                config[param] = var_type(env_value)
            except ValueError:
                # Keep the configured value if conversion fails
                logger.warning(f"Ignoring invalid {var_name}={env_value!r}")

        resolved_url = api_url or self.environ.get(self.API_URL_VAR) or config.get("api_url")
        if not resolved_url:
            raise ConfigError("No Flakebot API URL configured")

        return ReporterConfig(
            api_url=resolved_url,
            api_key=api_key,
            request_timeout=int(config.get("request_timeout", 30)),
            upload_timeout=int(config.get("upload_timeout", 300)),
            archive_name=config.get("archive_name", "report.zip"),
            report_pattern=config.get("report_pattern", ".xml"),
        )
