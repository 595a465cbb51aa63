"""Configuration loading for mcuxeq.

Builds the Config for one invocation from layered sources:
1. Built-in defaults
2. YAML configuration file (if any)
3. Environment variable overrides (MCUXEQ_DEV, MCUXEQ_PROMPT)

Command line flags are applied last by the CLI through
build_session_config().
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import logging
import os

import yaml

from mcuxeq.config.config_models import (
    Config,
    SerialConfig,
    LoggingConfig,
    LogLevel,
    SessionConfig
)
from mcuxeq.config.config_schema import ConfigSchema
from mcuxeq.config.defaults import (
    get_default_config,
    DEV_ENV,
    PROMPT_ENV,
    CONFIG_ENV,
    DEFAULT_CONFIG_PATH
)
from mcuxeq.config.prompt import compile_prompt
from mcuxeq.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Layered configuration loader.

    Unlike a process-wide singleton, every loader instance is independent;
    the CLI creates one, calls load() once and passes the resulting Config
    on explicitly.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load()
        >>> loader.sources["serial.device"]
        'env'
    """

    def __init__(self,
                 config_path: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """Initialize loader.

        Args:
            config_path: Explicit config file; must exist if given
            environ: Environment mapping (default: os.environ)
        """
        self.environ = os.environ if environ is None else environ
        self.explicit_path = config_path
        self.config_path: Optional[Path] = None
        self.sources: Dict[str, str] = {}

    def load(self) -> Config:
        """Load defaults, file and environment into a Config.

        Raises:
            ConfigError: Missing explicit file, unreadable YAML or schema violation
        """
        self.sources = {}

        config_dict = get_default_config().to_dict()
        self._mark_source(config_dict, "default")

        path = self._find_config_file()
        if path is not None:
            file_config = self._load_from_file(path)
            config_dict = self._merge_configs(config_dict, file_config)
            self._mark_source(file_config, "file")
            self.config_path = path

        env_overrides = self._env_overrides()
        if env_overrides:
            config_dict = self._merge_configs(config_dict, env_overrides)
            self._mark_source(env_overrides, "env")

        is_valid, errors = ConfigSchema.validate_config(config_dict)
        if not is_valid:
            raise ConfigError(
                "Configuration validation failed:\n" +
                "\n".join(f"  - {error}" for error in errors)
            )

        return self._dict_to_config(config_dict)

    def _find_config_file(self) -> Optional[Path]:
        """Locate the configuration file.

        Search order:
            1. Explicit path given to the loader (must exist)
            2. $MCUXEQ_CONFIG (must exist)
            3. ~/.config/mcuxeq/config.yaml (optional)
        """
        explicit = self.explicit_path or self.environ.get(CONFIG_ENV)
        if explicit:
            path = Path(explicit).expanduser()
            if not path.is_file():
                raise ConfigError(f"Configuration file not found: {path}")
            return path

        path = Path(DEFAULT_CONFIG_PATH).expanduser()
        if path.is_file():
            return path
        return None

    @staticmethod
    def _load_from_file(path: Path) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Raises:
            ConfigError: File cannot be read or parsed
        """
        logger.debug("Loading configuration from %s", path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigError(f"Failed to load config from {path}: top level must be a mapping")

        return config_dict

    def _env_overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}

        device = self.environ.get(DEV_ENV)
        if device:
            overrides['serial'] = {'device': device}

        prompt = self.environ.get(PROMPT_ENV)
        if prompt:
            overrides['prompt'] = prompt

        return overrides

    @staticmethod
    def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries (override takes precedence)."""
        merged = deepcopy(base)

        for section, section_values in override.items():
            if isinstance(section_values, dict) and isinstance(merged.get(section), dict):
                for key, value in section_values.items():
                    merged[section][key] = value
            else:
                merged[section] = section_values

        return merged

    def _mark_source(self, config: Dict[str, Any], source: str) -> None:
        for section, section_values in config.items():
            if isinstance(section_values, dict):
                for key in section_values.keys():
                    self.sources[f"{section}.{key}"] = source
            else:
                self.sources[section] = source

    @staticmethod
    def _dict_to_config(config_dict: Dict[str, Any]) -> Config:
        serial_dict = config_dict.get('serial', {})
        serial = SerialConfig(
            device=serial_dict.get('device'),
            baud_rate=serial_dict.get('baud_rate', 115200),
            timeout_ms=serial_dict.get('timeout_ms', 2000),
            retry_interval_ms=serial_dict.get('retry_interval_ms', 200)
        )

        log_dict = config_dict.get('logging', {})
        logging_config = LoggingConfig(
            level=LogLevel(log_dict.get('level', 'WARNING')),
            file_path=log_dict.get('file_path'),
            json_format=log_dict.get('json_format', False),
            max_file_size_mb=log_dict.get('max_file_size_mb', 1),
            backup_count=log_dict.get('backup_count', 3)
        )

        return Config(
            serial=serial,
            prompt=config_dict['prompt'],
            logging=logging_config
        )


def build_session_config(config: Config,
                         device: Optional[str] = None,
                         prompt: Optional[str] = None,
                         timeout_ms: Optional[int] = None,
                         baud_rate: Optional[int] = None,
                         force: bool = False,
                         debug_level: int = 0) -> SessionConfig:
    """Resolve a SessionConfig from loaded settings and command line values.

    Explicit arguments take precedence over the loaded Config.

    Raises:
        ConfigError: No device configured
        PromptPatternError: Prompt does not compile
    """
    device = device or config.serial.device
    if not device:
        raise ConfigError(f"No serial device given (use --device or ${DEV_ENV})")

    return SessionConfig(
        device=device,
        prompt=compile_prompt(prompt or config.prompt),
        timeout_ms=config.serial.timeout_ms if timeout_ms is None else timeout_ms,
        force=force,
        debug_level=debug_level,
        baud_rate=baud_rate or config.serial.baud_rate,
        retry_interval_ms=config.serial.retry_interval_ms
    )
