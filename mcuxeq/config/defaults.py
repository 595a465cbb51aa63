"""Default configuration values for zero-config operation.

This module provides the built-in defaults that apply when neither a
configuration file nor the environment say otherwise.
"""

from mcuxeq.config.config_models import (
    Config,
    SerialConfig,
    LoggingConfig,
    LogLevel
)

DEV_ENV = "MCUXEQ_DEV"
PROMPT_ENV = "MCUXEQ_PROMPT"
CONFIG_ENV = "MCUXEQ_CONFIG"

DEFAULT_CONFIG_PATH = "~/.config/mcuxeq/config.yaml"

DEFAULT_PROMPT = "^[[:alnum:]]*[#$>] $"
DEFAULT_TIMEOUT_MS = 2000
DEFAULT_BAUD_RATE = 115200
RETRY_INTERVAL_MS = 200


def get_default_config() -> Config:
    """Get default configuration.

    Default Values:
        - Serial: no device, 115200 baud, 2000 ms timeout, 200 ms busy retry
        - Prompt: a word followed by '#', '$' or '>' and a space
        - Logging: WARNING level, no log file
    """
    return Config(
        serial=SerialConfig(
            device=None,
            baud_rate=DEFAULT_BAUD_RATE,
            timeout_ms=DEFAULT_TIMEOUT_MS,
            retry_interval_ms=RETRY_INTERVAL_MS
        ),
        prompt=DEFAULT_PROMPT,
        logging=LoggingConfig(
            level=LogLevel.WARNING,
            file_path=None,
            json_format=False,
            max_file_size_mb=1,
            backup_count=3
        )
    )
