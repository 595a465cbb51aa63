"""Configuration management package.

Provides immutable configuration models, defaults, YAML file loading
with environment overrides, and prompt pattern compilation.
"""

from mcuxeq.config.config_manager import ConfigLoader, build_session_config
from mcuxeq.config.config_models import (
    Config,
    SerialConfig,
    LoggingConfig,
    LogLevel,
    SessionConfig
)
from mcuxeq.config.prompt import compile_prompt

__all__ = [
    'ConfigLoader',
    'build_session_config',
    'Config',
    'SerialConfig',
    'LoggingConfig',
    'LogLevel',
    'SessionConfig',
    'compile_prompt',
]
