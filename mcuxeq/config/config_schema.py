"""JSON Schema validation for mcuxeq configuration files.

Provides schema definition and validation logic with clear error messages.
"""

from typing import List, Tuple, Dict, Any
from jsonschema import Draft7Validator


class ConfigSchema:
    """Configuration schema validator using JSON Schema Draft 7.

    Example:
        >>> is_valid, errors = ConfigSchema.validate_config(config_dict)
        >>> if not is_valid:
        >>>     for error in errors:
        >>>         print(error)
    """

    VALID_BAUD_RATES = [
        1200, 2400, 4800, 9600, 19200, 38400, 57600,
        115200, 230400, 460800, 921600, 1000000, 1500000, 2000000
    ]

    @staticmethod
    def get_schema() -> Dict[str, Any]:
        """Get JSON Schema Draft 7 for configuration validation.

        Returns:
            JSON Schema dictionary defining all configuration sections,
            types, and value constraints.
        """
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "mcuxeq Configuration",
            "type": "object",
            "properties": {
                "serial": {
                    "type": "object",
                    "description": "Serial device settings",
                    "properties": {
                        "device": {
                            "type": ["string", "null"],
                            "description": "Serial device path",
                            "minLength": 1
                        },
                        "baud_rate": {
                            "type": "integer",
                            "description": "Line speed applied on open",
                            "enum": ConfigSchema.VALID_BAUD_RATES
                        },
                        "timeout_ms": {
                            "type": "integer",
                            "description": "Idle timeout and phase budget in ms (<= 0 disables)"
                        },
                        "retry_interval_ms": {
                            "type": "integer",
                            "description": "Back-off between busy open attempts",
                            "minimum": 1,
                            "maximum": 10000
                        }
                    },
                    "additionalProperties": False
                },
                "prompt": {
                    "type": "string",
                    "description": "Prompt regular expression (POSIX extended syntax)",
                    "minLength": 1
                },
                "logging": {
                    "type": "object",
                    "description": "Diagnostic logging settings",
                    "properties": {
                        "level": {
                            "type": "string",
                            "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]
                        },
                        "file_path": {
                            "type": ["string", "null"]
                        },
                        "json_format": {
                            "type": "boolean"
                        },
                        "max_file_size_mb": {
                            "type": "number",
                            "exclusiveMinimum": 0
                        },
                        "backup_count": {
                            "type": "integer",
                            "minimum": 0,
                            "maximum": 100
                        }
                    },
                    "additionalProperties": False
                }
            },
            "additionalProperties": False
        }

    @staticmethod
    def validate_config(config_dict: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Validate a configuration dictionary against the schema.

        Args:
            config_dict: Parsed configuration file content

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        validator = Draft7Validator(ConfigSchema.get_schema())
        errors = []
        for error in sorted(validator.iter_errors(config_dict), key=lambda e: list(e.path)):
            location = '.'.join(str(p) for p in error.path) or '<root>'
            errors.append(f"{location}: {error.message}")
        return (not errors, errors)
