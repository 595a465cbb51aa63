"""Unit tests for layered configuration loading.

Covers defaults, YAML files, environment overrides, schema validation
and resolution of the per-invocation SessionConfig.
"""

import pytest
import yaml

from mcuxeq.config.config_manager import ConfigLoader, build_session_config
from mcuxeq.config.config_models import Config, LogLevel, SerialConfig, SessionConfig
from mcuxeq.config.config_schema import ConfigSchema
from mcuxeq.config.defaults import DEFAULT_PROMPT, get_default_config
from mcuxeq.core.exceptions import ConfigError, PromptPatternError


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep the user's own config file out of the tests."""
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def write_config(path, content):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(content), encoding="utf-8")
    return path


class TestDefaults:
    """Test built-in defaults."""

    def test_default_config(self):
        config = ConfigLoader(environ={}).load()

        assert config == get_default_config()
        assert config.serial.device is None
        assert config.serial.timeout_ms == 2000
        assert config.serial.baud_rate == 115200
        assert config.prompt == DEFAULT_PROMPT
        assert config.logging.level == LogLevel.WARNING

    def test_sources(self):
        loader = ConfigLoader(environ={})
        loader.load()

        assert loader.sources["serial.timeout_ms"] == "default"
        assert loader.sources["prompt"] == "default"
        assert loader.config_path is None

    def test_defaults_pass_schema(self):
        is_valid, errors = ConfigSchema.validate_config(get_default_config().to_dict())

        assert is_valid, errors


class TestConfigFile:
    """Test YAML configuration files."""

    def test_explicit_file(self, tmp_path):
        path = write_config(tmp_path / "mcuxeq.yaml", {
            "serial": {"device": "/dev/ttyACM0", "timeout_ms": 5000},
            "prompt": "^uart:~\\$ $"
        })
        loader = ConfigLoader(str(path), environ={})

        config = loader.load()

        assert config.serial.device == "/dev/ttyACM0"
        assert config.serial.timeout_ms == 5000
        assert config.serial.baud_rate == 115200
        assert config.prompt == "^uart:~\\$ $"
        assert loader.sources["serial.device"] == "file"
        assert loader.sources["serial.baud_rate"] == "default"
        assert loader.config_path == path

    def test_default_location(self, isolated_home):
        write_config(isolated_home / ".config" / "mcuxeq" / "config.yaml",
                     {"serial": {"device": "/dev/ttyUSB3"}})

        config = ConfigLoader(environ={}).load()

        assert config.serial.device == "/dev/ttyUSB3"

    def test_file_from_environment(self, tmp_path):
        path = write_config(tmp_path / "env.yaml", {"logging": {"level": "DEBUG"}})

        config = ConfigLoader(environ={"MCUXEQ_CONFIG": str(path)}).load()

        assert config.logging.level == LogLevel.DEBUG

    def test_missing_explicit_file(self, tmp_path):
        """Test a named file that does not exist is an error."""
        with pytest.raises(ConfigError, match="Configuration file not found"):
            ConfigLoader(str(tmp_path / "nope.yaml"), environ={}).load()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert ConfigLoader(str(path), environ={}).load() == get_default_config()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("serial: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Failed to load config"):
            ConfigLoader(str(path), environ={}).load()

    def test_top_level_not_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="top level must be a mapping"):
            ConfigLoader(str(path), environ={}).load()

    def test_schema_violation(self, tmp_path):
        """Test unknown keys and bad values are all reported."""
        path = write_config(tmp_path / "bad.yaml", {
            "serial": {"baud_rate": 12345, "colour": "red"},
        })

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader(str(path), environ={}).load()

        message = str(exc_info.value)
        assert "Configuration validation failed" in message
        assert "serial.baud_rate" in message
        assert "colour" in message


class TestEnvironment:
    """Test environment variable overrides."""

    def test_device_and_prompt(self, tmp_path):
        path = write_config(tmp_path / "mcuxeq.yaml", {
            "serial": {"device": "/dev/ttyACM0"},
            "prompt": "^file> $"
        })
        loader = ConfigLoader(str(path), environ={
            "MCUXEQ_DEV": "/dev/ttyUSB1",
            "MCUXEQ_PROMPT": "^env> $"
        })

        config = loader.load()

        assert config.serial.device == "/dev/ttyUSB1"
        assert config.prompt == "^env> $"
        assert loader.sources["serial.device"] == "env"
        assert loader.sources["prompt"] == "env"

    def test_empty_values_ignored(self):
        config = ConfigLoader(environ={"MCUXEQ_DEV": "", "MCUXEQ_PROMPT": ""}).load()

        assert config.serial.device is None
        assert config.prompt == DEFAULT_PROMPT

    def test_process_environment(self, monkeypatch):
        monkeypatch.setenv("MCUXEQ_DEV", "/dev/ttyS0")
        monkeypatch.delenv("MCUXEQ_PROMPT", raising=False)
        monkeypatch.delenv("MCUXEQ_CONFIG", raising=False)

        assert ConfigLoader().load().serial.device == "/dev/ttyS0"


class TestBuildSessionConfig:
    """Test build_session_config()."""

    @pytest.fixture
    def config(self):
        return Config(serial=SerialConfig(device="/dev/ttyACM0", timeout_ms=3000, baud_rate=57600))

    def test_from_config(self, config):
        session_config = build_session_config(config)

        assert isinstance(session_config, SessionConfig)
        assert session_config.device == "/dev/ttyACM0"
        assert session_config.timeout_ms == 3000
        assert session_config.baud_rate == 57600
        assert session_config.idle_timeout == 3.0
        assert session_config.prompt.search(b"shell> ")
        assert not session_config.force

    def test_arguments_take_precedence(self, config):
        session_config = build_session_config(
            config,
            device="/dev/ttyUSB0",
            prompt="^> $",
            timeout_ms=500,
            baud_rate=9600,
            force=True,
            debug_level=2
        )

        assert session_config.device == "/dev/ttyUSB0"
        assert session_config.prompt.pattern == b"^> \\Z"
        assert session_config.timeout_ms == 500
        assert session_config.baud_rate == 9600
        assert session_config.force
        assert session_config.debug_level == 2

    def test_zero_timeout(self, config):
        """Test an explicit zero overrides the configured timeout."""
        session_config = build_session_config(config, timeout_ms=0)

        assert session_config.timeout_ms == 0
        assert session_config.idle_timeout is None

    def test_missing_device(self):
        with pytest.raises(ConfigError, match="No serial device given"):
            build_session_config(Config())

    def test_bad_prompt(self, config):
        with pytest.raises(PromptPatternError):
            build_session_config(config, prompt="(")

    def test_negative_debug_level(self, config):
        with pytest.raises(ValueError):
            build_session_config(config, debug_level=-1)
