"""
Unit tests for configuration, logging setup and Result objects.
"""

import logging

import pytest

from r2dice.core import config as config_module
from r2dice.core.config import Config, get_config
from r2dice.core.logging_config import ColoredFormatter, get_logger, setup_logging
from r2dice.core.result import ErrorCode, Result


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run in an empty directory without r2dice environment variables."""
    monkeypatch.chdir(tmp_path)
    for name in ('R2_MAX_DICE', 'R2_MAX_SIDES', 'R2_MAX_REPEAT', 'R2_MAX_CHAIN_LENGTH',
                 'R2_SEED', 'R2_NORMALIZE', 'LOG_LEVEL', 'LOG_FILE', 'HOST', 'PORT', 'DEBUG'):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging changes to the root logger."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfig:
    """Test environment-driven configuration."""

    def test_defaults(self, config):
        """Test default limits and server settings."""
        assert config.max_dice == 100
        assert config.max_sides == 1000
        assert config.max_repeat == 100
        assert config.max_chain_length == 100
        assert config.seed is None
        assert config.normalize is True
        assert config.host == '127.0.0.1'
        assert config.port == 5000
        assert config.debug is False
        assert config.log_level == 'INFO'
        assert config.validate() is True

    def test_environment_overrides(self, clean_env, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv('R2_MAX_DICE', '20')
        monkeypatch.setenv('R2_SEED', '42')
        monkeypatch.setenv('R2_NORMALIZE', 'false')
        monkeypatch.setenv('PORT', '8080')
        monkeypatch.setenv('DEBUG', 'yes')

        config = Config()
        assert config.max_dice == 20
        assert config.seed == 42
        assert config.normalize is False
        assert config.port == 8080
        assert config.debug is True

    def test_env_file(self, clean_env, monkeypatch):
        """Test loading settings from a .env file."""
        env_file = clean_env / 'custom.env'
        env_file.write_text("R2_MAX_SIDES=50\nLOG_LEVEL=debug\n")
        # load_dotenv writes to os.environ; registering the names lets monkeypatch remove them
        for name in ('R2_MAX_SIDES', 'LOG_LEVEL'):
            monkeypatch.setenv(name, '')
            monkeypatch.delenv(name)

        config = Config(env_file=str(env_file))
        assert config.max_sides == 50
        assert config.log_level == 'DEBUG'

    def test_validate_rejects_bad_limits(self, config, caplog):
        """Test that non-positive limits are reported."""
        config.max_repeat = 0
        assert config.validate() is False
        assert "max_repeat" in caplog.text

    def test_validate_unknown_log_level(self, config):
        """Test that an unknown log level falls back to INFO."""
        config.log_level = 'LOUD'
        assert config.validate() is True
        assert config.log_level == 'INFO'

    def test_get_config_singleton(self, clean_env, monkeypatch):
        """Test that get_config builds one shared instance."""
        monkeypatch.setattr(config_module, '_config', None)
        first = get_config()
        assert get_config() is first

    def test_repr(self, config):
        """Test repr shows the limits."""
        assert "max_dice=100" in repr(config)


class TestLogging:
    """Test logging setup."""

    def test_setup_logging_level(self, restore_root_logger):
        """Test that setup_logging configures the root logger."""
        root = setup_logging(level='debug', use_colors=False)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_setup_logging_file(self, restore_root_logger, tmp_path):
        """Test that a log file receives records without colors."""
        log_file = tmp_path / 'r2dice.log'
        setup_logging(level='INFO', log_file=str(log_file))
        logging.getLogger('r2dice.test').info("rolled 2d6")
        for handler in logging.getLogger().handlers:
            handler.flush()
        text = log_file.read_text()
        assert "rolled 2d6" in text
        assert "\x1b[" not in text

    def test_unknown_level(self, restore_root_logger):
        """Test that an unknown level is rejected."""
        with pytest.raises(ValueError):
            setup_logging(level='LOUD')

    def test_get_logger(self):
        """Test that module loggers are named loggers."""
        assert get_logger('r2dice.dice.evaluator').name == 'r2dice.dice.evaluator'

    def test_colored_formatter_restores_levelname(self):
        """Test that coloring does not leak into other handlers."""
        record = logging.LogRecord('r2dice', logging.WARNING, __file__, 1, "msg", None, None)
        formatted = ColoredFormatter('%(levelname)s %(message)s').format(record)
        assert "WARNING" in formatted
        assert record.levelname == 'WARNING'


class TestResult:
    """Test Result objects."""

    def test_ok(self):
        """Test successful results."""
        result = Result.ok({'value': 7})
        assert result.success is True
        assert result.data == {'value': 7}
        assert bool(result) is True

    def test_fail_with_code(self):
        """Test failed results carry the code value."""
        result = Result.fail("Division by zero", ErrorCode.DIVISION_BY_ZERO, {'position': 3})
        assert result.success is False
        assert result.error_code == 'division_by_zero'
        assert result.details == {'position': 3}
        assert not result

    def test_fail_with_string_code(self):
        """Test custom string codes."""
        assert Result.fail("Bad", "CUSTOM").error_code == "CUSTOM"

    def test_error_code_str(self):
        """Test ErrorCode string form."""
        assert str(ErrorCode.SYNTAX_ERROR) == 'syntax_error'
