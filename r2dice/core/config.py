"""
Configuration management for r2dice.

Provides centralized configuration loading from environment variables
with sensible defaults for all settings.
"""

import os
from pathlib import Path
from typing import Optional
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUTHY = ('true', '1', 'yes')


class Config:
    """
    Centralized configuration management for r2dice.

    Loads configuration from environment variables with fallback defaults.
    A .env file is read first via python-dotenv; real environment variables win.

    Example:
        config = Config()
        print(config.max_dice)   # 100
        print(config.port)       # 5000
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Optional path to .env file. If None, auto-discovers .env
                     in the current directory or project root.
        """
        if env_file:
            load_dotenv(env_file)
            logger.info(f"Loaded configuration from {env_file}")
        else:
            project_root = Path(__file__).parent.parent.parent
            for env_path in (Path.cwd() / '.env', project_root / '.env'):
                if env_path.exists():
                    load_dotenv(env_path)
                    logger.info(f"Loaded configuration from {env_path}")
                    break
            else:
                logger.debug("No .env file found, using environment variables and defaults")

        # === Evaluation limits ===
        self.max_dice = int(os.getenv('R2_MAX_DICE', '100'))
        self.max_sides = int(os.getenv('R2_MAX_SIDES', '1000'))
        self.max_repeat = int(os.getenv('R2_MAX_REPEAT', '100'))
        self.max_chain_length = int(os.getenv('R2_MAX_CHAIN_LENGTH', '100'))

        # === Evaluation behavior ===
        seed = os.getenv('R2_SEED', '')
        self.seed: Optional[int] = int(seed) if seed else None
        self.normalize = os.getenv('R2_NORMALIZE', 'True').lower() in _TRUTHY

        # === Server Settings ===
        self.host = os.getenv('HOST', '127.0.0.1')
        self.port = int(os.getenv('PORT', '5000'))
        self.debug = os.getenv('DEBUG', 'False').lower() in _TRUTHY

        # === Logging ===
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_file = os.getenv('LOG_FILE', None)

    def validate(self) -> bool:
        """
        Validate configuration and log problems.

        Returns:
            True if config is usable, False if a limit is out of range
        """
        valid = True

        for name in ('max_dice', 'max_sides', 'max_repeat'):
            if getattr(self, name) < 1:
                logger.error(f"Invalid {name}: {getattr(self, name)}. Must be at least 1")
                valid = False

        if self.max_chain_length < 0:
            logger.error(f"Invalid max_chain_length: {self.max_chain_length}. Must not be negative")
            valid = False

        if self.seed is not None:
            logger.warning(f"R2_SEED is set ({self.seed}); every evaluation will repeat the same dice")

        if self.log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            logger.warning(f"Unknown LOG_LEVEL {self.log_level}, falling back to INFO")
            self.log_level = 'INFO'

        return valid

    def __repr__(self) -> str:
        return (
            f"Config("
            f"max_dice={self.max_dice}, "
            f"max_sides={self.max_sides}, "
            f"max_repeat={self.max_repeat}, "
            f"max_chain_length={self.max_chain_length}, "
            f"host={self.host}, "
            f"port={self.port}, "
            f"debug={self.debug})"
        )


# Global config instance (lazy-loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global config instance (singleton pattern).

    Returns:
        Global Config instance

    Example:
        from r2dice.core.config import get_config
        config = get_config()
        print(config.max_repeat)
    """
    global _config
    if _config is None:
        _config = Config()
        _config.validate()
    return _config


__all__ = ['Config', 'get_config']
