"""Shared infrastructure: configuration, logging and Result objects."""

from .config import Config, get_config
from .logging_config import setup_logging, get_logger
from .result import Result, ErrorCode

__all__ = ['Config', 'get_config', 'setup_logging', 'get_logger', 'Result', 'ErrorCode']
