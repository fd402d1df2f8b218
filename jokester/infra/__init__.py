"""
Infrastructure module - logging and environment configuration.
"""

from .config import JokeMemoryConfig, load_config
from .logging_config import DailyRotatingFileHandler, setup_logging

__all__ = [
    "JokeMemoryConfig",
    "load_config",
    "DailyRotatingFileHandler",
    "setup_logging",
]
