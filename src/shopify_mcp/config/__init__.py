"""Configuration package"""

from .cli import build_arg_parser, load_config
from .logging import setup_logging
from .settings import Config

__all__ = ["Config", "build_arg_parser", "load_config", "setup_logging"]
