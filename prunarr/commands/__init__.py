"""
Commands module for PrunArr CLI
"""

from .test_command import test_command
from .tv_command import tv_command

__all__ = ["tv_command", "test_command"]
