"""
CLI module for chainconf.

Provides the command-line interface using Click.
"""

from chainconf.cli.main import cli, main

__all__ = ["main", "cli"]
