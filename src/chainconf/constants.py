"""
Shared constants for chainconf.

This module provides a single source of truth for names that are used
across multiple modules.
"""

APP_NAME = "chainconf"
"""Program name, also used for the user config directory."""

ENV_PREFIX = "CHAINCONF_"
"""Prefix of all chainconf environment variables."""

CONFIG_FILE_NAME = "config.yaml"
"""File name of every config layer."""

PROJECT_DIR_NAME = ".chainconf"
"""Directory holding the project config, relative to the project root."""

PROJECT_ROOT_MARKERS = (PROJECT_DIR_NAME, ".git")
"""Entries that mark a directory as a project root."""
