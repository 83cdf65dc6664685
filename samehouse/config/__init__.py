# (c) Copyright Datacraft, 2026
"""Configuration module for samehouse."""
from .settings import (
	DEFAULT_CONFIG_FILE,
	Settings,
	get_settings,
	load_settings,
	reset_settings,
)

__all__ = [
	'DEFAULT_CONFIG_FILE',
	'Settings',
	'get_settings',
	'load_settings',
	'reset_settings',
]
