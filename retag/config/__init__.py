"""Configuration for retag."""

from retag.config.base import CyclePolicy, RetagSettings, get_settings, lazy_settings, settings

__all__ = [
    'CyclePolicy',
    'RetagSettings',
    'get_settings',
    'lazy_settings',
    'settings',
]
