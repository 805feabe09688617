"""
Base configuration for retag.

Settings that decide how tag mutation and type transformation react to
malformed tags and recursive types.
"""

from __future__ import annotations

import os
import pathlib
from typing import Literal, TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings

T = TypeVar('T', bound='RetagSettings')

CyclePolicy = Literal['error', 'keep']


class RetagSettings(pydantic_settings.BaseSettings):
    """Shared configuration for tag mutators, the transformer and the retag service."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='RETAG_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='ignore',  # .env files are shared with other tools
    )

    # Application metadata
    APP_NAME: str = 'retag'
    VERSION: str = '0.1.0'

    # Re-raise tag errors from mutators instead of keeping the original tag
    STRICT_TAGS: bool = False

    # What the transformer does when a composite is nested inside itself
    CYCLE_POLICY: CyclePolicy = 'error'

    # Memoize transformed types per (source, skipper, mutator)
    CACHE_ENABLED: bool = True

    # Tag key used by the convenience helpers
    DEFAULT_TAG_KEY: str = 'json'

    @pydantic.field_validator('DEFAULT_TAG_KEY')
    @classmethod
    def validate_tag_key(cls, v: str) -> str:
        """Validate the tag key is usable as a struct tag key."""
        if not v or any(c <= ' ' or c in ':"\x7f' for c in v):
            raise ValueError('DEFAULT_TAG_KEY must be non-empty and contain no spaces, colons, quotes or controls')
        return v


def get_settings(settings_class: type[T], env_file: str | None = None) -> T:
    """
    Factory for creating settings with dynamic .env file loading.

    LOAD_ENV_FILE environment variable specifies custom .env file path.
    When unset, loads from environment variables only.

    Args:
        settings_class: Settings class to instantiate
        env_file: Optional path to .env file (overrides LOAD_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return settings_class(_env_file=None)  # No .env file, load from environment only

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T]) -> T:
    """
    Lazy settings - defers instantiation until first access.

    Args:
        settings_class: Settings class to instantiate

    Returns:
        Proxy that instantiates settings on first access
    """
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))


# Module-level singleton (lazy-loaded)
settings: RetagSettings = lazy_settings(RetagSettings)
