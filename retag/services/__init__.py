"""Service layer for retag operations."""

from retag.services.retag import ModelRetagService

__all__ = [
    'ModelRetagService',
]
