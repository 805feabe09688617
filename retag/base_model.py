"""
Shared Pydantic base model for strict validation.

All descriptor models in the package inherit from StrictModel.
"""

from __future__ import annotations

import pydantic


class StrictModel(pydantic.BaseModel):
    """
    Base model with strict validation settings.

    Frozen models are hashable, which lets descriptors act as cache keys.
    """

    model_config = pydantic.ConfigDict(
        extra='forbid',  # Raise error on unexpected fields
        strict=True,  # Strict type validation
        frozen=True,  # Immutable (cannot modify after creation)
    )
