"""
Model retag service - describe, transform and rebuild pydantic models.

Ties the introspection adapters, the transformer and the transform cache
together behind one entry point, so callers can go straight from a model class
to its retagged counterpart.
"""

from __future__ import annotations

from collections.abc import Sequence

import pydantic

from retag.cache import TransformCache
from retag.config.base import RetagSettings, settings as default_settings
from retag.descriptors import StructType
from retag.introspection import build_model, describe_model
from retag.mutate import TagMutator, add_option, mutate_type
from retag.protocols import LoggerProtocol, NullLogger
from retag.skippers import Skipper, capability_name, combine_skipper, skip_implementor, skip_not

type ModelClass = type[pydantic.BaseModel]


class ModelRetagService:
    """
    Service for rewriting struct tags of pydantic models.

    Results are memoized per (source, skipper, mutator) when CACHE_ENABLED is
    set; reuse skipper and mutator objects across calls to benefit from it.
    """

    def __init__(
        self,
        settings: RetagSettings | None = None,
        descriptor_cache: TransformCache[StructType] | None = None,
        model_cache: TransformCache[ModelClass] | None = None,
        logger: LoggerProtocol | None = None,
    ) -> None:
        """
        Initialize retag service.

        Args:
            settings: Optional settings (uses the module-level settings if not provided)
            descriptor_cache: Optional cache of transformed descriptors (creates one if not provided)
            model_cache: Optional cache of rebuilt models (creates one if not provided)
            logger: Optional logger instance
        """
        self.settings = settings or default_settings
        self.descriptor_cache = descriptor_cache if descriptor_cache is not None else TransformCache()
        self.model_cache = model_cache if model_cache is not None else TransformCache()
        self.logger = logger or NullLogger()
        self._omit_helpers: dict[tuple[str, tuple[str, ...], str, str], tuple[Skipper, TagMutator]] = {}

    def retag_descriptor(self, struct: StructType, skip: Skipper, mutate: TagMutator) -> StructType:
        """
        Transform a descriptor.

        Raises:
            CyclicTypeError: On a recursive composite when CYCLE_POLICY is 'error'
            TagError: If mutate raises one
        """
        if not self.settings.CACHE_ENABLED:
            return self._transform(struct, skip, mutate)

        if (struct, skip, mutate) in self.descriptor_cache:
            self.logger.info(f'Transform cache hit: {struct.display_name}')
        return self.descriptor_cache.get_or_create(struct, skip, mutate, lambda: self._transform(struct, skip, mutate))

    def retag_model(
        self,
        model: ModelClass,
        skip: Skipper,
        mutate: TagMutator,
        capabilities: Sequence[type] = (),
    ) -> ModelClass:
        """
        Build a new model class from model with rewritten struct tags.

        Args:
            model: Source pydantic model (left untouched)
            skip: Skipper deciding which nested models are not descended into
            mutate: Computes each field's new tag
            capabilities: Protocols the skipper and mutator test for

        Returns:
            New pydantic model class with the same fields
        """

        def factory() -> ModelClass:
            struct = describe_model(model, capabilities)
            return build_model(self.retag_descriptor(struct, skip, mutate))

        if not self.settings.CACHE_ENABLED:
            return factory()

        source = (model, tuple(capabilities))
        if (source, skip, mutate) in self.model_cache:
            self.logger.info(f'Model cache hit: {model.__name__}')
        return self.model_cache.get_or_create(source, skip, mutate, factory)

    def omit_zero_model(
        self,
        model: ModelClass,
        target_capability: type,
        skip_capabilities: Sequence[type] = (),
        key: str | None = None,
        option: str = ',omitzero',
    ) -> ModelClass:
        """
        Add option to every field whose type satisfies target_capability.

        Nested models are descended into unless they satisfy one of
        skip_capabilities (types that encode themselves, for instance).

        Args:
            model: Source pydantic model
            target_capability: Protocol a field type must satisfy to get the option
            skip_capabilities: Protocols whose implementors are not descended into
            key: Tag key. Defaults to settings.DEFAULT_TAG_KEY
            option: Option to add. The leading comma leaves the name slot empty
                when a field has no entry for key yet
        """
        key = key or self.settings.DEFAULT_TAG_KEY
        helper_key = (
            capability_name(target_capability),
            tuple(capability_name(c) for c in skip_capabilities),
            key,
            option,
        )
        if helper_key not in self._omit_helpers:
            skip = combine_skipper(*(skip_implementor(c) for c in skip_capabilities))
            mutate = add_option(
                key,
                option,
                skip_not(skip_implementor(target_capability)),
                strict=self.settings.STRICT_TAGS,
                logger=self.logger,
            )
            self._omit_helpers[helper_key] = (skip, mutate)

        skip, mutate = self._omit_helpers[helper_key]
        return self.retag_model(model, skip, mutate, capabilities=(target_capability, *skip_capabilities))

    def _transform(self, struct: StructType, skip: Skipper, mutate: TagMutator) -> StructType:
        self.logger.info(f'Transforming {struct.display_name} ({len(struct.fields)} fields)')
        return mutate_type(struct, skip, mutate, on_cycle=self.settings.CYCLE_POLICY)
