"""Entity type tags for entity-scoped permissions.

A permission with ``model="post"`` only applies to entities whose type is
registered under the tag ``"post"``. Tags are explicit so they stay stable
across refactors, module moves and class renames.

Usage::

    from rolecore.entities import entity_type

    @entity_type("post")
    class Post:
        def __init__(self, id, user_id):
            self.id = id
            self.user_id = user_id
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_T = TypeVar("_T", bound=type)


class EntityTypeRegistry:
    """Mapping of Python classes to stable entity-type tags.

    Lookup walks the MRO, so a subclass inherits its base class tag unless
    it registers its own.
    """

    def __init__(self) -> None:
        self._tags: dict[type, str] = {}

    def register(self, cls: type, tag: str) -> None:
        """Register ``cls`` under ``tag``.

        Raises:
            ConfigurationError: empty tag, or ``cls`` already registered
                under a different tag.
        """
        if not tag:
            raise ConfigurationError("Entity type tag must not be empty", entity=cls.__qualname__)
        existing = self._tags.get(cls)
        if existing is not None and existing != tag:
            raise ConfigurationError(
                f"{cls.__qualname__} already registered as {existing!r}",
                entity=cls.__qualname__,
                tag=existing,
            )
        self._tags[cls] = tag
        logger.debug("Registered entity type %s as %r", cls.__qualname__, tag)

    def unregister(self, cls: type) -> None:
        self._tags.pop(cls, None)

    def entity_type(self, tag: str) -> Callable[[_T], _T]:
        """Class decorator registering the decorated class under ``tag``."""

        def decorator(cls: _T) -> _T:
            self.register(cls, tag)
            return cls

        return decorator

    def tag_for(self, entity: Any) -> str | None:
        """Tag of ``entity`` (an instance or a class), or None if unregistered."""
        cls = entity if isinstance(entity, type) else type(entity)
        for klass in cls.__mro__:
            tag = self._tags.get(klass)
            if tag is not None:
                return tag
        return None

    def __contains__(self, cls: type) -> bool:
        return cls in self._tags

    def __len__(self) -> int:
        return len(self._tags)


default_entity_types = EntityTypeRegistry()


def entity_type(tag: str) -> Callable[[_T], _T]:
    """Register a class in :data:`default_entity_types`."""
    return default_entity_types.entity_type(tag)


__all__ = [
    "EntityTypeRegistry",
    "default_entity_types",
    "entity_type",
]
