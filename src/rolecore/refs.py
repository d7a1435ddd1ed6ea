"""Role and permission references.

Query functions accept loosely typed input: an id, a slug (or slug
pattern), a delimited string like ``"admin,editor"`` or ``"admin|editor"``,
model instances, or lists of any of these. Everything is normalized at the
engine boundary into a list of :class:`RefId` / :class:`RefSlug`.

Matching rules:
- ``RefId`` matches by id equality.
- ``RefSlug`` matches the whole slug, case-sensitively, where ``*`` matches
  any run of characters (``admin.*`` matches ``admin.billing``).
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Union

from .models import Permission, Role

logger = logging.getLogger(__name__)

# "a,b", "a | b", "a|b , c"
_LIST_SPLIT = re.compile(r" ?[,|] ?")


@dataclass(frozen=True)
class RefId:
    """Reference by numeric id."""

    id: int

    def matches(self, item: Role | Permission) -> bool:
        return item.id == self.id


@dataclass(frozen=True)
class RefSlug:
    """Reference by slug or ``*`` wildcard slug pattern."""

    pattern: str

    @property
    def is_pattern(self) -> bool:
        return "*" in self.pattern

    def matches(self, item: Role | Permission) -> bool:
        if self.pattern == item.slug:
            return True
        if not self.is_pattern:
            return False
        return _compile_pattern(self.pattern).fullmatch(item.slug) is not None


Ref = Union[RefId, RefSlug]

# Accepted raw input; lists nest ("Many").
RefInput = Union[int, str, Role, Permission, RefId, RefSlug, Iterable[Any]]


@functools.lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(re.escape(pattern).replace(r"\*", ".*"), re.DOTALL)


def to_ref(value: Any) -> Ref | None:
    """Convert a single raw value into a reference.

    Returns ``None`` for malformed input (empty string, bool, None, unknown
    types) so the caller can treat it as "no match".
    """
    if isinstance(value, (RefId, RefSlug)):
        return value
    if isinstance(value, (Role, Permission)):
        return RefId(value.id)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return RefId(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if value.isascii() and value.isdigit():
            return RefId(int(value))
        return RefSlug(value)
    return None


def normalize_refs(value: RefInput) -> list[Ref]:
    """Normalize query input into a flat list of references.

    Strings are split on ``,`` or ``|``; iterables are flattened. Invalid
    items are dropped and logged at debug level.

    Example::

        >>> normalize_refs("admin, editor|7")
        [RefSlug(pattern='admin'), RefSlug(pattern='editor'), RefId(id=7)]
    """
    raw: list[Any]
    if isinstance(value, str):
        raw = _LIST_SPLIT.split(value)
    elif isinstance(value, (RefId, RefSlug, Role, Permission, int)) or value is None:
        raw = [value]
    elif isinstance(value, Iterable):
        raw = []
        for item in value:
            if isinstance(item, str):
                raw.extend(_LIST_SPLIT.split(item))
            elif isinstance(item, (list, tuple, set, frozenset)):
                raw.extend(normalize_refs(item))
            else:
                raw.append(item)
    else:
        raw = [value]

    refs: list[Ref] = []
    for item in raw:
        ref = to_ref(item)
        if ref is None:
            logger.debug("Ignoring invalid reference %r", item)
            continue
        refs.append(ref)
    return refs


def matches_any(ref: Ref, items: Iterable[Role | Permission]) -> bool:
    """True iff any of ``items`` matches ``ref``."""
    return any(ref.matches(item) for item in items)


__all__ = [
    "Ref",
    "RefId",
    "RefInput",
    "RefSlug",
    "matches_any",
    "normalize_refs",
    "to_ref",
]
