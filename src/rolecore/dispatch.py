"""Query-name dispatch.

Maps names like ``isAdmin``, ``canEditArticles`` or ``allowed_update_post``
to an explicit ``(QueryKind, slug)`` pair, so callers that receive a check
by name (templates, config files, policy tables) can run it without any
dynamic attribute magic.

Example::

    >>> resolve_query_name("canEditArticles")
    (<QueryKind.MAY: 'may'>, 'edit.articles')
    >>> resolve_query_name("is_super_admin", separator="-")
    (<QueryKind.ROLE_IS: 'role_is'>, 'super-admin')
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from .exceptions import InvalidReferenceError


class QueryKind(str, Enum):
    """Which query a name resolves to."""

    ROLE_IS = "role_is"
    MAY = "may"
    ALLOWED = "allowed"


# Longest prefix first.
_PREFIXES: tuple[tuple[str, QueryKind], ...] = (
    ("allowed", QueryKind.ALLOWED),
    ("can", QueryKind.MAY),
    ("is", QueryKind.ROLE_IS),
)

_BOUNDARY = re.compile(r"(.)(?=[A-Z])")


def words_to_slug(value: str, separator: str = ".") -> str:
    """Convert ``EditArticles`` / ``edit_articles`` into ``edit.articles``."""
    value = "".join(value.split())
    value = _BOUNDARY.sub(lambda m: m.group(1) + separator, value)
    value = re.sub(r"_+", separator, value)
    return value.strip(separator).lower()


def resolve_query_name(name: str, separator: str = ".") -> tuple[QueryKind, str]:
    """Resolve a query name into its kind and target slug.

    Accepts camelCase (``isAdmin``) and snake_case (``is_admin``) names.

    Raises:
        InvalidReferenceError: unknown prefix or empty target.
    """
    for prefix, kind in _PREFIXES:
        if not name.startswith(prefix):
            continue
        rest = name[len(prefix) :]
        if rest.startswith("_"):
            rest = rest[1:]
        elif not rest[:1].isupper():
            continue
        slug = words_to_slug(rest, separator)
        if slug:
            return kind, slug
    raise InvalidReferenceError(f"Unrecognised query name: {name!r}", name=name)


def dispatch_query(target: Any, name: str, *args: Any, separator: str = ".") -> bool:
    """Run a named query against an :class:`~rolecore.subject.Authorizable`.

    ``ALLOWED`` queries take the entity (and optionally ``owner``,
    ``owner_column``) as positional arguments.

    Example::

        dispatch_query(user, "isAdmin")                 # user.role_is("admin")
        dispatch_query(user, "allowedEditPost", post)   # user.allowed("edit.post", post)
    """
    kind, slug = resolve_query_name(name, separator)
    if kind is QueryKind.ROLE_IS:
        return target.role_is(slug, *args)
    if kind is QueryKind.MAY:
        return target.may(slug, *args)
    if not args:
        raise InvalidReferenceError(f"{name} requires an entity argument", name=name)
    return target.allowed(slug, *args)


__all__ = [
    "QueryKind",
    "dispatch_query",
    "resolve_query_name",
    "words_to_slug",
]
