"""Authorizable subjects.

Any subject record (a user dataclass, an ORM row, a dict with an ``id``)
gets the authorization query surface by being wrapped, not by inheriting
from a mixin::

    authorizer = Authorizer(store, config=config)
    user = authorizer.for_subject(current_user)

    user.role_is("admin|editor")
    user.may("posts.edit")
    user.allowed("posts.edit", post)
    user.check("canEditPosts")

Each wrapper owns one resolver, so effective sets are cached per wrapper
(typically per request). Build a new wrapper to observe assignment changes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .config import RbacConfig
from .dispatch import dispatch_query
from .engine import AuthorizationEngine
from .entities import EntityTypeRegistry
from .exceptions import InvalidReferenceError
from .graph import RoleGraph
from .models import Permission, Role
from .refs import RefInput
from .resolver import EffectiveSetResolver
from .store import AssignmentStore, SubjectId

logger = logging.getLogger(__name__)


@runtime_checkable
class Authorizable(Protocol):
    """Role/permission capability bound to one subject."""

    def roles(self) -> frozenset[Role]: ...

    def permissions(self) -> frozenset[Permission]: ...

    def has_role(self, role: RefInput) -> bool: ...

    def has_any_role(self, roles: RefInput) -> bool: ...

    def has_all_roles(self, roles: RefInput) -> bool: ...

    def role_is(self, roles: RefInput, all: bool = False) -> bool: ...

    def has_permission(self, permission: RefInput) -> bool: ...

    def has_any_permission(self, permissions: RefInput) -> bool: ...

    def has_all_permissions(self, permissions: RefInput) -> bool: ...

    def may(self, permissions: RefInput, all: bool = False) -> bool: ...

    def allowed(
        self,
        permission: int | str | Permission,
        entity: Any,
        owner: bool = True,
        owner_column: str = "user_id",
    ) -> bool: ...

    def attach_role(self, role: Role | int, granted: bool = True) -> int: ...

    def detach_role(self, role: Role | int) -> int: ...

    def detach_all_roles(self) -> int: ...

    def attach_permission(self, permission: Permission | int, granted: bool = True) -> int: ...

    def detach_permission(self, permission: Permission | int) -> int: ...

    def detach_all_permissions(self) -> int: ...


def subject_identity(subject: Any) -> SubjectId:
    """Extract the identity of a subject record.

    Accepts plain ids, objects with an ``id`` attribute and mappings with an
    ``"id"`` key.
    """
    if isinstance(subject, (int, str)) and not isinstance(subject, bool):
        return subject
    if isinstance(subject, Mapping):
        identity = subject.get("id")
    else:
        identity = getattr(subject, "id", None)
    if identity is None or isinstance(identity, bool):
        raise InvalidReferenceError("Subject has no usable id", subject=type(subject).__qualname__)
    return identity


class AuthorizedSubject:
    """A subject paired with its resolver and query engine.

    Every query and mutation delegates to :class:`AuthorizationEngine`.

    Args:
        subject: The subject record (or a bare id).
        store: Assignment store.
        config: Core configuration. Defaults to ``RbacConfig()``.
        graph: Role graph to share between subjects. Defaults to a fresh
            graph over ``store``.
        entity_types: Registry for :meth:`allowed`.
    """

    def __init__(
        self,
        subject: Any,
        store: AssignmentStore,
        *,
        config: RbacConfig | None = None,
        graph: RoleGraph | None = None,
        entity_types: EntityTypeRegistry | None = None,
    ) -> None:
        self._subject = subject
        self._config = config or RbacConfig()
        if graph is None:
            graph = RoleGraph.from_store(store, strict=self._config.strict_graph)
        self._resolver = EffectiveSetResolver(store, subject_identity(subject), graph=graph)
        self._engine = AuthorizationEngine(self._resolver, config=self._config, entity_types=entity_types)

    @property
    def subject(self) -> Any:
        return self._subject

    @property
    def id(self) -> SubjectId:
        return self._resolver.subject_id

    @property
    def resolver(self) -> EffectiveSetResolver:
        return self._resolver

    @property
    def engine(self) -> AuthorizationEngine:
        return self._engine

    def __repr__(self) -> str:
        return f"AuthorizedSubject(id={self.id!r})"

    # ── Queries ─────────────────────────────────────────────

    def roles(self) -> frozenset[Role]:
        return self._engine.roles()

    def permissions(self) -> frozenset[Permission]:
        return self._engine.permissions()

    def role_permissions(self) -> frozenset[Permission]:
        return self._resolver.role_permissions()

    def has_role(self, role: RefInput) -> bool:
        return self._engine.has_role(role)

    def has_any_role(self, roles: RefInput) -> bool:
        return self._engine.has_any_role(roles)

    def has_all_roles(self, roles: RefInput) -> bool:
        return self._engine.has_all_roles(roles)

    def role_is(self, roles: RefInput, all: bool = False) -> bool:
        return self._engine.role_is(roles, all)

    def has_permission(self, permission: RefInput) -> bool:
        return self._engine.has_permission(permission)

    def has_any_permission(self, permissions: RefInput) -> bool:
        return self._engine.has_any_permission(permissions)

    def has_all_permissions(self, permissions: RefInput) -> bool:
        return self._engine.has_all_permissions(permissions)

    def may(self, permissions: RefInput, all: bool = False) -> bool:
        return self._engine.may(permissions, all)

    def allowed(
        self,
        permission: int | str | Permission,
        entity: Any,
        owner: bool = True,
        owner_column: str = "user_id",
    ) -> bool:
        return self._engine.allowed(permission, entity, owner, owner_column)

    def check(self, name: str, *args: Any) -> bool:
        """Run a named query (``isAdmin``, ``canEditPosts``, ``allowedEditPost``)."""
        return dispatch_query(self, name, *args, separator=self._config.separator)

    # ── Mutations ───────────────────────────────────────────

    def attach_role(self, role: Role | int, granted: bool = True) -> int:
        return self._engine.attach_role(role, granted)

    def detach_role(self, role: Role | int) -> int:
        return self._engine.detach_role(role)

    def detach_all_roles(self) -> int:
        return self._engine.detach_all_roles()

    def attach_permission(self, permission: Permission | int, granted: bool = True) -> int:
        return self._engine.attach_permission(permission, granted)

    def detach_permission(self, permission: Permission | int) -> int:
        return self._engine.detach_permission(permission)

    def detach_all_permissions(self) -> int:
        return self._engine.detach_all_permissions()


class Authorizer:
    """Process-level factory binding subjects to a store and config.

    Args:
        store: Assignment store shared by all subjects.
        config: Core configuration. Defaults to ``RbacConfig()``.
        entity_types: Registry for entity checks.
    """

    def __init__(
        self,
        store: AssignmentStore,
        *,
        config: RbacConfig | None = None,
        entity_types: EntityTypeRegistry | None = None,
    ) -> None:
        self._store = store
        self._config = config or RbacConfig()
        self._entity_types = entity_types
        if self._config.pretend.enabled:
            logger.warning("rolecore pretend mode is ENABLED; queries bypass role resolution")

    @property
    def store(self) -> AssignmentStore:
        return self._store

    @property
    def config(self) -> RbacConfig:
        return self._config

    def for_subject(self, subject: Any) -> AuthorizedSubject:
        """Wrap ``subject`` with a fresh resolver (fresh cache)."""
        return AuthorizedSubject(
            subject,
            self._store,
            config=self._config,
            entity_types=self._entity_types,
        )


__all__ = [
    "Authorizable",
    "AuthorizedSubject",
    "Authorizer",
    "subject_identity",
]
