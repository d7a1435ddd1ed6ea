"""Authorization query engine.

Answers boolean questions about one subject against the output of its
:class:`~rolecore.resolver.EffectiveSetResolver`:

- role queries: ``has_role``, ``has_any_role``, ``has_all_roles``, ``role_is``
- permission queries: ``has_permission``, ``has_any_permission``,
  ``has_all_permissions``, ``may``
- entity checks: ``allowed``

Queries never raise for "not allowed"; they return False. Malformed
references count as "no match". The only input error that raises is a
missing entity in :meth:`AuthorizationEngine.allowed`.

Simulation (pretend) mode comes from the injected :class:`RbacConfig`; when
enabled, every query returns the configured result without resolving.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .config import RbacConfig
from .entities import EntityTypeRegistry, default_entity_types
from .exceptions import InvalidReferenceError
from .models import Permission, Role
from .refs import Ref, RefId, RefInput, RefSlug, matches_any, normalize_refs, to_ref
from .resolver import EffectiveSetResolver

logger = logging.getLogger(__name__)

_MISSING = object()


def _owner_of(entity: Any, owner_column: str) -> Any:
    if isinstance(entity, Mapping):
        return entity.get(owner_column, _MISSING)
    return getattr(entity, owner_column, _MISSING)


def _same_identity(owner: Any, subject_id: Any) -> bool:
    if owner is _MISSING or owner is None:
        return False
    # "42" and 42 name the same subject.
    return owner == subject_id or str(owner) == str(subject_id)


def _target_id(value: Role | Permission | int, kind: str) -> int:
    if isinstance(value, (Role, Permission)):
        return value.id
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise InvalidReferenceError(f"Invalid {kind} reference: {value!r}", reference=repr(value))


class AuthorizationEngine:
    """Role/permission queries and assignment changes for one subject.

    Args:
        resolver: Resolver bound to the subject.
        config: Core configuration (pretend mode). Defaults to ``RbacConfig()``.
        entity_types: Registry used by :meth:`allowed`. Defaults to
            :data:`rolecore.entities.default_entity_types`.
    """

    def __init__(
        self,
        resolver: EffectiveSetResolver,
        *,
        config: RbacConfig | None = None,
        entity_types: EntityTypeRegistry | None = None,
    ) -> None:
        self._resolver = resolver
        self._config = config or RbacConfig()
        self._entity_types = entity_types if entity_types is not None else default_entity_types

    @property
    def resolver(self) -> EffectiveSetResolver:
        return self._resolver

    @property
    def config(self) -> RbacConfig:
        return self._config

    def _pretend(self, option: str) -> bool | None:
        pretend = self._config.pretend
        if not pretend.enabled:
            return None
        result = pretend.result_for(option)
        logger.debug("Pretend mode: %s -> %s for subject %s", option, result, self._resolver.subject_id)
        return result

    # ── Collections ─────────────────────────────────────────

    def roles(self) -> frozenset[Role]:
        """Effective roles of the subject."""
        return self._resolver.effective_roles()

    def permissions(self) -> frozenset[Permission]:
        """Effective permissions of the subject."""
        return self._resolver.effective_permissions()

    # ── Roles ───────────────────────────────────────────────

    def _has_role_ref(self, ref: Ref) -> bool:
        return matches_any(ref, self._resolver.effective_roles())

    def has_role(self, role: RefInput) -> bool:
        """True iff any effective role matches ``role`` (id or slug pattern)."""
        forced = self._pretend("role_is")
        if forced is not None:
            return forced
        ref = to_ref(role)
        return ref is not None and self._has_role_ref(ref)

    def has_any_role(self, roles: RefInput) -> bool:
        forced = self._pretend("role_is")
        if forced is not None:
            return forced
        return any(self._has_role_ref(ref) for ref in normalize_refs(roles))

    def has_all_roles(self, roles: RefInput) -> bool:
        forced = self._pretend("role_is")
        if forced is not None:
            return forced
        refs = normalize_refs(roles)
        return bool(refs) and all(self._has_role_ref(ref) for ref in refs)

    def role_is(self, roles: RefInput, all: bool = False) -> bool:
        """Check one or more roles.

        ``roles`` may be an id, a slug pattern, a ``","``/``"|"`` delimited
        string, a model instance or a list of these.

        Example::

            engine.role_is("admin|moderator")          # either
            engine.role_is("admin, moderator", all=True)  # both
        """
        return self.has_all_roles(roles) if all else self.has_any_role(roles)

    # ── Permissions ─────────────────────────────────────────

    def _has_permission_ref(self, ref: Ref) -> bool:
        return matches_any(ref, self._resolver.effective_permissions())

    def has_permission(self, permission: RefInput) -> bool:
        """True iff any effective permission matches ``permission``."""
        forced = self._pretend("may")
        if forced is not None:
            return forced
        ref = to_ref(permission)
        return ref is not None and self._has_permission_ref(ref)

    def has_any_permission(self, permissions: RefInput) -> bool:
        forced = self._pretend("may")
        if forced is not None:
            return forced
        return any(self._has_permission_ref(ref) for ref in normalize_refs(permissions))

    def has_all_permissions(self, permissions: RefInput) -> bool:
        forced = self._pretend("may")
        if forced is not None:
            return forced
        refs = normalize_refs(permissions)
        return bool(refs) and all(self._has_permission_ref(ref) for ref in refs)

    def may(self, permissions: RefInput, all: bool = False) -> bool:
        """Check one or more permissions; same input rules as :meth:`role_is`."""
        return self.has_all_permissions(permissions) if all else self.has_any_permission(permissions)

    # ── Entities ────────────────────────────────────────────

    def allowed(
        self,
        permission: int | str | Permission,
        entity: Any,
        owner: bool = True,
        owner_column: str = "user_id",
    ) -> bool:
        """Check whether the subject may act on a specific entity instance.

        1. With ``owner=True``, the subject owning the entity (its
           ``owner_column`` equals the subject id) is always allowed.
        2. Otherwise an effective permission must be scoped to the entity's
           registered type and match ``permission`` by id or exact slug.

        Raises:
            InvalidReferenceError: ``entity`` is None.
        """
        forced = self._pretend("allowed")
        if forced is not None:
            return forced

        if entity is None:
            raise InvalidReferenceError("allowed() requires an entity", permission=repr(permission))

        subject_id = self._resolver.subject_id
        if owner and _same_identity(_owner_of(entity, owner_column), subject_id):
            return True

        ref = to_ref(permission)
        if ref is None:
            logger.debug("allowed(): invalid permission reference %r", permission)
            return False

        tag = self._entity_types.tag_for(entity)
        if tag is None:
            logger.warning("allowed(): entity type %s is not registered", type(entity).__qualname__)
            return False

        for perm in self._resolver.effective_permissions():
            if perm.model != tag:
                continue
            if isinstance(ref, RefId) and perm.id == ref.id:
                return True
            if isinstance(ref, RefSlug) and perm.slug == ref.pattern:
                return True
        return False

    # ── Mutations ───────────────────────────────────────────
    # Changes go straight to the store; effective sets already computed by
    # this engine's resolver are NOT refreshed.

    def attach_role(self, role: Role | int, granted: bool = True) -> int:
        """Record a grant (or deny) of ``role``. No-op if the same row exists.

        Returns:
            Number of rows written (0 or 1).
        """
        role_id = _target_id(role, "role")
        store, subject_id = self._resolver.store, self._resolver.subject_id
        if (role_id, bool(granted)) in store.get_role_assignments(subject_id):
            return 0
        logger.info("Attaching role %s (granted=%s) to subject %s", role_id, granted, subject_id)
        return store.attach_role_assignment(subject_id, role_id, bool(granted))

    def detach_role(self, role: Role | int) -> int:
        """Remove every assignment row of ``role``. Returns rows removed."""
        role_id = _target_id(role, "role")
        removed = self._resolver.store.detach_role_assignment(self._resolver.subject_id, role_id)
        logger.info("Detached role %s from subject %s (%d rows)", role_id, self._resolver.subject_id, removed)
        return removed

    def detach_all_roles(self) -> int:
        removed = self._resolver.store.detach_role_assignment(self._resolver.subject_id, None)
        logger.info("Detached all roles from subject %s (%d rows)", self._resolver.subject_id, removed)
        return removed

    def attach_permission(self, permission: Permission | int, granted: bool = True) -> int:
        """Record a direct grant (or deny) of ``permission``. Idempotent per polarity."""
        permission_id = _target_id(permission, "permission")
        store, subject_id = self._resolver.store, self._resolver.subject_id
        if (permission_id, bool(granted)) in store.get_permission_assignments(subject_id):
            return 0
        logger.info("Attaching permission %s (granted=%s) to subject %s", permission_id, granted, subject_id)
        return store.attach_permission_assignment(subject_id, permission_id, bool(granted))

    def detach_permission(self, permission: Permission | int) -> int:
        permission_id = _target_id(permission, "permission")
        removed = self._resolver.store.detach_permission_assignment(self._resolver.subject_id, permission_id)
        logger.info(
            "Detached permission %s from subject %s (%d rows)", permission_id, self._resolver.subject_id, removed
        )
        return removed

    def detach_all_permissions(self) -> int:
        removed = self._resolver.store.detach_permission_assignment(self._resolver.subject_id, None)
        logger.info("Detached all permissions from subject %s (%d rows)", self._resolver.subject_id, removed)
        return removed


__all__ = ["AuthorizationEngine"]
