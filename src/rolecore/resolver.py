"""Effective-set resolution for a single subject.

Given the subject's raw assignments and the role graph, compute:

- **effective roles**: granted roles plus their descendants, minus the
  denied closure (denied roles plus *their* descendants). Deny wins at any
  depth.
- **effective permissions**: permissions of every effective role plus
  directly granted permissions, minus directly denied permissions.

A subject with both a granted and a denied row for the same role or
permission is treated as denied. A missing assignment is never a deny: it
only fails to grant.

Results are memoized for the lifetime of the resolver instance. Nothing is
invalidated when assignments change; build a new resolver to see changes.
"""

from __future__ import annotations

import logging
from functools import cached_property

from .graph import RoleGraph
from .models import Permission, Role
from .store import AssignmentStore, SubjectId

logger = logging.getLogger(__name__)


def _split_rows(rows: list[tuple[int, bool]]) -> tuple[frozenset[int], frozenset[int]]:
    granted = frozenset(target for target, is_granted in rows if is_granted)
    denied = frozenset(target for target, is_granted in rows if not is_granted)
    return granted, denied


class EffectiveSetResolver:
    """Resolve effective roles and permissions for one subject.

    Args:
        store: Assignment store to read from.
        subject_id: Identity of the subject being resolved.
        graph: Role graph to traverse. Defaults to a graph reading edges from
            ``store``; pass a shared instance to reuse closures.
    """

    def __init__(
        self,
        store: AssignmentStore,
        subject_id: SubjectId,
        *,
        graph: RoleGraph | None = None,
    ) -> None:
        self._store = store
        self._subject_id = subject_id
        self._graph = graph if graph is not None else RoleGraph.from_store(store)

    @property
    def subject_id(self) -> SubjectId:
        return self._subject_id

    @property
    def store(self) -> AssignmentStore:
        return self._store

    @property
    def graph(self) -> RoleGraph:
        return self._graph

    # ── Raw assignments (snapshot, fetched once) ────────────

    @cached_property
    def _role_rows(self) -> tuple[frozenset[int], frozenset[int]]:
        return _split_rows(self._store.get_role_assignments(self._subject_id))

    @cached_property
    def _permission_rows(self) -> tuple[frozenset[int], frozenset[int]]:
        return _split_rows(self._store.get_permission_assignments(self._subject_id))

    def granted_roles(self) -> frozenset[Role]:
        """Roles directly granted to the subject (before inheritance/deny)."""
        return frozenset(self._store.get_role(role_id) for role_id in self._role_rows[0])

    def denied_roles(self) -> frozenset[Role]:
        """Roles explicitly denied to the subject."""
        return frozenset(self._store.get_role(role_id) for role_id in self._role_rows[1])

    def granted_permissions(self) -> frozenset[Permission]:
        """Permissions directly granted to the subject."""
        return frozenset(self._store.get_permission(pid) for pid in self._permission_rows[0])

    def denied_permissions(self) -> frozenset[Permission]:
        """Permissions explicitly denied to the subject."""
        return frozenset(self._store.get_permission(pid) for pid in self._permission_rows[1])

    # ── Resolution ──────────────────────────────────────────

    @cached_property
    def _denied_role_ids(self) -> frozenset[int]:
        return self._graph.closure(self._role_rows[1])

    @cached_property
    def _effective_role_ids(self) -> frozenset[int]:
        granted, _ = self._role_rows
        denied_closure = self._denied_role_ids
        result = self._graph.closure(role_id for role_id in granted if role_id not in denied_closure)
        result -= denied_closure
        logger.debug(
            "Resolved roles for subject %s: granted=%d denied_closure=%d effective=%d",
            self._subject_id,
            len(granted),
            len(denied_closure),
            len(result),
        )
        return result

    @cached_property
    def _effective_roles(self) -> frozenset[Role]:
        return frozenset(self._store.get_role(role_id) for role_id in self._effective_role_ids)

    @cached_property
    def _role_permissions(self) -> frozenset[Permission]:
        permission_ids: set[int] = set()
        for role_id in self._effective_role_ids:
            permission_ids.update(self._store.get_role_permissions(role_id))
        return frozenset(self._store.get_permission(pid) for pid in permission_ids)

    @cached_property
    def _effective_permissions(self) -> frozenset[Permission]:
        granted_ids, denied_ids = self._permission_rows
        from_roles = {p for p in self._role_permissions if p.id not in denied_ids}
        direct = {self._store.get_permission(pid) for pid in granted_ids - denied_ids}
        result = frozenset(from_roles | direct)
        logger.debug(
            "Resolved permissions for subject %s: from_roles=%d direct=%d denied=%d effective=%d",
            self._subject_id,
            len(self._role_permissions),
            len(granted_ids),
            len(denied_ids),
            len(result),
        )
        return result

    def denied_closure(self) -> frozenset[Role]:
        """Denied roles plus all of their descendants."""
        return frozenset(self._store.get_role(role_id) for role_id in self._denied_role_ids)

    def effective_roles(self) -> frozenset[Role]:
        """Granted roles and descendants, minus the denied closure."""
        return self._effective_roles

    def role_permissions(self) -> frozenset[Permission]:
        """Union of the permissions attached to every effective role."""
        return self._role_permissions

    def effective_permissions(self) -> frozenset[Permission]:
        """``(role permissions ∪ direct grants) − direct denies``."""
        return self._effective_permissions


__all__ = ["EffectiveSetResolver"]
