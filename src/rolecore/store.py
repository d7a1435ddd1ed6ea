"""Assignment store interface and in-memory backend.

The authorization core never talks to a database directly. It consumes an
``AssignmentStore``: anything that can list a subject's raw role/permission
assignments, look up roles and permissions, and record assignment changes.

Provides:
- ``AssignmentStore`` — the protocol the resolver and engine depend on.
- ``InMemoryAssignmentStore`` — dict-backed implementation for tests,
  fixtures and embedding.
"""

from __future__ import annotations

import itertools
import logging
from typing import Protocol, runtime_checkable

from .exceptions import StoreError
from .models import Assignment, AssignmentKind, Permission, Role, slugify

logger = logging.getLogger(__name__)

SubjectId = int | str


@runtime_checkable
class AssignmentStore(Protocol):
    """Data-access capability consumed by the authorization core.

    Read operations return raw rows; write operations return the number of
    rows affected. Both polarities of an assignment may coexist for the same
    (subject, target) pair: the resolver decides what that means.
    """

    def get_role_assignments(self, subject_id: SubjectId) -> list[tuple[int, bool]]: ...

    def get_permission_assignments(self, subject_id: SubjectId) -> list[tuple[int, bool]]: ...

    def get_role(self, role_id: int) -> Role: ...

    def get_permission(self, permission_id: int) -> Permission: ...

    def get_role_children(self, role_id: int) -> list[int]: ...

    def get_role_permissions(self, role_id: int) -> list[int]: ...

    def attach_role_assignment(self, subject_id: SubjectId, role_id: int, granted: bool) -> int: ...

    def detach_role_assignment(self, subject_id: SubjectId, role_id: int | None = None) -> int: ...

    def attach_permission_assignment(self, subject_id: SubjectId, permission_id: int, granted: bool) -> int: ...

    def detach_permission_assignment(self, subject_id: SubjectId, permission_id: int | None = None) -> int: ...


def _id_of(value: Role | Permission | int) -> int:
    return value if isinstance(value, int) else value.id


class InMemoryAssignmentStore:
    """Dict-backed AssignmentStore.

    Assignment rows are kept per subject in insertion order, like a pivot
    table: attaching never replaces an existing row of the opposite polarity.

    Args:
        separator: Separator used when deriving slugs from names in
            :meth:`add_role` / :meth:`add_permission`.

    Example::

        store = InMemoryAssignmentStore()
        admin = store.add_role("Admin")
        editor = store.add_role("Editor")
        store.add_child(admin, editor)
        edit = store.add_permission("posts.edit")
        store.attach_permission_to_role(editor, edit)
        store.attach_role_assignment(42, admin.id, True)
    """

    def __init__(self, *, separator: str = ".") -> None:
        self._separator = separator
        self._roles: dict[int, Role] = {}
        self._permissions: dict[int, Permission] = {}
        self._role_children: dict[int, list[int]] = {}
        self._role_permissions: dict[int, list[int]] = {}
        self._role_rows: dict[SubjectId, list[tuple[int, bool]]] = {}
        self._permission_rows: dict[SubjectId, list[tuple[int, bool]]] = {}
        self._role_ids = itertools.count(1)
        self._permission_ids = itertools.count(1)

    # ── Seeding ─────────────────────────────────────────────

    def add_role(
        self,
        name: str,
        *,
        slug: str | None = None,
        role_id: int | None = None,
        description: str = "",
    ) -> Role:
        """Create and store a role. The slug defaults to ``slugify(name)``."""
        role = Role(
            id=role_id if role_id is not None else self._next_id(self._role_ids, self._roles),
            slug=slug or slugify(name, self._separator),
            name=name,
            description=description,
        )
        self._ensure_unique_slug(role, self._roles.values())
        self._roles[role.id] = role
        return role

    def add_permission(
        self,
        name: str,
        *,
        slug: str | None = None,
        permission_id: int | None = None,
        description: str = "",
        model: str = "",
    ) -> Permission:
        """Create and store a permission. ``model`` is the entity-type tag."""
        permission = Permission(
            id=permission_id if permission_id is not None else self._next_id(self._permission_ids, self._permissions),
            slug=slug or slugify(name, self._separator),
            name=name,
            description=description,
            model=model,
        )
        self._ensure_unique_slug(permission, self._permissions.values())
        self._permissions[permission.id] = permission
        return permission

    def add_child(self, parent: Role | int, child: Role | int) -> None:
        """Add a parent → child descendant edge."""
        parent_id, child_id = _id_of(parent), _id_of(child)
        self.get_role(parent_id)
        self.get_role(child_id)
        children = self._role_children.setdefault(parent_id, [])
        if child_id not in children:
            children.append(child_id)

    def attach_permission_to_role(self, role: Role | int, permission: Permission | int) -> None:
        """Attach a permission directly to a role."""
        role_id, permission_id = _id_of(role), _id_of(permission)
        self.get_role(role_id)
        self.get_permission(permission_id)
        attached = self._role_permissions.setdefault(role_id, [])
        if permission_id not in attached:
            attached.append(permission_id)

    def assignments(self, subject_id: SubjectId) -> list[Assignment]:
        """All assignment rows of a subject, roles first, as typed records."""
        return [
            Assignment(subject_id=subject_id, kind=kind, target_id=target_id, granted=granted)
            for kind, rows in (
                (AssignmentKind.ROLE, self._role_rows),
                (AssignmentKind.PERMISSION, self._permission_rows),
            )
            for target_id, granted in rows.get(subject_id, ())
        ]

    # ── AssignmentStore: reads ──────────────────────────────

    def get_role_assignments(self, subject_id: SubjectId) -> list[tuple[int, bool]]:
        return list(self._role_rows.get(subject_id, ()))

    def get_permission_assignments(self, subject_id: SubjectId) -> list[tuple[int, bool]]:
        return list(self._permission_rows.get(subject_id, ()))

    def get_role(self, role_id: int) -> Role:
        try:
            return self._roles[role_id]
        except KeyError:
            raise StoreError(f"Unknown role id: {role_id}", role_id=role_id) from None

    def get_permission(self, permission_id: int) -> Permission:
        try:
            return self._permissions[permission_id]
        except KeyError:
            raise StoreError(f"Unknown permission id: {permission_id}", permission_id=permission_id) from None

    def get_role_children(self, role_id: int) -> list[int]:
        return list(self._role_children.get(role_id, ()))

    def get_role_permissions(self, role_id: int) -> list[int]:
        return list(self._role_permissions.get(role_id, ()))

    # ── AssignmentStore: writes ─────────────────────────────

    def attach_role_assignment(self, subject_id: SubjectId, role_id: int, granted: bool) -> int:
        self.get_role(role_id)
        self._role_rows.setdefault(subject_id, []).append((role_id, bool(granted)))
        return 1

    def detach_role_assignment(self, subject_id: SubjectId, role_id: int | None = None) -> int:
        return self._detach(self._role_rows, subject_id, role_id)

    def attach_permission_assignment(self, subject_id: SubjectId, permission_id: int, granted: bool) -> int:
        self.get_permission(permission_id)
        self._permission_rows.setdefault(subject_id, []).append((permission_id, bool(granted)))
        return 1

    def detach_permission_assignment(self, subject_id: SubjectId, permission_id: int | None = None) -> int:
        return self._detach(self._permission_rows, subject_id, permission_id)

    # ── Internals ───────────────────────────────────────────

    @staticmethod
    def _detach(
        rows_by_subject: dict[SubjectId, list[tuple[int, bool]]],
        subject_id: SubjectId,
        target_id: int | None,
    ) -> int:
        rows = rows_by_subject.get(subject_id, [])
        if target_id is None:
            kept: list[tuple[int, bool]] = []
        else:
            kept = [row for row in rows if row[0] != target_id]
        removed = len(rows) - len(kept)
        logger.debug("Detached %d assignment rows from subject %s", removed, subject_id)
        if kept:
            rows_by_subject[subject_id] = kept
        else:
            rows_by_subject.pop(subject_id, None)
        return removed

    @staticmethod
    def _next_id(counter: itertools.count, existing: dict[int, object]) -> int:
        for candidate in counter:
            if candidate not in existing:
                return candidate
        raise StoreError("id counter exhausted")  # pragma: no cover

    @staticmethod
    def _ensure_unique_slug(item: Role | Permission, existing) -> None:
        for other in existing:
            if other.slug == item.slug and other.id != item.id:
                raise StoreError(f"Duplicate slug: {item.slug}", slug=item.slug)


__all__ = [
    "AssignmentStore",
    "InMemoryAssignmentStore",
    "SubjectId",
]
