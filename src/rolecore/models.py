"""Core data models for rolecore.

Role, Permission and Assignment are frozen Pydantic models, so they are
hashable and effective sets can be plain ``frozenset`` values.
"""

from __future__ import annotations

import re
import unicodedata
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def slugify(value: str, separator: str = ".") -> str:
    """Build an identifier-safe slug from a human name.

    Example::

        >>> slugify("Billing Admin")
        'billing.admin'
        >>> slugify("Edit  posts!", "-")
        'edit-posts'
    """
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = value.lower()
    sep = re.escape(separator)
    value = re.sub(rf"[^{sep}\w\s]+", "", value)
    value = re.sub(rf"[{sep}_\s]+", separator, value)
    return value.strip(separator)


class Role(BaseModel):
    """Named bundle of permissions, organised into a descendant hierarchy.

    Descendant edges and attached permissions live in the assignment store,
    not on the model.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    slug: str
    name: str = ""
    description: str = ""

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        if not v or any(ch.isspace() for ch in v):
            raise ValueError(f"Invalid role slug: {v!r}")
        return v


class Permission(BaseModel):
    """Named capability, optionally scoped to an entity type.

    ``model`` is the entity-type tag (see :mod:`rolecore.entities`);
    an empty string means the permission is not entity-scoped.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    slug: str
    name: str = ""
    description: str = ""
    model: str = ""

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        if not v or any(ch.isspace() for ch in v):
            raise ValueError(f"Invalid permission slug: {v!r}")
        return v

    @property
    def entity_scoped(self) -> bool:
        return self.model != ""


class AssignmentKind(str, Enum):
    ROLE = "role"
    PERMISSION = "permission"


class Assignment(BaseModel):
    """Grant (``granted=True``) or recorded deny (``granted=False``) of a
    role or permission to a subject."""

    model_config = ConfigDict(frozen=True)

    subject_id: int | str
    kind: AssignmentKind
    target_id: int
    granted: bool = Field(default=True)


__all__ = [
    "Assignment",
    "AssignmentKind",
    "Permission",
    "Role",
    "slugify",
]
