"""Shared fixtures: a small blog role hierarchy.

    admin ──► editor ──► author
      │
      └────► billing.admin

    editor:        posts.edit (model "post")
    author:        posts.create
    billing.admin: invoices.view
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from rolecore import (
    EntityTypeRegistry,
    InMemoryAssignmentStore,
    RbacConfig,
)


@dataclass
class User:
    id: int
    name: str = ""


@dataclass
class Post:
    id: int
    user_id: int


@dataclass
class Comment:
    id: int
    user_id: int


@pytest.fixture
def store() -> InMemoryAssignmentStore:
    store = InMemoryAssignmentStore()
    admin = store.add_role("Admin", role_id=1)
    editor = store.add_role("Editor", role_id=2)
    author = store.add_role("Author", role_id=3)
    billing = store.add_role("Billing Admin", slug="billing.admin", role_id=4)
    store.add_child(admin, editor)
    store.add_child(editor, author)
    store.add_child(admin, billing)

    edit = store.add_permission("Edit posts", slug="posts.edit", permission_id=10, model="post")
    create = store.add_permission("Create posts", slug="posts.create", permission_id=11)
    invoices = store.add_permission("View invoices", slug="invoices.view", permission_id=12)
    store.add_permission("Moderate comments", slug="comments.moderate", permission_id=13, model="comment")
    store.attach_permission_to_role(editor, edit)
    store.attach_permission_to_role(author, create)
    store.attach_permission_to_role(billing, invoices)
    return store


@pytest.fixture
def entity_types() -> EntityTypeRegistry:
    registry = EntityTypeRegistry()
    registry.register(Post, "post")
    registry.register(Comment, "comment")
    return registry


@pytest.fixture
def config() -> RbacConfig:
    return RbacConfig()


@pytest.fixture
def user() -> User:
    return User(id=42, name="alice")
