"""Tests for query-name dispatch."""

from __future__ import annotations

import pytest

from rolecore import InvalidReferenceError, QueryKind, dispatch_query, resolve_query_name
from rolecore.dispatch import words_to_slug


class TestWordsToSlug:
    def test_camel_case(self) -> None:
        assert words_to_slug("EditArticles") == "edit.articles"

    def test_snake_case(self) -> None:
        assert words_to_slug("edit_articles", "-") == "edit-articles"

    def test_single_word(self) -> None:
        assert words_to_slug("Admin") == "admin"


class TestResolveQueryName:
    """Tests for resolve_query_name()."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("isAdmin", (QueryKind.ROLE_IS, "admin")),
            ("is_admin", (QueryKind.ROLE_IS, "admin")),
            ("isBillingAdmin", (QueryKind.ROLE_IS, "billing.admin")),
            ("canEditArticles", (QueryKind.MAY, "edit.articles")),
            ("can_edit_articles", (QueryKind.MAY, "edit.articles")),
            ("allowedUpdatePost", (QueryKind.ALLOWED, "update.post")),
            ("allowed_update_post", (QueryKind.ALLOWED, "update.post")),
        ],
    )
    def test_names(self, name: str, expected: tuple[QueryKind, str]) -> None:
        assert resolve_query_name(name) == expected

    def test_custom_separator(self) -> None:
        assert resolve_query_name("canEditArticles", separator="-") == (QueryKind.MAY, "edit-articles")

    @pytest.mark.parametrize("name", ["isolate", "canada", "delete", "is", "can_", ""])
    def test_unrecognised(self, name: str) -> None:
        with pytest.raises(InvalidReferenceError):
            resolve_query_name(name)


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def role_is(self, *args):
        self.calls.append(("role_is", *args))
        return True

    def may(self, *args):
        self.calls.append(("may", *args))
        return False

    def allowed(self, *args):
        self.calls.append(("allowed", *args))
        return True


class TestDispatchQuery:
    """Tests for dispatch_query()."""

    def test_role_is(self) -> None:
        target = _Recorder()
        assert dispatch_query(target, "isAdmin") is True
        assert target.calls == [("role_is", "admin")]

    def test_may(self) -> None:
        target = _Recorder()
        assert dispatch_query(target, "canEditPosts") is False
        assert target.calls == [("may", "edit.posts")]

    def test_allowed_passes_entity(self) -> None:
        target = _Recorder()
        entity = object()
        assert dispatch_query(target, "allowedEditPost", entity, False, "owner_id") is True
        assert target.calls == [("allowed", "edit.post", entity, False, "owner_id")]

    def test_allowed_requires_entity(self) -> None:
        with pytest.raises(InvalidReferenceError):
            dispatch_query(_Recorder(), "allowedEditPost")
