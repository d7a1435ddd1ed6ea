"""Tests for the access guard."""

from __future__ import annotations

import logging

import pytest

from rolecore import (
    AccessGuard,
    AuthorizedSubject,
    ConfigurationError,
    EnforcementMode,
    ErrorRegistry,
    InMemoryAssignmentStore,
    PermissionDeniedError,
    RoleDeniedError,
)


@pytest.fixture
def editor(store: InMemoryAssignmentStore) -> AuthorizedSubject:
    store.attach_role_assignment(42, 2, True)
    return AuthorizedSubject(42, store)


class TestCheck:
    """Tests for check_role / check_permission."""

    def test_role_allowed(self, editor: AuthorizedSubject) -> None:
        result = AccessGuard().check_role(editor, "editor|admin")
        assert result.allowed
        assert not result.blocked
        assert result.requested == "editor|admin"

    def test_role_missing(self, editor: AuthorizedSubject) -> None:
        result = AccessGuard().check_role(editor, "editor|admin", all=True)
        assert result.blocked
        assert result.reason == "missing role: editor|admin"

    def test_permission_missing(self, editor: AuthorizedSubject) -> None:
        result = AccessGuard().check_permission(editor, "invoices.view")
        assert result.blocked
        assert result.reason == "missing permission: invoices.view"

    def test_off_mode_allows_everything(self, editor: AuthorizedSubject) -> None:
        guard = AccessGuard(EnforcementMode.OFF)
        assert guard.check_role(editor, "admin").allowed
        assert guard.check_permission(editor, "invoices.view").allowed

    def test_mode_from_string(self) -> None:
        assert AccessGuard("warn").mode is EnforcementMode.WARN  # type: ignore[arg-type]


class TestRequire:
    """Tests for require_role / require_permission."""

    def test_enforce_raises_role_denied(self, editor: AuthorizedSubject) -> None:
        with pytest.raises(RoleDeniedError) as exc_info:
            AccessGuard().require_role(editor, "admin")
        assert exc_info.value.requested == "admin"
        assert exc_info.value.details["subject_id"] == 42

    def test_enforce_raises_permission_denied(self, editor: AuthorizedSubject) -> None:
        with pytest.raises(PermissionDeniedError) as exc_info:
            AccessGuard().require_permission(editor, ["posts.edit", "invoices.view"], all=True)
        assert exc_info.value.code == "PERMISSION_DENIED"

    def test_enforce_allows(self, editor: AuthorizedSubject) -> None:
        AccessGuard().require_role(editor, "author")
        AccessGuard().require_permission(editor, "posts.*")

    def test_denial_logged(self, editor: AuthorizedSubject, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="rolecore.guard"):
            with pytest.raises(RoleDeniedError):
                AccessGuard().require_role(editor, "admin")
        record = caplog.records[0]
        assert record.getMessage() == "DENIED missing role: admin"
        assert record.subject_id == 42

    def test_warn_mode_logs_only(self, editor: AuthorizedSubject, caplog: pytest.LogCaptureFixture) -> None:
        guard = AccessGuard(EnforcementMode.WARN)
        with caplog.at_level(logging.WARNING, logger="rolecore.guard"):
            guard.require_role(editor, "admin")
            guard.require_permission(editor, "invoices.view")
        assert [r.getMessage().split()[0] for r in caplog.records] == ["WARN_DENIED", "WARN_DENIED"]

    def test_off_mode_never_raises(self, editor: AuthorizedSubject) -> None:
        AccessGuard(EnforcementMode.OFF).require_role(editor, "admin")


class TestErrorRegistry:
    """The raised error class is resolved by code from the registry."""

    def test_custom_error_class(self, editor: AuthorizedSubject) -> None:
        class TenantRoleDenied(RoleDeniedError):
            code = "ROLE_DENIED"

        registry = ErrorRegistry()
        registry.register("ROLE_DENIED", TenantRoleDenied)
        guard = AccessGuard(registry=registry)

        with pytest.raises(TenantRoleDenied) as exc_info:
            guard.require_role(editor, "admin")
        assert exc_info.value.requested == "admin"

    def test_missing_code(self, editor: AuthorizedSubject) -> None:
        guard = AccessGuard(registry=ErrorRegistry())
        with pytest.raises(ConfigurationError, match="PERMISSION_DENIED"):
            guard.require_permission(editor, "invoices.view")

    def test_non_access_error_rejected(self, editor: AuthorizedSubject) -> None:
        registry = ErrorRegistry()
        registry.register("ROLE_DENIED", ConfigurationError)
        with pytest.raises(ConfigurationError, match="No AccessDeniedError"):
            AccessGuard(registry=registry).require_role(editor, "admin")

    def test_allowed_skips_lookup(self, editor: AuthorizedSubject) -> None:
        AccessGuard(registry=ErrorRegistry()).require_role(editor, "editor")
