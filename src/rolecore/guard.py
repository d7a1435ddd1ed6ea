"""Access guard — turns failed queries into access-denied signals.

Queries return booleans. Request-handling layers (HTTP middleware, task
runners, CLI commands) usually need an exception carrying what was asked
for. The guard is that conversion, kept out of the query engine.

Provides:
- ``EnforcementMode`` — three-state toggle: off / warn / enforce.
- ``GuardResult`` — result of a role or permission check.
- ``AccessGuard`` — ``check_*`` returns a GuardResult, ``require_*`` raises
  the error registered for ``ROLE_DENIED`` / ``PERMISSION_DENIED`` in enforce
  mode (RoleDeniedError / PermissionDeniedError unless overridden).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .exceptions import AccessDeniedError, ConfigurationError, ErrorRegistry, error_registry
from .logging import get_subject_logger
from .refs import RefInput
from .subject import Authorizable


# ── Enforcement Mode ────────────────────────────────────────────


class EnforcementMode(str, Enum):
    """Three-state enforcement toggle.

    - ``off``     — no checks, everything allowed.
    - ``warn``    — check, log denials as WARNING, but allow through.
    - ``enforce`` — check and deny on failure (production).
    """

    OFF = "off"
    WARN = "warn"
    ENFORCE = "enforce"


# ── Guard Result ─────────────────────────────────────────────────


@dataclass
class GuardResult:
    """Result from a guard check."""

    allowed: bool = True
    reason: str = ""
    requested: Any = None

    @property
    def blocked(self) -> bool:
        return not self.allowed


# ── Access Guard ─────────────────────────────────────────────────


class AccessGuard:
    """Role and permission gate for request-handling code.

    Args:
        mode: Enforcement mode (default: enforce).
        registry: Error registry used to resolve the raised error class by
            code. Register an AccessDeniedError subclass under
            ``ROLE_DENIED`` or ``PERMISSION_DENIED`` to raise your own type.

    Usage::

        guard = AccessGuard()
        guard.require_role(user, "admin|moderator")
        guard.require_permission(user, "posts.edit, posts.publish", all=True)
    """

    def __init__(
        self,
        mode: EnforcementMode = EnforcementMode.ENFORCE,
        *,
        registry: ErrorRegistry | None = None,
    ) -> None:
        self._mode = EnforcementMode(mode)
        self._registry = registry if registry is not None else error_registry

    @property
    def mode(self) -> EnforcementMode:
        return self._mode

    def check_role(self, subject: Authorizable, roles: RefInput, all: bool = False) -> GuardResult:
        """Check ``subject.role_is(roles, all)``."""
        if self._mode is EnforcementMode.OFF:
            return GuardResult(requested=roles)
        if subject.role_is(roles, all):
            return GuardResult(requested=roles)
        return GuardResult(allowed=False, reason=f"missing role: {roles}", requested=roles)

    def check_permission(self, subject: Authorizable, permissions: RefInput, all: bool = False) -> GuardResult:
        """Check ``subject.may(permissions, all)``."""
        if self._mode is EnforcementMode.OFF:
            return GuardResult(requested=permissions)
        if subject.may(permissions, all):
            return GuardResult(requested=permissions)
        return GuardResult(allowed=False, reason=f"missing permission: {permissions}", requested=permissions)

    def require_role(self, subject: Authorizable, roles: RefInput, all: bool = False) -> None:
        """Raise the ``ROLE_DENIED`` error unless the subject has the role(s)."""
        self._enforce(subject, self.check_role(subject, roles, all), "ROLE_DENIED")

    def require_permission(self, subject: Authorizable, permissions: RefInput, all: bool = False) -> None:
        """Raise the ``PERMISSION_DENIED`` error unless the subject has the permission(s)."""
        self._enforce(subject, self.check_permission(subject, permissions, all), "PERMISSION_DENIED")

    def _error_class(self, code: str) -> type[AccessDeniedError]:
        error_cls = self._registry.get(code)
        if error_cls is None or not issubclass(error_cls, AccessDeniedError):
            raise ConfigurationError(f"No AccessDeniedError registered for {code}", error_code=code)
        return error_cls

    def _enforce(self, subject: Any, result: GuardResult, code: str) -> None:
        subject_id = getattr(subject, "id", subject)
        log = get_subject_logger(__name__, subject_id=subject_id)
        if result.allowed:
            log.debug("ALLOWED %r", result.requested)
            return

        if self._mode is EnforcementMode.WARN:
            log.warning("WARN_DENIED %s (would block in enforce mode)", result.reason)
            return

        log.warning("DENIED %s", result.reason)
        raise self._error_class(code)(result.requested, subject_id=subject_id)


__all__ = [
    "AccessGuard",
    "EnforcementMode",
    "GuardResult",
]
