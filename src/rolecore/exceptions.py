"""Unified exception hierarchy for rolecore.

All errors raised by the package inherit from RbacError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to exception classes

Query functions never raise for "access denied": they return ``False``.
Only :mod:`rolecore.guard` turns a failed check into an AccessDeniedError.

Usage:
    from rolecore.exceptions import (
        RbacError,
        ConfigurationError,
        InvalidReferenceError,
    )

Applications may define thin subclasses for their own errors:
    @register_error("TENANT_ROLE_ERROR")
    class TenantRoleError(RbacError):
        code = "TENANT_ROLE_ERROR"
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence, TypeVar, cast

__all__ = [
    # Base hierarchy
    "RbacError",
    "ConfigurationError",
    "CyclicRoleGraphError",
    "InvalidReferenceError",
    "StoreError",
    "AccessDeniedError",
    "RoleDeniedError",
    "PermissionDeniedError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class RbacError(Exception):
    """Base exception for rolecore.

    Attributes:
        code: Stable error code string (e.g. "ROLE_DENIED").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal authorization error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(RbacError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class CyclicRoleGraphError(ConfigurationError):
    """The role descendant graph contains a cycle.

    Attributes:
        cycle: Role ids forming the cycle, first id repeated at the end.
    """

    code: str = "CYCLIC_ROLE_GRAPH"
    message: str = "Role graph contains a cycle"

    def __init__(self, cycle: Sequence[int], message: str | None = None, **kwargs: Any) -> None:
        self.cycle = list(cycle)
        if message is None:
            message = "Role graph contains a cycle: " + " -> ".join(str(r) for r in self.cycle)
        super().__init__(message, cycle=self.cycle, **kwargs)


class InvalidReferenceError(RbacError, ValueError):
    """Malformed role, permission or entity reference."""

    code: str = "INVALID_REFERENCE"
    message: str = "Invalid reference"


class StoreError(RbacError):
    """Assignment store failure (unknown id, backend error)."""

    code: str = "STORE_ERROR"


class AccessDeniedError(RbacError):
    """A required role or permission check failed.

    Attributes:
        requested: The role/permission identifier(s) originally requested.
    """

    code: str = "ACCESS_DENIED"
    message: str = "Access denied"

    def __init__(self, requested: Any, message: str | None = None, **kwargs: Any) -> None:
        self.requested = requested
        if message is None:
            message = f"{self.message}: {requested!r}"
        super().__init__(message, requested=requested, **kwargs)


class RoleDeniedError(AccessDeniedError):
    """Subject does not have the required role(s)."""

    code: str = "ROLE_DENIED"
    message: str = "Role denied"


class PermissionDeniedError(AccessDeniedError):
    """Subject does not have the required permission(s)."""

    code: str = "PERMISSION_DENIED"
    message: str = "Permission denied"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[RbacError])


class ErrorRegistry:
    """Registry for mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[RbacError]] = {}

    def register(self, code: str, error_cls: type[RbacError]) -> None:
        if code in self._errors and self._errors[code] is not error_cls:
            logger.warning("Error code %s re-registered: %s -> %s", code, self._errors[code], error_cls)
        self._errors[code] = error_cls

    def get(self, code: str) -> type[RbacError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[RbacError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("MY_CUSTOM_ERROR")
        class MyCustomError(RbacError):
            code = "MY_CUSTOM_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", RbacError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("CYCLIC_ROLE_GRAPH", CyclicRoleGraphError)
error_registry.register("INVALID_REFERENCE", InvalidReferenceError)
error_registry.register("STORE_ERROR", StoreError)
error_registry.register("ACCESS_DENIED", AccessDeniedError)
error_registry.register("ROLE_DENIED", RoleDeniedError)
error_registry.register("PERMISSION_DENIED", PermissionDeniedError)
