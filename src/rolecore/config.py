"""Configuration contract for rolecore.

Pydantic-validated models for everything the authorization core consumes:
the slug separator, simulation ("pretend") switches and logging settings.

Configuration is always passed explicitly to the objects that need it
(engine, subject wrapper, guard). There is no ambient global config: tests
inject a ``RbacConfig`` with pretend mode enabled without touching shared
state.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PretendConfig(BaseModel):
    """Simulation mode: force query results without resolving assignments.

    When ``enabled`` is True every query short-circuits and returns the
    configured boolean for its operation kind:

    - ``role_is``  — role queries (``role_is``, ``has_role``, ...)
    - ``may``      — permission queries (``may``, ``has_permission``, ...)
    - ``allowed``  — entity-level ``allowed`` checks
    """

    model_config = {"extra": "forbid", "frozen": True}

    enabled: bool = Field(
        default=False,
        description="Enable simulation mode. Disabled = real resolution.",
    )
    role_is: bool = Field(default=True, description="Forced result of role queries")
    may: bool = Field(default=True, description="Forced result of permission queries")
    allowed: bool = Field(default=True, description="Forced result of entity checks")

    def result_for(self, option: str) -> bool:
        """Forced result for an operation kind (``role_is``, ``may``, ``allowed``)."""
        return bool(getattr(self, option))


class RbacConfig(BaseModel):
    """Configuration for the authorization core.

    Attributes:
        separator: Word separator used when deriving slugs from names
            (``EditArticles`` → ``edit.articles``).
        pretend: Simulation mode switches.
        strict_graph: Validate the role graph for cycles before traversal and
            fail with CyclicRoleGraphError instead of silently stopping.
        log_level: Logging level used by :func:`rolecore.logging.setup_logging`.
        log_json: Use JSON log format.
    """

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",  # Prevent accidental extra fields
        "frozen": True,
    }

    separator: str = Field(default=".", description="Slug word separator")
    pretend: PretendConfig = Field(default_factory=PretendConfig)
    strict_graph: bool = Field(default=False, description="Fail on cyclic role graphs")
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_json: bool = Field(default=False)

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Separator must be a single non-alphanumeric character."""
        if len(v) != 1 or v.isalnum() or v.isspace():
            raise ValueError(f"Invalid separator: {v!r}. Must be a single non-alphanumeric character")
        if v in ",|*":
            raise ValueError(f"Invalid separator: {v!r}. ',', '|' and '*' are reserved")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")


_TRUTHY = ("true", "1", "yes", "on")


def load_rbac_config_from_env() -> RbacConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is used in rolecore.

    Environment variables:
    - RBAC_SEPARATOR: Slug word separator (default: ".")
    - RBAC_PRETEND_ENABLED: Enable simulation mode (true/false)
    - RBAC_PRETEND_ROLE_IS: Forced role query result (default: true)
    - RBAC_PRETEND_MAY: Forced permission query result (default: true)
    - RBAC_PRETEND_ALLOWED: Forced entity check result (default: true)
    - RBAC_STRICT_GRAPH: Fail on cyclic role graphs (default: false)
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)

    Returns:
        RbacConfig instance with values from environment or defaults.
    """
    import os

    def _flag(name: str, default: str) -> bool:
        return os.getenv(name, default).strip().lower() in _TRUTHY

    pretend = PretendConfig(
        enabled=_flag("RBAC_PRETEND_ENABLED", "false"),
        role_is=_flag("RBAC_PRETEND_ROLE_IS", "true"),
        may=_flag("RBAC_PRETEND_MAY", "true"),
        allowed=_flag("RBAC_PRETEND_ALLOWED", "true"),
    )

    return RbacConfig(
        separator=os.getenv("RBAC_SEPARATOR", "."),
        pretend=pretend,
        strict_graph=_flag("RBAC_STRICT_GRAPH", "false"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=_flag("LOG_JSON", "false"),
    )


__all__ = [
    "LogLevel",
    "PretendConfig",
    "RbacConfig",
    "load_rbac_config_from_env",
]
