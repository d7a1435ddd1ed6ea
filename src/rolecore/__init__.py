from .config import LogLevel, PretendConfig, RbacConfig, load_rbac_config_from_env
from .dispatch import QueryKind, dispatch_query, resolve_query_name
from .engine import AuthorizationEngine
from .entities import EntityTypeRegistry, default_entity_types, entity_type
from .exceptions import (
    AccessDeniedError,
    ConfigurationError,
    CyclicRoleGraphError,
    ErrorRegistry,
    InvalidReferenceError,
    PermissionDeniedError,
    RbacError,
    RoleDeniedError,
    StoreError,
    error_registry,
    register_error,
)
from .graph import RoleGraph
from .guard import AccessGuard, EnforcementMode, GuardResult
from .logging import (
    RbacFormatter,
    SubjectLoggerAdapter,
    get_subject_logger,
    safe_preview,
    setup_logging,
)
from .models import Assignment, AssignmentKind, Permission, Role, slugify
from .refs import RefId, RefSlug, normalize_refs
from .resolver import EffectiveSetResolver
from .store import AssignmentStore, InMemoryAssignmentStore
from .subject import Authorizable, AuthorizedSubject, Authorizer, subject_identity

__all__ = [
    'AccessDeniedError',
    'AccessGuard',
    'Assignment',
    'AssignmentKind',
    'AssignmentStore',
    'Authorizable',
    'AuthorizationEngine',
    'AuthorizedSubject',
    'Authorizer',
    'ConfigurationError',
    'CyclicRoleGraphError',
    'EffectiveSetResolver',
    'EnforcementMode',
    'EntityTypeRegistry',
    'ErrorRegistry',
    'GuardResult',
    'InMemoryAssignmentStore',
    'InvalidReferenceError',
    'LogLevel',
    'Permission',
    'PermissionDeniedError',
    'PretendConfig',
    'QueryKind',
    'RbacConfig',
    'RbacError',
    'RbacFormatter',
    'RefId',
    'RefSlug',
    'Role',
    'RoleDeniedError',
    'RoleGraph',
    'StoreError',
    'SubjectLoggerAdapter',
    'default_entity_types',
    'dispatch_query',
    'entity_type',
    'error_registry',
    'get_subject_logger',
    'load_rbac_config_from_env',
    'normalize_refs',
    'register_error',
    'resolve_query_name',
    'safe_preview',
    'setup_logging',
    'slugify',
    'subject_identity',
]
