"""Error Hierarchy — typed, categorized exceptions for all chain manager failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation and conflict errors are raised before any side effect
    - Host errors abort before build_chain runs: nothing to clean up
    - ChainCleanupError means generated files may be orphaned: operator action needed
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with ChainManagerError base: FastAPI global handler catches all
    - ErrorContext as dataclass: host/chain coordinates without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_HOST = "external_host"
    FILESYSTEM = "filesystem"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    chain_id: int | None = None
    chain_name: str | None = None
    host: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class ChainManagerError(Exception):
    """Base exception for all chain manager errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "chain_id": self.context.chain_id,
                    "chain_name": self.context.chain_name,
                    "host": self.context.host,
                },
            }
        }


# ─── Validation / Conflict Errors (400-level) ───────────────────

class InsufficientNodesError(ChainManagerError):
    """Deploy request asks for fewer nodes than a chain can run with."""
    def __init__(self, requested: int, minimum: int, context: ErrorContext | None = None):
        super().__init__(
            f"A chain needs at least {minimum} nodes, requested {requested}",
            "TWO_NODES_AT_LEAST", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.requested = requested


class ChainIdExistsError(ChainManagerError):
    """Chain id already registered."""
    def __init__(self, chain_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.chain_id = chain_id
        super().__init__(
            f"Chain id {chain_id} already exists",
            "CHAIN_ID_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


class ChainNameExistsError(ChainManagerError):
    """Chain name already registered."""
    def __init__(self, chain_name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.chain_name = chain_name
        super().__init__(
            f"Chain name '{chain_name}' already exists",
            "CHAIN_NAME_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


class ResourceNotFoundError(ChainManagerError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Host Precondition Errors ────────────────────────────────────

class HostConnectError(ChainManagerError):
    """SSH connectivity check against a target host failed."""
    def __init__(self, host: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.host = host
        super().__init__(
            f"Connect to host:[{host}] failed",
            "HOST_CONNECT_ERROR", ErrorCategory.EXTERNAL_HOST,
            ErrorSeverity.ERROR, ctx, 502,
        )


class ImageNotExistsError(ChainManagerError):
    """Docker image for the requested version missing on a host (manual image policy)."""
    def __init__(self, host: str, version: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.host = host
        super().__init__(
            f"Docker image of version:[{version}] not exists on host:[{host}]",
            "IMAGE_NOT_EXISTS_ON_HOST", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.version = version


class RemoteCommandError(ChainManagerError):
    """A command executed over SSH exited non-zero."""
    def __init__(self, host: str, command: str, detail: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.host = host
        ctx.debug_info = {"command": command, "detail": detail}
        super().__init__(
            f"Remote command failed on host:[{host}]",
            "REMOTE_COMMAND_ERROR", ErrorCategory.EXTERNAL_HOST,
            ErrorSeverity.ERROR, ctx, 502,
        )


# ─── Build / Initialization Errors (500-level) ──────────────────

class ChainRootExistsError(ChainManagerError):
    """Generated files for the chain name already exist locally; build_chain would clobber them."""
    def __init__(self, chain_name: str, chain_root: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.chain_name = chain_name
        ctx.debug_info = {"chain_root": chain_root}
        super().__init__(
            f"Chain directory of [{chain_name}] already exists",
            "CHAIN_ROOT_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


class BuildChainError(ChainManagerError):
    """build_chain procedure failed to generate the chain config."""
    def __init__(self, detail: str, context: ErrorContext | None = None):
        super().__init__(
            f"Build chain config failed: {detail}",
            "BUILD_CHAIN_ERROR", ErrorCategory.EXTERNAL_HOST,
            ErrorSeverity.ERROR, context, 500,
        )


class ListHostNodeDirError(ChainManagerError):
    """Generated node directories of a host could not be listed."""
    def __init__(self, host: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.host = host
        super().__init__(
            f"List node directories of host:[{host}] failed",
            "LIST_HOST_NODE_DIR_ERROR", ErrorCategory.FILESYSTEM,
            ErrorSeverity.ERROR, ctx, 500,
        )


class NodeConfigError(ChainManagerError):
    """A generated node directory is missing or has a malformed config."""
    def __init__(self, node_dir: str, detail: str, context: ErrorContext | None = None):
        super().__init__(
            f"Read node config in [{node_dir}] failed: {detail}",
            "READ_NODE_CONFIG_ERROR", ErrorCategory.FILESYSTEM,
            ErrorSeverity.ERROR, context, 500,
        )
        self.node_dir = node_dir


class FrontConfigRenderError(ChainManagerError):
    """Front application.yml could not be written into a node directory."""
    def __init__(self, node_dir: str, context: ErrorContext | None = None):
        super().__init__(
            f"Generate front config in [{node_dir}] failed",
            "GENERATE_FRONT_YML_ERROR", ErrorCategory.FILESYSTEM,
            ErrorSeverity.ERROR, context, 500,
        )
        self.node_dir = node_dir


class InsertChainError(ChainManagerError):
    """Chain row insert affected no rows."""
    def __init__(self, chain_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.chain_id = chain_id
        super().__init__(
            f"Insert chain {chain_id} failed",
            "INSERT_CHAIN_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.ERROR, ctx, 500,
        )


class ChainCleanupError(ChainManagerError):
    """Compensating deletion of generated chain files failed — manual cleanup required."""
    def __init__(self, chain_name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.chain_name = chain_name
        super().__init__(
            f"Delete chain directory of [{chain_name}] failed after init error; "
            "remove it manually",
            "DELETE_CHAIN_ERROR", ErrorCategory.FILESYSTEM,
            ErrorSeverity.CRITICAL, ctx, 500,
        )


# ─── Infrastructure Errors ───────────────────────────────────────

class DatabaseError(ChainManagerError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
