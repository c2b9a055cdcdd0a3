from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

import structlog

from dms_api.core.errors import api_error
from dms_api.ports.base import ContentPort, PermissionPort, SearchPort, SignatureRequestPort, VersionPort

log = structlog.get_logger(__name__)

T = TypeVar("T")


class CapabilityKind(str, Enum):
    CONTENT = "content"
    VERSION = "version"
    SEARCH = "search"
    PERMISSION = "permission"
    SIGNATURE = "signature"


_PORT_TYPES: dict[CapabilityKind, type] = {
    CapabilityKind.CONTENT: ContentPort,
    CapabilityKind.VERSION: VersionPort,
    CapabilityKind.SEARCH: SearchPort,
    CapabilityKind.PERMISSION: PermissionPort,
    CapabilityKind.SIGNATURE: SignatureRequestPort,
}


class CapabilityRegistry:
    """Runtime lookup of the optional content-management capabilities.

    ``lookup`` returns the registered port or ``None``; an absent capability
    is an expected outcome, and each call site decides what absence means.
    """

    def __init__(self, ports: dict[CapabilityKind, Any] | None = None):
        self._ports: dict[CapabilityKind, Any] = {}
        for kind, port in (ports or {}).items():
            self.register(kind, port)

    def register(self, kind: CapabilityKind, port: Any) -> None:
        expected = _PORT_TYPES[kind]
        if not isinstance(port, expected):
            raise TypeError(f"{type(port).__name__} does not implement the {kind.value} capability")
        self._ports[kind] = port

    def unregister(self, kind: CapabilityKind) -> None:
        self._ports.pop(kind, None)

    def lookup(self, kind: CapabilityKind) -> Any | None:
        return self._ports.get(kind)

    def available(self) -> set[CapabilityKind]:
        return set(self._ports)

    def content(self) -> ContentPort | None:
        return self._ports.get(CapabilityKind.CONTENT)

    def version(self) -> VersionPort | None:
        return self._ports.get(CapabilityKind.VERSION)

    def search(self) -> SearchPort | None:
        return self._ports.get(CapabilityKind.SEARCH)

    def permission(self) -> PermissionPort | None:
        return self._ports.get(CapabilityKind.PERMISSION)

    def signature(self) -> SignatureRequestPort | None:
        return self._ports.get(CapabilityKind.SIGNATURE)


def require_capability(port: T | None, kind: CapabilityKind, operation: str) -> T:
    if port is not None:
        return port
    log.warning("capability_unavailable", capability=kind.value, operation=operation)
    raise api_error(
        424,
        "capability_unavailable",
        f"Operation '{operation}' requires the {kind.value} capability to be configured",
        {"capability": kind.value, "operation": operation},
        hint="Register a provider for this capability",
    )


@dataclass(frozen=True)
class CallOutcome:
    capability: CapabilityKind
    operation: str
    ok: bool
    error: str | None = None
    value: Any = None


async def best_effort(
    kind: CapabilityKind,
    operation: str,
    call: Callable[[], Awaitable[Any]],
    **context: Any,
) -> CallOutcome:
    """Run a tolerated capability call; failures are logged, never raised.

    The awaited result is kept on ``CallOutcome.value`` when the call succeeds.
    """
    try:
        value = await call()
    except Exception as exc:
        log.warning(
            "capability_call_failed",
            capability=kind.value,
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
            **context,
        )
        return CallOutcome(kind, operation, ok=False, error=str(exc))
    log.debug("capability_call_succeeded", capability=kind.value, operation=operation, **context)
    return CallOutcome(kind, operation, ok=True, value=value)
