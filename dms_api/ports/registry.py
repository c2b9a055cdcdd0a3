import structlog

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry
from dms_api.core.config import Settings, settings
from dms_api.ports.local_fs import LocalFsContentStore, LocalFsVersionStore

log = structlog.get_logger(__name__)


def build_capability_registry(config: Settings) -> CapabilityRegistry:
    registry = CapabilityRegistry()
    backends = {
        CapabilityKind.CONTENT: (config.content_backend, LocalFsContentStore),
        CapabilityKind.VERSION: (config.version_backend, LocalFsVersionStore),
    }
    for kind, (backend, local_cls) in backends.items():
        name = backend.lower()
        if name == "fs":
            registry.register(kind, local_cls(config.local_content_store_path))
        elif name != "none":
            raise ValueError(f"Unsupported {kind.value} backend: {backend}")
    log.info("capabilities_configured", available=sorted(k.value for k in registry.available()))
    return registry


capability_registry = build_capability_registry(settings)


def get_capabilities() -> CapabilityRegistry:
    return capability_registry
