from dms_api.api.api_v1.endpoints import (
    documents,
    folders,
    metadata,
    permissions,
    signature_providers,
    signature_requests,
    signatures,
    tags,
    verifications,
    versions,
)

__all__ = [
    "documents",
    "folders",
    "metadata",
    "permissions",
    "signature_providers",
    "signature_requests",
    "signatures",
    "tags",
    "verifications",
    "versions",
]
