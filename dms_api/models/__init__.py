from dms_api.models.entities import (
    Base,
    Document,
    DocumentMetadata,
    DocumentPermission,
    DocumentSignature,
    DocumentTag,
    DocumentVersion,
    Folder,
    SignatureProvider,
    SignatureRequest,
    SignatureVerification,
    Tag,
    UtcDateTime,
    ensure_utc,
    new_id,
    now_utc,
)
from dms_api.models.enums import (
    DocumentStatus,
    DocumentType,
    PermissionType,
    SecurityLevel,
    SignatureFormat,
    SignatureStatus,
    SignatureType,
    StorageType,
    VerificationStatus,
)

__all__ = [
    "Base",
    "Document",
    "DocumentMetadata",
    "DocumentPermission",
    "DocumentSignature",
    "DocumentTag",
    "DocumentVersion",
    "Folder",
    "SignatureProvider",
    "SignatureRequest",
    "SignatureVerification",
    "Tag",
    "UtcDateTime",
    "ensure_utc",
    "new_id",
    "now_utc",
    "DocumentStatus",
    "DocumentType",
    "PermissionType",
    "SecurityLevel",
    "SignatureFormat",
    "SignatureStatus",
    "SignatureType",
    "StorageType",
    "VerificationStatus",
]
