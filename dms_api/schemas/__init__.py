from dms_api.schemas.common import DeleteResponse, ErrorPayload
from dms_api.schemas.document import DocumentIn, DocumentOut, DocumentVersionOut
from dms_api.schemas.folder import FolderIn, FolderOut
from dms_api.schemas.metadata import DocumentMetadataIn, DocumentMetadataOut
from dms_api.schemas.permission import PermissionCheckOut, PermissionIn, PermissionOut
from dms_api.schemas.signature import (
    DocumentSigningStatusOut,
    ProviderStatusIn,
    SignatureIn,
    SignatureOut,
    SignatureRequestIn,
    SignatureRequestOut,
    VerificationIn,
    VerificationOut,
)
from dms_api.schemas.signature_provider import SignatureProviderIn, SignatureProviderOut
from dms_api.schemas.tag import DocumentTagIn, DocumentTagOut, TagIn, TagOut

__all__ = [
    "DeleteResponse",
    "ErrorPayload",
    "DocumentIn",
    "DocumentOut",
    "DocumentVersionOut",
    "FolderIn",
    "FolderOut",
    "DocumentMetadataIn",
    "DocumentMetadataOut",
    "PermissionCheckOut",
    "PermissionIn",
    "PermissionOut",
    "DocumentSigningStatusOut",
    "ProviderStatusIn",
    "SignatureIn",
    "SignatureOut",
    "SignatureRequestIn",
    "SignatureRequestOut",
    "VerificationIn",
    "VerificationOut",
    "SignatureProviderIn",
    "SignatureProviderOut",
    "DocumentTagIn",
    "DocumentTagOut",
    "TagIn",
    "TagOut",
]
