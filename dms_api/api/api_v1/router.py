from fastapi import APIRouter

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

api_router = APIRouter()
api_router.include_router(folders.router, tags=["folders"])
api_router.include_router(documents.router, tags=["documents"])
api_router.include_router(versions.router, tags=["versions"])
api_router.include_router(tags.router, tags=["tags"])
api_router.include_router(metadata.router, tags=["metadata"])
api_router.include_router(permissions.router, tags=["permissions"])
api_router.include_router(signatures.router, tags=["signatures"])
api_router.include_router(signature_requests.router, tags=["signature_requests"])
api_router.include_router(signature_providers.router, tags=["signature_providers"])
api_router.include_router(verifications.router, tags=["verifications"])
