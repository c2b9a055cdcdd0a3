import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry, best_effort, require_capability
from dms_api.core.errors import not_found
from dms_api.models import Document, DocumentPermission, PermissionType, new_id, now_utc
from dms_api.ports.base import EcmPermission, PrincipalType, ResourceType
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.permission import PermissionIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id

log = structlog.get_logger(__name__)


def to_ecm_permission(permission_id: str, data: PermissionIn) -> EcmPermission:
    return EcmPermission(
        id=permission_id,
        resource_id=data.document_id,
        principal_id=data.party_id,
        permission_type=data.permission_type.value,
        granted=data.is_granted,
        granted_at=now_utc(),
        expires_at=data.expiration_date,
    )


class PermissionService:
    """Local permission records mirrored to the permission capability.

    Remote grant, update and revoke are tolerated failures; the access check
    has no local fallback.
    """

    def __init__(self, session: AsyncSession, capabilities: CapabilityRegistry | None = None):
        self.session = session
        self.capabilities = capabilities or get_capabilities()

    async def get(self, permission_id: str) -> DocumentPermission:
        row = await self.session.get(DocumentPermission, permission_id)
        if not row:
            raise not_found("permission", permission_id)
        return row

    async def list_for_document(self, document_id: str) -> list[DocumentPermission]:
        stmt = (
            select(DocumentPermission)
            .where(DocumentPermission.document_id == document_id)
            .order_by(DocumentPermission.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: PermissionIn) -> DocumentPermission:
        reject_supplied_id(data.permission_id, "permission_id")
        if not await self.session.get(Document, data.document_id):
            raise not_found("document", data.document_id)

        # The remote grant and the local row share one identity so a later
        # revoke by id reaches both.
        permission_id = new_id()
        port = self.capabilities.permission()
        if port is not None:
            await best_effort(
                CapabilityKind.PERMISSION,
                "grant_permission",
                lambda: port.grant_permission(to_ecm_permission(permission_id, data)),
                permission_id=permission_id,
                document_id=data.document_id,
            )
        else:
            log.info("permission_recorded_locally", document_id=data.document_id, party_id=data.party_id)

        row = DocumentPermission(permission_id=permission_id, **data.model_dump(exclude={"permission_id"}))
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("permission_created", permission_id=permission_id, permission_type=row.permission_type.value)
        return row

    async def update(self, data: PermissionIn) -> DocumentPermission:
        permission_id = require_id(data.permission_id, "permission_id")
        row = await self.get(permission_id)

        port = self.capabilities.permission()
        if port is not None:
            await best_effort(
                CapabilityKind.PERMISSION,
                "update_permission",
                lambda: port.update_permission(to_ecm_permission(permission_id, data)),
                permission_id=permission_id,
            )

        apply_fields(row, data.model_dump(exclude={"permission_id"}))
        await self.session.commit()
        await self.session.refresh(row)
        log.info("permission_updated", permission_id=permission_id)
        return row

    async def delete(self, permission_id: str) -> None:
        row = await self.get(permission_id)

        port = self.capabilities.permission()
        if port is not None:
            await best_effort(
                CapabilityKind.PERMISSION,
                "revoke_permission",
                lambda: port.revoke_permission(permission_id),
                permission_id=permission_id,
            )

        await self.session.delete(row)
        await self.session.commit()
        log.info("permission_deleted", permission_id=permission_id)

    async def has_permission(self, document_id: str, party_id: str, permission_type: PermissionType) -> bool:
        port = require_capability(self.capabilities.permission(), CapabilityKind.PERMISSION, "has_permission")
        allowed = await port.has_permission(
            document_id,
            ResourceType.DOCUMENT,
            party_id,
            PrincipalType.USER,
            permission_type.value,
        )
        log.debug(
            "permission_checked",
            document_id=document_id,
            party_id=party_id,
            permission_type=permission_type.value,
            allowed=allowed,
        )
        return bool(allowed)
