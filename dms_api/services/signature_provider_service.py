import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.errors import invalid_argument, not_found
from dms_api.models import SignatureProvider, new_id
from dms_api.schemas.signature_provider import SignatureProviderIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id

log = structlog.get_logger(__name__)


def _same_tenant(tenant_id: str | None):
    if tenant_id is None:
        return SignatureProvider.tenant_id.is_(None)
    return SignatureProvider.tenant_id == tenant_id


class SignatureProviderService:
    """Signature provider registry; each tenant has at most one default provider."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, provider_id: str) -> SignatureProvider:
        row = await self.session.get(SignatureProvider, provider_id)
        if not row:
            raise not_found("signature_provider", provider_id)
        return row

    async def list_providers(self, tenant_id: str | None = None, active_only: bool = False) -> list[SignatureProvider]:
        stmt = select(SignatureProvider).order_by(SignatureProvider.name)
        if tenant_id is not None:
            stmt = stmt.where(SignatureProvider.tenant_id == tenant_id)
        if active_only:
            stmt = stmt.where(SignatureProvider.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_default_provider(self, tenant_id: str | None) -> SignatureProvider | None:
        stmt = select(SignatureProvider).where(SignatureProvider.is_default.is_(True), _same_tenant(tenant_id))
        return (await self.session.execute(stmt)).scalars().first()

    async def _clear_default(self, tenant_id: str | None, keep_id: str) -> None:
        stmt = select(SignatureProvider).where(
            SignatureProvider.is_default.is_(True),
            _same_tenant(tenant_id),
            SignatureProvider.provider_id != keep_id,
        )
        for current in (await self.session.execute(stmt)).scalars():
            current.is_default = False
            log.info("signature_provider_default_unset", provider_id=current.provider_id, tenant_id=tenant_id)

    async def create(self, data: SignatureProviderIn) -> SignatureProvider:
        reject_supplied_id(data.provider_id, "provider_id")
        row = SignatureProvider(provider_id=new_id(), **data.model_dump(exclude={"provider_id"}))
        if row.is_default:
            await self._clear_default(row.tenant_id, row.provider_id)

        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_provider_created", provider_id=row.provider_id, tenant_id=row.tenant_id)
        return row

    async def update(self, data: SignatureProviderIn) -> SignatureProvider:
        provider_id = require_id(data.provider_id, "provider_id")
        row = await self.get(provider_id)

        apply_fields(row, data.model_dump(exclude={"provider_id"}))
        if row.is_default:
            await self._clear_default(row.tenant_id, provider_id)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_provider_updated", provider_id=provider_id)
        return row

    async def delete(self, provider_id: str) -> None:
        row = await self.get(provider_id)
        await self.session.delete(row)
        await self.session.commit()
        log.info("signature_provider_deleted", provider_id=provider_id)

    async def set_as_default(self, provider_id: str, tenant_id: str | None) -> SignatureProvider:
        row = await self.get(provider_id)
        if row.tenant_id != tenant_id:
            raise invalid_argument(
                "Signature provider belongs to another tenant",
                {"provider_id": provider_id, "tenant_id": tenant_id},
            )

        await self._clear_default(tenant_id, provider_id)
        row.is_default = True
        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_provider_default_set", provider_id=provider_id, tenant_id=tenant_id)
        return row
