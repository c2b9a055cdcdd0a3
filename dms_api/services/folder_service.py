import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.errors import invalid_argument, not_found
from dms_api.models import Document, Folder
from dms_api.schemas.folder import FolderIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id

log = structlog.get_logger(__name__)


class FolderService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, folder_id: str) -> Folder:
        row = await self.session.get(Folder, folder_id)
        if not row:
            raise not_found("folder", folder_id)
        return row

    async def list_children(self, parent_folder_id: str | None = None) -> list[Folder]:
        if parent_folder_id is not None:
            await self.get(parent_folder_id)
            condition = Folder.parent_folder_id == parent_folder_id
        else:
            condition = Folder.parent_folder_id.is_(None)
        result = await self.session.execute(select(Folder).where(condition).order_by(Folder.name))
        return list(result.scalars().all())

    async def create(self, data: FolderIn) -> Folder:
        reject_supplied_id(data.folder_id, "folder_id")
        if data.parent_folder_id is not None:
            parent = await self.get(data.parent_folder_id)
        else:
            parent = None

        values = data.model_dump(exclude={"folder_id"})
        if values["path"] is None:
            values["path"] = f"{parent.path or ''}/{data.name}" if parent else f"/{data.name}"

        row = Folder(**values)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("folder_created", folder_id=row.folder_id, parent_folder_id=row.parent_folder_id)
        return row

    async def update(self, data: FolderIn) -> Folder:
        folder_id = require_id(data.folder_id, "folder_id")
        row = await self.get(folder_id)
        if data.parent_folder_id == folder_id:
            raise invalid_argument("A folder cannot be its own parent", {"folder_id": folder_id})
        if data.parent_folder_id is not None:
            await self.get(data.parent_folder_id)

        apply_fields(row, data.model_dump(exclude={"folder_id"}))
        await self.session.commit()
        await self.session.refresh(row)
        log.info("folder_updated", folder_id=folder_id)
        return row

    async def delete(self, folder_id: str) -> None:
        row = await self.get(folder_id)
        if row.is_system_folder:
            raise invalid_argument("System folders cannot be deleted", {"folder_id": folder_id})

        # Contents move up one level instead of disappearing with the folder.
        await self.session.execute(
            update(Folder).where(Folder.parent_folder_id == folder_id).values(parent_folder_id=row.parent_folder_id)
        )
        await self.session.execute(
            update(Document).where(Document.folder_id == folder_id).values(folder_id=row.parent_folder_id)
        )
        await self.session.delete(row)
        await self.session.commit()
        log.info("folder_deleted", folder_id=folder_id)
