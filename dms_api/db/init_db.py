from sqlalchemy.ext.asyncio import AsyncEngine

from dms_api.db.session import engine as default_engine
from dms_api.models import Base


async def init_db(engine: AsyncEngine | None = None) -> None:
    async with (engine or default_engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
