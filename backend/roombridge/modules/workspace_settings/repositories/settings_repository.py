"""
Workspace Settings Repository
Upsert/read of the single workspace settings row.
"""
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from roombridge.modules.workspace_settings.models.workspace_settings import WorkspaceSettings
from roombridge.shared.core.constants import WORKSPACE_SETTINGS_ID
from roombridge.shared.db.base import model_to_dict


class WorkspaceSettingsRepository:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get(self) -> Optional[dict]:
        result = await self.db.execute(
            select(WorkspaceSettings).where(WorkspaceSettings.id == WORKSPACE_SETTINGS_ID)
        )
        row = result.scalar_one_or_none()
        return model_to_dict(row) if row else None

    async def upsert(self, values: dict) -> dict:
        """Create the row on first write, overwrite the given fields afterwards."""
        stmt = insert(WorkspaceSettings).values(id=WORKSPACE_SETTINGS_ID, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[WorkspaceSettings.id],
            set_={**values, "updated_at": func.now()},
        )
        await self.db.execute(stmt)
        # The row may already be in the identity map with stale values
        self.db.expire_all()
        return await self.get()
