"""
Workspace Settings Service
Reads and upserts the single workspace profile row.
"""
from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.utils.exceptions import EntityNotFoundError
from roombridge.shared.utils.time_utils import isoformat_utc


def serialize_settings(row: dict) -> dict:
    return {
        "id": row["id"],
        "displayName": row["display_name"],
        "description": row["description"],
        "welcomeMessage": row["welcome_message"],
        "profileImage": row.get("profile_image"),
        "isConnected": bool(row.get("is_connected")),
        "platformLink": row.get("platform_link"),
        "phone": row.get("phone"),
        "timestamp": row.get("timestamp"),
        "updatedAt": isoformat_utc(row.get("updated_at") or row.get("created_at")),
    }


class WorkspaceSettingsService:

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def get_settings(self) -> dict:
        async with self.gateway.session() as repos:
            row = await repos.workspace_settings.get()
        if row is None:
            raise EntityNotFoundError("Settings", message="Settings not found")
        return serialize_settings(row)

    async def save_settings(self, values: dict) -> dict:
        async with self.gateway.session() as repos:
            row = await repos.workspace_settings.upsert(values)
        return serialize_settings(row)
