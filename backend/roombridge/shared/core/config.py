from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3001",
]


class Settings(BaseSettings):
    PROJECT_NAME: str = "RoomBridge Chat Backend"
    ENVIRONMENT: str = "production"  # "development" widens CORS to localhost
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "postgresql+asyncpg://localhost:5432/chatapp"

    # Comma-separated list, used by both HTTP CORS and the socket server
    ALLOWED_ORIGINS: str = "https://yourdomain.com"

    # Base URL used to build invite links for rooms
    APP_DOMAIN: str = "http://localhost:3000"

    # Socket.IO heartbeat (seconds)
    SOCKET_PING_INTERVAL: int = 25
    SOCKET_PING_TIMEOUT: int = 20

    # WATI WhatsApp webhook
    WATI_WEBHOOK_SECRET: str = ""  # Secret token for webhook verification (set in .env)
    WATI_WEBHOOK_ALLOWED_IPS: str = ""  # Comma-separated IPs to whitelist (optional)
    WATI_BROADCAST_INBOUND: bool = False  # Also push webhook messages to joined sockets

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def allowed_origins(self) -> List[str]:
        """Explicit origin list for the current environment."""
        if self.is_development:
            return list(DEV_ORIGINS)
        origins = [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]
        return origins or ["https://yourdomain.com"]

    def build_invite_link(self, room_id: str, phone: str) -> str:
        return f"{self.APP_DOMAIN.rstrip('/')}/chat/{room_id}?phone={phone}"


settings = Settings()
