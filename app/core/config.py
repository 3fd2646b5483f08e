from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DEBUG: bool = True

    # API Settings
    PROJECT_NAME: str = "Savings Manager API"
    API_PREFIX: str = "/api"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Friend balances, loans and WhatsApp reminders"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "savings_manager"

    # CORS (comma-separated, empty allows every origin)
    CLIENT_URL: str = ""

    # UltraMsg WhatsApp gateway
    ULTRAMSG_INSTANCE: str = ""
    ULTRAMSG_TOKEN: str = ""
    ULTRAMSG_BASE_URL: str = "https://api.ultramsg.com"
    NOTIFY_TIMEOUT_SECONDS: float = 15.0

    # Wall clock used for "today" and for dates in messages
    TIMEZONE: str = "Asia/Kolkata"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore"
    )

    @property
    def cors_origins(self) -> List[str]:
        origins = [o.strip() for o in self.CLIENT_URL.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def ultramsg_configured(self) -> bool:
        return bool(self.ULTRAMSG_INSTANCE and self.ULTRAMSG_TOKEN)

settings = Settings()
