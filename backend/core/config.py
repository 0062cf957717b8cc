# backend/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Slack Configuration
    slack_client_id: str = ""
    slack_client_secret: str = ""
    slack_redirect_uri: str = ""
    slack_scope: str = "chat:write channels:read channels:history"

    # Google Configuration
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = ""
    google_scope: str = "https://www.googleapis.com/auth/gmail.send https://www.googleapis.com/auth/calendar https://www.googleapis.com/auth/drive.file"

    # Redis Configuration
    redis_url: str = "redis://localhost:6379/0"

    # HTTP Client Configuration
    http_timeout_seconds: float = 10.0
    http_max_connections: int = 100
    http_max_keepalive_connections: int = 20
    http_user_agent: str = "workflow-integrations/1.0"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")


settings = Settings()
