# pulsechat/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    PROJECT_NAME: str = "PulseChat API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Direct and group messaging core"
    API_V1_STR: str = "/api/v1"
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"
    REDIS_HOST: str
    REDIS_PORT: int

    # identity provider (verified bearer JWTs)
    IDENTITY_JWT_KEY: str
    IDENTITY_JWT_ALGORITHM: str = "RS256"
    IDENTITY_JWT_ISSUER: str | None = None
    IDENTITY_JWT_AUDIENCE: str | None = None

    ONLINE_WINDOW_SECONDS: int = 60
    TYPING_TTL_SECONDS: int = 3
    SEARCH_HISTORY_LIMIT: int = 8
    SUGGESTED_USERS_LIMIT: int = 10

    AI_SUGGEST_URL: str | None = None
    AI_SUGGEST_TIMEOUT_SECONDS: float = 5.0
    AI_SUGGEST_CONTEXT_LIMIT: int = 2000

    model_config = SettingsConfigDict(env_file=".env", extra="allow")
