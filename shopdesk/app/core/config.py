from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./shopdesk.sqlite3"
    DATABASE_ECHO: bool = False

    # CORS origins: the Next.js frontend by default
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Prefix used to turn stored relative paths into absolute URLs
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Attachment uploads
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_MAX_FILES: int = 10
    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024

    LOW_STOCK_THRESHOLD: int = 5
    LOGS_PAGE_SIZE: int = 20

    LOG_LEVEL: str = "INFO"


settings = Settings()
