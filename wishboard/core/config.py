from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://board.example.com,http://localhost:3000"
    CORS_ORIGINS: str = "*"

    # "sql" (SQLAlchemy, DATABASE_URL) or "json" (flat file, JSON_STORE_PATH)
    STORE_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite:///./wishboard.db"
    # Production schemas are managed by Alembic; this only helps local runs.
    DATABASE_CREATE_TABLES: bool = True
    JSON_STORE_PATH: str = "db.json"

    # Object store for photo uploads (S3 or any S3-compatible provider)
    UPLOAD_BUCKET: str = ""
    UPLOAD_PREFIX: str = "memories"
    UPLOAD_PUBLIC_BASE_URL: str = ""
    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024
    AWS_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: str = ""

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def store_backend(self) -> str:
        return self.STORE_BACKEND.strip().lower()


settings = Settings()
