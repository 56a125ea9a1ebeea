from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod|test
    TZ: str = Field(default="Europe/Berlin")
    API_PREFIX: str = Field(default="/api")

    # Security
    JWT_SECRET: str = Field(default="change-me")
    JWT_ALG: str = Field(default="HS256")
    JWT_EXPIRES_MIN: int = Field(default=60 * 12)

    # DB
    DATABASE_URL: str = Field(default="postgresql+psycopg://app:app@db:5432/app")

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:5173,http://localhost")

    # Celery / Redis
    REDIS_URL: str = Field(default="redis://redis:6379/0")
    CELERY_TASK_ALWAYS_EAGER: bool = Field(default=False)

    # Identity provider (GoTrue-compatible auth + PostgREST profiles)
    IDP_URL: str = Field(default="http://localhost:54321")
    IDP_SERVICE_KEY: str = Field(default="")
    IDP_ANON_KEY: str = Field(default="")
    IDP_JWT_SECRET: str = Field(default="change-me-too")
    IDP_JWT_AUDIENCE: str = Field(default="authenticated")
    IDP_TIMEOUT_SEC: float = Field(default=10.0)

    # Mail
    SMTP_HOST: str | None = Field(default=None)
    SMTP_PORT: int = Field(default=587)
    SMTP_USER: str | None = Field(default=None)
    SMTP_PASSWORD: str | None = Field(default=None)
    MAIL_FROM: str = Field(default="noreply@solarcrm.local")

    # Seed (dev)
    SEED_DEMO: bool = Field(default=True)
    DEMO_ADMIN_LOGIN: str = Field(default="admin")
    DEMO_ADMIN_PASSWORD: str = Field(default="admin123")


settings = Settings()
