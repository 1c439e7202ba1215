from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    All config comes from .env file.
    Change values in .env; they apply everywhere.
    """

    # ── Database ──────────────────────────────────────────
    DATABASE_URL: str                    # asyncpg, used by FastAPI
    DATABASE_SYNC_URL: str | None = None # psycopg2, used only by Alembic

    # ── JWT ───────────────────────────────────────────────
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # ── CORS ──────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    # ── App ───────────────────────────────────────────────
    APP_ENV: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Points ────────────────────────────────────────────
    TARGET_POINTS: int = 36

    # ── Password reset / email ────────────────────────────
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    FRONTEND_URL: str = "http://localhost:5173"
    BREVO_API_KEY: str | None = None
    EMAIL_FROM: str = "no-reply@tifpoint.app"
    EMAIL_FROM_NAME: str = "TIFPoint System"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def origins_list(self) -> list[str]:
        """Splits comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def email_configured(self) -> bool:
        return bool(self.BREVO_API_KEY)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Single instance used across the entire app
settings = get_settings()
