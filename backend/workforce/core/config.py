from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Database – SQLite for local development
    DATABASE_URL: str = "sqlite+aiosqlite:///./workforce.db"

    # Redis pub/sub for realtime notifications.
    # Disabled: notifications are delivered only to sockets held by this process.
    REDIS_URL: str = "redis://localhost:6379/0"
    USE_REDIS_PUBSUB: bool = False
    NOTIFICATION_CHANNEL_PREFIX: str = "workforce:notify"

    # Security
    SECRET_KEY: str = "dev_secret_key_change_in_production_min_32_chars!!"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # SendGrid – email is skipped when no key is set
    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = "scheduling@yourdomain.com"
    ADMIN_NOTIFICATION_EMAIL: str = ""

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
