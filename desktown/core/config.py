"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Set to True when running behind nginx/Cloudflare to trust X-Forwarded-For
    TRUST_PROXY_HEADERS: bool = False

    # Database
    DATABASE_URL: str

    # Session Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_EXPIRES_HOURS: int = 12

    # Employee portal bearer tokens
    EMPLOYEE_TOKEN_TTL_HOURS: int = 8

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173"

    # Frontend (checkout return pages, share links)
    FRONTEND_URL: str = "http://localhost:5173"

    # Base URL this API is reachable at (automation callbacks)
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Payments
    PAYMENT_WEBHOOK_SECRET: str = ""
    PAYMENT_CHECKOUT_BASE_URL: str = "http://localhost:5173/checkout"
    PAYMENT_WEBHOOK_MAX_PAYLOAD_BYTES: int = 256 * 1024
    PLATFORM_COMMISSION_RATE: float = 0.15

    # Task automations (n8n)
    AUTOMATION_CALLBACK_SECRET: str = ""
    AUTOMATION_TIMEOUT_SECONDS: float = 15.0
    AUTOMATION_SEND_ATTEMPTS: int = 1

    # Web Push (VAPID)
    VAPID_PUBLIC_KEY: str = ""
    VAPID_PRIVATE_KEY: str = ""
    VAPID_SUBJECT: str = "mailto:support@desktown.app"
    PUSH_TIMEOUT_SECONDS: float = 10.0

    # Object storage
    STORAGE_BACKEND: str = "local"  # local | s3
    LOCAL_STORAGE_PATH: str = "/tmp/desktown-objects"
    S3_BUCKET: str = ""
    S3_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: str = ""
    S3_URL_STYLE: str = ""
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_AUTH: int = 5
    RATE_LIMIT_WEBHOOK: int = 100
    RATE_LIMIT_API: int = 120
    RATE_LIMIT_PUBLIC_WRITE: int = 20

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets

    @property
    def cookie_secure(self) -> bool:
        """Secure cookies only in production."""
        return self.ENV != "dev"

    @property
    def push_enabled(self) -> bool:
        return bool(self.VAPID_PUBLIC_KEY and self.VAPID_PRIVATE_KEY)


settings = Settings()
