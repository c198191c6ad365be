from typing import Any, List
from pydantic import AnyHttpUrl, field_validator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application configuration settings.

    Loads values from environment variables or .env file.
    """
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Storefront Auth API"
    ENVIRONMENT: str = "development"

    # SECURITY
    SECRET_KEY: str = Field(description="Secret key for JWT encoding and OTP hashing")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    TOKEN_COOKIE_NAME: str = "token"
    TOKEN_COOKIE_SECURE: bool = False

    # DATABASE
    DATABASE_URL: str = Field(description="PostgreSQL Connection URL")

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    # OTP
    OTP_EXPIRY_MINUTES: int = 10
    OTP_SWEEP_INTERVAL_MINUTES: int = 60

    # Fixture identity, never set in production
    TEST_USER_PHONE: str | None = None
    TEST_USER_OTP: str | None = None

    # SMS (Fast2SMS DLT route)
    SMS_API_URL: str = "https://www.fast2sms.com/dev/bulkV2"
    FAST2SMS_API_KEY: str | None = None
    FAST2SMS_SENDER_ID: str | None = None
    FAST2SMS_TEMPLATE_ID: str | None = None
    SMS_TIMEOUT_SECONDS: float = 10.0

    # RATE LIMITING
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    AUTH_RATE_LIMIT: str = "10/minute"
    OTP_RATE_LIMIT: str = "3/minute"

    # WELCOME GIFT
    WELCOME_DISCOUNT_PERCENT: int = 10
    WELCOME_MAX_DISCOUNT: int = 500
    WELCOME_VALID_DAYS: int = 30

    # CELERY
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> Any:
        """
        Parses comma-separated string of CORS origins into a list.
        """
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

settings = Settings()
