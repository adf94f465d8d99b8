"""Application settings"""
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me-this-secret-must-be-long-enough"


class JwtSettings(BaseModel):
    """Immutable token configuration handed to the token issuer and the bearer scheme."""

    model_config = ConfigDict(frozen=True)

    secret: str
    issuer: str
    audience: str
    expire_minutes: int = 5
    leeway_seconds: int = 60
    algorithm: str = "HS256"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False,
        populate_by_name=True,
    )

    app_name: str = Field(default="Order Management API", validation_alias="APP_NAME")
    version: str = "1.0.0"

    host: str = Field(default="127.0.0.1", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT", ge=1, le=65535)

    database_url: str = Field(default="sqlite:///./orders.db", validation_alias="DATABASE_URL")

    jwt_secret: SecretStr = Field(
        default=SecretStr(DEFAULT_JWT_SECRET), validation_alias="JWT_SECRET"
    )
    jwt_issuer: str = Field(default="order-api", validation_alias="JWT_ISSUER")
    jwt_audience: str = Field(default="order-api-clients", validation_alias="JWT_AUDIENCE")
    jwt_expire_minutes: int = Field(default=5, validation_alias="JWT_EXPIRE_MINUTES", ge=1)
    jwt_leeway_seconds: int = Field(default=60, validation_alias="JWT_LEEWAY_SECONDS", ge=0)

    # bcrypt cost factor
    password_hash_rounds: int = Field(default=12, validation_alias="PASSWORD_HASH_ROUNDS", ge=4, le=31)
    seed_users: bool = Field(default=True, validation_alias="SEED_USERS")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def jwt(self) -> JwtSettings:
        return JwtSettings(
            secret=self.jwt_secret.get_secret_value(),
            issuer=self.jwt_issuer,
            audience=self.jwt_audience,
            expire_minutes=self.jwt_expire_minutes,
            leeway_seconds=self.jwt_leeway_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
