from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Store credentials. Absent -> the whole app answers with the config error screen.
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")

    jwt_secret_key: Optional[str] = Field(None, alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(180, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Partition prefix for every document path (artifacts/{app_id}/...)
    app_id: str = Field("default", alias="APP_ID")
    timezone: str = Field("Asia/Seoul", alias="TIMEZONE")
    max_upload_kb: int = Field(800, alias="MAX_UPLOAD_KB")

    cors_origins: str = Field("*", alias="CORS_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def missing_store_config(self) -> List[str]:
        """Names of required variables that are not set."""
        missing = []
        if not self.database_url:
            missing.append("DATABASE_URL")
        if not self.jwt_secret_key:
            missing.append("JWT_SECRET_KEY")
        return missing


settings = Settings()
