from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = Field(..., alias="DATABASE_URL")
    DEBUG: bool = Field(default=False, alias="DEBUG")

    # Tokens are issued by the university identity provider; we only verify them.
    JWT_SECRET: str = Field(..., alias="JWT_SECRET")
    JWT_ALGORITHM: str = Field(default="HS256", alias="JWT_ALGORITHM")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # Attachment storage
    STORAGE_BACKEND: Literal["local", "supabase"] = Field(
        default="local", alias="STORAGE_BACKEND"
    )
    UPLOAD_DIR: str = Field(default="uploads", alias="UPLOAD_DIR")
    SUPABASE_URL: str | None = Field(default=None, alias="SUPABASE_URL")
    SUPABASE_SERVICE_KEY: str | None = Field(default=None, alias="SUPABASE_SERVICE_KEY")
    ATTACHMENTS_BUCKET: str = Field(default="ticket-attachments", alias="ATTACHMENTS_BUCKET")
    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES"
    )  # 10MB

    # Ticket engine
    TICKET_NO_START: int = Field(default=1001, alias="TICKET_NO_START")
    RESPONSE_TIME_SAMPLE_SIZE: int = Field(default=50, alias="RESPONSE_TIME_SAMPLE_SIZE")
    TICKET_UPDATE_RETRIES: int = Field(default=3, alias="TICKET_UPDATE_RETRIES")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
