from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    DATABASE_URL: str
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"

    AWS_ACCESS_KEY_ID: str
    AWS_SECRET_ACCESS_KEY: str
    AWS_S3_BUCKET_NAME: str
    AWS_S3_ENDPOINT_URL: str
    AWS_S3_REGION: Optional[str] = None
    AWS_S3_SECURE: bool = False

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # seconds
    DB_COMMAND_TIMEOUT: float = 10.0
    DB_POOL_TIMEOUT: float = 30.0

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def s3_base_url(self) -> str:
        return self.AWS_S3_ENDPOINT_URL.rstrip("/") + "/" + self.AWS_S3_BUCKET_NAME


# Глобальный объект настроек, импортируется везде
settings = Settings()
