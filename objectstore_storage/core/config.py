"""Application configuration utilities."""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ObjectStoreConfig(BaseModel):
    """Resolved connection and layout settings for the object store adapter."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    access_key: str | None = None
    secret_key: str | None = None
    bucket: str
    region: str
    use_ssl: bool = False
    storage_path: str
    static_file_url_prefix: str


class Settings(BaseSettings):
    """Settings derived from environment variables."""

    # Development defaults for a local MinIO; override them everywhere else.
    endpoint: str = Field(
        default="http://minio:9000", alias="storage__object_store__endpoint"
    )
    access_key: str | None = Field(
        default=None, alias="storage__object_store__accessKey"
    )
    secret_key: str | None = Field(
        default=None, alias="storage__object_store__secretKey"
    )
    bucket: str = Field(default="ghost", alias="storage__object_store__bucket")
    region: str = Field(default="eu-west-1", alias="storage__object_store__region")
    use_ssl: bool = Field(default=False, alias="storage__object_store__useSSL")
    storage_path: str = Field(
        default="content/media/", alias="storage__object_store__storagePath"
    )
    static_file_url_prefix: str = Field(
        default="content/media/",
        alias="storage__object_store__staticFileURLPrefix",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("use_ssl", mode="before")
    @classmethod
    def _parse_use_ssl(cls, value: object) -> bool:
        """Only an explicit ``true`` turns TLS on."""

        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() == "true"

    def to_object_store_config(self, **overrides: object) -> ObjectStoreConfig:
        """Return an immutable adapter config, applying non-``None`` overrides."""

        values = {
            "endpoint": self.endpoint,
            "access_key": self.access_key,
            "secret_key": self.secret_key,
            "bucket": self.bucket,
            "region": self.region,
            "use_ssl": self.use_ssl,
            "storage_path": self.storage_path,
            "static_file_url_prefix": self.static_file_url_prefix,
        }
        for key, value in overrides.items():
            if key not in values:
                raise TypeError(f"Unknown object store option: {key}")
            if value is not None:
                values[key] = value
        return ObjectStoreConfig(**values)


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["ObjectStoreConfig", "Settings", "get_settings"]
