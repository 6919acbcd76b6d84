from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_NAME: str | None = None
    DATABASE_USER: str | None = None
    DATABASE_PASSWORD: str | None = None
    DATABASE_HOST: str | None = None
    DATABASE_PORT: int = 5432

    # Used when no Postgres connection is configured
    SQLITE_DATABASE_PATH: str = "var/content.db"

    @property
    def DATABASE_URL(self) -> str:
        """
        Get the content database URL.
        Falls back to a local sqlite file when Postgres is not configured.
        """
        if self.DATABASE_HOST and self.DATABASE_USER and self.DATABASE_PASSWORD and self.DATABASE_NAME:
            return (
                f"postgresql+psycopg2://{self.DATABASE_USER}:"
                f"{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:"
                f"{self.DATABASE_PORT}/{self.DATABASE_NAME}"
            )
        return f"sqlite:///{self.SQLITE_DATABASE_PATH}"

    # Field types are loaded at runtime from these packages
    FIELD_TYPE_PACKAGES: str = "field_types"

    # Image storage: "local" (filesystem) or "s3"
    IMAGE_STORAGE_BACKEND: str = "local"
    IMAGE_STORAGE_PREFIX: str = "images"
    LOCAL_STORAGE_ROOT: str = "var/storage"

    # S3 / MinIO storage (leave S3_LOCAL_ENDPOINT empty for AWS S3)
    S3_BUCKET_NAME: str = "content-field-images"
    S3_LOCAL_ENDPOINT: str | None = None
    S3_ACCESS_KEY: str | None = None
    S3_SECRET_KEY: str | None = None
    AWS_REGION: str = "eu-central-1"

    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # Sentry error tracking
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
