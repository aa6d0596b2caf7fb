"""Configuration for the CodeReview service.

Settings are grouped in sections and loaded once from the environment (and an
optional ``.env`` file). Variables use the CODEREVIEW__ prefix with ``__`` between
section and key, e.g. ``CODEREVIEW__MONGO__URI=mongodb://mongo:27017``.
"""

import os
from typing import List, Literal, Optional

from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """HTTP surface and process-level settings."""

    # Service URL (e.g., http://localhost:8080)
    URL: str = "http://localhost:8080"
    API_PREFIX: str = "/api"

    # Links in emails point at the frontend
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "~/.cache/codereview/logs"
    DEBUG: bool = False


class MongoSettings(BaseModel):
    URI: str = "mongodb://localhost:27017"
    DB: str = "codereview"
    TIMEOUT_MS: int = 5000


class AuthSettings(BaseModel):
    JWT_SECRET: SecretStr = SecretStr("dev-secret-key")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: int = 24 * 60 * 60  # seconds

    COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = False

    VERIFICATION_TOKEN_EXPIRES_IN: int = 24 * 60 * 60
    RESET_TOKEN_EXPIRES_IN: int = 60 * 60
    REQUIRE_VERIFIED_EMAIL: bool = True


class MailSettings(BaseModel):
    ENABLED: bool = False
    HOST: str = "localhost"
    PORT: int = 587
    USERNAME: Optional[str] = None
    PASSWORD: Optional[SecretStr] = None
    USE_TLS: bool = True
    FROM_ADDRESS: str = "CodeReview Platform <no-reply@codereview.local>"
    TIMEOUT: float = 10.0


class StorageSettings(BaseModel):
    BACKEND: Literal["local", "minio"] = "local"
    LOCAL_DIR: str = "~/.cache/codereview/uploads"

    # MinIO / S3
    BUCKET: str = "codereview"
    ENDPOINT: str = "localhost:9000"
    ACCESS_KEY: str = "minioadmin"
    SECRET_KEY: SecretStr = SecretStr("minioadmin")
    SECURE: bool = False
    REGION: Optional[str] = None

    # Upload limits
    MAX_FILE_SIZE: int = 10 * 1024 * 1024
    MAX_FILES: int = 10
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024


class CodeReviewSettings(BaseSettings):
    """CodeReview service configuration settings."""

    APP: AppSettings = AppSettings()
    MONGO: MongoSettings = MongoSettings()
    AUTH: AuthSettings = AuthSettings()
    MAIL: MailSettings = MailSettings()
    STORAGE: StorageSettings = StorageSettings()

    model_config = SettingsConfigDict(
        env_prefix="CODEREVIEW__",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    @property
    def log_dir(self) -> str:
        return os.path.expanduser(self.APP.LOG_DIR)

    @property
    def storage_dir(self) -> str:
        return os.path.expanduser(self.STORAGE.LOCAL_DIR)


# Module-level config cache
_config: Optional[CodeReviewSettings] = None


def get_config() -> CodeReviewSettings:
    """Get the CodeReview configuration singleton.

    Configuration is loaded once and cached.

    Examples:
        ```bash
        export CODEREVIEW__APP__URL=http://0.0.0.0:8081
        export CODEREVIEW__AUTH__JWT_SECRET=change-me
        ```

        ```python
        config = get_config()
        print(config.APP.URL)  # http://localhost:8080
        ```

    Returns:
        CodeReviewSettings with APP, MONGO, AUTH, MAIL and STORAGE sections.
    """
    global _config
    if _config is None:
        _config = CodeReviewSettings()
    return _config


def reset_config() -> None:
    """Reset the config cache. Useful for testing."""
    global _config
    _config = None
