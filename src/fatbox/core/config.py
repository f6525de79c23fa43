"""Configuration management for fatbox."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    ENV: str = "local"
    SERVICE_NAME: str = "fatbox"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Scratch storage
    SCRATCH_ROOT: str = "/tmp"

    # Destinations
    POMF_UPLOAD_URL: str = "https://pomf.lain.la/upload.php"
    CATBOX_UPLOAD_URL: str = "https://catbox.moe/user/api.php"
    LITTERBOX_UPLOAD_URL: str = "https://litterbox.catbox.moe/resources/internals/api.php"
    DEFAULT_LITTERBOX_TIME: str = "1h"

    # Outbound forwarding
    FORWARD_TIMEOUT_SECONDS: float = 300.0
    FORWARD_MAX_ATTEMPTS: int = 2  # first try plus one retry
    FORWARD_RETRY_JITTER_SECONDS: float = 1.0

    @property
    def uploads_dir(self) -> Path:
        """Directory holding one subdirectory of chunks per upload."""
        return Path(self.SCRATCH_ROOT) / "uploads"

    @property
    def temp_dir(self) -> Path:
        """Directory holding assembled and direct-upload files."""
        return Path(self.SCRATCH_ROOT) / "temp"


# Singleton settings instance
settings = Settings()
