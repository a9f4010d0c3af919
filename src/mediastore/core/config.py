"""Configuration management for the media store adapter."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from mediastore.storage.keys import NamingPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "mediastore"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # GCP Configuration
    GCP_PROJECT_ID: str = ""

    # Storage Configuration
    GCS_BUCKET_NAME: str = ""
    STORAGE_ORIGIN: str = ""  # Public URL origin, empty = https://storage.googleapis.com/{bucket}

    # Upload Constraints
    MAX_UPLOAD_MB: int = 50
    ALLOWED_UPLOAD_MIME_TYPES: str = ""  # Comma-separated, empty = allow all

    # File key naming policy
    FILE_KEY_ENABLED: bool = False  # False = keys are content hashes assigned by the adapter
    FILE_KEY_PREFIX: str = ""  # Date template, e.g. "YYYY/MM/"
    FILE_KEY_SUFFIX: str = ""
    FILE_KEY_EXTNAME: bool = True
    FILE_KEY_HASH_AS_BASENAME: bool = False
    FILE_KEY_SAFE_STRING: bool = False

    @property
    def allowed_mime_types(self) -> list[str] | None:
        """Parse ALLOWED_UPLOAD_MIME_TYPES into a list."""
        if not self.ALLOWED_UPLOAD_MIME_TYPES:
            return None
        return [mt.strip() for mt in self.ALLOWED_UPLOAD_MIME_TYPES.split(",")]

    @property
    def max_upload_bytes(self) -> int:
        """Convert MAX_UPLOAD_MB to bytes."""
        return self.MAX_UPLOAD_MB * 1024 * 1024

    @property
    def naming_policy(self) -> NamingPolicy | None:
        """Build the file key naming policy, or None when disabled."""
        if not self.FILE_KEY_ENABLED:
            return None
        return NamingPolicy(
            prefix=self.FILE_KEY_PREFIX or None,
            suffix=self.FILE_KEY_SUFFIX or None,
            extname=self.FILE_KEY_EXTNAME,
            hash_as_basename=self.FILE_KEY_HASH_AS_BASENAME,
            safe_string=self.FILE_KEY_SAFE_STRING,
        )


# Singleton settings instance
settings = Settings()
