from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="CSVWB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "csv-workbench"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    # File Upload
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB

    # Preview sizes per tool
    PREVIEW_ROWS_CLEAN: int = 100
    PREVIEW_ROWS_VIEW: int = 500
    PREVIEW_ROWS_CONVERT: int = 100


settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings
