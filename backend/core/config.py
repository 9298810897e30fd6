"""Core configuration with Pydantic v2 Settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support (``FACTURA_*``)."""

    model_config = SettingsConfigDict(env_prefix="FACTURA_")

    app_env: str = "development"
    log_level: str = "INFO"
    # Emit one JSON object per log line instead of plain text
    log_json: bool = False

    # Root of the JSON key-value store (one file per key)
    data_dir: Path = Path("data")
    # Rendered PDFs and backup exports
    output_dir: Path = Path("artifacts/factura")

    # Timezone used when printing invoice dates
    display_timezone: str = "America/Bogota"

    # Load the sample catalogue and customer the first time the store is opened
    seed_on_first_run: bool = True


# Global settings instance
settings = Settings()
