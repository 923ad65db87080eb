"""
Configuration module for the MPI Ledger Service.
Uses Pydantic BaseSettings for validation - app fails fast if config is inconsistent.
"""
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every field can be overridden with an environment variable prefixed
    with MPI_LEDGER_ (e.g. MPI_LEDGER_RANGE_END_KEY).
    """

    model_config = SettingsConfigDict(
        env_prefix="MPI_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=8000, description="API port")
    reload: bool = Field(default=False, description="Enable hot reload")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["json", "text"] = Field(default="json", description="Log output format")

    # Range scan window used by get_AllPatients.
    # Lexicographic, start inclusive, end exclusive.
    range_start_key: str = Field(default="MPI0", description="Inclusive lower key bound for the patient scan")
    range_end_key: str = Field(default="MPI99999999999", description="Exclusive upper key bound for the patient scan")

    # What to do when a stored value cannot be decoded during a scan or history read
    decode_failure_policy: Literal["mask", "fail"] = Field(
        default="mask",
        description="'mask' substitutes an empty record and logs a warning; 'fail' aborts the query",
    )

    @model_validator(mode="after")
    def validate_range_window(self) -> "Settings":
        """
        Reject a scan window that can never match a key.
        """
        if not self.range_start_key:
            raise ValueError("range_start_key must not be empty")
        if self.range_start_key >= self.range_end_key:
            raise ValueError(
                f"range_start_key ({self.range_start_key!r}) must sort before "
                f"range_end_key ({self.range_end_key!r})"
            )
        return self


# Create global settings instance - fails fast if config is inconsistent
settings = Settings()

# Shortcuts read by main.py
API_HOST = settings.host
API_PORT = settings.port
API_RELOAD = settings.reload
