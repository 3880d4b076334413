"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    allowed_origins: List[str] = field(
        default_factory=lambda: _split_origins(os.getenv("ALLOWED_ORIGINS", ""))
    )

    # Data
    data_file: str = field(default_factory=lambda: os.getenv("DATA_FILE", ""))
    seed_sample_data: bool = field(
        default_factory=lambda: os.getenv("SEED_SAMPLE_DATA", "false").lower() == "true"
    )

    # Reporting
    currency: str = field(default_factory=lambda: os.getenv("REPORTS_CURRENCY", "USD"))

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "allowed_origins": self.allowed_origins,
            "data_file": self.data_file,
            "seed_sample_data": self.seed_sample_data,
            "currency": self.currency,
        }
