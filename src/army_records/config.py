"""
Application settings read from the environment.

Database connection settings are read by DatabaseConnectionPool itself
(DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD).
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


class Settings(BaseModel):
    """
    Runtime settings.

    Attributes:
        data_dir: Base directory of the holding areas
        max_file_size: Largest accepted upload in bytes
        rules_path: Optional YAML rule file replacing the built-in rules
        log_level: Logging level name
        log_format: "json" or "text"
    """

    data_dir: Path = Path("data")
    max_file_size: int = Field(DEFAULT_MAX_FILE_SIZE, gt=0)
    rules_path: Path | None = None
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        values = {
            "data_dir": os.getenv("ARMY_RECORDS_DATA_DIR"),
            "max_file_size": os.getenv("MAX_FILE_SIZE"),
            "rules_path": os.getenv("RULES_PATH"),
            "log_level": os.getenv("LOG_LEVEL"),
            "log_format": os.getenv("LOG_FORMAT"),
        }
        return cls(**{k: v for k, v in values.items() if v})
