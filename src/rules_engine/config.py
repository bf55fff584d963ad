"""
Configuration module using pydantic-settings.

All configuration loaded from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Load from .env file or environment variables (prefix RULES_).
    """

    # Project paths
    project_root: Path = Path(__file__).parent.parent.parent
    data_dir: Path = project_root / "data"

    # Document layout inside data_dir
    rules_database_file: str = "rules-database.json"
    powers_file: str = "powers.json"
    equipment_file: str = "equipment.json"
    monsters_file: str = "monsters.json"

    # Search settings
    search_max_results: int = 20
    canonical_stat_category: str = "character-creation"

    # Suggestion settings
    suggestion_min_length: int = 2
    suggestion_limit: int = 10
    navigation_limit: int = 15

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("search_max_results", "suggestion_limit", "navigation_limit")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Result limits must be positive"""
        if v < 1:
            raise ValueError(f"Limit must be >= 1, got {v}")
        return v

    @property
    def rules_database_path(self) -> Path:
        """Path to the top-level rules database file"""
        return self.data_dir / self.rules_database_file


# Global settings instance
settings = Settings()
