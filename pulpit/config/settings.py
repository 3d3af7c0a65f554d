import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues."""
    db_url = os.getenv("PULPIT_DATABASE_URL", "")
    if db_url:
        logger.info(f"Using PULPIT_DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "pulpit.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.debug(f"Using default database path: {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="PULPIT_DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="PULPIT_LOG_LEVEL")
    log_file: str | None = Field(
        default=None,
        validation_alias="PULPIT_LOG_FILE",
        description="Optional path of a rotating log file",
    )
    sql_echo: bool = Field(
        default=False,
        validation_alias="PULPIT_SQL_ECHO",
        description="Echo SQL statements issued by the persistence adapter",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PULPIT_",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value


settings = Settings()
