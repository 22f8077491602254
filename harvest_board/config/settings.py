from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    default_source_database: str = Field(
        default="cobblestone",
        validation_alias="HARVEST_BOARD_DEFAULT_SOURCE_DATABASE",
        description="Source database whose commodities and pools are shown by default",
    )
    include_all_commodity_sources: bool = Field(
        default=False,
        validation_alias="HARVEST_BOARD_INCLUDE_ALL_COMMODITY_SOURCES",
        description="Index commodities and pools from every source database",
    )
    week_starts_on: int = Field(
        default=6,
        validation_alias="HARVEST_BOARD_WEEK_STARTS_ON",
        description="First day of the board week, date.weekday() numbering (0=Monday, 6=Sunday)",
    )
    timezone: str = Field(
        default="",
        validation_alias="HARVEST_BOARD_TIMEZONE",
        description="IANA zone used for day keys; empty means process local time",
    )
    persist_same_day_moves: bool = Field(
        default=True,
        validation_alias="HARVEST_BOARD_PERSIST_SAME_DAY_MOVES",
        description="Send an update request for reorders within a single day",
    )
    move_timeout_seconds: float | None = Field(
        default=None,
        validation_alias="HARVEST_BOARD_MOVE_TIMEOUT_SECONDS",
        description="Seconds to wait for a move to persist before rolling back",
    )
    move_error_fallback_message: str = Field(
        default="Failed to move plan",
        validation_alias="HARVEST_BOARD_MOVE_ERROR_FALLBACK",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str = Field(
        default="",
        validation_alias="HARVEST_BOARD_LOG_FILE",
        description="Optional JSON-lines log file; empty means console only",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("week_starts_on")
    @classmethod
    def validate_week_starts_on(cls, value: int) -> int:
        """Validate that the week start is a weekday number."""
        if not 0 <= value <= 6:
            logger.warning(f"Invalid HARVEST_BOARD_WEEK_STARTS_ON '{value}'. Must be 0-6. Defaulting to 6 (Sunday).")
            return 6
        return value

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Validate that the board timezone is a known IANA zone."""
        if not value:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown HARVEST_BOARD_TIMEZONE '{value}'. Falling back to process local time.")
            return ""
        return value

    @field_validator("move_timeout_seconds")
    @classmethod
    def validate_move_timeout(cls, value: float | None) -> float | None:
        """Treat non-positive timeouts as disabled."""
        if value is not None and value <= 0:
            return None
        return value


settings = Settings()
