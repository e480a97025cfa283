import json
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Annotated, Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase, split_csv

class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # User-error interception
    USER_ERROR_PREFIX: str = "app-exception: "
    USER_ERROR_SQLSTATES: Annotated[list[str], NoDecode] = ["P0001"]
    USER_ERROR_EXCEPTIONS: Annotated[list[str], NoDecode] = ["sqlalchemy.exc.DBAPIError"]
    USER_ERROR_CATALOG: Path | None = None

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/user-errors")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase; the logging module expects "DEBUG", "INFO", ...
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    @field_validator("USER_ERROR_SQLSTATES", "USER_ERROR_EXCEPTIONS", mode="before")
    def parse_csv_lists(cls, v):
        """
        Allow `USER_ERROR_SQLSTATES=P0001,P0002` in the environment besides a JSON list.
        """
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        return split_csv(v)

    @field_validator("USER_ERROR_SQLSTATES", mode="after")
    def normalize_sqlstates(cls, v: list[str]) -> list[str]:
        # SQLSTATE codes are upper-case alphanumerics
        return [code.upper() for code in v]

    model_config = SettingsConfigDict(
        # .env next to the package root
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

# get_settings() takes no arguments and always returns the same settings from the environment,
# so it is cached.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
