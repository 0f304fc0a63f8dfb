"""Runtime configuration from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vixlib import constants


class Settings(BaseSettings):
    """Runtime configuration from environment variables.

    All settings can be overridden via environment variables with VIXLIB_ prefix.
    Example: VIXLIB_DEFAULT_TIMEOUT_SECONDS=300
    """

    model_config = SettingsConfigDict(
        env_prefix="VIXLIB_",
        extra="ignore",
    )

    locale: str = constants.DEFAULT_LOCALE
    default_timeout_seconds: int = Field(
        default=constants.DEFAULT_TIMEOUT_SECONDS,
        ge=1,
        le=constants.MAX_TIMEOUT_SECONDS,
    )

    opener: str | None = None
    """Import path ("package.module:callable") of the function that connects
    to the host and opens a VM. Used by the CLI only."""
