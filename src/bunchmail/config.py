"""Configuration management for bunchmail.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files and
is overridden by command-line flags in :mod:`bunchmail.cli`.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from bunchmail.exceptions import ConfigurationError


def split_comma_list(value: Any) -> list[str]:
    """Split a comma separated string into its non-empty, stripped parts."""

    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    else:
        parts = list(value)
    return [str(p).strip() for p in parts if str(p).strip()]


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the BUNCHMAIL_ prefix (e.g., BUNCHMAIL_DOMAIN). List settings accept
    comma separated values.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUNCHMAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Input / output maildirs
    output_dir: Path | None = Field(
        default=None,
        description="The directory path to the bunch (output) maildir. It is cleared first.",
    )
    inbox_paths: Annotated[list[Path], NoDecode] = Field(
        default_factory=list,
        description="Inbox-role maildirs to read",
    )
    archive_paths: Annotated[list[Path], NoDecode] = Field(
        default_factory=list,
        description="Archive-role maildirs to read",
    )

    # Collation
    identities: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="All addresses you use(d) to send mail, for sent mail collation",
    )
    remove_flags: str = Field(
        default="",
        description='Maildir flags to remove from every message (e.g. "FRT")',
    )
    no_dupes: bool = Field(
        default=False,
        description="Discard duplicate messages instead of writing them",
    )
    domain: str = Field(
        default="bunchmail.local",
        description="Domain used in generated file names and synthetic Message-IDs",
    )

    # Reporting
    dupes_log_path: Path = Field(
        default=Path("dupes.log"),
        description="Tab separated audit file listing every duplicate found",
    )
    progress_interval: int = Field(
        default=1000,
        ge=1,
        description="Log progress every N messages read or written",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("inbox_paths", "archive_paths", "identities", mode="before")
    @classmethod
    def _split_lists(cls, value: Any) -> list[str]:
        return split_comma_list(value)

    @field_validator("output_dir", mode="before")
    @classmethod
    def _blank_output_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def validate_for_run(self) -> None:
        """Check that a run has somewhere to read from and write to.

        The output tree is deleted before writing, so it must not contain the
        working directory, any input maildir or the duplicate log, and no
        input may contain it.

        Raises:
            ConfigurationError: If the output directory or all inputs are
                missing, or the output overlaps something it would destroy.
        """

        if self.output_dir is None:
            raise ConfigurationError("You must give a bunch (output) directory")
        if not self.inbox_paths and not self.archive_paths:
            raise ConfigurationError(
                "You must define the (input) Inbox and/or Archive directories"
            )

        output = Path(self.output_dir).resolve()
        if Path.cwd().resolve().is_relative_to(output):
            raise ConfigurationError(
                f"Bunch directory {self.output_dir} contains the current directory"
            )
        for source in (*self.inbox_paths, *self.archive_paths):
            resolved = Path(source).resolve()
            if resolved.is_relative_to(output) or output.is_relative_to(resolved):
                raise ConfigurationError(
                    f"Input maildir {source} overlaps the bunch directory {self.output_dir}"
                )
        if Path(self.dupes_log_path).resolve().is_relative_to(output):
            raise ConfigurationError(
                f"Duplicate log {self.dupes_log_path} is inside the bunch directory"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
