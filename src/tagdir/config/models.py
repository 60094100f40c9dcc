"""Configuration models describing tagdir settings."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tagdir.tags.reader import DEFAULT_EXTENSIONS

DEFAULT_DIR_FORMATS = [
    "%{artist} - %{album}",
    "%{artist} - [%{year}] %{album}",
    "%{artist} - %{album} (%{year})",
    "%{artist}/%{album}",
    "%{artist}/[%{year}] %{album}",
    "%{artist}/%{album} (%{year})",
    "%{albumartist}/%{max-year} %{album}",
    "%{unq-albumartist} - %{album}",
]


class TagdirBaseModel(BaseModel):
    """Shared configuration for tagdir Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class RenamerSettings(TagdirBaseModel):
    """Directory renaming options.

    Attributes:
        format: Format used to generate directory names.
        mode: ``rename`` replaces a file's directory, ``create`` creates a
            subdirectory below it.
        formats: Formats offered as presets.
        recursive: Whether to include files in subdirectories.
        tag_source: Which tag view to read (``easy`` or ``raw``).
        extensions: File suffixes treated as audio files.
        max_rename_hops: Chained directory renames followed per file.
        max_refinement_rounds: Planning rounds per file.
        max_descend_depth: New directory levels created below a file.
    """

    format: str = DEFAULT_DIR_FORMATS[0]
    mode: Literal["rename", "create"] = "rename"
    formats: List[str] = Field(default_factory=lambda: list(DEFAULT_DIR_FORMATS))
    recursive: bool = True
    tag_source: Literal["easy", "raw"] = "easy"
    extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    max_rename_hops: int = Field(default=5, ge=1)
    max_refinement_rounds: int = Field(default=2, ge=1)
    max_descend_depth: int = Field(default=5, ge=1)

    @field_validator("format")
    @classmethod
    def _format_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("format must not be empty")
        return value

    @field_validator("extensions")
    @classmethod
    def _dotted_extensions(cls, value: List[str]) -> List[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]


class LoggingSettings(TagdirBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file_logging: Whether to also write a rotating log file.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file_logging: bool = False
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(TagdirBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class TagdirConfig(TagdirBaseModel):
    """Top-level configuration struct for tagdir."""

    renamer: RenamerSettings = Field(default_factory=RenamerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_DIR_FORMATS",
    "TagdirBaseModel",
    "RenamerSettings",
    "LoggingSettings",
    "CLIOptions",
    "TagdirConfig",
]
