"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use SLOTDOWN_ prefix (e.g., SLOTDOWN_MAX_NESTING_DEPTH=32).

Settings can also be loaded from a .env file in the project root.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use SLOTDOWN_ prefix.

    Examples:
        SLOTDOWN_MAX_INPUT_CHARS=200000
        SLOTDOWN_STRICT_MODE=true
        SLOTDOWN_SCHEMA_FILE=schemas/site.yaml
    """

    model_config = SettingsConfigDict(
        env_prefix="SLOTDOWN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Parser safeguards
    max_input_chars: int = Field(
        default=2_000_000,
        description="Reject documents longer than this many characters",
        gt=0,
    )

    max_nesting_depth: int = Field(
        default=64,
        description="Reject documents whose fenced directives nest deeper than this",
        gt=0,
    )

    # Validation configuration
    validate_schema: bool = Field(
        default=True,
        description="Validate the parsed tree against directive schemas",
    )

    allow_unknown_directives: bool = Field(
        default=False,
        description="Do not report directive kinds missing from the schema registry",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: treat schema violations as failures",
    )

    schema_file: Optional[str] = Field(
        default=None,
        description="Optional YAML file with additional directive schemas",
    )

    # Output configuration
    output_indent: int = Field(
        default=2,
        description="Indentation used when writing the JSON tree",
        ge=0,
    )

    def depth_exceeds(self, depth: int) -> bool:
        """
        Check a fence nesting depth against the configured cap.

        Args:
            depth: Number of fences open after pushing a new one

        Returns:
            True if the depth is beyond max_nesting_depth

        Example:
            >>> AppSettings(max_nesting_depth=2).depth_exceeds(3)
            True
        """
        return depth > self.max_nesting_depth


# Singleton instance - import this in your code
appsettings = AppSettings()
