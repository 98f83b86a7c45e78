"""Engine settings read from the environment."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from linkweave.core.schema import LinkFormat, SettingsSchema
from linkweave.core.walker import DEFAULT_MAX_DEPTH


class EngineSettings(BaseSettings):
    """
    Engine settings managed by Pydantic.
    Reads from LINKWEAVE_* environment variables and/or .env file.
    """

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)
    base_url: str = ""
    default_format: LinkFormat = LinkFormat.HAL
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"

    # Pagination query parameters
    cursor_param: str = "page[cursor]"
    after_param: str = "page[after]"
    before_param: str = "page[before]"
    last_param: str = "page[last]"
    offset_param: str = "page[offset]"
    limit_param: str = "page[limit]"
    page_size: int = Field(default=20, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="LINKWEAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def lower_log_level(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    def merged_with(self, overrides: SettingsSchema) -> EngineSettings:
        """Return a copy with the non-empty values of a registry settings block applied."""
        update = overrides.model_dump(exclude_none=True)
        return self.model_copy(update=update)
