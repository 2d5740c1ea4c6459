"""Pydantic models describing the imapquery runtime configuration."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


FetchItemName = Literal["uid", "envelope", "flags", "size", "content_info", "headers", "body"]


class ImapSettings(BaseModel):
    """Server connection defaults."""

    model_config = ConfigDict(extra="forbid")

    host: str
    port: int = Field(default=993, gt=0, le=65535)
    ssl: bool = True
    username: str
    password: Optional[str] = None
    default_mailbox: str = "INBOX"
    charset: str = "UTF-8"


class QuerySettings(BaseModel):
    """Defaults applied to every query."""

    model_config = ConfigDict(extra="forbid")

    prefetch: List[FetchItemName] = Field(default_factory=lambda: ["envelope", "flags"])
    rate_limit_per_minute: int = Field(default=500, gt=0)

    @field_validator("prefetch", mode="before")
    @classmethod
    def _lowercase_items(cls, value):
        if isinstance(value, list):
            return [item.lower() if isinstance(item, str) else item for item in value]
        return value


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    component: str = "imapquery"
    redact: List[str] = Field(default_factory=lambda: ["subject", "body", "pattern", "password"])


class RuntimeConfig(BaseModel):
    """Root configuration loaded from ``config.yaml``."""

    model_config = ConfigDict(extra="forbid")

    version: int = 1
    imap: ImapSettings
    query: QuerySettings = Field(default_factory=QuerySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
