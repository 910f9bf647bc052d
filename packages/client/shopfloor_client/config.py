"""
Configuration loading and validation.

Loads client configuration from a YAML file. The bearer token is read from the
environment variable named in the config; it is never stored in the file.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field


class ApiConfig(BaseModel):
    url: str = "http://localhost:8000"
    verify_tls: bool = True
    request_timeout_seconds: int = 30
    token_env: str = "SHOPFLOOR_TOKEN"

    @property
    def token(self) -> str | None:
        return os.environ.get(self.token_env)


class PollingConfig(BaseModel):
    notifications_interval_seconds: float = Field(default=60.0, gt=0)
    chat_interval_seconds: float = Field(default=10.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = "info"
    format: Literal["json", "text"] = "text"


class ClientConfig(BaseModel):
    api: ApiConfig = Field(default_factory=ApiConfig)
    employee_id: uuid.UUID | None = None
    polling: PollingConfig = Field(default_factory=PollingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> ClientConfig:
    """Load and validate client configuration from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return ClientConfig.model_validate(raw)
