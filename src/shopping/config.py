"""Runtime settings for the Shopping domain.

Settings are read from environment variables so the same code runs in
development, test and production. PROTEAN_ENV selects the protean config
overlay and is surfaced here for logging only.
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    env: str = "development"
    log_level: str = "INFO"
    log_json: bool = False
    # Upper bound for a single remote wishlist call; None disables the timeout
    remote_timeout_seconds: float | None = Field(default=10.0, gt=0)
    poll_interval_seconds: float = Field(default=30.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables, ignoring unset ones."""
        environ = os.environ if environ is None else environ

        values: dict = {}
        if "PROTEAN_ENV" in environ:
            values["env"] = environ["PROTEAN_ENV"]
        if "SHOPPING_LOG_LEVEL" in environ:
            values["log_level"] = environ["SHOPPING_LOG_LEVEL"]
        if "SHOPPING_LOG_JSON" in environ:
            values["log_json"] = environ["SHOPPING_LOG_JSON"].strip().lower() in ("1", "true", "yes")
        if "SHOPPING_REMOTE_TIMEOUT" in environ:
            raw = environ["SHOPPING_REMOTE_TIMEOUT"].strip().lower()
            values["remote_timeout_seconds"] = None if raw in ("", "0", "none", "off") else float(raw)
        if "SHOPPING_POLL_INTERVAL" in environ:
            values["poll_interval_seconds"] = float(environ["SHOPPING_POLL_INTERVAL"])

        return cls(**values)
