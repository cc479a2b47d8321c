from __future__ import annotations

"""
User settings for talking to the remote ledger.

Mirrors config/ledgerflow.yml. Environment variables override the file for
the API URL and token so secrets need not be written to disk.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field

from ledgerflow.config import (
    DEFAULT_BASE_CURRENCY,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_API_TOKEN,
    ENV_API_URL,
)


class Settings(BaseModel):
    api_base_url: str = Field(default="http://localhost:3000/api")
    api_token: Optional[str] = Field(default=None, description="Bearer token for the ledger API")
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    base_currency: str = DEFAULT_BASE_CURRENCY
    log_level: str = "WARNING"

    def with_env_overrides(self) -> Settings:
        """Return a copy with LEDGERFLOW_API_URL / LEDGERFLOW_API_TOKEN applied."""
        updates = {}
        url = os.environ.get(ENV_API_URL)
        if url:
            updates["api_base_url"] = url
        token = os.environ.get(ENV_API_TOKEN)
        if token:
            updates["api_token"] = token
        return self.model_copy(update=updates)
