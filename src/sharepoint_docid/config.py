"""
Configuration management.
Loads environment variables (and a .env file, if present) for sign-in and transport settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from sharepoint_docid._internal.rest_client import DEFAULT_TIMEOUT
from sharepoint_docid.auth import DEFAULT_TENANT_ID
from sharepoint_docid.models import AuthMode

# Load environment variables from .env file
load_dotenv()

ENV_CLIENT_ID = "SP_DOCID_CLIENT_ID"
ENV_TENANT_ID = "SP_DOCID_TENANT_ID"
ENV_AUTH_MODE = "SP_DOCID_AUTH_MODE"
ENV_CACHE_DIR = "SP_DOCID_CACHE_DIR"
ENV_TIMEOUT = "SP_DOCID_TIMEOUT"

DEFAULT_CACHE_DIR = Path.home() / ".sp-docid"


@dataclass(frozen=True)
class Settings:
    """Sign-in and transport settings."""

    client_id: str | None = None
    tenant_id: str = DEFAULT_TENANT_ID
    auth_mode: AuthMode = AuthMode.INTERACTIVE
    cache_dir: Path = DEFAULT_CACHE_DIR
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> Settings:
        """
        Load settings from environment variables.
        Raises ValueError if a variable holds an invalid value.
        """
        auth_mode_raw = os.getenv(ENV_AUTH_MODE, AuthMode.INTERACTIVE.value)
        try:
            auth_mode = AuthMode(auth_mode_raw.strip().lower())
        except ValueError as e:
            choices = ", ".join(mode.value for mode in AuthMode)
            raise ValueError(f"{ENV_AUTH_MODE} must be one of {choices}, got '{auth_mode_raw}'") from e

        timeout_raw = os.getenv(ENV_TIMEOUT, str(DEFAULT_TIMEOUT))
        try:
            timeout = float(timeout_raw)
        except ValueError as e:
            raise ValueError(f"{ENV_TIMEOUT} must be a number of seconds, got '{timeout_raw}'") from e

        cache_dir = os.getenv(ENV_CACHE_DIR)
        return cls(
            client_id=os.getenv(ENV_CLIENT_ID) or None,
            tenant_id=os.getenv(ENV_TENANT_ID) or DEFAULT_TENANT_ID,
            auth_mode=auth_mode,
            cache_dir=Path(cache_dir).expanduser() if cache_dir else DEFAULT_CACHE_DIR,
            timeout=timeout,
        )
