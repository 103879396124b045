"""Pytest fixtures for sharepoint_docid tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from helpers import FakeSession, token_result

from sharepoint_docid.config import ENV_AUTH_MODE, ENV_CACHE_DIR, ENV_CLIENT_ID, ENV_TENANT_ID, ENV_TIMEOUT


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of the tests."""
    for name in (ENV_CLIENT_ID, ENV_TENANT_ID, ENV_AUTH_MODE, ENV_CACHE_DIR, ENV_TIMEOUT):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_session() -> FakeSession:
    """Create a session bound to the Finance site returning a Document ID."""
    return FakeSession()


@pytest.fixture
def patch_msal_app() -> Any:
    """Patch the MSAL PublicClientApplication class for testing."""
    with patch("sharepoint_docid.auth.msal.PublicClientApplication") as mock_class:
        mock_app = MagicMock()
        mock_app.get_accounts.return_value = []
        mock_app.acquire_token_silent.return_value = None
        mock_app.acquire_token_interactive.return_value = token_result()
        mock_class.return_value = mock_app
        mock_app.mock_class = mock_class
        yield mock_app
