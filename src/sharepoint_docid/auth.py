"""Session management: MSAL sign-in and the per-site authenticated session."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx
import msal

from sharepoint_docid._internal.rest_client import DEFAULT_TIMEOUT, SharePointRestClient
from sharepoint_docid.classifier import parse_url
from sharepoint_docid.exceptions import AuthenticationError, MalformedUrlError
from sharepoint_docid.models import AuthMode, SiteReference

logger = logging.getLogger(__name__)

DEFAULT_TENANT_ID = "organizations"
TOKEN_CACHE_FILE = "token_cache.json"
SESSION_STATE_FILE = "session.json"


class AuthenticatedSession:
    """A signed-in connection bound to exactly one SharePoint site."""

    def __init__(
        self,
        site: SiteReference,
        rest_client: SharePointRestClient,
        *,
        account: str | None = None,
    ) -> None:
        self._site = site
        self._rest_client = rest_client
        self._account = account

    @property
    def site(self) -> SiteReference:
        return self._site

    @property
    def account(self) -> str | None:
        return self._account

    def get_file_list_item(self, server_relative_path: str, fields: Iterable[str]) -> dict[str, Any]:
        """Read selected list-item fields of a file in this site."""
        return self._rest_client.get_file_list_item(server_relative_path, fields)

    def close(self) -> None:
        self._rest_client.close()


class SessionManager:
    """Creates and remembers authenticated sessions.

    The MSAL token cache and the last connected site are persisted under
    cache_dir so later invocations can reuse the session without prompting.

    Example:
        manager = SessionManager("00000000-0000-0000-0000-000000000000")
        session = manager.get_current_session()
        if session is None or not session.site.matches(site):
            session = manager.connect(site.base_url)
    """

    def __init__(
        self,
        client_id: str | None = None,
        *,
        tenant_id: str = DEFAULT_TENANT_ID,
        auth_mode: AuthMode = AuthMode.INTERACTIVE,
        cache_dir: Path | str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        device_code_callback: Callable[[str], None] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            client_id: Entra ID application (client) id used to sign in
            tenant_id: Tenant used for the authority (default: organizations)
            auth_mode: Sign-in flow used by connect() when none is given
            cache_dir: Optional directory for the token cache and session state
            timeout: HTTP timeout in seconds for metadata requests
            device_code_callback: Receives the device-code sign-in instructions
            transport: Optional httpx transport for the REST client
        """
        self._client_id = client_id
        self._tenant_id = tenant_id
        self._auth_mode = auth_mode
        self._cache_dir = Path(cache_dir) if cache_dir else None
        self._timeout = timeout
        self._device_code_callback = device_code_callback
        self._transport = transport
        self._token_cache = msal.SerializableTokenCache()
        self._token_cache_loaded = False
        self._apps: dict[str, msal.PublicClientApplication] = {}
        self._current: AuthenticatedSession | None = None

    @property
    def authority(self) -> str:
        return f"https://login.microsoftonline.com/{self._tenant_id}"

    def _path(self, name: str) -> Path | None:
        return self._cache_dir / name if self._cache_dir else None

    def _load_token_cache(self) -> None:
        """Load the MSAL token cache from disk."""
        path = self._path(TOKEN_CACHE_FILE)
        if self._token_cache_loaded or path is None:
            return
        self._token_cache_loaded = True
        if not path.exists():
            return
        try:
            self._token_cache.deserialize(path.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load token cache: {e}")

    def _save_token_cache(self) -> None:
        """Save the MSAL token cache to disk if it changed."""
        path = self._path(TOKEN_CACHE_FILE)
        if path is None or not self._token_cache.has_state_changed:
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self._token_cache.serialize())
        except OSError as e:
            logger.warning(f"Failed to save token cache: {e}")

    def _load_session_state(self) -> dict[str, str]:
        path = self._path(SESSION_STATE_FILE)
        if path is None or not path.exists():
            return {}
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load session state: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save_session_state(self, site: SiteReference, client_id: str) -> None:
        path = self._path(SESSION_STATE_FILE)
        if path is None:
            return
        payload = {
            "site_url": site.base_url,
            "client_id": client_id,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2))
        except OSError as e:
            logger.warning(f"Failed to save session state: {e}")

    def _clear_session_state(self) -> None:
        path = self._path(SESSION_STATE_FILE)
        if path is not None and path.exists():
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Failed to clear session state: {e}")

    def _clear_token_cache(self) -> None:
        """Sign every cached account out and delete the persisted token cache."""
        for app in self._apps.values():
            for account in app.get_accounts():
                app.remove_account(account)
        self._apps.clear()
        self._token_cache = msal.SerializableTokenCache()
        self._token_cache_loaded = True

        path = self._path(TOKEN_CACHE_FILE)
        if path is not None and path.exists():
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Failed to clear token cache: {e}")

    def _get_app(self, client_id: str) -> msal.PublicClientApplication:
        """Get (or create) the MSAL public client application for client_id."""
        if client_id not in self._apps:
            self._load_token_cache()
            self._apps[client_id] = msal.PublicClientApplication(
                client_id,
                authority=self.authority,
                token_cache=self._token_cache,
            )
        return self._apps[client_id]

    @staticmethod
    def _scopes(site: SiteReference) -> list[str]:
        return [f"{parse_url(site.base_url).root}/.default"]

    def _acquire_silent(
        self, app: msal.PublicClientApplication, scopes: list[str]
    ) -> dict[str, Any] | None:
        for account in app.get_accounts():
            result = app.acquire_token_silent(scopes, account=account)
            if result and "access_token" in result:
                return result
        return None

    def _acquire(
        self, app: msal.PublicClientApplication, scopes: list[str], auth_mode: AuthMode
    ) -> dict[str, Any]:
        if auth_mode is AuthMode.DEVICE_CODE:
            flow = app.initiate_device_flow(scopes=scopes)
            if "user_code" not in flow:
                raise AuthenticationError(
                    f"Could not start device code sign-in: {flow.get('error_description') or flow}"
                )
            if self._device_code_callback:
                self._device_code_callback(flow["message"])
            else:
                logger.warning(flow["message"])
            return app.acquire_token_by_device_flow(flow)  # type: ignore[no-any-return]

        # Web login always shows the sign-in page instead of an account picker
        prompt = "login" if auth_mode is AuthMode.WEB_LOGIN else "select_account"
        return app.acquire_token_interactive(scopes, prompt=prompt)  # type: ignore[no-any-return]

    def _build_session(self, site: SiteReference, result: dict[str, Any]) -> AuthenticatedSession:
        rest_client = SharePointRestClient(
            site.base_url,
            result["access_token"],
            timeout=self._timeout,
            transport=self._transport,
        )
        account = (result.get("id_token_claims") or {}).get("preferred_username")
        return AuthenticatedSession(site, rest_client, account=account)

    def _set_current(self, session: AuthenticatedSession) -> None:
        if self._current is not None and self._current is not session:
            self._current.close()
        self._current = session

    def get_current_session(self) -> AuthenticatedSession | None:
        """Return the current session, restoring the persisted one if possible.

        Returns:
            The session of this process, or one rebuilt silently from the
            persisted token cache for the last connected site, or None
        """
        if self._current is not None:
            return self._current

        state = self._load_session_state()
        site_url = state.get("site_url")
        client_id = self._client_id or state.get("client_id")
        if not site_url or not client_id:
            return None

        site = SiteReference(site_url)
        try:
            result = self._acquire_silent(self._get_app(client_id), self._scopes(site))
        except MalformedUrlError as e:
            logger.warning(f"Ignoring unusable session state for {site_url}: {e}")
            return None
        self._save_token_cache()
        if result is None:
            logger.info(f"Stored session for {site_url} has expired")
            return None

        logger.info(f"Reusing session for {site_url}")
        session = self._build_session(site, result)
        self._set_current(session)
        return session

    def connect(
        self,
        site_url: str,
        auth_mode: AuthMode | None = None,
        client_id: str | None = None,
    ) -> AuthenticatedSession:
        """Sign in and bind a new session to site_url.

        A token already in the cache is used when it is valid; otherwise the
        sign-in flow selected by auth_mode runs.

        Args:
            site_url: Site collection URL to connect to
            auth_mode: Sign-in flow (defaults to the manager's auth_mode)
            client_id: Application id (defaults to the manager's client_id)

        Returns:
            The new current session

        Raises:
            AuthenticationError: If no client id is configured or sign-in fails
            MalformedUrlError: If site_url is not an absolute http(s) URL
        """
        client_id = client_id or self._client_id
        if not client_id:
            raise AuthenticationError(
                "A client id is required to sign in (set SP_DOCID_CLIENT_ID or pass --client-id)"
            )
        auth_mode = auth_mode or self._auth_mode

        site = SiteReference(site_url.rstrip("/"))
        scopes = self._scopes(site)
        app = self._get_app(client_id)

        result = None
        if auth_mode is not AuthMode.WEB_LOGIN:
            result = self._acquire_silent(app, scopes)
        if result is None:
            logger.info(f"Signing in to {site.base_url} ({auth_mode.value})")
            result = self._acquire(app, scopes, auth_mode)
        self._save_token_cache()

        if not result or "access_token" not in result:
            error = (result or {}).get("error")
            description = (result or {}).get("error_description")
            raise AuthenticationError(f"Sign-in to {site.base_url} failed: {error}: {description}")

        session = self._build_session(site, result)
        self._set_current(session)
        self._save_session_state(site, client_id)
        logger.info(f"Connected to {site.base_url}")
        return session

    def disconnect(self) -> None:
        """Forget the current session along with everything persisted for it.

        The next connect() runs the sign-in flow again, so a different account
        can be used.
        """
        self.close()
        self._clear_session_state()
        self._clear_token_cache()

    def close(self) -> None:
        """Close the current session."""
        if self._current is not None:
            self._current.close()
            self._current = None
