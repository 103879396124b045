"""Main DocIdClient class tying classification, sign-in and resolution together."""

from __future__ import annotations

import logging
from typing import Any

from sharepoint_docid.auth import AuthenticatedSession, SessionManager
from sharepoint_docid.classifier import classify
from sharepoint_docid.models import Classification, SiteReference
from sharepoint_docid.resolver import resolve

logger = logging.getLogger(__name__)


class DocIdClient:
    """Client for resolving permanent Document ID URLs.

    Supports both context manager and manual session patterns.

    Example (context manager - recommended):
        with DocIdClient(SessionManager(client_id)) as client:
            url = client.get_permanent_url(
                "https://contoso.sharepoint.com/sites/Finance/Shared%20Documents/Budget.xlsx"
            )

    Example (manual session):
        client = DocIdClient(SessionManager(client_id))
        url = client.get_permanent_url(link)
        client.close()
    """

    def __init__(
        self,
        session_manager: SessionManager | None = None,
        *,
        tenant_url: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            session_manager: Provides and creates sessions (a default manager
                without persistence is created when omitted)
            tenant_url: Optional tenant base URL overriding the host of input links
        """
        self._sessions = session_manager or SessionManager()
        self._tenant_url = tenant_url

    def __enter__(self) -> DocIdClient:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit context manager."""
        self.close()

    def classify(self, url: str) -> Classification:
        """Classify a link without any network activity."""
        return classify(url, tenant_url=self._tenant_url)

    def session_for(self, site: SiteReference) -> AuthenticatedSession:
        """Get a session bound to site, connecting when the current one is absent or elsewhere."""
        session = self._sessions.get_current_session()
        if session is not None and session.site.matches(site):
            return session

        if session is not None:
            logger.info(f"Current session is bound to {session.site.base_url}; connecting to {site.base_url}")
        return self._sessions.connect(site.base_url)

    def get_permanent_url(self, url: str) -> str:
        """Resolve the permanent Document ID URL of the document behind url.

        Args:
            url: Link to the document, canonical or sharing link

        Returns:
            The Document ID redirect URL

        Raises:
            ClassificationError: If the link cannot be classified (no session is touched)
            AuthenticationError: If signing in to the document's site fails
            ResolutionError: If the permanent URL cannot be resolved
        """
        classification = self.classify(url)
        session = self.session_for(classification.site)
        return resolve(session, classification.candidate_path, site=classification.site)

    def close(self) -> None:
        """Close the client and clean up resources."""
        self._sessions.close()
