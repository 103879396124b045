"""Shared test helpers for sharepoint_docid tests."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sharepoint_docid.models import SiteReference

FINANCE_SITE = "https://contoso.sharepoint.com/sites/Finance"
FINANCE_URL = "https://contoso.sharepoint.com/sites/Finance/Shared%20Documents/Budget.xlsx"
FINANCE_PATH = "/sites/Finance/Shared Documents/Budget.xlsx"
FINANCE_PERMANENT_URL = "https://contoso.sharepoint.com/sites/Finance/_layouts/15/DocIdRedir.aspx?ID=DOC-42-1"


def docid_fields(
    document_id: str | None = "DOC-42-1",
    url_field: Any = f"{FINANCE_PERMANENT_URL}, DOC-42-1",
    file_ref: str = FINANCE_PATH,
) -> dict[str, Any]:
    """ListItemAllFields payload as returned by SharePoint."""
    return {"FileRef": file_ref, "_dlc_DocId": document_id, "_dlc_DocIdUrl": url_field}


def token_result(token: str = "test_token", username: str = "jane@contoso.com") -> dict[str, Any]:
    """Successful MSAL token response."""
    return {"access_token": token, "id_token_claims": {"preferred_username": username}}


class FakeSession:
    """Stand-in for AuthenticatedSession that records metadata requests."""

    def __init__(
        self,
        site_url: str = FINANCE_SITE,
        fields: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.site = SiteReference(site_url)
        self.account = None
        self.fields = fields if fields is not None else docid_fields()
        self.error = error
        self.calls: list[tuple[str, tuple[str, ...]]] = []
        self.closed = False

    def get_file_list_item(self, server_relative_path: str, fields: Iterable[str]) -> dict[str, Any]:
        self.calls.append((server_relative_path, tuple(fields)))
        if self.error is not None:
            raise self.error
        return self.fields

    def close(self) -> None:
        self.closed = True
