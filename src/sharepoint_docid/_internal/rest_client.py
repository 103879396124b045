"""Minimal SharePoint REST client used to read list-item metadata."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "sharepoint-docid"

FILE_LIST_ITEM_ENDPOINT = "/_api/web/GetFileByServerRelativePath(decodedurl=@p)/ListItemAllFields"


def odata_quote(value: str) -> str:
    """Quote a value as an OData string literal."""
    return "'" + value.replace("'", "''") + "'"


class SharePointRestClient:
    """httpx wrapper bound to one site, authenticating with a bearer token."""

    def __init__(
        self,
        site_url: str,
        access_token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._site_url = site_url.rstrip("/")
        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json;odata=nometadata",
                "User-Agent": DEFAULT_USER_AGENT,
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def site_url(self) -> str:
        return self._site_url

    def get_file_list_item(self, server_relative_path: str, fields: Iterable[str]) -> dict[str, Any]:
        """Read selected list-item fields of the file at server_relative_path.

        The path travels as an aliased parameter so that characters such as
        '#', '%' and quotes in file names need no escaping in the URL path.

        Raises:
            httpx.HTTPStatusError: If SharePoint answers with an error status
            httpx.RequestError: If the request cannot be sent
            ValueError: If the response body is not a JSON object
        """
        url = f"{self._site_url}{FILE_LIST_ITEM_ENDPOINT}"
        params = {
            "@p": odata_quote(server_relative_path),
            "$select": ",".join(fields),
        }
        logger.debug(f"GET {url} path={server_relative_path} select={params['$select']}")
        response = self._client.get(url, params=params)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected metadata response: {type(data).__name__}")
        return data

    def close(self) -> None:
        self._client.close()
