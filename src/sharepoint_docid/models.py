"""Data models for the sharepoint_docid library."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import quote

# List-item fields read by the metadata request
FILE_REF_FIELD = "FileRef"
DOCUMENT_ID_FIELD = "_dlc_DocId"
DOCUMENT_ID_URL_FIELD = "_dlc_DocIdUrl"
METADATA_FIELDS = (FILE_REF_FIELD, DOCUMENT_ID_FIELD, DOCUMENT_ID_URL_FIELD)

# Characters left as they are when a decoded path is put back into a URL
PATH_SAFE_CHARS = "/:@!$&'()*+,;="


class ShapeKind(str, Enum):
    """Known SharePoint URL shapes, in the order they are tested."""

    MODERN_SHARING_LINK = "modern-sharing-link"
    SITE_COLLECTION_PATH = "site-collection-path"
    LIBRARY_ROOT_PATH = "library-root-path"
    UNCLASSIFIED = "unclassified"


class AuthMode(str, Enum):
    """How a session is established with SharePoint."""

    INTERACTIVE = "interactive"
    DEVICE_CODE = "device-code"
    WEB_LOGIN = "web-login"


@dataclass(frozen=True)
class ParsedUrl:
    """An absolute http(s) URL split into the parts the classifier uses."""

    scheme: str
    host: str
    path: str
    query: str | None = None

    @property
    def root(self) -> str:
        """Tenant root, e.g. https://contoso.sharepoint.com."""
        return f"{self.scheme}://{self.host}"


@dataclass(frozen=True)
class UrlShape:
    """Which known URL pattern a path matched."""

    kind: ShapeKind
    site_segment: str | None = None
    managed_path: str | None = None


@dataclass(frozen=True)
class SiteReference:
    """The site collection to authenticate and connect against."""

    base_url: str

    def matches(self, other: SiteReference) -> bool:
        """Compare two references, ignoring case and a trailing slash."""
        return self.base_url.rstrip("/").casefold() == other.base_url.rstrip("/").casefold()


@dataclass(frozen=True)
class CandidateServerRelativePath:
    """Best-effort server-relative path for the metadata request.

    reliable is False when the path was taken from a sharing link and may not
    address the underlying file.
    """

    path: str
    reliable: bool


@dataclass(frozen=True)
class Classification:
    """Result of classifying an input URL."""

    parsed: ParsedUrl
    shape: UrlShape
    site: SiteReference
    candidate_path: CandidateServerRelativePath

    @property
    def canonical_url(self) -> str:
        """URL of the candidate path, percent-encoded again when it was decoded."""
        path = self.candidate_path.path
        if self.candidate_path.reliable:
            path = quote(path, safe=PATH_SAFE_CHARS)
        return f"{self.parsed.root}{path}"


@dataclass(frozen=True)
class DocumentMetadata:
    """Projection of the list-item fields returned by the metadata API."""

    file_ref: str
    document_id: str | None = None
    document_id_url_field: str | None = None

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> DocumentMetadata:
        """Build metadata from a ListItemAllFields JSON object.

        The REST API returns URL fields either as text ("<url>, <description>")
        or as an object with Url and Description keys; both are reduced to the
        text form.
        """
        url_field = fields.get(DOCUMENT_ID_URL_FIELD)
        if isinstance(url_field, dict):
            url = url_field.get("Url") or ""
            description = url_field.get("Description") or ""
            url_field = f"{url}, {description}" if url else None

        document_id = fields.get(DOCUMENT_ID_FIELD)
        return cls(
            file_ref=str(fields.get(FILE_REF_FIELD) or ""),
            document_id=str(document_id) if document_id else None,
            document_id_url_field=str(url_field) if url_field else None,
        )
