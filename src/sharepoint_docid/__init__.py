"""SharePoint Document ID - resolve the permanent URL of a SharePoint document.

Example usage:
    from pathlib import Path

    from sharepoint_docid import DocIdClient, SessionManager

    # Using context manager (recommended)
    manager = SessionManager("<client id>", cache_dir=Path.home() / ".sp-docid")
    with DocIdClient(manager) as client:
        url = client.get_permanent_url(
            "https://contoso.sharepoint.com/sites/Finance/Shared%20Documents/Budget.xlsx"
        )
        print(url)

    # Classification only, no network
    from sharepoint_docid import classify
    result = classify("https://contoso.sharepoint.com/:x:/s/Finance/EabcXYZ")
    print(result.site.base_url, result.candidate_path.reliable)
"""

from sharepoint_docid.auth import AuthenticatedSession, SessionManager
from sharepoint_docid.classifier import classify, parse_url
from sharepoint_docid.client import DocIdClient
from sharepoint_docid.exceptions import (
    AuthenticationError,
    ClassificationError,
    DocIdError,
    DocumentIdNotConfiguredError,
    MalformedUrlError,
    NotASharePointUrlError,
    ResolutionError,
    SessionSiteMismatchError,
    TransportFailureError,
)
from sharepoint_docid.models import (
    AuthMode,
    CandidateServerRelativePath,
    Classification,
    DocumentMetadata,
    ParsedUrl,
    ShapeKind,
    SiteReference,
    UrlShape,
)
from sharepoint_docid.resolver import normalize_permanent_url, resolve

__version__ = "0.1.0"

__all__ = [
    # Main client
    "DocIdClient",
    "classify",
    "parse_url",
    "resolve",
    "normalize_permanent_url",
    # Sessions
    "SessionManager",
    "AuthenticatedSession",
    # Models
    "AuthMode",
    "CandidateServerRelativePath",
    "Classification",
    "DocumentMetadata",
    "ParsedUrl",
    "ShapeKind",
    "SiteReference",
    "UrlShape",
    # Exceptions
    "DocIdError",
    "ClassificationError",
    "MalformedUrlError",
    "NotASharePointUrlError",
    "ResolutionError",
    "SessionSiteMismatchError",
    "TransportFailureError",
    "DocumentIdNotConfiguredError",
    "AuthenticationError",
]
