"""Classification of SharePoint document links.

Decides, from a user-supplied link, which site collection to connect to and
which server-relative path to hand to the metadata API. Shapes are tested in
a fixed order and the first match wins:

1. modern sharing links (``/:x:/s/<site>/...``), which are syntactically
   also generic paths and must be recognised first
2. site collection paths (``/sites/<site>/...`` or ``/teams/<site>/...``)
3. anything else, which is treated as a library under the tenant root site

Example:
    from sharepoint_docid.classifier import classify

    result = classify("https://contoso.sharepoint.com/sites/Finance/Shared%20Documents/Budget.xlsx")
    result.site.base_url             # https://contoso.sharepoint.com/sites/Finance
    result.candidate_path.path       # /sites/Finance/Shared Documents/Budget.xlsx
"""

from __future__ import annotations

import logging
import re
from urllib.parse import quote, unquote, urlsplit

from sharepoint_docid.exceptions import MalformedUrlError, NotASharePointUrlError
from sharepoint_docid.models import (
    PATH_SAFE_CHARS,
    CandidateServerRelativePath,
    Classification,
    ParsedUrl,
    ShapeKind,
    SiteReference,
    UrlShape,
)

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")

# /:x:/s/Finance/EabcXYZ -> doctype "x", scope "s", rest "/Finance/EabcXYZ"
SHARING_LINK_RE = re.compile(
    r"^/:(?P<doctype>[a-z]{1,2}):/(?P<scope>[a-z])(?P<rest>/.*)?$", re.IGNORECASE
)
SITE_COLLECTION_RE = re.compile(r"^/(?P<managed>sites|teams)/(?P<site>[^/]+)(?:/|$)", re.IGNORECASE)

# Sharing-link scopes that name a site collection, kept verbatim in the site URL (/s/X, /t/X)
SITE_SCOPES = {"s", "t"}
# Sharing-link scope that embeds the canonical server-relative path
REDIRECT_SCOPE = "r"


def parse_url(raw_url: str) -> ParsedUrl:
    """Parse an absolute http(s) URL.

    Raises:
        MalformedUrlError: If the input is empty or not an absolute http(s) URL
    """
    if not raw_url or not raw_url.strip():
        raise MalformedUrlError("URL is empty", url=raw_url)

    text = raw_url.strip()
    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError as e:
        raise MalformedUrlError(f"Not a valid URL: {text} ({e})", url=raw_url) from e

    if parts.scheme.lower() not in SUPPORTED_SCHEMES or not parts.hostname:
        raise MalformedUrlError(f"Not an absolute http(s) URL: {text}", url=raw_url)

    host = parts.hostname.lower()
    if port is not None:
        host = f"{host}:{port}"

    return ParsedUrl(
        scheme=parts.scheme.lower(),
        host=host,
        path=_strip_query(parts.path) or "/",
        query=parts.query or None,
    )


def _strip_query(path: str) -> str:
    return path.split("?", 1)[0]


def _parse_with_tenant(raw_url: str, tenant_url: str) -> ParsedUrl:
    """Parse raw_url, taking scheme and host from tenant_url.

    A server-relative raw_url (starting with "/") is accepted in this mode.
    """
    tenant = parse_url(tenant_url)
    if raw_url and raw_url.strip().startswith("/"):
        parts = urlsplit(raw_url.strip())
        path, query = parts.path, parts.query or None
    else:
        parsed = parse_url(raw_url)
        path, query = parsed.path, parsed.query
    return ParsedUrl(scheme=tenant.scheme, host=tenant.host, path=_strip_query(path) or "/", query=query)


def _ensure_sharepoint_host(parsed: ParsedUrl, raw_url: str) -> None:
    hostname = parsed.host.split(":", 1)[0]
    labels = hostname.split(".")
    if len(labels) < 2 or not all(labels):
        raise NotASharePointUrlError(
            f"'{parsed.host}' does not look like a SharePoint host", url=raw_url
        )


def _classify_site_path(parsed: ParsedUrl, path: str) -> Classification:
    """Classify a canonical (non sharing link) path."""
    decoded = unquote(path)
    candidate = CandidateServerRelativePath(path=decoded, reliable=True)

    match = SITE_COLLECTION_RE.match(decoded)
    if match:
        managed = match.group("managed").lower()
        site_segment = match.group("site")
        return Classification(
            parsed=parsed,
            shape=UrlShape(
                kind=ShapeKind.SITE_COLLECTION_PATH,
                site_segment=site_segment,
                managed_path=managed,
            ),
            site=SiteReference(f"{parsed.root}/{managed}/{quote(site_segment, safe=PATH_SAFE_CHARS)}"),
            candidate_path=candidate,
        )

    return Classification(
        parsed=parsed,
        shape=UrlShape(kind=ShapeKind.LIBRARY_ROOT_PATH),
        site=SiteReference(parsed.root),
        candidate_path=candidate,
    )


def _classify_sharing_link(parsed: ParsedUrl, match: re.Match[str]) -> Classification:
    scope = match.group("scope").lower()
    rest = match.group("rest") or ""

    if scope == REDIRECT_SCOPE and rest.strip("/"):
        logger.debug(f"Redirect sharing link, classifying embedded path {rest}")
        return _classify_site_path(parsed, rest)

    site_segment = rest.strip("/").split("/", 1)[0]
    if scope in SITE_SCOPES and site_segment:
        return Classification(
            parsed=parsed,
            shape=UrlShape(
                kind=ShapeKind.MODERN_SHARING_LINK,
                site_segment=site_segment,
                managed_path=scope,
            ),
            site=SiteReference(f"{parsed.root}/{scope}/{site_segment}"),
            candidate_path=CandidateServerRelativePath(path=parsed.path, reliable=False),
        )

    # No recoverable site structure (e.g. /:w:/g/personal/...): guess the tenant root
    logger.debug(f"Sharing link without site structure: {parsed.path}")
    return Classification(
        parsed=parsed,
        shape=UrlShape(kind=ShapeKind.LIBRARY_ROOT_PATH),
        site=SiteReference(parsed.root),
        candidate_path=CandidateServerRelativePath(path=parsed.path, reliable=False),
    )


def classify(raw_url: str, *, tenant_url: str | None = None) -> Classification:
    """Classify a document link.

    Args:
        raw_url: Link to the document, canonical or sharing link
        tenant_url: Optional tenant base URL; when given, its scheme and host
            are used instead of the ones in raw_url

    Returns:
        Classification with the site to connect to and the candidate path

    Raises:
        MalformedUrlError: If raw_url (or tenant_url) is not an absolute http(s) URL
        NotASharePointUrlError: If the host has no dot-separated domain
    """
    parsed = _parse_with_tenant(raw_url, tenant_url) if tenant_url else parse_url(raw_url)
    _ensure_sharepoint_host(parsed, raw_url)

    match = SHARING_LINK_RE.match(parsed.path)
    if match:
        result = _classify_sharing_link(parsed, match)
    else:
        result = _classify_site_path(parsed, parsed.path)

    logger.debug(
        f"Classified {raw_url} as {result.shape.kind.value}: site={result.site.base_url} "
        f"path={result.candidate_path.path} reliable={result.candidate_path.reliable}"
    )
    return result
