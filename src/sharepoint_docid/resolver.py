"""Resolution of a document's permanent Document ID URL."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from sharepoint_docid.exceptions import (
    DocumentIdNotConfiguredError,
    SessionSiteMismatchError,
    TransportFailureError,
)
from sharepoint_docid.models import (
    METADATA_FIELDS,
    CandidateServerRelativePath,
    DocumentMetadata,
    SiteReference,
)

if TYPE_CHECKING:
    from sharepoint_docid.auth import AuthenticatedSession

logger = logging.getLogger(__name__)


def normalize_permanent_url(field_value: str) -> str:
    """Extract the redirect URL from a Document ID URL field.

    The field holds "<url>, <document id>"; only the URL is kept.
    """
    return field_value.split(",", 1)[0].strip()


def fetch_metadata(
    session: AuthenticatedSession, candidate_path: CandidateServerRelativePath
) -> DocumentMetadata:
    """Read FileRef and the Document ID fields of the candidate file.

    Raises:
        TransportFailureError: If the request fails or the answer is unusable
    """
    try:
        fields = session.get_file_list_item(candidate_path.path, METADATA_FIELDS)
    except httpx.HTTPStatusError as e:
        raise TransportFailureError(candidate_path, e, e.response.status_code) from e
    except httpx.HTTPError as e:
        raise TransportFailureError(candidate_path, e) from e
    except ValueError as e:
        raise TransportFailureError(candidate_path, e) from e
    return DocumentMetadata.from_fields(fields)


def resolve(
    session: AuthenticatedSession,
    candidate_path: CandidateServerRelativePath,
    *,
    site: SiteReference | None = None,
) -> str:
    """Resolve the permanent URL of the document at candidate_path.

    Args:
        session: Session to read the metadata with
        candidate_path: Path produced by the classifier
        site: Site the classifier chose; the session must be bound to it

    Returns:
        The Document ID redirect URL

    Raises:
        SessionSiteMismatchError: If the session is bound to another site
        TransportFailureError: If the metadata request fails
        DocumentIdNotConfiguredError: If the document has no Document ID
    """
    if site is not None and not session.site.matches(site):
        raise SessionSiteMismatchError(candidate_path, expected=site, actual=session.site)

    metadata = fetch_metadata(session, candidate_path)
    if not metadata.document_id or not metadata.document_id_url_field:
        raise DocumentIdNotConfiguredError(candidate_path, file_ref=metadata.file_ref or None)

    permanent_url = normalize_permanent_url(metadata.document_id_url_field)
    if not permanent_url:
        raise DocumentIdNotConfiguredError(candidate_path, file_ref=metadata.file_ref or None)

    logger.info(f"Document {metadata.document_id} resolved to {permanent_url}")
    return permanent_url
