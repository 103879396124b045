"""Tests for permanent URL resolution."""

from __future__ import annotations

import httpx
import pytest
from helpers import (
    FINANCE_PATH,
    FINANCE_PERMANENT_URL,
    FINANCE_SITE,
    FINANCE_URL,
    FakeSession,
    docid_fields,
)

from sharepoint_docid import (
    CandidateServerRelativePath,
    DocumentIdNotConfiguredError,
    DocumentMetadata,
    SessionSiteMismatchError,
    SiteReference,
    TransportFailureError,
    classify,
    normalize_permanent_url,
    resolve,
)
from sharepoint_docid.models import METADATA_FIELDS

RELIABLE = CandidateServerRelativePath(path=FINANCE_PATH, reliable=True)
SHARING = CandidateServerRelativePath(path="/:x:/s/Finance/EabcXYZ", reliable=False)


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", f"{FINANCE_SITE}/_api/web/GetFileByServerRelativePath")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


class TestNormalizePermanentUrl:
    """Tests for normalize_permanent_url."""

    def test_takes_first_element(self) -> None:
        """Test that the document id token after the comma is dropped."""
        value = "https://t/s/x/_layouts/15/DocIdRedir.aspx?ID=DOC-1-1, DOC-1-1"

        assert normalize_permanent_url(value) == "https://t/s/x/_layouts/15/DocIdRedir.aspx?ID=DOC-1-1"

    def test_trims_whitespace(self) -> None:
        """Test that surrounding whitespace is removed."""
        assert normalize_permanent_url("  https://t/a  ,DOC-1") == "https://t/a"

    def test_value_without_comma(self) -> None:
        """Test that a single value is returned unchanged."""
        assert normalize_permanent_url("https://t/a") == "https://t/a"


class TestDocumentMetadata:
    """Tests for DocumentMetadata.from_fields."""

    def test_text_url_field(self) -> None:
        """Test that the text form of the URL field is kept."""
        metadata = DocumentMetadata.from_fields(docid_fields())

        assert metadata.file_ref == FINANCE_PATH
        assert metadata.document_id == "DOC-42-1"
        assert metadata.document_id_url_field == f"{FINANCE_PERMANENT_URL}, DOC-42-1"

    def test_object_url_field(self) -> None:
        """Test that the object form of the URL field is reduced to text."""
        fields = docid_fields(url_field={"Url": FINANCE_PERMANENT_URL, "Description": "DOC-42-1"})

        metadata = DocumentMetadata.from_fields(fields)

        assert metadata.document_id_url_field == f"{FINANCE_PERMANENT_URL}, DOC-42-1"

    def test_missing_fields(self) -> None:
        """Test that absent Document ID fields become None."""
        metadata = DocumentMetadata.from_fields({"FileRef": FINANCE_PATH})

        assert metadata.document_id is None
        assert metadata.document_id_url_field is None


class TestResolve:
    """Tests for resolve."""

    def test_resolve_returns_permanent_url(self, fake_session: FakeSession) -> None:
        """Test a successful resolution."""
        url = resolve(fake_session, RELIABLE, site=SiteReference(FINANCE_SITE))

        assert url == FINANCE_PERMANENT_URL

    def test_resolve_fetches_once_with_projection(self, fake_session: FakeSession) -> None:
        """Test that exactly one request for the three fields is made."""
        resolve(fake_session, RELIABLE)

        assert fake_session.calls == [(FINANCE_PATH, METADATA_FIELDS)]

    def test_resolve_object_url_field(self) -> None:
        """Test resolution when the URL field comes back as an object."""
        session = FakeSession(
            fields=docid_fields(url_field={"Url": FINANCE_PERMANENT_URL, "Description": "DOC-42-1"})
        )

        assert resolve(session, RELIABLE) == FINANCE_PERMANENT_URL

    def test_end_to_end_finance_document(self, fake_session: FakeSession) -> None:
        """Test classification followed by resolution of the Finance budget."""
        classification = classify(FINANCE_URL)

        url = resolve(fake_session, classification.candidate_path, site=classification.site)

        assert url == FINANCE_PERMANENT_URL
        assert fake_session.calls[0][0] == FINANCE_PATH


class TestResolveFailures:
    """Tests for resolve failures."""

    def test_session_site_mismatch(self) -> None:
        """Test that a session bound elsewhere is refused before any request."""
        session = FakeSession(site_url="https://contoso.sharepoint.com/sites/HR")

        with pytest.raises(SessionSiteMismatchError) as exc_info:
            resolve(session, RELIABLE, site=SiteReference(FINANCE_SITE))

        assert session.calls == []
        assert exc_info.value.expected.base_url == FINANCE_SITE
        assert exc_info.value.actual.base_url == "https://contoso.sharepoint.com/sites/HR"

    @pytest.mark.parametrize("document_id", [None, ""])
    def test_document_id_not_configured(self, document_id: str | None) -> None:
        """Test that a missing Document ID is reported as not configured."""
        session = FakeSession(fields=docid_fields(document_id=document_id, url_field=None))

        with pytest.raises(DocumentIdNotConfiguredError) as exc_info:
            resolve(session, RELIABLE)

        assert "Document ID Service" in str(exc_info.value)
        assert "sharing link" not in str(exc_info.value)
        assert exc_info.value.reliable is True

    def test_document_id_not_configured_for_sharing_link(self) -> None:
        """Test that both possible causes are stated for sharing links."""
        session = FakeSession(fields={"FileRef": "/sites/Finance/Shared Documents/Other.docx"})

        with pytest.raises(DocumentIdNotConfiguredError) as exc_info:
            resolve(session, SHARING)

        message = str(exc_info.value)
        assert "Document ID Service" in message
        assert "may not point at the real file" in message
        assert exc_info.value.reliable is False

    def test_document_id_without_url(self) -> None:
        """Test that no URL is guessed when only the id is present."""
        session = FakeSession(fields=docid_fields(url_field=None))

        with pytest.raises(DocumentIdNotConfiguredError):
            resolve(session, RELIABLE)

    def test_http_error_is_transport_failure(self) -> None:
        """Test that an HTTP error status becomes a transport failure."""
        session = FakeSession(error=_status_error(404))

        with pytest.raises(TransportFailureError) as exc_info:
            resolve(session, RELIABLE)

        assert exc_info.value.status_code == 404
        assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)
        assert "canonical library path" not in str(exc_info.value)

    def test_transport_failure_hint_for_sharing_link(self) -> None:
        """Test that a failed sharing-link lookup suggests the canonical link."""
        session = FakeSession(site_url="https://contoso.sharepoint.com/s/Finance", error=_status_error(400))

        with pytest.raises(TransportFailureError) as exc_info:
            resolve(session, SHARING)

        assert "sharing link" in str(exc_info.value)
        assert "canonical library path" in str(exc_info.value)

    def test_network_error_is_transport_failure(self) -> None:
        """Test that connection errors become transport failures."""
        session = FakeSession(error=httpx.ConnectError("connection refused"))

        with pytest.raises(TransportFailureError) as exc_info:
            resolve(session, RELIABLE)

        assert exc_info.value.status_code is None
        assert "ConnectError" in str(exc_info.value)

    def test_unexpected_body_is_transport_failure(self) -> None:
        """Test that an unusable response body becomes a transport failure."""
        session = FakeSession(error=ValueError("Unexpected metadata response: list"))

        with pytest.raises(TransportFailureError):
            resolve(session, RELIABLE)
