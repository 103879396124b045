"""Exception hierarchy for the sharepoint_docid library."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sharepoint_docid.models import CandidateServerRelativePath, SiteReference

SHARING_LINK_HINT = (
    "The input looks like a sharing link, which does not address the file directly. "
    "Open the document, copy its canonical library path (e.g. "
    "https://<tenant>.sharepoint.com/sites/<site>/Shared Documents/<file>) and try again."
)


class DocIdError(Exception):
    """Base exception for all sharepoint_docid errors."""

    pass


class ClassificationError(DocIdError):
    """Raised when an input URL cannot be classified."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class MalformedUrlError(ClassificationError):
    """Raised when the input is not an absolute http(s) URL."""

    pass


class NotASharePointUrlError(ClassificationError):
    """Raised when the URL parses but its host cannot be a SharePoint host."""

    pass


class ResolutionError(DocIdError):
    """Raised when the permanent URL of a classified document cannot be resolved.

    The candidate_path attribute carries the path that was (or would have been)
    sent to the metadata API together with its reliability flag.
    """

    def __init__(self, message: str, candidate_path: CandidateServerRelativePath) -> None:
        super().__init__(message)
        self.candidate_path = candidate_path

    @property
    def reliable(self) -> bool:
        return self.candidate_path.reliable


class SessionSiteMismatchError(ResolutionError):
    """Raised when the session is bound to a different site than the classified one."""

    def __init__(
        self,
        candidate_path: CandidateServerRelativePath,
        expected: SiteReference,
        actual: SiteReference,
    ) -> None:
        super().__init__(
            f"Session is connected to {actual.base_url} but the document lives in "
            f"{expected.base_url}. Connect to {expected.base_url} and try again.",
            candidate_path,
        )
        self.expected = expected
        self.actual = actual


class TransportFailureError(ResolutionError):
    """Raised when the metadata request fails (network error, 403, 404, ...)."""

    def __init__(
        self,
        candidate_path: CandidateServerRelativePath,
        cause: Exception,
        status_code: int | None = None,
    ) -> None:
        detail = f"HTTP {status_code}" if status_code is not None else type(cause).__name__
        message = f"Failed to read metadata for '{candidate_path.path}' ({detail}): {cause}"
        if not candidate_path.reliable:
            message = f"{message}\n{SHARING_LINK_HINT}"
        super().__init__(message, candidate_path)
        self.cause = cause
        self.status_code = status_code


class DocumentIdNotConfiguredError(ResolutionError):
    """Raised when the document has no Document ID.

    This is an expected outcome: the Document ID Service feature is not
    activated on the site collection, or the guessed path of a sharing link
    points at something other than the file.
    """

    def __init__(
        self,
        candidate_path: CandidateServerRelativePath,
        file_ref: str | None = None,
    ) -> None:
        target = file_ref or candidate_path.path
        message = (
            f"No Document ID found for '{target}'. "
            "The Document ID Service feature may not be enabled on this site collection."
        )
        if not candidate_path.reliable:
            message = (
                f"{message}\nThe path was guessed from a sharing link and may not point "
                f"at the real file.\n{SHARING_LINK_HINT}"
            )
        super().__init__(message, candidate_path)
        self.file_ref = file_ref


class AuthenticationError(DocIdError):
    """Raised when a session cannot be established."""

    pass
