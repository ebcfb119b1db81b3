"""Merge request decoration exceptions."""

from __future__ import annotations


class DecorationError(Exception):
    """Base exception for a failed decoration pass."""


class ConfigurationError(DecorationError):
    """Raised when a required setting is missing, before any network call."""


class GitLabApiError(DecorationError):
    """Raised when the GitLab API answers with an unexpected status."""

    def __init__(self, status_code: int, status_text: str, body: str = "") -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        super().__init__(f"GitLab API Error {status_code} {status_text}: {body}")


class GitLabAuthError(GitLabApiError):
    """Raised on 401/403 authentication failures."""

    def __init__(self, status_code: int, body: str = "") -> None:
        status_text = "Unauthorized" if status_code == 401 else "Forbidden"
        super().__init__(status_code, status_text, body)


class GitLabNotFoundError(GitLabApiError):
    """Raised on 404 responses."""

    def __init__(self, body: str = "") -> None:
        super().__init__(404, "Not Found", body)


class GitLabTransportError(DecorationError):
    """Raised when a request fails before a response is received."""

    def __init__(self, method: str, url: str, reason: str) -> None:
        self.method = method
        self.url = url
        super().__init__(f"{method} {url} failed: {reason}")


class PaginationError(DecorationError):
    """Raised when a paged listing never runs out of ``next`` links."""
