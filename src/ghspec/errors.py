"""Error types raised by handlers and the GitHub client."""

from __future__ import annotations

import httpx


class ResourceValidationError(ValueError):
    """Desired attributes are malformed; raised before any remote call."""


class InvalidIdError(ValueError):
    """A stored resource ID cannot be decoded."""


class ImportFormatError(ValueError):
    """An import token does not match the accepted shape."""


class ConflictError(RuntimeError):
    """Creating the resource would overwrite an unmanaged remote object."""


class GitHubError(Exception):
    """The GitHub API answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class NotFoundError(GitHubError):
    """404 from the API."""


class NotModifiedError(GitHubError):
    """304 from the API; the cached ETag is still current."""
