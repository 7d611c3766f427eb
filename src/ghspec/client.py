"""Synchronous GitHub REST API client.

Covers the endpoints the resource handlers need:
- deploy keys, organization memberships, repository contents, commits, branches
- conditional requests via ``If-None-Match``
- ``Link`` header pagination for commit listings

Errors are raised, never retried.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from .errors import GitHubError, NotFoundError, NotModifiedError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com/"
API_VERSION = "2022-11-28"
USER_AGENT = "ghspec/0.1.0"


@dataclass
class ApiResponse:
    """A successful API response."""

    status_code: int
    data: Any = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    @property
    def etag(self) -> str:
        return self.headers.get("ETag", "")


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"{resp.request.method} {resp.request.url}: {resp.status_code} {body['message']}"
    return f"{resp.request.method} {resp.request.url}: {resp.status_code}"


class GitHubClient:
    """GitHub REST API client bound to one token."""

    def __init__(
        self,
        token: str = "",
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        etag: str | None = None,
    ) -> ApiResponse:
        """Issue one request and map error statuses to exceptions."""
        headers = {"If-None-Match": etag} if etag else None
        logger.debug("%s %s", method, path)
        resp = self._client.request(method, path, params=params, json=json, headers=headers)

        if resp.status_code == 304:
            raise NotModifiedError(_error_message(resp), 304, resp)
        if resp.status_code == 404:
            raise NotFoundError(_error_message(resp), 404, resp)
        if resp.status_code >= 400:
            raise GitHubError(_error_message(resp), resp.status_code, resp)

        data = resp.json() if resp.content else None
        return ApiResponse(status_code=resp.status_code, data=data, headers=resp.headers)

    # -- Organizations --

    def get_organization(self, org: str) -> ApiResponse:
        return self._request("GET", f"orgs/{org}")

    def get_org_membership(self, org: str, username: str, *, etag: str | None = None) -> ApiResponse:
        return self._request("GET", f"orgs/{org}/memberships/{username}", etag=etag)

    def edit_org_membership(self, org: str, username: str, *, role: str) -> ApiResponse:
        return self._request("PUT", f"orgs/{org}/memberships/{username}", json={"role": role})

    def remove_org_membership(self, org: str, username: str) -> ApiResponse:
        return self._request("DELETE", f"orgs/{org}/memberships/{username}")

    # -- Deploy keys --

    def create_key(
        self,
        owner: str,
        repo: str,
        *,
        key: str,
        title: str,
        read_only: bool,
    ) -> ApiResponse:
        payload = {"key": key, "title": title, "read_only": read_only}
        return self._request("POST", f"repos/{owner}/{repo}/keys", json=payload)

    def get_key(self, owner: str, repo: str, key_id: int, *, etag: str | None = None) -> ApiResponse:
        return self._request("GET", f"repos/{owner}/{repo}/keys/{key_id}", etag=etag)

    def delete_key(self, owner: str, repo: str, key_id: int) -> ApiResponse:
        return self._request("DELETE", f"repos/{owner}/{repo}/keys/{key_id}")

    # -- Branches and commits --

    def get_branch(self, owner: str, repo: str, branch: str) -> ApiResponse:
        return self._request("GET", f"repos/{owner}/{repo}/branches/{quote(branch, safe='')}")

    def get_commit(self, owner: str, repo: str, sha: str) -> ApiResponse:
        return self._request("GET", f"repos/{owner}/{repo}/commits/{sha}")

    def list_commits(
        self,
        owner: str,
        repo: str,
        *,
        sha: str | None = None,
        path: str | None = None,
        per_page: int = 100,
    ) -> list[dict[str, Any]]:
        """List commits, following ``Link: rel="next"`` until exhausted."""
        params: dict[str, Any] | None = {"per_page": per_page}
        if sha:
            params["sha"] = sha
        if path:
            params["path"] = path

        commits: list[dict[str, Any]] = []
        url: str | None = f"repos/{owner}/{repo}/commits"
        while url:
            resp = self._request("GET", url, params=params)
            commits.extend(resp.data or [])
            url = _next_link(resp.headers)
            # the next link already carries the query string
            params = None
        return commits

    # -- Contents --

    def get_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        ref: str | None = None,
        etag: str | None = None,
    ) -> ApiResponse:
        params = {"ref": ref} if ref else None
        return self._request(
            "GET",
            f"repos/{owner}/{repo}/contents/{quote(path, safe='/')}",
            params=params,
            etag=etag,
        )

    def create_or_update_file(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        content: str,
        message: str,
        branch: str | None = None,
        sha: str | None = None,
        author: dict[str, str] | None = None,
        committer: dict[str, str] | None = None,
    ) -> ApiResponse:
        """Create a file, or replace it when ``sha`` names the current blob."""
        payload: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode()).decode("ascii"),
        }
        if branch:
            payload["branch"] = branch
        if sha:
            payload["sha"] = sha
        if author:
            payload["author"] = author
        if committer:
            payload["committer"] = committer
        return self._request(
            "PUT",
            f"repos/{owner}/{repo}/contents/{quote(path, safe='/')}",
            json=payload,
        )

    def delete_file(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        message: str,
        sha: str,
        branch: str | None = None,
    ) -> ApiResponse:
        payload: dict[str, Any] = {"message": message, "sha": sha}
        if branch:
            payload["branch"] = branch
        return self._request(
            "DELETE",
            f"repos/{owner}/{repo}/contents/{quote(path, safe='/')}",
            json=payload,
        )


def _next_link(headers: httpx.Headers) -> str | None:
    """Return the ``rel="next"`` URL from a ``Link`` header, if any."""
    link = headers.get("Link")
    if not link:
        return None
    for part in link.split(","):
        segments = part.split(";")
        target = segments[0].strip()
        if any(s.strip() == 'rel="next"' for s in segments[1:]):
            return target.strip("<>")
    return None
