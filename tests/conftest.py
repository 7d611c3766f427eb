"""Shared fixtures: an in-memory stand-in for the GitHub API."""

from __future__ import annotations

import base64
import hashlib
import itertools
from typing import Any

import httpx
import pytest

from ghspec.client import ApiResponse
from ghspec.errors import GitHubError, NotFoundError, NotModifiedError
from ghspec.provider import Owner

DEFAULT_COMMITTER = {"name": "GitHub", "email": "noreply@github.com"}


def _digest(value: Any) -> str:
    return hashlib.sha1(repr(value).encode()).hexdigest()


class FakeGitHub:
    """Implements the GitHubClient surface against dictionaries."""

    def __init__(self, orgs: set[str] | None = None) -> None:
        self.orgs = orgs if orgs is not None else {"acme"}
        self.keys: dict[tuple[str, str, int], dict[str, Any]] = {}
        self.memberships: dict[tuple[str, str], dict[str, Any]] = {}
        self.branches: set[tuple[str, str, str]] = set()
        self.files: dict[tuple[str, str, str, str], dict[str, Any]] = {}
        self.commits: dict[str, dict[str, Any]] = {}
        self.history: dict[tuple[str, str, str], list[str]] = {}
        self.directories: set[tuple[str, str, str, str]] = set()
        self.closed = False
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._ids = itertools.count(1)

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def called(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def _conditional(self, data: dict[str, Any], etag: str | None) -> ApiResponse:
        tag = f'"{_digest(sorted(data.items()))}"'
        if etag == tag:
            raise NotModifiedError("not modified", 304)
        return ApiResponse(200, dict(data), httpx.Headers({"ETag": tag}))

    # -- Organizations --

    def get_organization(self, org: str) -> ApiResponse:
        self._record("get_organization", org)
        if org not in self.orgs:
            raise NotFoundError(f"org {org} not found", 404)
        return ApiResponse(200, {"login": org})

    def get_org_membership(self, org: str, username: str, *, etag: str | None = None) -> ApiResponse:
        self._record("get_org_membership", org, username, etag)
        membership = self.memberships.get((org, username.lower()))
        if membership is None:
            raise NotFoundError("membership not found", 404)
        return self._conditional(membership, etag)

    def edit_org_membership(self, org: str, username: str, *, role: str) -> ApiResponse:
        self._record("edit_org_membership", org, username, role)
        membership = {"role": role, "state": "active", "organization": org}
        self.memberships[(org, username.lower())] = membership
        return ApiResponse(200, dict(membership))

    def remove_org_membership(self, org: str, username: str) -> ApiResponse:
        self._record("remove_org_membership", org, username)
        if self.memberships.pop((org, username.lower()), None) is None:
            raise NotFoundError("membership not found", 404)
        return ApiResponse(204)

    # -- Deploy keys --

    def create_key(self, owner: str, repo: str, *, key: str, title: str, read_only: bool) -> ApiResponse:
        self._record("create_key", owner, repo, key, title, read_only)
        key_id = next(self._ids)
        # GitHub stores keys without their comment
        stored = {
            "id": key_id,
            "key": " ".join(key.split()[:2]),
            "title": title,
            "read_only": read_only,
        }
        self.keys[(owner, repo, key_id)] = stored
        return ApiResponse(201, dict(stored))

    def get_key(self, owner: str, repo: str, key_id: int, *, etag: str | None = None) -> ApiResponse:
        self._record("get_key", owner, repo, key_id, etag)
        stored = self.keys.get((owner, repo, key_id))
        if stored is None:
            raise NotFoundError("key not found", 404)
        return self._conditional(stored, etag)

    def delete_key(self, owner: str, repo: str, key_id: int) -> ApiResponse:
        self._record("delete_key", owner, repo, key_id)
        if self.keys.pop((owner, repo, key_id), None) is None:
            raise NotFoundError("key not found", 404)
        return ApiResponse(204)

    # -- Branches and commits --

    def get_branch(self, owner: str, repo: str, branch: str) -> ApiResponse:
        self._record("get_branch", owner, repo, branch)
        if (owner, repo, branch) not in self.branches:
            raise NotFoundError("branch not found", 404)
        return ApiResponse(200, {"name": branch})

    def get_commit(self, owner: str, repo: str, sha: str) -> ApiResponse:
        self._record("get_commit", owner, repo, sha)
        if sha not in self.commits:
            raise NotFoundError("commit not found", 404)
        return ApiResponse(200, self.commits[sha])

    def list_commits(
        self,
        owner: str,
        repo: str,
        *,
        sha: str | None = None,
        path: str | None = None,
        per_page: int = 100,
    ) -> list[dict[str, Any]]:
        self._record("list_commits", owner, repo, sha, path)
        result = []
        for commit_sha in self.history.get((owner, repo, sha or "main"), []):
            commit = self.commits[commit_sha]
            if path is None or any(f["filename"] == path for f in commit["files"]):
                result.append({"sha": commit_sha, "commit": {"message": commit["commit"]["message"]}})
        return result

    def add_commit(
        self,
        owner: str,
        repo: str,
        branch: str,
        message: str,
        files: list[dict[str, str]],
        committer: dict[str, str] | None = None,
    ) -> str:
        commit_sha = _digest((owner, repo, branch, message, next(self._ids)))
        self.commits[commit_sha] = {
            "sha": commit_sha,
            "commit": {"message": message, "committer": dict(committer or DEFAULT_COMMITTER)},
            "files": files,
        }
        self.history.setdefault((owner, repo, branch), []).insert(0, commit_sha)
        return commit_sha

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
        self._record("get_contents", owner, repo, path, ref, etag)
        if (owner, repo, ref or "main", path) in self.directories:
            listing = [{"type": "file", "path": f"{path}/index.md", "sha": _digest(path)}]
            return ApiResponse(200, listing, httpx.Headers({"ETag": f'"{_digest(listing)}"'}))

        stored = self.files.get((owner, repo, ref or "main", path))
        if stored is None:
            raise NotFoundError("file not found", 404)
        raw = stored["content"]
        if isinstance(raw, str):
            raw = raw.encode()
        # the API omits content for files over 1 MB
        encoding = stored.get("encoding", "base64")
        data = {
            "type": "file",
            "path": path,
            "sha": stored["sha"],
            "encoding": encoding,
            "content": base64.b64encode(raw).decode() if encoding == "base64" else "",
        }
        return self._conditional(data, etag)

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
        self._record("create_or_update_file", owner, repo, path, content, message, branch, sha, author)
        branch = branch or "main"
        existing = self.files.get((owner, repo, branch, path))
        if existing is not None and existing["sha"] != sha:
            raise GitHubError(f"{path} does not match {sha}", 409)

        blob_sha = _digest(content)
        self.files[(owner, repo, branch, path)] = {"content": content, "sha": blob_sha}
        status = "modified" if existing else "added"
        commit_sha = self.add_commit(
            owner,
            repo,
            branch,
            message,
            [{"filename": path, "status": status}],
            committer or author,
        )
        return ApiResponse(
            201,
            {"content": {"path": path, "sha": blob_sha}, "commit": {"sha": commit_sha}},
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
        self._record("delete_file", owner, repo, path, message, sha, branch)
        branch = branch or "main"
        existing = self.files.get((owner, repo, branch, path))
        if existing is None:
            raise NotFoundError("file not found", 404)
        if existing["sha"] != sha:
            raise GitHubError(f"{path} does not match {sha}", 409)
        del self.files[(owner, repo, branch, path)]
        self.add_commit(owner, repo, branch, message, [{"filename": path, "status": "removed"}])
        return ApiResponse(200, {"commit": {}})

    def seed_file(self, owner: str, repo: str, path: str, content: str, branch: str = "main") -> str:
        """Put a file in place as if someone else committed it; returns the commit SHA."""
        self.branches.add((owner, repo, branch))
        resp = self.create_or_update_file(
            owner,
            repo,
            path,
            content=content,
            message=f"Seed {path}",
            branch=branch,
            sha=self.files.get((owner, repo, branch, path), {}).get("sha"),
        )
        self.calls.clear()
        return resp.data["commit"]["sha"]

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def github() -> FakeGitHub:
    fake = FakeGitHub()
    fake.branches.add(("acme", "site", "main"))
    return fake


@pytest.fixture()
def owner(github: FakeGitHub) -> Owner:
    return Owner(name="acme", client=github, is_organization=True)  # type: ignore[arg-type]


@pytest.fixture()
def user_owner(github: FakeGitHub) -> Owner:
    return Owner(name="octocat", client=github, is_organization=False)  # type: ignore[arg-type]
