"""Files committed to a repository branch."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from ..client import GitHubClient
from ..errors import ConflictError, NotFoundError, ResourceValidationError
from ..ids import DEFAULT_BRANCH, build_file_id, parse_file_import_id, split_repo_file_path
from ..provider import Owner
from ..resource import Resource, resource
from ..schema import Attribute, ResourceData

logger = logging.getLogger(__name__)


def check_branch_exists(client: GitHubClient, owner: str, repo: str, branch: str) -> None:
    try:
        client.get_branch(owner, repo, branch)
    except NotFoundError as exc:
        raise ResourceValidationError(
            f"branch {branch} not found in repository {owner}/{repo} or repository is not readable"
        ) from exc


def check_file_exists(client: GitHubClient, owner: str, repo: str, file: str, branch: str) -> None:
    try:
        resp = client.get_contents(owner, repo, file, ref=branch)
    except NotFoundError as exc:
        raise ResourceValidationError(
            f"file {file} is not a file in repository {owner}/{repo} or repository is not readable"
        ) from exc
    if not isinstance(resp.data, dict):
        raise ResourceValidationError(f"{file} is a directory in repository {owner}/{repo}")


def find_file_commit(
    client: GitHubClient,
    owner: str,
    repo: str,
    file: str,
    branch: str,
) -> dict[str, Any]:
    """Walk the branch history for the most recent commit that touched file."""
    for summary in client.list_commits(owner, repo, sha=branch, path=file):
        if "Merge branch" in summary.get("commit", {}).get("message", ""):
            continue
        commit = client.get_commit(owner, repo, summary["sha"]).data
        for changed in commit.get("files", []):
            if changed.get("filename") == file and changed.get("status") != "removed":
                return commit
    raise LookupError(f"cannot find file {file} in repo {owner}/{repo}")


def _decode_content(data: dict[str, Any], file: str) -> str:
    encoding = data.get("encoding", "base64")
    if encoding != "base64":
        raise ResourceValidationError(
            f"file {file} has content encoding {encoding!r}; only files up to 1 MB can be managed"
        )
    try:
        return base64.b64decode(data.get("content", "")).decode()
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ResourceValidationError(f"file {file} is not UTF-8 text") from exc


@resource("github_repository_file")
class RepositoryFile(Resource):
    schema = {
        "repository": Attribute(required=True, force_new=True, description="The repository name"),
        "file": Attribute(required=True, force_new=True, description="The file path to manage"),
        "content": Attribute(required=True, description="The file's content"),
        "branch": Attribute(
            optional=True,
            force_new=True,
            default=DEFAULT_BRANCH,
            description='The branch name, defaults to "main"',
        ),
        "commit_sha": Attribute(computed=True, description="The SHA of the commit that modified the file"),
        "commit_message": Attribute(optional=True, computed=True),
        "commit_author": Attribute(optional=True, computed=True),
        "commit_email": Attribute(optional=True, computed=True),
        "sha": Attribute(computed=True, description="The blob SHA of the file"),
        "overwrite_on_create": Attribute(
            type=bool,
            optional=True,
            default=False,
            description="Enable overwriting existing files",
        ),
        "etag": Attribute(computed=True),
    }

    def _file_options(self, d: ResourceData) -> dict[str, Any]:
        """Build create_or_update_file keyword arguments from d."""
        opts: dict[str, Any] = {
            "content": d.get("content"),
            "branch": d.get("branch"),
        }

        message, has_message = d.get_ok("commit_message")
        if has_message:
            opts["message"] = message

        sha, has_sha = d.get_ok("sha")
        if has_sha:
            opts["sha"] = sha

        author, has_author = d.get_ok("commit_author")
        email, has_email = d.get_ok("commit_email")
        if has_author and not has_email:
            raise ResourceValidationError("cannot set commit_author without setting commit_email")
        if has_email and not has_author:
            raise ResourceValidationError("cannot set commit_email without setting commit_author")
        if has_author and has_email:
            opts["author"] = {"name": author, "email": email}
            opts["committer"] = {"name": author, "email": email}

        return opts

    def create(self, d: ResourceData, owner: Owner) -> None:
        client = owner.client
        repo = d.get("repository")
        file = d.get("file")
        branch = d.get("branch")

        opts = self._file_options(d)
        check_branch_exists(client, owner.name, repo, branch)
        opts.setdefault("message", f"Add {file}")

        logger.debug("Checking for an existing file %s/%s/%s in branch %s", owner.name, repo, file, branch)
        try:
            existing = client.get_contents(owner.name, repo, file, ref=branch).data
        except NotFoundError:
            existing = None

        if existing is not None and not isinstance(existing, dict):
            raise ResourceValidationError(f"{file} is a directory in repository {owner.name}/{repo}")
        if existing is not None:
            if not d.get("overwrite_on_create"):
                raise ConflictError(
                    "refusing to overwrite existing file: "
                    "configure `overwrite_on_create` to `true` to override"
                )
            opts["sha"] = existing.get("sha")

        resp = client.create_or_update_file(owner.name, repo, file, **opts)
        d.set_id(build_file_id(repo, file))
        d.set("commit_sha", resp.data["commit"]["sha"])
        self.read(d, owner)

    def read(self, d: ResourceData, owner: Owner) -> None:
        client = owner.client
        repo, file = split_repo_file_path(d.id)
        branch = d.get("branch")

        check_branch_exists(client, owner.name, repo, branch)
        resp = self.conditional_read(
            d,
            lambda etag: client.get_contents(owner.name, repo, file, ref=branch, etag=etag),
            f"repository file {owner.name}/{repo}/{file} on branch",
        )
        if resp is None:
            return

        # a directory lists its entries; symlinks and submodules are not files
        if not isinstance(resp.data, dict) or resp.data.get("type", "file") != "file":
            logger.info(
                "Removing repository file %s/%s/%s from state because it is no longer a file",
                owner.name,
                repo,
                file,
            )
            d.set_id("")
            return

        d.set("content", _decode_content(resp.data, file))
        d.set("repository", repo)
        d.set("file", file)
        d.set("sha", resp.data.get("sha", ""))

        commit_sha, known = d.get_ok("commit_sha")
        if known:
            logger.debug("Using known commit SHA: %s", commit_sha)
            commit = client.get_commit(owner.name, repo, commit_sha).data
        else:
            logger.debug("Commit SHA unknown for file %s/%s/%s, looking for commit", owner.name, repo, file)
            commit = find_file_commit(client, owner.name, repo, file, branch)
            logger.debug("Found file %s/%s/%s in commit SHA %s", owner.name, repo, file, commit.get("sha"))

        committer = commit.get("commit", {}).get("committer") or {}
        d.set("commit_sha", commit.get("sha", ""))
        d.set("commit_author", committer.get("name", ""))
        d.set("commit_email", committer.get("email", ""))
        d.set("commit_message", commit.get("commit", {}).get("message", ""))

    def update(self, d: ResourceData, owner: Owner) -> None:
        client = owner.client
        repo = d.get("repository")
        file = d.get("file")

        opts = self._file_options(d)
        check_branch_exists(client, owner.name, repo, d.get("branch"))
        if opts.get("message", f"Add {file}") == f"Add {file}":
            opts["message"] = f"Update {file}"

        resp = client.create_or_update_file(owner.name, repo, file, **opts)
        d.set("commit_sha", resp.data["commit"]["sha"])
        self.read(d, owner)

    def delete(self, d: ResourceData, owner: Owner) -> None:
        file = d.get("file")
        owner.client.delete_file(
            owner.name,
            d.get("repository"),
            file,
            message=f"Delete {file}",
            sha=d.get("sha"),
            branch=d.get("branch"),
        )

    def import_state(self, d: ResourceData, owner: Owner) -> ResourceData:
        repo, file, branch = parse_file_import_id(d.id)
        check_file_exists(owner.client, owner.name, repo, file, branch)

        d.set_id(build_file_id(repo, file))
        d.set("branch", branch)
        d.set("overwrite_on_create", False)
        return d
