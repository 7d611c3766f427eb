"""Repository deploy keys. The API treats keys as immutable."""

from __future__ import annotations

from ..errors import InvalidIdError
from ..ids import build_two_part_id, parse_two_part_id
from ..provider import Owner
from ..resource import Resource, resource
from ..schema import Attribute, ResourceData
from ..validators import suppress_deploy_key_diff


def _parse_key_id(id: str) -> tuple[str, int]:
    repo, key_id = parse_two_part_id(id, "repository", "ID")
    try:
        return repo, int(key_id)
    except ValueError as exc:
        raise InvalidIdError(f"unexpected ID format ({key_id!r}), expected numerical ID: {exc}") from exc


@resource("github_repository_deploy_key")
class RepositoryDeployKey(Resource):
    schema = {
        "key": Attribute(
            required=True,
            force_new=True,
            diff_suppress=suppress_deploy_key_diff,
            description="The public SSH key",
        ),
        "read_only": Attribute(type=bool, optional=True, force_new=True, default=True),
        "repository": Attribute(required=True, force_new=True),
        "title": Attribute(required=True, force_new=True),
        "etag": Attribute(computed=True),
    }

    def create(self, d: ResourceData, owner: Owner) -> None:
        repo = d.get("repository")
        resp = owner.client.create_key(
            owner.name,
            repo,
            key=d.get("key"),
            title=d.get("title"),
            read_only=d.get("read_only"),
        )
        d.set_id(build_two_part_id(repo, str(resp.data["id"])))
        self.read(d, owner)

    def read(self, d: ResourceData, owner: Owner) -> None:
        repo, key_id = _parse_key_id(d.id)
        resp = self.conditional_read(
            d,
            lambda etag: owner.client.get_key(owner.name, repo, key_id, etag=etag),
            "repository deploy key",
        )
        if resp is None:
            return

        key = resp.data
        d.set("key", key.get("key", ""))
        d.set("read_only", key.get("read_only", False))
        d.set("repository", repo)
        d.set("title", key.get("title", ""))

    def delete(self, d: ResourceData, owner: Owner) -> None:
        repo, key_id = _parse_key_id(d.id)
        owner.client.delete_key(owner.name, repo, key_id)
