"""Organization memberships."""

from __future__ import annotations

from ..ids import build_two_part_id, parse_two_part_id
from ..provider import Owner, check_organization
from ..resource import Resource, resource
from ..schema import Attribute, ResourceData
from ..validators import case_insensitive, validate_value_func

ROLES = ("member", "admin")


@resource("github_membership")
class Membership(Resource):
    schema = {
        "username": Attribute(required=True, force_new=True, diff_suppress=case_insensitive),
        "role": Attribute(optional=True, default="member", validate=validate_value_func(ROLES)),
        "etag": Attribute(computed=True),
    }

    def create(self, d: ResourceData, owner: Owner) -> None:
        check_organization(owner)
        username = d.get("username")
        owner.client.edit_org_membership(owner.name, username, role=d.get("role"))
        d.set_id(build_two_part_id(owner.name, username))
        self.read(d, owner)

    def update(self, d: ResourceData, owner: Owner) -> None:
        self.create(d, owner)

    def read(self, d: ResourceData, owner: Owner) -> None:
        check_organization(owner)
        _, username = parse_two_part_id(d.id, "organization", "username")
        resp = self.conditional_read(
            d,
            lambda etag: owner.client.get_org_membership(owner.name, username, etag=etag),
            "membership",
        )
        if resp is None:
            return

        d.set("username", username)
        d.set("role", resp.data.get("role", ""))

    def delete(self, d: ResourceData, owner: Owner) -> None:
        check_organization(owner)
        owner.client.remove_org_membership(owner.name, d.get("username"))
