"""Provider configuration and the owner handle passed to every handler."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from pydantic import BaseModel, Field

from .client import DEFAULT_BASE_URL, GitHubClient
from .errors import NotFoundError, ResourceValidationError

logger = logging.getLogger(__name__)


class ProviderConfig(BaseModel):
    """Connection settings for the GitHub API."""

    owner: str
    token: str = Field(default_factory=lambda: os.environ.get("GITHUB_TOKEN", ""))
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0


@dataclass
class Owner:
    """The account resources are managed under, plus the client used to reach it."""

    name: str
    client: GitHubClient
    is_organization: bool = False

    def __enter__(self) -> Owner:
        return self

    def __exit__(self, *exc: object) -> None:
        self.client.close()


def configure(config: ProviderConfig, client: GitHubClient | None = None) -> Owner:
    """Build an Owner, probing whether the account is an organization."""
    owns_client = client is None
    if client is None:
        client = GitHubClient(config.token, base_url=config.base_url, timeout=config.timeout)

    try:
        client.get_organization(config.owner)
        is_org = True
    except NotFoundError:
        is_org = False
    except Exception:
        if owns_client:
            client.close()
        raise

    logger.debug("Configured owner '%s' (organization=%s)", config.owner, is_org)
    return Owner(name=config.owner, client=client, is_organization=is_org)


def check_organization(owner: Owner) -> None:
    if not owner.is_organization:
        raise ResourceValidationError(
            f"this resource can only be used in the context of an organization, "
            f"{owner.name!r} is a user"
        )
