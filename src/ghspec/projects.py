"""Project model — the top-level build target bound to one GitHub owner."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, Field

from .blueprints import Blueprint
from .client import DEFAULT_BASE_URL
from .context import Context
from .provider import Owner, ProviderConfig, configure
from .schema import ResourceData
from .spec import ResourceSpec
from .state import StateStore

logger = logging.getLogger(__name__)


class Project(BaseModel):
    """Base model that apps may subclass with extra fields."""

    model_config = {"arbitrary_types_allowed": True}

    name: str
    description: str = ""
    owner: str = ""
    token: str = ""
    base_url: str = DEFAULT_BASE_URL
    state: str = ""
    blueprints: list[Blueprint] = Field(default_factory=list)

    def provider_config(self) -> ProviderConfig:
        """Provider settings; the owner defaults to the project name."""
        settings: dict[str, Any] = {"owner": self.owner or self.name, "base_url": self.base_url}
        if self.token:
            settings["token"] = self.token
        return ProviderConfig(**settings)

    def specs(self) -> Iterator[ResourceSpec]:
        for blueprint in self.blueprints:
            for op in blueprint:
                if isinstance(op.spec, ResourceSpec):
                    yield op.spec

    @contextmanager
    def _session(self, connection: Owner | None, dry_run: bool) -> Iterator[Context[Any]]:
        owner = connection if connection is not None else configure(self.provider_config())
        try:
            store = StateStore(self.state or None)
            store.load()
            try:
                yield Context(target=self, owner=owner, state=store, dry_run=dry_run)
            finally:
                if not dry_run:
                    store.save()
        finally:
            if connection is None:
                owner.client.close()

    def build(self, *, dry_run: bool = False, connection: Owner | None = None) -> None:
        """Reconcile all blueprints; state is saved even if an operation fails."""
        with self._session(connection, dry_run) as ctx:
            logger.info("Building project '%s'", self.name)
            for blueprint in self.blueprints:
                blueprint.build(ctx)

    def import_resource(
        self,
        address: str,
        token: str,
        *,
        connection: Owner | None = None,
    ) -> ResourceData:
        """Import an existing remote object into state for a declared resource."""
        for spec in self.specs():
            if spec.address == address:
                break
        else:
            raise ValueError(f"Project '{self.name}' declares no resource '{address}'")

        with self._session(connection, dry_run=False) as ctx:
            return spec.import_(ctx, token)
