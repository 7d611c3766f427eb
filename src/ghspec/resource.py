"""Resource handler ABC and resource type registration."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import ClassVar

from .client import ApiResponse
from .errors import NotFoundError, NotModifiedError
from .provider import Owner
from .schema import ResourceData, Schema

logger = logging.getLogger(__name__)

_resource_registry: dict[str, type[Resource]] = {}


def resource(name: str):
    """Register a Resource class under its type name."""

    def decorator(cls):
        cls.type_name = name
        _resource_registry[name] = cls
        return cls

    return decorator


def get_resource_type(name: str) -> type[Resource]:
    if name not in _resource_registry:
        raise ValueError(f"Unknown resource type: '{name}'")
    return _resource_registry[name]


class Resource(ABC):
    """Create/read/update/delete handler for one kind of remote object."""

    type_name: ClassVar[str] = ""
    schema: ClassVar[Schema] = {}

    @abstractmethod
    def create(self, d: ResourceData, owner: Owner) -> None:
        """Create the remote object, set the ID, then read it back."""

    @abstractmethod
    def read(self, d: ResourceData, owner: Owner) -> None:
        """Refresh d from the remote object; clears the ID if it is gone."""

    def update(self, d: ResourceData, owner: Owner) -> None:
        """Apply mutable attribute changes in place."""
        raise NotImplementedError(f"{self.type_name} cannot be updated in place")

    @abstractmethod
    def delete(self, d: ResourceData, owner: Owner) -> None:
        """Delete the remote object."""

    def import_state(self, d: ResourceData, owner: Owner) -> ResourceData:
        """Prepare d for an import read; the ID is used as given."""
        return d

    @property
    def updatable(self) -> bool:
        return type(self).update is not Resource.update

    def conditional_read(
        self,
        d: ResourceData,
        fetch: Callable[[str | None], ApiResponse],
        description: str,
    ) -> ApiResponse | None:
        """Fetch with the stored ETag; None means there is nothing to write back.

        A 304 leaves d untouched. A 404 clears the ID so the resource drops
        out of state. Other errors propagate.
        """
        etag = None if d.is_new_resource else d.get("etag") or None
        try:
            resp = fetch(etag)
        except NotModifiedError:
            logger.debug("%s %s not modified", description, d.id)
            return None
        except NotFoundError:
            logger.info(
                "Removing %s %s from state because it no longer exists in GitHub",
                description,
                d.id,
            )
            d.set_id("")
            return None

        d.set("etag", resp.etag)
        return resp
