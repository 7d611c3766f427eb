"""Specification ABC and the declared-resource spec that drives the handlers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from .context import Context
from .diff import Plan, compute_plan
from .resource import get_resource_type
from .schema import ResourceData, apply_defaults, validate_config

logger = logging.getLogger(__name__)


class Specification[P](ABC):
    """Base class for anything a strategy can reconcile."""

    @abstractmethod
    def equals(self, ctx: Context[P]) -> bool:
        """Current state matches desired state."""

    def exists(self, ctx: Context[P]) -> bool:
        """Resource exists (defaults to equals)."""
        return self.equals(ctx)

    @abstractmethod
    def apply(self, ctx: Context[P]) -> None:
        """Create or update resource."""

    @abstractmethod
    def remove(self, ctx: Context[P]) -> None:
        """Delete resource."""


class ResourceSpec(Specification[Any]):
    """A declared resource: handler type, local name and desired attributes.

    The stored record is refreshed through the handler once per context. A
    handler that clears the ID during refresh means the remote object is
    gone, and the record is dropped from state.
    """

    def __init__(self, type_name: str, name: str, **attrs: Any) -> None:
        self.handler = get_resource_type(type_name)()
        self.name = name
        validate_config(self.handler.schema, attrs)
        self.desired = apply_defaults(self.handler.schema, attrs)
        self._observed: tuple[Context[Any], ResourceData | None] | None = None

    @property
    def type_name(self) -> str:
        return self.handler.type_name

    @property
    def address(self) -> str:
        return f"{self.type_name}.{self.name}"

    def __str__(self) -> str:
        return self.address

    def __repr__(self) -> str:
        return f"ResourceSpec({self.address!r})"

    def _record(self, ctx: Context[Any], d: ResourceData) -> None:
        if d.id:
            ctx.state.put(self.address, self.type_name, d.id, d.attributes)
        else:
            ctx.state.remove(self.address)

    def observe(self, ctx: Context[Any]) -> ResourceData | None:
        """Refresh the stored record from GitHub; None if unmanaged or gone."""
        if self._observed is not None and self._observed[0] is ctx:
            return self._observed[1]

        entry = ctx.state.get(self.address)
        d: ResourceData | None = None
        if entry is not None:
            d = ResourceData(self.handler.schema, entry.attributes, id=entry.id)
            logger.debug("Refreshing %s (%s)", self.address, entry.id)
            self.handler.read(d, ctx.owner)
            self._record(ctx, d)
            if not d.id:
                d = None

        self._observed = (ctx, d)
        return d

    def plan(self, ctx: Context[Any]) -> Plan | None:
        """Changes needed for an existing resource; None when it must be created."""
        d = self.observe(ctx)
        if d is None:
            return None
        return compute_plan(self.handler.schema, d.attributes, self.desired)

    def exists(self, ctx: Context[Any]) -> bool:
        return self.observe(ctx) is not None

    def equals(self, ctx: Context[Any]) -> bool:
        plan = self.plan(ctx)
        return plan is not None and not plan

    def _create(self, ctx: Context[Any]) -> None:
        d = ResourceData(self.handler.schema, self.desired, new=True)
        self.handler.create(d, ctx.owner)
        self._record(ctx, d)
        logger.info("Created %s (%s)", self.address, d.id)

    def apply(self, ctx: Context[Any]) -> None:
        current = self.observe(ctx)
        self._observed = None

        if current is None:
            self._create(ctx)
            return

        plan = compute_plan(self.handler.schema, current.attributes, self.desired)
        if not plan:
            return

        if plan.requires_replace or not self.handler.updatable:
            logger.info("Replacing %s (%s)", self.address, plan)
            self.handler.delete(current, ctx.owner)
            ctx.state.remove(self.address)
            self._create(ctx)
            return

        logger.info("Updating %s (%s)", self.address, plan)
        d = ResourceData(
            self.handler.schema,
            {**current.attributes, **self.desired},
            id=current.id,
        )
        self.handler.update(d, ctx.owner)
        self._record(ctx, d)

    def remove(self, ctx: Context[Any]) -> None:
        current = self.observe(ctx)
        self._observed = None
        if current is None:
            return
        self.handler.delete(current, ctx.owner)
        ctx.state.remove(self.address)
        logger.info("Deleted %s (%s)", self.address, current.id)

    def import_(self, ctx: Context[Any], token: str) -> ResourceData:
        """Adopt an existing remote object into state under this address."""
        if self.address in ctx.state:
            raise ValueError(f"Resource '{self.address}' is already managed")

        d = ResourceData(self.handler.schema, id=token)
        d = self.handler.import_state(d, ctx.owner)
        self.handler.read(d, ctx.owner)
        if not d.id:
            raise ValueError(f"Cannot import non-existent remote object '{token}' as '{self.address}'")

        self._record(ctx, d)
        self._observed = None
        logger.info("Imported %s (%s)", self.address, d.id)
        return d
