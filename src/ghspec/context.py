"""Runtime execution context for a reconciliation run."""

from __future__ import annotations

from .provider import Owner
from .state import StateStore


class Context[P]:
    """Runtime state passed through the build chain."""

    def __init__(
        self,
        target: P,
        owner: Owner,
        *,
        state: StateStore | None = None,
        dry_run: bool = False,
    ) -> None:
        self.target = target
        self.owner = owner
        self.state = state if state is not None else StateStore()
        self.dry_run = dry_run
