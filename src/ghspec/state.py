"""State store — the last observed attributes of every managed resource."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class ResourceState(BaseModel):
    """One managed resource as last observed."""

    type: str
    id: str
    attributes: dict[str, Any] = Field(default_factory=dict)


class State(BaseModel):
    version: int = STATE_VERSION
    resources: dict[str, ResourceState] = Field(default_factory=dict)


class StateStore:
    """Address-keyed resource records, optionally backed by a JSON file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else None
        self._state = State()

    def load(self) -> None:
        """Read the state file; a missing file means empty state."""
        if self.path is None or not self.path.exists():
            logger.debug("No state file; starting empty")
            self._state = State()
            return
        self._state = State.model_validate_json(self.path.read_text())
        if self._state.version != STATE_VERSION:
            raise ValueError(f"{self.path}: unsupported state version {self._state.version}")
        logger.debug("Loaded %d resource(s) from %s", len(self._state.resources), self.path)

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self._state.model_dump_json(indent=2))
        logger.debug("Saved %d resource(s) to %s", len(self._state.resources), self.path)

    def get(self, address: str) -> ResourceState | None:
        return self._state.resources.get(address)

    def put(self, address: str, type: str, id: str, attributes: dict[str, Any]) -> None:
        self._state.resources[address] = ResourceState(type=type, id=id, attributes=attributes)

    def remove(self, address: str) -> None:
        self._state.resources.pop(address, None)

    def __contains__(self, address: object) -> bool:
        return address in self._state.resources

    def __len__(self) -> int:
        return len(self._state.resources)

    def __repr__(self) -> str:
        return f"StateStore(path={self.path}, resources={len(self)})"
