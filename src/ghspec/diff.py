"""Plan computation — compare observed attributes to desired ones."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .schema import Schema


@dataclass(frozen=True)
class AttributeChange:
    name: str
    old: Any
    new: Any
    force_new: bool = False


@dataclass
class Plan:
    """Attribute changes needed to reach the desired state."""

    changes: list[AttributeChange] = field(default_factory=list)

    @property
    def requires_replace(self) -> bool:
        return any(c.force_new for c in self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __iter__(self) -> Iterator[AttributeChange]:
        return iter(self.changes)

    def __str__(self) -> str:
        return ", ".join(f"{c.name}: {c.old!r} -> {c.new!r}" for c in self.changes)


def compute_plan(schema: Schema, observed: Mapping[str, Any], desired: Mapping[str, Any]) -> Plan:
    """Only desired keys are compared; computed values the user left unset never diff."""
    plan = Plan()
    for name, new in desired.items():
        attr = schema[name]
        old = observed.get(name)
        if old == new:
            continue
        if attr.diff_suppress is not None and old is not None and attr.diff_suppress(old, new):
            continue
        plan.changes.append(AttributeChange(name, old, new, attr.force_new))
    return plan
