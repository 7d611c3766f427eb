"""Resolver — walk parsed HCL data and resolve ${...} references."""

from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_INTERP_PATTERN = re.compile(r"\$\$\{|(\$\{([^{}]+)\})")
_SINGLE_REF = re.compile(r"\$\{([^{}]+)\}")


class Resolver:
    """Resolve ``${a.b}`` references against a context dict.

    Use ``$${`` for a literal ``${``.
    """

    def __init__(self, context: dict[str, Any] | None = None) -> None:
        self._context = context or {}

    def lookup(self, ref: str) -> Any:
        """Resolve a dotted reference such as ``env.GITHUB_TOKEN``."""
        current: Any = self._context
        for part in ref.split("."):
            try:
                current = current[part]
            except (KeyError, TypeError):
                try:
                    current = getattr(current, part)
                except AttributeError:
                    raise ValueError(f"undefined variable '{ref}'") from None

        if callable(current) and not isinstance(current, type):
            current = current()
        return current

    def resolve_value(self, value: str) -> Any:
        """A string that is exactly one reference keeps the referenced type."""
        if "${" not in value:
            return value

        match = _SINGLE_REF.fullmatch(value)
        if match:
            return self.lookup(match.group(1).strip())

        def _replace(m: re.Match) -> str:  # type: ignore[type-arg]
            if m.group(0) == "$${":
                return "${"
            return str(self.lookup(m.group(2).strip()))

        return _INTERP_PATTERN.sub(_replace, value)

    def resolve(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: self.resolve(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self.resolve(item) for item in data]
        if isinstance(data, str):
            return self.resolve_value(data)
        return data
