"""Diff suppressors and attribute validators."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import Any

from .errors import ResourceValidationError

_DEPLOY_KEY_PATTERN = re.compile(r"^([a-z0-9-]+ [^\s]+)( [^\s]+)?$")


def suppress_deploy_key_diff(old: Any, new: Any) -> bool:
    """Ignore the trailing comment GitHub drops from stored SSH keys."""
    trimmed = _DEPLOY_KEY_PATTERN.sub(r"\1", str(new).strip())
    return old == trimmed


def case_insensitive(old: Any, new: Any) -> bool:
    return str(old).casefold() == str(new).casefold()


def validate_value_func(values: Iterable[str]) -> Callable[[Any, str], None]:
    """Build a validator accepting only the given values."""
    allowed = list(values)

    def validate(value: Any, key: str) -> None:
        if value not in allowed:
            raise ResourceValidationError(
                f"{value!r} is an invalid value for argument {key}; "
                f"acceptable values are: {', '.join(allowed)}"
            )

    return validate
