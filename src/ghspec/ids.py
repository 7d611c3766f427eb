"""Composite ID codec — pack remote identity parts into a single state key.

Two-part IDs split on the first ``:`` so the right part may contain colons.
File IDs split on the first ``/`` so the path keeps its directories.
"""

from __future__ import annotations

from .errors import ImportFormatError, InvalidIdError

DEFAULT_BRANCH = "main"


def build_two_part_id(left: str, right: str) -> str:
    return f"{left}:{right}"


def parse_two_part_id(id: str, left: str, right: str) -> tuple[str, str]:
    """Split a ``left:right`` ID; ``left`` and ``right`` name the parts for errors."""
    first, sep, second = id.partition(":")
    if not sep:
        raise InvalidIdError(f"unexpected ID format ({id!r}); expected {left}:{right}")
    return first, second


def build_file_id(repository: str, path: str) -> str:
    return f"{repository}/{path}"


def split_repo_file_path(id: str) -> tuple[str, str]:
    repository, sep, path = id.partition("/")
    if not sep:
        raise InvalidIdError(f"unexpected ID format ({id!r}); expected <repository>/<file path>")
    return repository, path


def parse_file_import_id(token: str) -> tuple[str, str, str]:
    """Parse ``<repository>/<path>[:<branch>]`` into (repository, path, branch).

    Only one ``:`` is accepted, so files whose path contains a colon cannot
    be imported.
    """
    parts = token.split(":")
    if len(parts) > 2:
        raise ImportFormatError(
            f"invalid ID {token!r}; must be written as <repository>/<file path> "
            f'(when branch is "{DEFAULT_BRANCH}") or <repository>/<file path>:<branch>'
        )

    branch = parts[1] if len(parts) == 2 else DEFAULT_BRANCH
    try:
        repository, path = split_repo_file_path(parts[0])
    except InvalidIdError as exc:
        raise ImportFormatError(str(exc)) from exc
    return repository, path, branch
