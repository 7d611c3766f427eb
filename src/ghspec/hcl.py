"""HCL loading — render, parse and resolve configuration files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import hcl2
import jinja2

from .projects import Project
from .resolve import Resolver

if TYPE_CHECKING:
    from .workspace import Workspace

logger = logging.getLogger(__name__)


def scan[P: Project](
    path: str | Path,
    *,
    project_type: type[P] = Project,  # type: ignore[assignment]
    recurse: bool = True,
    context: dict[str, Any] | None = None,
) -> Workspace[P]:
    """Scan a directory for .hcl files and return a ready Workspace."""
    from .workspace import Workspace

    ws = Workspace(project_type=project_type, context=context)
    ws.scan(path, recurse=recurse)
    return ws


def load(
    file: str | Path,
    *,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Render a file through Jinja2, parse it as HCL, then resolve ``${...}`` references.

    ``env`` and ``CWD`` are always available to references; ``context``
    entries are available to both the template and the references.
    """
    file = Path(file)
    ctx = context if context is not None else {}
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    try:
        text = env.from_string(file.read_text()).render(ctx)
    except jinja2.TemplateError as exc:
        raise ValueError(f"{file}: {exc}") from exc

    try:
        data = hcl2.loads(text)
    except Exception as exc:
        raise ValueError(f"{file}: {exc}") from exc

    resolver = Resolver({"env": dict(os.environ), "CWD": os.getcwd, **ctx})
    try:
        return resolver.resolve(data)
    except ValueError as exc:
        raise ValueError(f"{file}: {exc}") from exc
