# step_workflows/lint.py
from __future__ import annotations

from typing import List

from ..dsl import run
from ..model import Step


def lint_step(
    name: str,
    tool: str,
    args: str | None = None,
    *,
    files: List[str] | None = None,
    continue_on_error: bool = False,
) -> Step:
    """Create a run step that invokes a linting tool over `files` (default: the repo)."""
    parts = [tool]
    if args:
        parts.append(args)
    parts.extend(files or ["."])
    return run(name, " ".join(parts), continue_on_error=continue_on_error)
