# step_workflows/test.py
from __future__ import annotations

from ..dsl import run
from ..model import Step


def unit_test_steps(
    name: str,
    framework: str,
    args: str = "",
    *,
    install: bool = True,
) -> list[Step]:
    """
    Turn a test framework choice into runnable shell steps:
    an optional install step followed by the test command.
    """
    args = (args or "").strip()

    if framework == "pytest":
        out: list[Step] = []
        if install:
            out.append(run("Install dependencies", "pip install -r requirements.txt"))
        out.append(run(name, f"pytest {args}".strip()))
        return out

    if framework == "npm":
        out = []
        if install:
            out.append(run("Install dependencies", "npm ci"))
        out.append(run(name, f"npm test {args}".strip()))
        return out

    raise ValueError(f"Unknown framework: {framework!r}")
