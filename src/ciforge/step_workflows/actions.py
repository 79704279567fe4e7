# step_workflows/actions.py
from __future__ import annotations

from ..dsl import uses
from ..model import Step


def checkout(name: str = "Checkout code", version: str = "v4") -> Step:
    return uses(name, f"actions/checkout@{version}")


def setup_node(node_version: str = "18", *, name: str = "Setup Node.js") -> Step:
    return uses(name, "actions/setup-node@v4", with_={"node-version": f"'{node_version}'"})


def setup_python(python_version: str = "3.12", *, name: str = "Setup Python") -> Step:
    """`python_version` may be an expression such as ${{ matrix.python-version }}."""
    value = python_version if python_version.startswith("${{") else f"'{python_version}'"
    return uses(name, "actions/setup-python@v4", with_={"python-version": value})
