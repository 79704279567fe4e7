# ciforge_pipeline.py
# CI for ciforge itself: lint, then tests on a Python version matrix
from __future__ import annotations

from ciforge.dsl import job, matrix, pipeline, run, secret, triggers
from ciforge.step_workflows import checkout, lint_step, setup_python

PIPELINE = pipeline(
    # Lint job - runs ruff on the codebase
    job(
        "lint",
        checkout(),
        setup_python("3.12"),
        run("Install ruff", "pip install ruff"),
        lint_step("Ruff check", tool="ruff", args="check", files=["src/", "tests/"]),
        cache=True,
        timeout=10,
    ),

    # Test job - installs the package and runs pytest
    job(
        "test",
        checkout(),
        setup_python("${{ matrix.python-version }}"),
        run("Install package", "pip install -e .[test]"),
        run("Run pytest", "pytest -q"),
        needs=["lint"],
        cache=True,
        timeout=20,
        matrix=matrix("python-version", ["3.10", "3.11", "3.12", "3.13"]),
        fail_fast=False,
    ),
    on=triggers(push=True, pull_request=True, branches=["main"], workflow_dispatch=True),
    secrets=[secret("CODECOV_TOKEN", "Coverage upload token")],
)
