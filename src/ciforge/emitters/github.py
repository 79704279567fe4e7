# emitters/github.py
from __future__ import annotations

from typing import List

from ..model import STEP_USES, Job, Pipeline, Step, Trigger

HEADER = "name: CI/CD Pipeline"
INDENT = "  "

CACHE_STEP = [
    "- name: Cache dependencies",
    "  uses: actions/cache@v4",
    "  with:",
    "    path: ~/.cache",
    "    key: ${{ runner.os }}-cache-${{ hashFiles('**/package-lock.json') }}",
    "    restore-keys: |",
    "      ${{ runner.os }}-cache-",
]


def flow_list(values: List[str]) -> str:
    """["a", "b"] with every item double-quoted."""
    return "[" + ", ".join(f'"{v}"' for v in values) + "]"


def _ind(level: int) -> str:
    return INDENT * level


def secret_ref(key: str) -> str:
    return "${{ secrets." + key + " }}"


def _triggers(t: Trigger) -> List[str]:
    out = ["on:"]
    if t.push:
        out.append(f"{_ind(1)}push:")
        out.append(f"{_ind(2)}branches: {flow_list(t.branches)}")
        if t.paths:
            out.append(f"{_ind(2)}paths: {flow_list(t.paths)}")
    if t.pull_request:
        out.append(f"{_ind(1)}pull_request:")
        out.append(f"{_ind(2)}branches: {flow_list(t.branches)}")
    if t.tags:
        # Second `push:` key when t.push is also set; kept as-is (see DESIGN.md).
        out.append(f"{_ind(1)}push:")
        out.append(f'{_ind(2)}tags: ["v*"]')
    if t.cron:
        out.append(f"{_ind(1)}schedule:")
        out.append(f'{_ind(2)}- cron: "{t.cron}"')
    if t.workflow_dispatch:
        out.append(f"{_ind(1)}workflow_dispatch:")
    return out


def _step(step: Step) -> List[str]:
    base = _ind(3)
    out = [f"{base}- name: {step.name}"]
    if step.condition:
        out.append(f"{base}  if: {step.condition}")
    if step.continue_on_error:
        out.append(f"{base}  continue-on-error: true")
    if step.type == STEP_USES:
        out.append(f"{base}  uses: {step.content}")
    else:
        out.append(f"{base}  run: |")
        pad = _ind(5)
        for line in step.content.split("\n"):
            out.append(pad + line if line else "")
    return out


def _job(job: Job) -> List[str]:
    out = [f"{_ind(1)}{job.name}:"]
    out.append(f"{_ind(2)}runs-on: {job.runs_on}")

    if job.timeout:
        out.append(f"{_ind(2)}timeout-minutes: {job.timeout}")

    if job.needs:
        out.append(f"{_ind(2)}needs: {flow_list(job.needs)}")

    strategy = job.strategy
    if strategy is not None and (strategy.matrix or strategy.fail_fast is not None):
        out.append(f"{_ind(2)}strategy:")
        if strategy.matrix:
            out.append(f"{_ind(3)}matrix:")
            for axis, values in strategy.matrix.items():
                out.append(f"{_ind(4)}{axis}: {flow_list(values)}")
        if strategy.fail_fast is not None:
            out.append(f"{_ind(3)}fail-fast: {'true' if strategy.fail_fast else 'false'}")

    if job.docker_image:
        out.append(f"{_ind(2)}container: {job.docker_image}")

    if job.env_vars:
        out.append(f"{_ind(2)}env:")
        for env in job.env_vars:
            out.append(f"{_ind(3)}{env.key}: {env.value}")

    out.append(f"{_ind(2)}steps:")
    if job.cache:
        out.extend(_ind(3) + line for line in CACHE_STEP)
    for step in job.steps:
        out.extend(_step(step))

    out.append("")
    return out


def emit(pipeline: Pipeline) -> str:
    """Render a Pipeline as a GitHub Actions workflow."""
    out = [HEADER, ""]
    out.extend(_triggers(pipeline.triggers))

    if pipeline.secrets:
        out.append("")
        out.append("env:")
        for secret in pipeline.secrets:
            out.append(f"{_ind(1)}{secret.key}: {secret_ref(secret.key)}")

    out.append("")
    out.append("jobs:")
    for job in pipeline.jobs:
        out.extend(_job(job))

    return "\n".join(out) + "\n"
