# emitters/gitlab.py
from __future__ import annotations

from typing import List

from ..model import STEP_RUN, Job, Pipeline, Trigger

HEADER = "# GitLab CI/CD Pipeline"
CACHE_PATHS = ["node_modules/", ".cache/"]


def variable_ref(key: str) -> str:
    return "$" + key


def rules_for(t: Trigger) -> List[str]:
    """One rule per active trigger type, shared by every job."""
    rules: List[str] = []
    if t.push:
        if t.branches:
            branch = f'"{t.branches[0]}"'
        else:
            branch = "$CI_DEFAULT_BRANCH"
        rules.append(f"if: '$CI_PIPELINE_SOURCE == \"push\" && $CI_COMMIT_BRANCH == {branch}'")
    if t.pull_request:
        rules.append("if: '$CI_PIPELINE_SOURCE == \"merge_request_event\"'")
    if t.tags:
        rules.append("if: '$CI_COMMIT_TAG'")
    return rules


def script_lines(job: Job) -> List[str]:
    """Trimmed, non-blank lines of every run step; `uses` steps have no equivalent here."""
    lines: List[str] = []
    for step in job.steps:
        if step.type != STEP_RUN:
            continue
        lines.extend(line.strip() for line in step.content.split("\n") if line.strip())
    return lines


def _job(job: Job, rules: List[str]) -> List[str]:
    out = [f"{job.name}:", f"  stage: {job.name}"]

    if job.docker_image:
        out.append(f"  image: {job.docker_image}")

    if job.timeout:
        out.append(f"  timeout: {job.timeout}m")

    if job.needs:
        out.append(f"  needs: [{', '.join(job.needs)}]")

    if job.cache:
        out.append("  cache:")
        out.append("    paths:")
        out.extend(f"      - {p}" for p in CACHE_PATHS)

    if job.env_vars:
        out.append("  variables:")
        out.extend(f"    {env.key}: {env.value}" for env in job.env_vars)

    if rules:
        out.append("  rules:")
        out.extend(f"    - {rule}" for rule in rules)

    out.append("  script:")
    out.extend(f"    - {line}" for line in script_lines(job))

    out.append("")
    return out


def emit(pipeline: Pipeline) -> str:
    """Render a Pipeline as a .gitlab-ci.yml document (one stage per job)."""
    out = [HEADER, ""]

    if pipeline.secrets:
        out.append("variables:")
        for secret in pipeline.secrets:
            out.append(f"  {secret.key}: {variable_ref(secret.key)}")
        out.append("")

    out.append("stages:")
    out.extend(f"  - {job.name}" for job in pipeline.jobs)
    out.append("")

    rules = rules_for(pipeline.triggers)
    for job in pipeline.jobs:
        out.extend(_job(job, rules))

    return "\n".join(out) + "\n"
