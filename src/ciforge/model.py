# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

GITHUB = "github"
GITLAB = "gitlab"
PLATFORMS = (GITHUB, GITLAB)

STEP_RUN = "run"
STEP_USES = "uses"
STEP_TYPES = (STEP_RUN, STEP_USES)


@dataclass
class Trigger:
    """Events that start a pipeline run."""
    push: bool = False
    pull_request: bool = False
    tags: bool = False
    cron: str = ""                              # 5-field cron, passed through verbatim
    branches: list[str] = field(default_factory=list)
    paths: Optional[List[str]] = None
    workflow_dispatch: bool = False


def default_triggers() -> Trigger:
    """The trigger set a fresh pipeline starts with."""
    return Trigger(push=True, branches=["main"], paths=[])


@dataclass(frozen=True)
class Secret:
    """A named external credential. Only the name is ever emitted."""
    key: str
    description: str = ""


@dataclass(frozen=True)
class Step:
    """A single action inside a CI job: a shell script or an action reference."""
    id: str
    name: str
    type: str = STEP_RUN
    content: str = ""
    condition: str | None = None
    continue_on_error: bool = False


@dataclass(frozen=True)
class EnvVar:
    key: str
    value: str


@dataclass
class Strategy:
    matrix: Optional[Dict[str, List[str]]] = None
    fail_fast: bool | None = None


@dataclass
class Job:
    """
    A CI job: steps + dependencies + runner metadata.

    `name` is used verbatim as the YAML map key (and GitLab stage), so it
    must be a bare token without spaces.
    """
    id: str
    name: str
    runs_on: str = "ubuntu-latest"
    steps: list[Step] = field(default_factory=list)
    cache: bool = False
    env_vars: list[EnvVar] = field(default_factory=list)
    needs: list[str] = field(default_factory=list)
    docker_image: str | None = None
    timeout: int | None = None                  # minutes
    strategy: Optional[Strategy] = None


@dataclass
class Pipeline:
    """The unit of persistence/export: platform, triggers, secrets, jobs."""
    platform: str = GITHUB
    triggers: Trigger = field(default_factory=default_triggers)
    secrets: list[Secret] = field(default_factory=list)
    jobs: list[Job] = field(default_factory=list)

    def job_names(self) -> list[str]:
        return [j.name for j in self.jobs]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted record layout (camelCase keys)."""
        return {
            "platform": self.platform,
            "jobs": [_job_to_dict(j) for j in self.jobs],
            "triggers": _trigger_to_dict(self.triggers),
            "secrets": [{"key": s.key, "description": s.description} for s in self.secrets],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Pipeline:
        """Rebuild a Pipeline from a (possibly partial) persisted record."""
        # Import here to avoid circular import
        from .schemas import PipelineRecord

        return PipelineRecord.model_validate(data).to_pipeline()


def _trigger_to_dict(t: Trigger) -> Dict[str, Any]:
    return {
        "push": t.push,
        "pullRequest": t.pull_request,
        "tags": t.tags,
        "cron": t.cron,
        "branches": list(t.branches),
        "paths": list(t.paths) if t.paths is not None else None,
        "workflowDispatch": t.workflow_dispatch,
    }


def _step_to_dict(s: Step) -> Dict[str, Any]:
    return {
        "id": s.id,
        "name": s.name,
        "type": s.type,
        "content": s.content,
        "condition": s.condition,
        "continueOnError": s.continue_on_error,
    }


def _job_to_dict(j: Job) -> Dict[str, Any]:
    strategy = None
    if j.strategy is not None:
        strategy = {
            "matrix": {k: list(v) for k, v in j.strategy.matrix.items()}
            if j.strategy.matrix is not None else None,
            "failFast": j.strategy.fail_fast,
        }
    return {
        "id": j.id,
        "name": j.name,
        "runsOn": j.runs_on,
        "dockerImage": j.docker_image,
        "steps": [_step_to_dict(s) for s in j.steps],
        "cache": j.cache,
        "envVars": [{"key": e.key, "value": e.value} for e in j.env_vars],
        "needs": list(j.needs),
        "timeout": j.timeout,
        "strategy": strategy,
    }
