"""
Record boundary for imported/persisted pipelines.

Saved and exported configurations are loosely-typed JSON. Everything that
enters the core goes through these models first, which fill every missing
field from the default pipeline and coerce the common sloppy shapes.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .model import (
    GITHUB,
    PLATFORMS,
    STEP_TYPES,
    EnvVar,
    Job,
    Pipeline,
    Secret,
    Step,
    Strategy,
    Trigger,
)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TriggerRecord(_Record):
    push: bool = True
    pull_request: bool = Field(default=False, alias="pullRequest")
    tags: bool = False
    cron: str = ""
    branches: List[str] = Field(default_factory=lambda: ["main"])
    paths: Optional[List[str]] = Field(default_factory=list)
    workflow_dispatch: bool = Field(default=False, alias="workflowDispatch")

    @field_validator("cron", mode="before")
    @classmethod
    def _none_cron(cls, v: Any) -> Any:
        return "" if v is None else v

    def to_trigger(self) -> Trigger:
        return Trigger(
            push=self.push,
            pull_request=self.pull_request,
            tags=self.tags,
            cron=self.cron,
            branches=list(self.branches),
            paths=list(self.paths) if self.paths is not None else None,
            workflow_dispatch=self.workflow_dispatch,
        )


class SecretRecord(_Record):
    key: str
    description: str = ""


class StepRecord(_Record):
    id: str = ""
    name: str = "New Step"
    type: str = "run"
    content: str = ""
    condition: Optional[str] = None
    continue_on_error: bool = Field(default=False, alias="continueOnError")

    @field_validator("type")
    @classmethod
    def _known_type(cls, v: str) -> str:
        if v not in STEP_TYPES:
            raise ValueError(f"step type must be one of {STEP_TYPES}, got {v!r}")
        return v

    @field_validator("id", mode="before")
    @classmethod
    def _str_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, float)) else v


class EnvVarRecord(_Record):
    key: str
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _str_value(cls, v: Any) -> Any:
        if v is None:
            return ""
        return str(v) if isinstance(v, (int, float, bool)) else v


class StrategyRecord(_Record):
    matrix: Optional[Dict[str, List[str]]] = None
    fail_fast: Optional[bool] = Field(default=None, alias="failFast")

    @field_validator("matrix", mode="before")
    @classmethod
    def _str_values(cls, v: Any) -> Any:
        # "python-version": [3.8, "3.9"] -> ["3.8", "3.9"]
        if isinstance(v, dict):
            return {
                k: [str(x) for x in vals] if isinstance(vals, list) else vals
                for k, vals in v.items()
            }
        return v


class JobRecord(_Record):
    id: str = ""
    name: str
    runs_on: str = Field(default="ubuntu-latest", alias="runsOn")
    docker_image: Optional[str] = Field(default=None, alias="dockerImage")
    steps: List[StepRecord] = Field(default_factory=list)
    cache: bool = False
    env_vars: List[EnvVarRecord] = Field(default_factory=list, alias="envVars")
    needs: List[str] = Field(default_factory=list)
    timeout: Optional[int] = None
    strategy: Optional[StrategyRecord] = None

    @field_validator("id", mode="before")
    @classmethod
    def _str_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, float)) else v

    @field_validator("needs", mode="before")
    @classmethod
    def _single_need(cls, v: Any) -> Any:
        # the editing surface only ever picks one dependency
        if v is None or v == "":
            return []
        if isinstance(v, str):
            return [v]
        return v

    def to_job(self) -> Job:
        strategy = None
        if self.strategy is not None:
            strategy = Strategy(
                matrix={k: list(v) for k, v in self.strategy.matrix.items()}
                if self.strategy.matrix is not None else None,
                fail_fast=self.strategy.fail_fast,
            )
        return Job(
            id=self.id,
            name=self.name,
            runs_on=self.runs_on,
            docker_image=self.docker_image,
            steps=[
                Step(
                    id=s.id,
                    name=s.name,
                    type=s.type,
                    content=s.content,
                    condition=s.condition,
                    continue_on_error=s.continue_on_error,
                )
                for s in self.steps
            ],
            cache=self.cache,
            env_vars=[EnvVar(key=e.key, value=e.value) for e in self.env_vars],
            needs=list(self.needs),
            timeout=self.timeout,
            strategy=strategy,
        )


class PipelineRecord(_Record):
    platform: str = GITHUB
    jobs: List[JobRecord] = Field(default_factory=list)
    triggers: TriggerRecord = Field(default_factory=TriggerRecord)
    secrets: List[SecretRecord] = Field(default_factory=list)

    @field_validator("platform")
    @classmethod
    def _known_platform(cls, v: str) -> str:
        if v not in PLATFORMS:
            raise ValueError(f"platform must be one of {PLATFORMS}, got {v!r}")
        return v

    @field_validator("triggers", mode="before")
    @classmethod
    def _null_triggers(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def from_pipeline(cls, pipeline: Pipeline) -> PipelineRecord:
        return cls.model_validate(pipeline.to_dict())

    def to_pipeline(self) -> Pipeline:
        return Pipeline(
            platform=self.platform,
            triggers=self.triggers.to_trigger(),
            secrets=[Secret(key=s.key, description=s.description) for s in self.secrets],
            jobs=[j.to_job() for j in self.jobs],
        )


def parse_record(text: str | bytes) -> Pipeline:
    """
    Parse a JSON configuration into a Pipeline.

    Raises:
        ConfigError: kind="parse" if the text is not JSON or not a pipeline record
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(
            kind="parse",
            message="could not parse configuration",
            details={"reason": str(e)},
        ) from e

    if not isinstance(data, dict):
        raise ConfigError(
            kind="parse",
            message="could not parse configuration",
            details={"reason": f"expected an object, got {type(data).__name__}"},
        )

    try:
        return PipelineRecord.model_validate(data).to_pipeline()
    except ValidationError as e:
        raise ConfigError(
            kind="parse",
            message="could not parse configuration",
            details={"errors": e.error_count(), "reason": _first_error(e)},
        ) from e


def _first_error(e: ValidationError) -> str:
    errs = e.errors()
    if not errs:
        return str(e)
    first = errs[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {first.get('msg', '')}"
