# dsl.py
from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .graph import check_jobs
from .model import (
    GITHUB,
    STEP_RUN,
    STEP_USES,
    EnvVar,
    Job,
    Pipeline,
    Secret,
    Step,
    Strategy,
    Trigger,
)

# `with:` lines sit under a step at 8 spaces, their keys at 10
_WITH_INDENT = " " * 8


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def run(
    name: str,
    script: str,
    *,
    condition: str | None = None,
    continue_on_error: bool = False,
) -> Step:
    """Create a shell step. `script` may span several lines."""
    return Step(
        id="",
        name=name,
        type=STEP_RUN,
        content=script,
        condition=condition,
        continue_on_error=continue_on_error,
    )


def uses(
    name: str,
    ref: str,
    *,
    with_: Optional[Dict[str, str]] = None,
    condition: str | None = None,
    continue_on_error: bool = False,
) -> Step:
    """Create a step that references a reusable action, e.g. actions/checkout@v4."""
    content = ref
    if with_:
        lines = [ref, f"{_WITH_INDENT}with:"]
        lines.extend(f"{_WITH_INDENT}  {k}: {v}" for k, v in with_.items())
        content = "\n".join(lines)
    return Step(
        id="",
        name=name,
        type=STEP_USES,
        content=content,
        condition=condition,
        continue_on_error=continue_on_error,
    )


def _number_steps(steps: List[Step]) -> List[Step]:
    # ids only need to be unique within the job
    return [s if s.id else replace(s, id=str(i + 1)) for i, s in enumerate(steps)]


def _env_vars(env: Optional[Dict[str, Any]]) -> List[EnvVar]:
    return [EnvVar(key=k, value=str(v)) for k, v in (env or {}).items()]


# ---------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------

class Matrix:
    """
    Matrix axes for a job strategy.

    Example:
        job("test", ..., matrix=matrix("python-version", ["3.11", "3.12"]))

    Or expand into one job per value instead of a strategy:
        matrix("py", ["3.11", "3.12"]).jobs(
            lambda v: job(f"test-py{v}", run("Test", "pytest"))
        )
    """
    def __init__(self, key: str, values: Iterable[Any]):
        self.key = key
        self.values = [str(v) for v in values]
        self.axes: Dict[str, List[str]] = {key: self.values}

    def axis(self, key: str, values: Iterable[Any]) -> Matrix:
        self.axes[key] = [str(v) for v in values]
        return self

    def to_dict(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self.axes.items()}

    def jobs(self, builder: Callable[[str], Job]) -> List[Job]:
        return [builder(v) for v in self.values]


def matrix(key: str, values: Iterable[Any]) -> Matrix:
    return Matrix(key, values)


MatrixLike = Union[Matrix, Dict[str, Iterable[Any]]]


def _strategy(m: Optional[MatrixLike], fail_fast: bool | None) -> Optional[Strategy]:
    if m is None and fail_fast is None:
        return None
    axes = None
    if isinstance(m, Matrix):
        axes = m.to_dict()
    elif m is not None:
        axes = {k: [str(v) for v in vals] for k, vals in m.items()}
    return Strategy(matrix=axes, fail_fast=fail_fast)


# ---------------------------------------------------------------------
# Functional Job helper
# ---------------------------------------------------------------------

def job(
    name: str,
    *steps: Step,  # allow: job("x", run(...), uses(...))
    steps_list: Optional[List[Step]] = None,  # allow: job("x", steps_list=[...])
    runs_on: str = "ubuntu-latest",
    needs: Optional[List[str]] = None,
    env: Optional[Dict[str, Any]] = None,
    cache: bool = False,
    docker_image: str | None = None,
    timeout: int | None = None,
    matrix: Optional[MatrixLike] = None,
    fail_fast: bool | None = None,
    job_id: str = "",
) -> Job:
    steps_final: List[Step] = []
    if steps_list:
        steps_final.extend(list(steps_list))
    steps_final.extend(list(steps))

    if not steps_final:
        raise ValueError(f"job({name!r}) must have at least one step")

    return Job(
        id=job_id,
        name=name,
        runs_on=runs_on,
        steps=_number_steps(steps_final),
        cache=cache,
        env_vars=_env_vars(env),
        needs=list(needs or []),
        docker_image=docker_image,
        timeout=timeout,
        strategy=_strategy(matrix, fail_fast),
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, name: str):
        self.name = name
        self._runs_on = "ubuntu-latest"
        self._needs: list[str] = []
        self._steps: list[Step] = []
        self._env: dict[str, str] = {}
        self._cache = False
        self._image: str | None = None
        self._timeout: int | None = None
        self._matrix: Optional[Matrix] = None
        self._fail_fast: bool | None = None

    def runs_on(self, runner: str):
        self._runs_on = runner
        return self

    def depends_on(self, *job_names: str):
        self._needs.extend(job_names)
        return self

    def define_step(self, name: str, script: str, **kwargs):
        self._steps.append(run(name, script, **kwargs))
        return self

    def use_action(self, name: str, ref: str, **kwargs):
        self._steps.append(uses(name, ref, **kwargs))
        return self

    def add_steps(self, *steps: Step):
        self._steps.extend(steps)
        return self

    def with_env(self, **env):
        # force values to str, they are emitted verbatim
        self._env.update({k: str(v) for k, v in env.items()})
        return self

    def with_cache(self, enabled: bool = True):
        self._cache = enabled
        return self

    def in_container(self, image: str):
        self._image = image
        return self

    def timeout_minutes(self, minutes: int):
        self._timeout = minutes
        return self

    def with_matrix(self, key: str, values: Iterable[Any], *, fail_fast: bool | None = None):
        if self._matrix is None:
            self._matrix = Matrix(key, values)
        else:
            self._matrix.axis(key, values)
        if fail_fast is not None:
            self._fail_fast = fail_fast
        return self

    def build(self) -> Job:
        if not self._steps:
            raise ValueError(f"Job '{self.name}' has no steps")

        return job(
            self.name,
            steps_list=self._steps,
            runs_on=self._runs_on,
            needs=self._needs,
            env=self._env,
            cache=self._cache,
            docker_image=self._image,
            timeout=self._timeout,
            matrix=self._matrix,
            fail_fast=self._fail_fast,
        )


def build(name: str) -> JobBuilder:
    """Convenience: build('test').define_step(...).build()"""
    return JobBuilder(name)


# ---------------------------------------------------------------------
# Pipeline helpers
# ---------------------------------------------------------------------

def triggers(
    *,
    push: bool = True,
    pull_request: bool = False,
    tags: bool = False,
    cron: str = "",
    branches: Optional[List[str]] = None,
    paths: Optional[List[str]] = None,
    workflow_dispatch: bool = False,
) -> Trigger:
    return Trigger(
        push=push,
        pull_request=pull_request,
        tags=tags,
        cron=cron,
        branches=list(branches) if branches else ["main"],
        paths=list(paths or []),
        workflow_dispatch=workflow_dispatch,
    )


def secret(key: str, description: str = "") -> Secret:
    return Secret(key=key.upper(), description=description)


def pipeline(
    *jobs: Job,
    platform: str = GITHUB,
    on: Optional[Trigger] = None,
    secrets: Optional[List[Secret]] = None,
) -> Pipeline:
    """
    Pipeline definition helper.

        from ciforge import pipeline, job, run

        PIPELINE = pipeline(
            job("build", run("Install", "npm ci")),
            job("test", run("Test", "npm test"), needs=["build"]),
        )

    Raises ValueError on duplicate job names, unknown `needs`, cycles or
    duplicate secret keys.
    """
    jobs_final = [j if j.id else replace(j, id=str(i + 1)) for i, j in enumerate(jobs)]
    check_jobs(jobs_final)

    secrets_final = list(secrets or [])
    keys = [s.key for s in secrets_final]
    if len(set(keys)) != len(keys):
        raise ValueError(f"Duplicate secret keys: {sorted({k for k in keys if keys.count(k) > 1})}")

    return Pipeline(
        platform=platform,
        triggers=on if on is not None else triggers(),
        secrets=secrets_final,
        jobs=jobs_final,
    )
