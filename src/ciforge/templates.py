# templates.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Dict, List

from .dsl import job, matrix, run
from .errors import ConfigError
from .model import Job, Pipeline
from .step_workflows import checkout, docker_build_steps, setup_node, setup_python, unit_test_steps


@dataclass(frozen=True)
class Template:
    key: str
    name: str
    description: str
    build_jobs: Callable[[], List[Job]]

    def jobs(self) -> List[Job]:
        # fresh objects on every call, templates are applied to many pipelines
        return [j if j.id else replace(j, id=str(i + 1)) for i, j in enumerate(self.build_jobs())]

    def apply(self, pipeline: Pipeline) -> Pipeline:
        """Swap the template's jobs into `pipeline`; platform, triggers and secrets stay."""
        return replace(pipeline, jobs=self.jobs())


def _node_ci() -> List[Job]:
    return [
        job(
            "build-and-test",
            checkout(),
            setup_node("18"),
            *unit_test_steps("Run tests", "npm"),
            run("Build application", "npm run build"),
            cache=True,
            env={"NODE_ENV": "production"},
        ),
    ]


def _docker_build() -> List[Job]:
    return [
        job(
            "docker-build",
            checkout("Checkout"),
            *docker_build_steps("user/app:latest"),
        ),
    ]


def _python_ci() -> List[Job]:
    return [
        job(
            "test",
            checkout("Checkout"),
            setup_python("${{ matrix.python-version }}"),
            *unit_test_steps("Run tests", "pytest"),
            cache=True,
            matrix=matrix("python-version", ["3.10", "3.11", "3.12", "3.13"]),
        ),
    ]


TEMPLATES: Dict[str, Template] = {
    t.key: t
    for t in (
        Template("node-ci", "Node.js CI/CD", "Node.js pipeline with tests and build", _node_ci),
        Template("docker-build", "Docker Build & Push", "Build and publish Docker images", _docker_build),
        Template("python-ci", "Python CI/CD", "Python pipeline with a pytest version matrix", _python_ci),
    )
}


def list_templates() -> List[Template]:
    return list(TEMPLATES.values())


def get_template(key: str) -> Template:
    try:
        return TEMPLATES[key]
    except KeyError:
        raise ConfigError(
            kind="template",
            message=f"Unknown template: {key!r}",
            details={"known": ", ".join(TEMPLATES)},
        ) from None
