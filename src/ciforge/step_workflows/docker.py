# step_workflows/docker.py
from __future__ import annotations

from typing import List

from ..dsl import uses
from ..model import Step


def docker_build_steps(
    tags: str,
    *,
    push: bool = True,
    username_secret: str = "DOCKER_USERNAME",
    password_secret: str = "DOCKER_PASSWORD",
) -> List[Step]:
    """Buildx setup, registry login and build/push, credentials read from secrets."""
    return [
        uses("Setup Docker Buildx", "docker/setup-buildx-action@v3"),
        uses(
            "Login to DockerHub",
            "docker/login-action@v3",
            with_={
                "username": "${{ secrets." + username_secret + " }}",
                "password": "${{ secrets." + password_secret + " }}",
            },
        ),
        uses(
            "Build and push",
            "docker/build-push-action@v5",
            with_={"push": "true" if push else "false", "tags": tags},
        ),
    ]
