from __future__ import annotations

from typing import Callable, Dict

from ..errors import ConfigError
from ..model import GITHUB, GITLAB, PLATFORMS, Pipeline
from . import github, gitlab

Emitter = Callable[[Pipeline], str]

EMITTERS: Dict[str, Emitter] = {
    GITHUB: github.emit,
    GITLAB: gitlab.emit,
}

OUTPUT_PATHS: Dict[str, str] = {
    GITHUB: ".github/workflows/ci.yml",
    GITLAB: ".gitlab-ci.yml",
}


def get_emitter(platform: str) -> Emitter:
    try:
        return EMITTERS[platform]
    except KeyError:
        raise ConfigError(
            kind="platform",
            message=f"Unknown platform: {platform!r}",
            details={"known": ", ".join(PLATFORMS)},
        ) from None


def output_path(platform: str) -> str:
    """Conventional repository path of the generated file."""
    get_emitter(platform)
    return OUTPUT_PATHS[platform]


def emit(pipeline: Pipeline) -> str:
    return get_emitter(pipeline.platform)(pipeline)


__all__ = ["EMITTERS", "OUTPUT_PATHS", "emit", "get_emitter", "output_path"]
