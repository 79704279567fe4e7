# orchestrator.py
from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

from .emitters import emit, output_path
from .errors import ConfigError
from .lint import Report, validate
from .model import PLATFORMS, Pipeline
from .schemas import parse_record
from .templates import get_template


class Orchestrator:
    """
    Holds the current Pipeline and keeps its YAML and lint report in sync.

    Every change goes through `pipeline` (or a helper that sets it), which
    re-emits and re-lints synchronously. Pipelines are never mutated in place;
    updates build a new Pipeline with dataclasses.replace.
    """

    def __init__(self, pipeline: Optional[Pipeline] = None):
        self._pipeline = Pipeline()
        self._yaml = ""
        self._report = Report()
        self.pipeline = pipeline if pipeline is not None else Pipeline()

    # ---- state ----

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    @pipeline.setter
    def pipeline(self, value: Pipeline) -> None:
        # render first so a failing emit leaves the previous state intact
        yaml = emit(value)
        report = validate(yaml)
        self._pipeline, self._yaml, self._report = value, yaml, report

    @property
    def yaml(self) -> str:
        return self._yaml

    @property
    def report(self) -> Report:
        return self._report

    @property
    def output_path(self) -> str:
        return output_path(self._pipeline.platform)

    # ---- changes ----

    def update(self, **fields: Any) -> Pipeline:
        """Replace top-level Pipeline fields (platform, triggers, secrets, jobs)."""
        self.pipeline = replace(self._pipeline, **fields)
        return self._pipeline

    def set_platform(self, platform: str) -> Pipeline:
        if platform not in PLATFORMS:
            raise ConfigError(
                kind="platform",
                message=f"Unknown platform: {platform!r}",
                details={"known": ", ".join(PLATFORMS)},
            )
        return self.update(platform=platform)

    def reset(self) -> Pipeline:
        self.pipeline = Pipeline()
        return self._pipeline

    def load_template(self, key: str) -> Pipeline:
        self.pipeline = get_template(key).apply(self._pipeline)
        return self._pipeline

    # ---- export / import ----

    def export_record(self) -> Dict[str, Any]:
        """Persisted record plus the cached YAML output."""
        record = self._pipeline.to_dict()
        record["yamlOutput"] = self._yaml
        return record

    def import_text(self, text: str | bytes) -> Pipeline:
        """
        Replace the current pipeline with a JSON configuration.

        Raises:
            ConfigError: kind="parse"; the current pipeline is left unchanged
        """
        self.pipeline = parse_record(text)
        return self._pipeline
