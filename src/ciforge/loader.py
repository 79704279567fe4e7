# loader.py
from __future__ import annotations

import runpy
from pathlib import Path

from .dsl import pipeline as dsl_pipeline
from .errors import ConfigError
from .model import Pipeline
from .schemas import parse_record


def load_pipeline(path: str | Path) -> Pipeline:
    """
    Load a pipeline from a file.

    Supported:
      - .json: a persisted/exported configuration record
      - .py:   a module defining either
                 pipeline() -> Pipeline
                 PIPELINE = Pipeline(...)
    """
    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(f"Pipeline file not found: {p}")

    if p.suffix == ".json":
        try:
            return parse_record(p.read_text(encoding="utf-8"))
        except ConfigError as e:
            e.details.setdefault("file", str(p))
            raise

    if p.suffix != ".py":
        raise ValueError(f"Pipeline must be a .py or .json file, got: {p.name}")

    module_name = f"ciforge_pipeline_{p.stem}"
    globals_dict = runpy.run_path(str(p), run_name=module_name)

    result = None
    defined = globals_dict.get("pipeline")
    if "PIPELINE" in globals_dict:
        result = globals_dict["PIPELINE"]
    elif callable(defined) and defined is not dsl_pipeline:
        result = defined()

    if not isinstance(result, Pipeline):
        raise TypeError(
            "Pipeline file must return/define a Pipeline. "
            "Define pipeline() -> Pipeline or PIPELINE = pipeline(...)."
        )

    return result
