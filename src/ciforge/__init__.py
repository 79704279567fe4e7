from .dsl import job, run, uses, matrix, secret, triggers, pipeline, JobBuilder, build
from .emitters import emit, output_path
from .lint import validate, Report
from .model import Pipeline, Job, Step, Trigger, Secret
from .orchestrator import Orchestrator

__all__ = [
    "job", "run", "uses", "matrix", "secret", "triggers", "pipeline", "JobBuilder", "build",
    "emit", "output_path", "validate", "Report",
    "Pipeline", "Job", "Step", "Trigger", "Secret", "Orchestrator",
]
