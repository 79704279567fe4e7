from .actions import checkout, setup_node, setup_python
from .docker import docker_build_steps
from .lint import lint_step
from .test import unit_test_steps

__all__ = ["checkout", "setup_node", "setup_python", "docker_build_steps", "lint_step", "unit_test_steps"]
