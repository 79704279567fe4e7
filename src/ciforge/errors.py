# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ConfigError(Exception):
    """
    Structured configuration error with enough context for:
      - clean CLI output
      - HTTP error bodies
      - debugging without full tracebacks

    kind is one of: parse, platform, template, name, missing.
    """
    kind: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)
