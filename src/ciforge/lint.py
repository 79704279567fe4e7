"""
Pattern-based linter for generated CI YAML.

This is a line linter, not a YAML parser: every check is an independent
regex or substring test over the raw text, so it never fails on malformed
input, it just finds less.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

_BARE_KEY = re.compile(r"^[ \t]*[a-zA-Z0-9_-]+:[ \t]*$", re.MULTILINE)
_KEY_VALUE = re.compile(r"^[^:]+:\s*(.+)?$")
_STAGES_BLOCK = re.compile(r"stages:\s*\n((?:\s*-\s*.+\n?)*)")
_LIST_ITEM = re.compile(r"-\s*(.+)")
_STAGE_USE = re.compile(r"stage:\s*(.+)")

DEPRECATED_ACTIONS = [
    ("actions/checkout@v2", "actions/checkout@v2 is deprecated, use @v4"),
    ("actions/setup-node@v2", "actions/setup-node@v2 is deprecated, use @v4"),
]

# (runtime key, pinned version, message)
EOL_RUNTIMES: List[Tuple[str, str, str]] = [
    ("node-version", "12", "Node.js 12 is EOL, use Node.js 18 or 20"),
    ("node-version", "14", "Node.js 14 is EOL, use Node.js 18 or 20"),
    ("node-version", "16", "Node.js 16 is EOL, use Node.js 18 or 20"),
    ("python-version", "3.6", "Python 3.6 is EOL, use Python 3.10 or newer"),
    ("python-version", "3.7", "Python 3.7 is EOL, use Python 3.10 or newer"),
    ("python-version", "3.8", "Python 3.8 is EOL, use Python 3.10 or newer"),
]


@dataclass
class Stats:
    jobs: int = 0
    steps: int = 0
    triggers: int = 0


@dataclass
class Report:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)

    @property
    def is_valid(self) -> bool:
        # warnings and suggestions never affect validity
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "stats": {
                "jobs": self.stats.jobs,
                "steps": self.stats.steps,
                "triggers": self.stats.triggers,
            },
        }


def _stats(text: str) -> Stats:
    bare_keys = len(_BARE_KEY.findall(text))
    return Stats(
        # minus the `jobs:` header itself; an approximation, not a structural count
        jobs=bare_keys - 1 if bare_keys else 0,
        steps=text.count("- name:"),
        triggers=text.count("on:") + text.count("push:") + text.count("pull_request:"),
    )


def _check_lines(text: str, report: Report) -> None:
    for index, line in enumerate(text.split("\n")):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        lineno = index + 1

        indent = len(line) - len(line.lstrip())
        if indent % 2 != 0:
            report.warnings.append(f"Line {lineno}: odd indentation detected")

        if ":" in trimmed and not _KEY_VALUE.match(trimmed):
            report.errors.append(f"Line {lineno}: invalid key-value syntax")

        if "\t" in line:
            report.errors.append(f"Line {lineno}: use spaces instead of tabs")


def _check_github(text: str, report: Report) -> None:
    if "jobs:" not in text:
        report.errors.append('GitHub Actions workflow must contain a "jobs" section')

    for marker, message in DEPRECATED_ACTIONS:
        if marker in text:
            report.warnings.append(message)

    if "timeout-minutes:" not in text:
        report.suggestions.append("Add timeout-minutes to prevent hanging jobs")
    if "cache" not in text:
        report.suggestions.append("Consider adding a cache step to speed up builds")


def declared_stages(text: str) -> List[str]:
    """Items of the first `stages:` list in the text."""
    m = _STAGES_BLOCK.search(text)
    if not m:
        return []
    return [item.strip() for item in _LIST_ITEM.findall(m.group(0))]


def _check_gitlab(text: str, report: Report) -> None:
    if _STAGES_BLOCK.search(text):
        stages = declared_stages(text)
        for used in _STAGE_USE.findall(text):
            stage = used.strip()
            if stage not in stages:
                report.errors.append(f'Stage "{stage}" used but not defined in stages list')

    if "rules:" not in text and "only:" not in text and "except:" not in text:
        report.suggestions.append("Add rules to control when jobs execute")


def _check_cross_cutting(text: str, report: Report) -> None:
    for line in text.split("\n"):
        if "${{ secrets." in line and "echo" in line:
            report.warnings.append("Avoid displaying secrets in logs")
            break

    if "ubuntu-latest" in text and "windows-latest" in text:
        report.suggestions.append("Use a matrix strategy to test on multiple OS efficiently")

    for key, version, message in EOL_RUNTIMES:
        for form in (version, f"'{version}'", f'"{version}"'):
            if re.search(rf"{re.escape(key)}: {re.escape(form)}(?!\d)", text):
                report.warnings.append(message)
                break


def validate(text: str) -> Report:
    """
    Lint a CI YAML document.

    GitHub checks run when the text contains `on:`, GitLab checks when it
    contains `stages:`; both can apply to the same text.
    """
    if not text or not text.strip():
        return Report()

    report = Report(stats=_stats(text))
    _check_lines(text, report)

    if "on:" in text:
        _check_github(text, report)
    if "stages:" in text:
        _check_gitlab(text, report)

    _check_cross_cutting(text, report)
    return report
