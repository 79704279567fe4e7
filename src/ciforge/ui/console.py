"""Console output formatting utilities for ciforge."""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

from ..errors import ConfigError
from ..lint import Report
from ..model import Pipeline


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_pipeline_summary(self, pipeline: Pipeline, target: str) -> None:
        """Print what is about to be generated."""
        print("\nGENERATING", file=sys.stderr)
        print(f"Platform: {pipeline.platform}", file=sys.stderr)
        print(f"Target: {target}", file=sys.stderr)
        print(f"Jobs: {len(pipeline.jobs)}", file=sys.stderr)
        print(f"Secrets: {len(pipeline.secrets)}", file=sys.stderr)

    def print_yaml(self, text: str) -> None:
        """Print generated YAML on stdout, untouched."""
        sys.stdout.write(text)

    def print_report(self, report: Report) -> None:
        """
        Print a validation report.

        Errors go first; warnings and suggestions follow and never change
        the verdict line.
        """
        stats = report.stats
        verdict = "YAML VALID" if report.is_valid else f"{_plural(len(report.errors), 'ERROR').upper()}"
        print(f"\nVALIDATION: {verdict}", file=sys.stderr)
        print(
            f"{_plural(stats.jobs, 'job')}, {_plural(stats.steps, 'step')}, "
            f"{_plural(stats.triggers, 'trigger')}",
            file=sys.stderr,
        )
        for title, items in (
            ("Errors", report.errors),
            ("Warnings", report.warnings),
            ("Suggestions", report.suggestions),
        ):
            if not items:
                continue
            print(f"{title}:", file=sys.stderr)
            for item in items:
                print(f"  - {item}", file=sys.stderr)

    def print_templates(self, rows: List[Dict[str, Any]]) -> None:
        for row in rows:
            print(f"{row['key']:<14} {row['name']:<22} {row['description']}")

    def print_configs(self, names: List[str]) -> None:
        if not names:
            print("No saved configurations")
            return
        for name in names:
            print(f"  {name}")

    def print_history(self, entries: List[Dict[str, Any]]) -> None:
        if not entries:
            print("No history")
            return
        for e in entries:
            print(
                f"  {e.get('id', '')[:8]}  {e.get('name', '')}  "
                f"({e.get('platform', '?')}, {_plural(int(e.get('jobCount', 0)), 'job')})  "
                f"{e.get('lastModified', '')}"
            )

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_config_error(self, exc: ConfigError, suggestion: Optional[str] = None) -> None:
        self.print_error(
            exc.kind.replace("_", " ").capitalize() + " error",
            exc.message,
            details=[f"{k}: {v}" for k, v in exc.details.items()] or None,
            suggestion=suggestion,
        )

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message, file=sys.stderr)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
