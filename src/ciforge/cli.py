# cli.py
from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path

import click

from ciforge.emitters import emit, output_path
from ciforge.errors import ConfigError
from ciforge.graph import check_jobs
from ciforge.lint import validate as lint_yaml
from ciforge.loader import load_pipeline
from ciforge.model import PLATFORMS, Pipeline
from ciforge.settings import STORE_DIR
from ciforge.store import LocalStore
from ciforge.templates import get_template, list_templates
from ciforge.ui.console import Console, get_console, set_console

DEFAULT_SOURCES = ("ciforge_pipeline.py", "ciforge.json")


def find_pipeline_files() -> list[Path]:
    """
    Find all pipeline definition files in the current directory.

    Returns:
        List of Path objects for pipeline files
    """
    found = []
    current_dir = Path(".")

    for name in DEFAULT_SOURCES:
        candidate = current_dir / name
        if candidate.exists():
            found.append(candidate)

    # Look for other *_pipeline.py files
    for path in current_dir.glob("*_pipeline.py"):
        if path.name not in DEFAULT_SOURCES:
            found.append(path)

    return sorted(found)


def discover_pipeline(source: str | None) -> Path:
    """
    Resolve the pipeline source from an argument or by discovery.

    Raises:
        SystemExit: If no source can be found or several candidates exist
    """
    console = get_console()

    if source:
        path = Path(source)
        if not path.exists():
            console.print_error(
                "Pipeline file not found",
                f"Could not find pipeline file: {source}",
                suggestion="Create a pipeline file or pass a template:\n  ciforge generate --template node-ci",
            )
            sys.exit(1)
        return path

    candidates = find_pipeline_files()

    if len(candidates) == 0:
        console.print_error(
            "No pipeline file found",
            "Could not find any pipeline definition.",
            details=[
                "Looked for:",
                "  ciforge_pipeline.py",
                "  ciforge.json",
                "  *_pipeline.py",
            ],
            suggestion="Create one of those files, or start from a template:\n  ciforge generate --template python-ci",
        )
        sys.exit(1)

    if len(candidates) > 1:
        file_list = "\n".join(f"  {f}" for f in candidates)
        console.print_error(
            "Multiple pipeline files found",
            "Found multiple pipeline files. Please specify which one to use:",
            details=[file_list],
            suggestion="Pass the file explicitly:\n  ciforge generate ciforge_pipeline.py",
        )
        sys.exit(1)

    return candidates[0]


def _fail(exc: Exception) -> None:
    console = get_console()
    if isinstance(exc, ConfigError):
        console.print_config_error(exc)
    else:
        console.print_exception(exc)
    sys.exit(1)


def _store(ctx: click.Context) -> LocalStore:
    return LocalStore(ctx.obj["store_dir"])


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option("--store-dir", default=STORE_DIR, show_default=True, help="Directory for saved configurations")
@click.pass_context
def cli(ctx, debug, store_dir):
    """ciforge: generate and lint GitHub Actions / GitLab CI YAML."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["store_dir"] = store_dir


@cli.command()
@click.argument("source", required=False)
@click.option("--template", "template_key", default=None, help="Start from a built-in template")
@click.option("--platform", type=click.Choice(PLATFORMS), default=None, help="Override the target platform")
@click.option("--output", "-o", default=None, help="Write YAML to this path instead of stdout")
@click.option("--write", is_flag=True, default=False, help="Write YAML to the platform's conventional path")
@click.option("--validate/--no-validate", default=True, show_default=True, help="Lint the generated YAML")
@click.pass_context
def generate(ctx, source, template_key, platform, output, write, validate):
    """Generate CI YAML from a pipeline file or template."""
    console = get_console()

    try:
        if template_key:
            console.print_debug(f"Using template {template_key}")
            pipeline = get_template(template_key).apply(Pipeline())
        else:
            path = discover_pipeline(source)
            console.print_debug(f"Loading pipeline from {path}")
            pipeline = load_pipeline(path)

        if platform:
            pipeline = replace(pipeline, platform=platform)

        try:
            check_jobs(pipeline.jobs)
        except ValueError as e:
            console.print_info(f"Warning: {e}")

        text = emit(pipeline)
        target = output or (output_path(pipeline.platform) if write else None)

        if target:
            console.print_pipeline_summary(pipeline, target)
            path = Path(target)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            console.print_info(f"Wrote {path}")
        else:
            console.print_yaml(text)

        if validate:
            report = lint_yaml(text)
            console.print_report(report)
            if not report.is_valid:
                sys.exit(1)

    except (ConfigError, FileNotFoundError, ValueError, TypeError) as e:
        _fail(e)


@cli.command()
@click.argument("file", type=click.File("r", encoding="utf-8"))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the report as JSON")
@click.pass_context
def validate(ctx, file, as_json):
    """Lint a CI YAML file ('-' for stdin)."""
    console = get_console()
    report = lint_yaml(file.read())

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        console.print_report(report)

    if not report.is_valid:
        sys.exit(1)


@cli.command()
def templates():
    """List built-in templates."""
    get_console().print_templates(
        [{"key": t.key, "name": t.name, "description": t.description} for t in list_templates()]
    )


@cli.command()
@click.argument("name")
@click.argument("source")
@click.pass_context
def save(ctx, name, source):
    """Save a pipeline file under NAME."""
    console = get_console()
    try:
        pipeline = load_pipeline(source)
        store = _store(ctx)
        store.save(name, pipeline)
        store.record_history(name, pipeline)
        console.print_info(f"Configuration {name!r} saved")
    except (ConfigError, FileNotFoundError, ValueError, TypeError) as e:
        _fail(e)


@cli.command()
@click.argument("name")
@click.option("--output", "-o", default=None, help="Write the record to this path instead of stdout")
@click.pass_context
def load(ctx, name, output):
    """Print a saved configuration as JSON."""
    try:
        pipeline = _store(ctx).load(name)
    except ConfigError as e:
        _fail(e)
        return

    text = json.dumps(pipeline.to_dict(), indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        get_console().print_info(f"Wrote {output}")
    else:
        click.echo(text)


@cli.command(name="list")
@click.pass_context
def list_configs(ctx):
    """List saved configurations."""
    try:
        get_console().print_configs(_store(ctx).list())
    except ConfigError as e:
        _fail(e)


@cli.command()
@click.argument("name")
@click.pass_context
def delete(ctx, name):
    """Delete a saved configuration."""
    try:
        _store(ctx).delete(name)
        get_console().print_info(f"Configuration {name!r} deleted")
    except ConfigError as e:
        _fail(e)


@cli.command()
@click.pass_context
def history(ctx):
    """Show the most recently saved configurations."""
    try:
        get_console().print_history(_store(ctx).history())
    except ConfigError as e:
        _fail(e)


if __name__ == "__main__":
    cli()
