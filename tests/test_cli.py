import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from ciforge.cli import cli

PIPELINE_RECORD = {
    "platform": "github",
    "jobs": [{"name": "build", "steps": [{"name": "Install", "content": "npm ci"}]}],
}


@pytest.fixture
def runner():
    return CliRunner()


def test_generate_from_template(runner):
    result = runner.invoke(cli, ["generate", "--template", "node-ci"])
    assert result.exit_code == 0, result.output
    assert "  build-and-test:\n" in result.output
    assert "VALIDATION: YAML VALID" in result.output


def test_generate_platform_override(runner):
    result = runner.invoke(cli, ["generate", "--template", "python-ci", "--platform", "gitlab"])
    assert result.exit_code == 0, result.output
    assert "stages:\n  - test\n" in result.output


def test_generate_unknown_template(runner):
    result = runner.invoke(cli, ["generate", "--template", "rust-ci"])
    assert result.exit_code == 1
    assert "Unknown template" in result.output


def test_generate_discovers_json(runner):
    with runner.isolated_filesystem():
        Path("ciforge.json").write_text(json.dumps(PIPELINE_RECORD))
        result = runner.invoke(cli, ["generate", "--no-validate"])
        assert result.exit_code == 0, result.output
        assert "      - name: Install\n" in result.output
        assert "VALIDATION" not in result.output


def test_generate_without_source(runner):
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["generate"])
        assert result.exit_code == 1
        assert "No pipeline file found" in result.output


def test_generate_with_several_candidates(runner):
    with runner.isolated_filesystem():
        Path("ciforge.json").write_text(json.dumps(PIPELINE_RECORD))
        Path("release_pipeline.py").write_text("PIPELINE = None\n")
        result = runner.invoke(cli, ["generate"])
        assert result.exit_code == 1
        assert "Multiple pipeline files found" in result.output


def test_generate_write(runner):
    with runner.isolated_filesystem():
        Path("ci.json").write_text(json.dumps({**PIPELINE_RECORD, "platform": "gitlab"}))
        result = runner.invoke(cli, ["generate", "ci.json", "--write"])
        assert result.exit_code == 0, result.output
        text = Path(".gitlab-ci.yml").read_text()
        assert "build:\n  stage: build\n" in text
        assert "Wrote .gitlab-ci.yml" in result.output


def test_generate_malformed_json(runner):
    with runner.isolated_filesystem():
        Path("ci.json").write_text("{nope")
        result = runner.invoke(cli, ["generate", "ci.json"])
        assert result.exit_code == 1
        assert "could not parse configuration" in result.output


def test_generate_bad_graph_is_only_a_warning(runner):
    record = {"jobs": [{"name": "deploy", "needs": ["build"], "steps": [{"name": "Go", "content": "make"}]}]}
    with runner.isolated_filesystem():
        Path("ci.json").write_text(json.dumps(record))
        result = runner.invoke(cli, ["generate", "ci.json"])
        assert result.exit_code == 0, result.output
        assert "Warning: Job 'deploy' needs missing job 'build'" in result.output


def test_validate_file(runner, tmp_path):
    path = tmp_path / "ci.yml"
    path.write_text("jobs:\n\tbuild:\n")
    result = runner.invoke(cli, ["validate", str(path)])
    assert result.exit_code == 1
    assert "Line 2: use spaces instead of tabs" in result.output


def test_validate_json_from_stdin(runner):
    result = runner.invoke(cli, ["validate", "--json", "-"], input="stages:\n  - build\n")
    assert result.exit_code == 0
    report = json.loads(result.output)
    assert report["isValid"] is True
    assert report["suggestions"] == ["Add rules to control when jobs execute"]


def test_templates(runner):
    result = runner.invoke(cli, ["templates"])
    assert result.exit_code == 0
    for key in ("node-ci", "docker-build", "python-ci"):
        assert key in result.output


def test_store_commands(runner, tmp_path):
    store = str(tmp_path / "store")
    source = tmp_path / "ci.json"
    source.write_text(json.dumps(PIPELINE_RECORD))

    result = runner.invoke(cli, ["--store-dir", store, "list"])
    assert "No saved configurations" in result.output

    result = runner.invoke(cli, ["--store-dir", store, "save", "nightly", str(source)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["--store-dir", store, "list"])
    assert "nightly" in result.output

    result = runner.invoke(cli, ["--store-dir", store, "history"])
    assert "nightly" in result.output
    assert "(github, 1 job)" in result.output

    result = runner.invoke(cli, ["--store-dir", store, "load", "nightly"])
    assert result.exit_code == 0
    assert json.loads(result.output)["jobs"][0]["name"] == "build"

    result = runner.invoke(cli, ["--store-dir", store, "delete", "nightly"])
    assert result.exit_code == 0

    result = runner.invoke(cli, ["--store-dir", store, "load", "nightly"])
    assert result.exit_code == 1
    assert "No saved configuration named 'nightly'" in result.output


def test_debug_output(runner):
    result = runner.invoke(cli, ["--debug", "generate", "--template", "node-ci"])
    assert result.exit_code == 0, result.output
    assert "[DEBUG] Using template node-ci" in result.output
