import pytest

from ciforge.lint import declared_stages, validate

GITHUB_WORKFLOW = """\
name: CI
on:
  push:
    branches: ["main"]
jobs:
  build:
    runs-on: ubuntu-latest
    timeout-minutes: 10
    steps:
      - name: Cache
        uses: actions/cache@v4
      - name: Install
        run: npm ci
"""


def test_clean_workflow_has_no_findings():
    report = validate(GITHUB_WORKFLOW)
    assert report.is_valid
    assert report.errors == []
    assert report.warnings == []
    assert report.suggestions == []


def test_stats_are_pattern_counts():
    stats = validate(GITHUB_WORKFLOW).stats
    # on, push, jobs, build, steps -> 5 bare keys, minus one
    assert stats.jobs == 4
    assert stats.steps == 2
    # "runs-on:" also counts as an "on:" occurrence
    assert stats.triggers == 3


@pytest.mark.parametrize("text", ["", "   ", "\n\n\t\n"])
def test_empty_input_is_valid_and_empty(text):
    report = validate(text)
    assert report.is_valid
    assert report.to_dict() == {
        "isValid": True,
        "errors": [],
        "warnings": [],
        "suggestions": [],
        "stats": {"jobs": 0, "steps": 0, "triggers": 0},
    }


def test_tab_indentation_is_an_error():
    report = validate("jobs:\n\tbuild:\n")
    assert not report.is_valid
    assert "Line 2: use spaces instead of tabs" in report.errors


def test_odd_indentation_is_a_warning():
    report = validate("jobs:\n   build:\n    x: 1\n")
    assert report.is_valid
    assert report.warnings == ["Line 2: odd indentation detected"]


def test_invalid_key_value_syntax():
    report = validate("name: ok\n: oops\n")
    assert report.errors == ["Line 2: invalid key-value syntax"]


def test_comment_lines_are_skipped():
    assert validate("#\tnot: checked\n# :\n").errors == []


def test_missing_jobs_section():
    report = validate("on:\n  push:\n")
    assert 'GitHub Actions workflow must contain a "jobs" section' in report.errors


def test_deprecated_checkout_is_only_a_warning():
    text = "on:\n  push:\njobs:\n  build:\n    steps:\n      - uses: actions/checkout@v2\n"
    report = validate(text)
    assert report.is_valid
    assert "actions/checkout@v2 is deprecated, use @v4" in report.warnings


def test_github_suggestions():
    report = validate("on:\n  push:\njobs:\n  build:\n    runs-on: ubuntu-latest\n")
    assert "Add timeout-minutes to prevent hanging jobs" in report.suggestions
    assert "Consider adding a cache step to speed up builds" in report.suggestions


def test_undeclared_stage():
    text = "stages:\n  - build\n\ndeploy:\n  stage: deploy\n  script:\n    - echo hi\n"
    report = validate(text)
    assert report.errors == ['Stage "deploy" used but not defined in stages list']
    assert "Add rules to control when jobs execute" in report.suggestions


def test_declared_stages():
    assert declared_stages("stages:\n  - build\n  - test\n\nbuild:\n  stage: build\n") == ["build", "test"]
    assert declared_stages("jobs:\n") == []


def test_secret_echo_on_same_line():
    report = validate("steps:\n  - run: echo ${{ secrets.TOKEN }}\n")
    assert report.warnings.count("Avoid displaying secrets in logs") == 1


def test_secret_and_echo_on_different_lines():
    text = "env:\n  A: ${{ secrets.TOKEN }}\nsteps:\n  - run: echo hi\n"
    assert "Avoid displaying secrets in logs" not in validate(text).warnings


def test_multiple_os_suggests_matrix():
    text = "a:\n  runs-on: ubuntu-latest\nb:\n  runs-on: windows-latest\n"
    assert "Use a matrix strategy to test on multiple OS efficiently" in validate(text).suggestions


@pytest.mark.parametrize(
    "line",
    ["node-version: 16", "node-version: '16'", 'node-version: "16"', "node-version: 16.x"],
)
def test_eol_node(line):
    assert "Node.js 16 is EOL, use Node.js 18 or 20" in validate(f"with:\n  {line}\n").warnings


def test_eol_python_versions():
    report = validate("with:\n  python-version: '3.7'\n")
    assert report.warnings == ["Python 3.7 is EOL, use Python 3.10 or newer"]


@pytest.mark.parametrize("line", ["node-version: 18", "python-version: '3.12'", "node-version: 160"])
def test_supported_runtime_is_not_flagged(line):
    assert not any("EOL" in w for w in validate(f"with:\n  {line}\n").warnings)


@pytest.mark.parametrize("text", ["::::", "- : -\n\t\t", "{[}]", "stages:\n  -\n"])
def test_garbage_input_never_raises(text):
    report = validate(text)
    assert isinstance(report.errors, list)


def test_warnings_do_not_affect_validity():
    text = "on:\n  push:\njobs:\n   build:\n      - uses: actions/checkout@v2\n"
    report = validate(text)
    assert report.warnings
    assert report.is_valid
