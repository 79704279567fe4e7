from dataclasses import replace

from conftest import build_job
from ciforge.emitters import gitlab
from ciforge.lint import validate
from ciforge.model import EnvVar, Pipeline, Secret, Step, Trigger


def _gitlab(p: Pipeline) -> Pipeline:
    return replace(p, platform="gitlab")


def test_single_job_pipeline(simple_pipeline):
    text = gitlab.emit(_gitlab(simple_pipeline))

    assert text.startswith("# GitLab CI/CD Pipeline\n\n")
    assert "stages:\n  - build\n" in text
    assert "build:\n  stage: build\n" in text
    assert "  script:\n    - npm ci\n" in text

    report = validate(text)
    assert report.is_valid
    # rules are emitted for the push trigger
    assert "Add rules to control when jobs execute" not in report.suggestions


def test_output_is_deterministic(full_pipeline):
    p = _gitlab(full_pipeline)
    assert gitlab.emit(p) == gitlab.emit(p)


def test_empty_jobs_still_lints_clean():
    text = gitlab.emit(Pipeline(platform="gitlab"))
    assert "stages:" in text
    assert validate(text).errors == []


def test_secrets_become_variables(simple_pipeline):
    p = _gitlab(replace(simple_pipeline, secrets=[Secret(key="NPM_TOKEN")]))
    text = gitlab.emit(p)
    assert "variables:\n  NPM_TOKEN: $NPM_TOKEN\n\nstages:" in text


def test_cache_block(simple_pipeline):
    text = gitlab.emit(_gitlab(replace(simple_pipeline, jobs=[build_job(cache=True)])))
    assert "  cache:\n    paths:\n      - node_modules/\n      - .cache/\n" in text


def test_uses_steps_are_skipped(simple_pipeline):
    steps = [
        Step(id="1", name="Checkout", type="uses", content="actions/checkout@v4"),
        Step(id="2", name="Test", content="npm test"),
    ]
    text = gitlab.emit(_gitlab(replace(simple_pipeline, jobs=[build_job(steps=steps)])))
    assert "actions/checkout" not in text
    assert "  script:\n    - npm test\n" in text


def test_script_lines_are_trimmed_and_blank_lines_dropped():
    job = build_job(steps=[Step(id="1", name="S", content="  echo a\n\n    echo b  \n")])
    assert gitlab.script_lines(job) == ["echo a", "echo b"]


def test_job_level_fields(simple_pipeline):
    jobs = [
        build_job(),
        build_job(
            id="2",
            name="deploy",
            needs=["build"],
            docker_image="alpine:3.20",
            timeout=30,
            env_vars=[EnvVar(key="STAGE", value="prod")],
        ),
    ]
    text = gitlab.emit(_gitlab(replace(simple_pipeline, jobs=jobs)))
    assert "stages:\n  - build\n  - deploy\n" in text
    assert (
        "deploy:\n"
        "  stage: deploy\n"
        "  image: alpine:3.20\n"
        "  timeout: 30m\n"
        "  needs: [build]\n"
    ) in text
    assert "  variables:\n    STAGE: prod\n" in text


def test_rules_cover_every_trigger_type():
    t = Trigger(push=True, pull_request=True, tags=True, branches=["develop", "main"])
    assert gitlab.rules_for(t) == [
        "if: '$CI_PIPELINE_SOURCE == \"push\" && $CI_COMMIT_BRANCH == \"develop\"'",
        "if: '$CI_PIPELINE_SOURCE == \"merge_request_event\"'",
        "if: '$CI_COMMIT_TAG'",
    ]


def test_push_without_branches_uses_default_branch():
    rules = gitlab.rules_for(Trigger(push=True))
    assert rules == ["if: '$CI_PIPELINE_SOURCE == \"push\" && $CI_COMMIT_BRANCH == $CI_DEFAULT_BRANCH'"]


def test_no_triggers_means_no_rules(simple_pipeline):
    text = gitlab.emit(_gitlab(replace(simple_pipeline, triggers=Trigger())))
    assert "rules:" not in text
    assert "Add rules to control when jobs execute" in validate(text).suggestions
