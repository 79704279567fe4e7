import os
import tempfile

# must be set before ciforge.settings is imported
_DB_DIR = tempfile.mkdtemp(prefix="ciforge-test-")
os.environ.setdefault(
    "CIFORGE_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'ciforge.db')}",
)

import pytest  # noqa: E402

from ciforge.model import EnvVar, Job, Pipeline, Secret, Step, Strategy, Trigger  # noqa: E402


def build_job(**overrides) -> Job:
    fields = dict(
        id="1",
        name="build",
        runs_on="ubuntu-latest",
        steps=[Step(id="1", name="Install", type="run", content="npm ci")],
        cache=False,
    )
    fields.update(overrides)
    return Job(**fields)


@pytest.fixture
def simple_pipeline() -> Pipeline:
    return Pipeline(
        platform="github",
        triggers=Trigger(push=True, branches=["main"]),
        jobs=[build_job()],
    )


@pytest.fixture
def full_pipeline() -> Pipeline:
    return Pipeline(
        platform="github",
        triggers=Trigger(
            push=True,
            pull_request=True,
            tags=False,
            cron="0 3 * * 1",
            branches=["main", "develop"],
            paths=["src/**"],
            workflow_dispatch=True,
        ),
        secrets=[Secret(key="NPM_TOKEN", description="registry token")],
        jobs=[
            build_job(
                cache=True,
                env_vars=[EnvVar(key="NODE_ENV", value="production")],
                timeout=15,
                docker_image="node:20",
                strategy=Strategy(matrix={"node": ["18", "20"]}, fail_fast=False),
                steps=[
                    Step(id="1", name="Checkout", type="uses", content="actions/checkout@v4"),
                    Step(id="2", name="Install", type="run", content="npm ci\nnpm run build",
                         condition="github.event_name == 'push'", continue_on_error=True),
                ],
            ),
            build_job(
                id="2",
                name="deploy",
                needs=["build"],
                steps=[Step(id="1", name="Ship", type="run", content="./deploy.sh")],
            ),
        ],
    )
