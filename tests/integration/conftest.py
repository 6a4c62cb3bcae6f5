import os

import pytest

from monitoring_e2e.exceptions import ClusterSetupError
from monitoring_e2e.runner import ScenarioRunner, get_scenario_runner
from monitoring_e2e.utils import setup_logging


@pytest.fixture(scope="session")
def runner() -> ScenarioRunner:
    """Runner bound to the current cluster, only when MONITORING_E2E=1"""
    if os.getenv("MONITORING_E2E") != "1":
        pytest.skip("set MONITORING_E2E=1 to run against a live cluster")
    setup_logging()
    try:
        return get_scenario_runner()
    except ClusterSetupError as e:
        pytest.skip(f"no cluster available: {e}")


@pytest.fixture
def namespace(runner):
    """Scenario namespace, deleted after the test whatever its outcome"""
    name = runner.setup()
    yield name
    runner.teardown(name)
    if runner.namespace_deleted(name):
        return
    pytest.fail(f"namespace {name} still active after teardown")
