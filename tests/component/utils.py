import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest
from kubernetes import client as k8s_client

from monitoring_e2e.config import ClusterConfig, PollConfig, WorkloadConfig, get_monitoring_config, read_config
from monitoring_e2e.runner import ScenarioRunner
from monitoring_e2e.services import AlertmanagerService, ClusterService, ManifestService, PrometheusService
from monitoring_e2e.utils import get_logger

logger = get_logger("test.utils")


def envelope(data: Any, status: str = "success", **extra: Any) -> bytes:
    """Encode a Prometheus style {status, data} response body"""
    return json.dumps({"status": status, "data": data, **extra}).encode()


class FakeServiceClient:
    """ServiceClient returning canned bodies in order, the last one repeating

    Exceptions in the list are raised instead of returned.
    """

    def __init__(self, *responses: bytes | Exception) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, Any]] = []

    def get(self, path: str, params=None) -> bytes:
        logger.debug("=====>Catching %s %s", path, params)
        self.calls.append((path, params))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    """Monotonic clock advanced only by sleep"""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock(monkeypatch) -> FakeClock:
    """Make poll_until use a fake clock so no test really sleeps"""
    clock = FakeClock()
    monkeypatch.setattr("monitoring_e2e.polling.time", SimpleNamespace(monotonic=clock, sleep=clock.sleep))
    return clock


def make_deployment(name: str = "monitoring-test") -> k8s_client.V1Deployment:
    labels = {"app": name}
    return k8s_client.V1Deployment(
        metadata=k8s_client.V1ObjectMeta(name=name),
        spec=k8s_client.V1DeploymentSpec(
            selector=k8s_client.V1LabelSelector(match_labels=labels),
            template=k8s_client.V1PodTemplateSpec(
                metadata=k8s_client.V1ObjectMeta(labels=labels),
                spec=k8s_client.V1PodSpec(containers=[k8s_client.V1Container(name=name, image="busybox:1.36")]),
            ),
        ),
    )


def make_runner(
    prometheus_client: FakeServiceClient | None = None,
    alertmanager_client: FakeServiceClient | None = None,
    cluster_config: ClusterConfig | None = None,
) -> ScenarioRunner:
    """Runner with a mocked cluster service, namespace test-monitoring-abcde"""
    cluster_service = MagicMock(spec=ClusterService)
    cluster_service.create_namespace.return_value = "test-monitoring-abcde"
    cluster_service.create_deployment.return_value = make_deployment()
    cluster_service.namespace_exists.return_value = False

    monitoring_config = get_monitoring_config(read_config())
    return ScenarioRunner(
        cluster_service=cluster_service,
        manifest_service=ManifestService(WorkloadConfig()),
        prometheus=PrometheusService(prometheus_client or FakeServiceClient(envelope([]))),
        alertmanager=AlertmanagerService(
            alertmanager_client or FakeServiceClient(envelope([])), monitoring_config.alertmanager
        ),
        monitoring_config=monitoring_config,
        poll_config=PollConfig(interval=5, timeout=60),
        cluster_config=cluster_config or ClusterConfig(),
    )
