"""Scenario runner: namespace setup, workload deployment, polling and teardown"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from monitoring_e2e.config import (
    ClusterConfig,
    MonitoringConfig,
    PollConfig,
    get_cluster_config,
    get_monitoring_config,
    get_poll_config,
    get_workload_config,
    read_config,
)
from monitoring_e2e.exceptions import ClusterError
from monitoring_e2e.polling import non_empty, poll_until
from monitoring_e2e.services import (
    AlertmanagerService,
    ClusterService,
    ManifestService,
    PrometheusService,
    get_cluster_service,
    get_service_client,
)
from monitoring_e2e.services.manifest_service import container_name
from monitoring_e2e.utils import get_logger

if TYPE_CHECKING:
    from monitoring_e2e.scenarios import Scenario

logger = get_logger("runner")

T = TypeVar("T")

NAMESPACE_TERMINATING = "Terminating"


@dataclass
class ScenarioContext:
    """What a scenario deployed: its namespace and the container to look for"""

    namespace: str
    deployment_name: str
    container: str
    crash_loop: bool = False


class ScenarioRunner:
    """Run scenarios, each in its own namespace that is always deleted afterwards"""

    def __init__(  # noqa: PLR0913
        self,
        cluster_service: ClusterService,
        manifest_service: ManifestService,
        prometheus: PrometheusService,
        alertmanager: AlertmanagerService,
        monitoring_config: MonitoringConfig,
        poll_config: PollConfig,
        cluster_config: ClusterConfig,
    ) -> None:
        self.cluster_service = cluster_service
        self.manifest_service = manifest_service
        self.prometheus = prometheus
        self.alertmanager = alertmanager
        self.monitoring_config = monitoring_config
        self.poll_config = poll_config
        self.cluster_config = cluster_config

    def setup(self) -> str:
        """Create the scenario namespace

        Returns:
            str: Namespace name
        """
        return self.cluster_service.create_namespace(self.cluster_config.namespace_prefix)

    def deploy(self, namespace: str, crash_loop: bool = False) -> ScenarioContext:
        """Deploy the workload, optionally patched to crash-loop

        Raises:
            DeploymentError: If the manifest cannot be decoded or the deployment is rejected
        """
        manifest = self.manifest_service.load_manifest()
        if crash_loop:
            manifest = self.manifest_service.crash_looping(manifest)
        deployment = self.cluster_service.create_deployment(namespace, manifest)
        return ScenarioContext(
            namespace=namespace,
            deployment_name=deployment.metadata.name,
            container=container_name(manifest),
            crash_loop=crash_loop,
        )

    def poll(self, probe: Callable[[], T], description: str, predicate: Callable[[T], bool] = non_empty) -> T:
        """Poll a monitoring query with the configured interval and timeout"""
        return poll_until(
            probe,
            predicate,
            interval=self.poll_config.interval,
            timeout=self.poll_config.timeout,
            description=description,
        )

    def teardown(self, namespace: str) -> None:
        """Delete the scenario namespace, waiting for it to disappear when configured"""
        self.cluster_service.delete_namespace(namespace)
        if self.cluster_config.wait_for_namespace_deletion:
            poll_until(
                lambda: self.cluster_service.namespace_exists(namespace),
                lambda exists: not exists,
                interval=self.poll_config.interval,
                timeout=self.poll_config.timeout,
                description=f"deletion of namespace {namespace}",
                retry_on=(ClusterError,),
            )

    def namespace_deleted(self, namespace: str) -> bool:
        """Tell whether the namespace is gone or on its way out"""
        return self.cluster_service.namespace_phase(namespace) in (None, NAMESPACE_TERMINATING)

    def run(self, scenario: "Scenario") -> Any:  # noqa: ANN401
        """Run one scenario: setup, deploy, check, teardown

        Returns:
            The observation the scenario asserted on
        """
        logger.info("Running scenario %s", scenario.name)
        namespace = self.setup()
        passed = False
        try:
            context = self.deploy(namespace, crash_loop=scenario.crash_loop)
            result = scenario.check(self, context)
            passed = True
        finally:
            if passed:
                self.teardown(namespace)
            else:
                logger.error("Scenario %s failed in namespace %s", scenario.name, namespace)
                self._teardown_after_failure(namespace)
        logger.info("Scenario %s passed", scenario.name)
        return result

    def _teardown_after_failure(self, namespace: str) -> None:
        # The scenario error is the one reported, teardown errors are only logged
        try:
            self.teardown(namespace)
        except Exception:
            logger.exception("Failed to tear down namespace %s", namespace)


def get_scenario_runner(config: dict[str, Any] | None = None) -> ScenarioRunner:
    """Build a runner from the configuration and the ambient cluster credentials"""
    if config is None:
        config = read_config()
    cluster_config = get_cluster_config(config)
    monitoring_config = get_monitoring_config(config)

    cluster_service = get_cluster_service(cluster_config)
    prometheus = PrometheusService(get_service_client(cluster_service, monitoring_config.prometheus))
    alertmanager = AlertmanagerService(
        get_service_client(cluster_service, monitoring_config.alertmanager), monitoring_config.alertmanager
    )
    return ScenarioRunner(
        cluster_service=cluster_service,
        manifest_service=ManifestService(get_workload_config(config)),
        prometheus=prometheus,
        alertmanager=alertmanager,
        monitoring_config=monitoring_config,
        poll_config=get_poll_config(config),
        cluster_config=cluster_config,
    )
