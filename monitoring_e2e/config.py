"""Configuration loading for the monitoring e2e suite"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ValidationError

from monitoring_e2e.exceptions import ConfigurationError
from monitoring_e2e.utils import deep_merge, get_logger

logger = get_logger("config")

CONFIG_ENV_VAR = "MONITORING_E2E_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    "cluster": {
        "namespace_prefix": "test-monitoring-",
        "wait_for_namespace_deletion": False,
    },
    "monitoring": {
        "namespace": "kubeprod",
        "crash_alert_name": "CrashLooping_test",
        "prometheus": {"name": "prometheus", "port": 9090, "scheme": "http"},
        "alertmanager": {
            "name": "alertmanager",
            "port": 9093,
            "scheme": "http",
            "path_prefix": "/alertmanager",
            "api_version": "v1",
        },
    },
    "poll": {"interval": 5, "timeout": 1200},
    "workload": {
        "template": "monitoring-deploy.yaml.tpl",
        "manifest": None,
        "name": "monitoring-test",
        "image": "busybox:1.36",
        "crash_command": ["echo"],
    },
}


class ClusterConfig(BaseModel):
    """Configuration for namespace handling"""

    namespace_prefix: str = "test-monitoring-"
    wait_for_namespace_deletion: bool = False


class ServiceEndpoint(BaseModel):
    """Location of an in-cluster HTTP service

    When url is set the service is queried directly instead of through the
    Kubernetes API server proxy.
    """

    name: str
    port: int
    scheme: str = "http"
    namespace: str = "kubeprod"
    path_prefix: str = ""
    url: str | None = None

    @property
    def proxy_name(self) -> str:
        """Service reference in the scheme:name:port form used by the service proxy"""
        return f"{self.scheme}:{self.name}:{self.port}"


class AlertmanagerEndpoint(ServiceEndpoint):
    """Alertmanager location and API flavour"""

    api_version: Literal["v1", "v2"] = "v1"

    @property
    def alerts_path(self) -> str:
        """Path of the alerts endpoint, including the route prefix"""
        return f"{self.path_prefix}/api/{self.api_version}/alerts"


class MonitoringConfig(BaseModel):
    """Configuration for the monitoring stack under test"""

    namespace: str
    crash_alert_name: str
    prometheus: ServiceEndpoint
    alertmanager: AlertmanagerEndpoint


class PollConfig(BaseModel):
    """Polling interval and ceiling, in seconds"""

    interval: float = 5
    timeout: float = 1200


class WorkloadConfig(BaseModel):
    """Configuration for the deployed workload"""

    template: str = "monitoring-deploy.yaml.tpl"
    manifest: str | None = None
    name: str = "monitoring-test"
    image: str = "busybox:1.36"
    crash_command: list[str] = ["echo"]


def read_config(path: str | Path | None = None) -> dict[str, Any]:
    """Read the configuration, merging an optional YAML file over the defaults

    Args:
        path: YAML file to load, defaults to the MONITORING_E2E_CONFIG environment variable

    Returns:
        The merged configuration

    Raises:
        ConfigurationError: If the file cannot be read or is not a YAML mapping
    """
    path = path or os.getenv(CONFIG_ENV_VAR)
    if not path:
        return deep_merge(DEFAULT_CONFIG, {})

    logger.info("Loading configuration from %s", path)
    try:
        with open(path, encoding="utf-8") as config_file:
            loaded = yaml.safe_load(config_file) or {}
    except (OSError, yaml.YAMLError) as e:
        msg = f"Failed to read configuration {path}: {e}"
        raise ConfigurationError(msg) from e

    if not isinstance(loaded, dict):
        msg = f"Configuration {path} must be a mapping"
        raise ConfigurationError(msg)
    return deep_merge(DEFAULT_CONFIG, loaded)


def _section(config: dict[str, Any], key: str, parent: str = "") -> dict[str, Any]:
    section = config.get(key, {})
    if not isinstance(section, dict):
        msg = f"Configuration section '{parent}{key}' must be a mapping, got {section!r}"
        raise ConfigurationError(msg)
    return section


def _build(model: type[BaseModel], section: str, data: Any) -> Any:  # noqa: ANN401
    try:
        return model.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid '{section}' configuration: {e}"
        raise ConfigurationError(msg) from e


def get_cluster_config(config: dict[str, Any] | None = None) -> ClusterConfig:
    """Returns namespace handling configuration"""
    if config is None:
        config = read_config()
    return _build(ClusterConfig, "cluster", _section(config, "cluster"))


def get_monitoring_config(config: dict[str, Any] | None = None) -> MonitoringConfig:
    """Returns the monitoring stack configuration

    The monitoring namespace is the default namespace of both services.
    """
    if config is None:
        config = read_config()
    section = dict(_section(config, "monitoring"))
    namespace = section.get("namespace", "kubeprod")
    for service in ("prometheus", "alertmanager"):
        section[service] = {"namespace": namespace, **_section(section, service, "monitoring.")}
    return _build(MonitoringConfig, "monitoring", section)


def get_poll_config(config: dict[str, Any] | None = None) -> PollConfig:
    """Returns polling configuration"""
    if config is None:
        config = read_config()
    return _build(PollConfig, "poll", _section(config, "poll"))


def get_workload_config(config: dict[str, Any] | None = None) -> WorkloadConfig:
    """Returns workload configuration"""
    if config is None:
        config = read_config()
    return _build(WorkloadConfig, "workload", _section(config, "workload"))
