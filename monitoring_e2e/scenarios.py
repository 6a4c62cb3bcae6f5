"""Monitoring scenarios: what each one queries and asserts"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from monitoring_e2e.exceptions import ExpectationError
from monitoring_e2e.models import Alert, Endpoint, Series

if TYPE_CHECKING:
    from monitoring_e2e.runner import ScenarioContext, ScenarioRunner


def _field(subject: Any, path: str) -> Any:  # noqa: ANN401
    value = subject
    for part in path.split("."):
        value = value.get(part) if isinstance(value, dict) else getattr(value, part, None)
    return value


def assert_fields(subject: Any, expected: dict[str, Any], name: str = "result") -> None:  # noqa: ANN401
    """Check fields of subject, dotted names reach into nested objects

    Raises:
        ExpectationError: Listing every field whose value differs
    """
    mismatches = {}
    for path, value in expected.items():
        actual = _field(subject, path)
        if actual != value:
            mismatches[path] = (value, actual)
    if mismatches:
        raise ExpectationError(mismatches, subject=name)


def assert_contains(subject: Any, path: str, fragment: str, name: str = "result") -> None:  # noqa: ANN401
    """Check that a string field of subject contains fragment"""
    actual = _field(subject, path)
    if not isinstance(actual, str) or fragment not in actual:
        raise ExpectationError({path: (f"a value containing {fragment!r}", actual)}, subject=name)


@dataclass(frozen=True)
class Scenario:
    """A named check run against a freshly deployed workload"""

    name: str
    check: Callable[["ScenarioRunner", "ScenarioContext"], Any]
    crash_loop: bool = False
    description: str = ""


def check_container_monitored(runner: "ScenarioRunner", context: "ScenarioContext") -> Series:
    """Prometheus has a kube_pod_container_info series for the deployed container"""
    series = runner.poll(
        lambda: runner.prometheus.container_series(context.namespace, context.container),
        f"series of container {context.namespace}/{context.container}",
    )
    assert_fields(series[0], {"container": context.container, "namespace": context.namespace}, name="series")
    return series[0]


def check_alertmanagers_discovered(runner: "ScenarioRunner", context: "ScenarioContext") -> Endpoint:
    """Prometheus discovered at least one Alertmanager"""
    active = runner.poll(lambda: runner.prometheus.alertmanagers().active, "active alertmanagers")
    assert_contains(active[0], "url", runner.monitoring_config.alertmanager.alerts_path, name="alertmanager endpoint")
    return active[0]


def check_crash_detected(runner: "ScenarioRunner", context: "ScenarioContext") -> Series:
    """Prometheus fires the crash-loop alert for the deployed container"""
    alertname = runner.monitoring_config.crash_alert_name
    series = runner.poll(
        lambda: runner.prometheus.firing_alert_series(context.namespace, context.container, alertname),
        f"firing {alertname} for {context.namespace}/{context.container}",
    )
    assert_fields(
        series[0],
        {"container": context.container, "namespace": context.namespace, "alertname": alertname},
        name="alert series",
    )
    return series[0]


def check_crash_alert_routed(runner: "ScenarioRunner", context: "ScenarioContext") -> Alert:
    """Alertmanager reports the crash-loop alert for the deployed container"""
    alertname = runner.monitoring_config.crash_alert_name
    labels = {"namespace": context.namespace, "container": context.container, "alertname": alertname}
    alerts = runner.poll(
        lambda: runner.alertmanager.alerts(labels),
        f"{alertname} in Alertmanager for {context.namespace}/{context.container}",
    )
    assert_fields(alerts[0], {f"labels.{label}": value for label, value in labels.items()}, name="alert")
    return alerts[0]


SCENARIOS = (
    Scenario("container-monitored", check_container_monitored, description=check_container_monitored.__doc__),
    Scenario(
        "alertmanagers-discovered", check_alertmanagers_discovered, description=check_alertmanagers_discovered.__doc__
    ),
    Scenario("crash-detected", check_crash_detected, crash_loop=True, description=check_crash_detected.__doc__),
    Scenario(
        "crash-alert-routed", check_crash_alert_routed, crash_loop=True, description=check_crash_alert_routed.__doc__
    ),
)


def get_scenario(name: str) -> Scenario:
    """Look a scenario up by name

    Raises:
        KeyError: If no scenario has this name
    """
    for scenario in SCENARIOS:
        if scenario.name == name:
            return scenario
    raise KeyError(name)
