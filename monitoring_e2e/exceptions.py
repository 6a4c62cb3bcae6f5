"""exceptions"""

from typing import Any

from monitoring_e2e.constants import (
    ALERTMANAGER_ERROR,
    CLUSTER_ERROR,
    CLUSTER_SETUP_ERROR,
    CONFIGURATION_ERROR,
    DEPLOYMENT_ERROR,
    EXPECTATION_ERROR,
    MONITORING_TEST_ERROR,
    POLL_TIMEOUT_ERROR,
    PROMETHEUS_ERROR,
    QUERY_ERROR,
    RESPONSE_DECODE_ERROR,
)


class MonitoringTestError(Exception):
    """Base exception for all monitoring e2e errors"""

    def __init__(self, message: str | None = None, code: int = MONITORING_TEST_ERROR) -> None:
        self.code = code
        self.message = message or "Monitoring test failed"
        super().__init__(self.message)


class ConfigurationError(MonitoringTestError):
    """Exception for invalid or unreadable configuration"""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Invalid configuration", CONFIGURATION_ERROR)


class ClusterError(MonitoringTestError):
    """Exception for Kubernetes API errors"""

    def __init__(self, message: str | None = None, code: int = CLUSTER_ERROR, namespace: str | None = None) -> None:
        self.namespace = namespace
        super().__init__(message or "Cluster operation failed", code)


class ClusterSetupError(ClusterError):
    """Exception for errors while preparing the scenario namespace"""

    def __init__(self, message: str | None = None, namespace: str | None = None) -> None:
        super().__init__(message or "Cluster setup failed", CLUSTER_SETUP_ERROR, namespace)


class DeploymentError(ClusterError):
    """Exception for errors while decoding or creating the workload"""

    def __init__(self, message: str | None = None, namespace: str | None = None) -> None:
        super().__init__(message or "Deployment failed", DEPLOYMENT_ERROR, namespace)


class QueryError(MonitoringTestError):
    """Exception for errors querying a monitoring service, retried while polling"""

    def __init__(self, message: str | None = None, code: int = QUERY_ERROR) -> None:
        super().__init__(message or "Query failed", code)


class PrometheusError(QueryError):
    """Exception for Prometheus errors"""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Prometheus operation failed", PROMETHEUS_ERROR)


class AlertmanagerError(QueryError):
    """Exception for Alertmanager errors"""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Alertmanager operation failed", ALERTMANAGER_ERROR)


class ResponseDecodeError(QueryError):
    """Exception for a response body that does not match the expected shape"""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Failed to decode response", RESPONSE_DECODE_ERROR)


class PollTimeoutError(MonitoringTestError):
    """Exception raised when a condition did not hold before the timeout"""

    def __init__(
        self, description: str, timeout: float, last_value: Any = None, last_error: Exception | None = None  # noqa: ANN401
    ) -> None:
        self.description = description
        self.timeout = timeout
        self.last_value = last_value
        self.last_error = last_error
        detail = f"last error: {last_error}" if last_error is not None else f"last value: {last_value!r}"
        message = f"Timed out after {timeout}s waiting for {description} ({detail})"
        super().__init__(message, POLL_TIMEOUT_ERROR)


class ExpectationError(MonitoringTestError, AssertionError):
    """Exception for observed fields that differ from the expected values"""

    def __init__(self, mismatches: dict[str, tuple[Any, Any]], subject: str = "result") -> None:
        self.mismatches = mismatches
        lines = [f"  {field}: expected {expected!r}, got {actual!r}" for field, (expected, actual) in mismatches.items()]
        message = f"Unexpected {subject}:\n" + "\n".join(lines)
        super().__init__(message, EXPECTATION_ERROR)
