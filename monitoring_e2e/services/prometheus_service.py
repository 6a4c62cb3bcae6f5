"""Service for querying Prometheus"""

from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from monitoring_e2e.constants import ALERT_STATE_FIRING, ALERTS_METRIC, CONTAINER_INFO_METRIC, PROM_STATUS_SUCCESS
from monitoring_e2e.exceptions import PrometheusError, QueryError, ResponseDecodeError
from monitoring_e2e.models import AlertmanagerDiscovery, PromResponse, Series
from monitoring_e2e.services.service_client import ServiceClient
from monitoring_e2e.utils import get_logger

logger = get_logger("prometheus")

T = TypeVar("T")


def build_selector(metric: str, labels: dict[str, str]) -> str:
    """Build a series selector such as metric{a="b",c="d"}

    Double quotes and backslashes in label values are escaped.
    """
    matchers = ",".join(f'{name}="{_escape(value)}"' for name, value in labels.items())
    return f"{metric}{{{matchers}}}"


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def decode_envelope(
    raw: bytes, source: str = "Prometheus", error: type[QueryError] = PrometheusError
) -> PromResponse:
    """Decode the {status, data} envelope

    Raises:
        ResponseDecodeError: If the body is not JSON or a success response has no data
        QueryError: If the envelope reports an error, as the given error type
    """
    try:
        response = PromResponse.model_validate_json(raw)
    except ValidationError as e:
        msg = f"Failed to parse {source} response: {e}"
        raise ResponseDecodeError(msg) from e

    if response.status != PROM_STATUS_SUCCESS:
        error_msg = response.error or "Unknown error"
        logger.error("%s API returned error: %s (%s)", source, error_msg, response.error_type)
        msg = f"{source} query failed ({response.error_type or response.status}): {error_msg}"
        raise error(msg)

    if "data" not in response.model_fields_set:
        msg = f"{source} response has no data"
        raise ResponseDecodeError(msg)
    return response


def decode_data(data: Any, shape: type[T] | Any, source: str = "Prometheus") -> T:  # noqa: ANN401
    """Decode the inner payload of an envelope into the expected shape

    Raises:
        ResponseDecodeError: If the payload does not match the shape
    """
    try:
        return TypeAdapter(shape).validate_python(data)
    except ValidationError as e:
        msg = f"Unexpected {source} payload: {e}"
        raise ResponseDecodeError(msg) from e


class PrometheusService:
    """Service for querying the Prometheus HTTP API"""

    def __init__(self, client: ServiceClient) -> None:
        self.client = client

    def _get(self, path: str, params: list[tuple[str, str]] | None = None) -> Any:  # noqa: ANN401
        """Execute a Prometheus API request and return the decoded data payload

        Raises:
            PrometheusError: If the request fails or Prometheus reports an error
            ResponseDecodeError: If the response cannot be decoded
        """
        try:
            raw = self.client.get(path, params)
        except QueryError as exc:
            msg = f"Failed to query Prometheus {path}: {exc!s}"
            raise PrometheusError(msg) from exc
        return decode_envelope(raw).data

    def series(self, selector: str) -> list[Series]:
        """Query api/v1/series for one selector

        Args:
            selector: Series selector, passed as match[]

        Returns:
            list[Series]: Label sets of the matching series
        """
        logger.debug("Series query: %s", selector)
        data = self._get("api/v1/series", [("match[]", selector)])
        return decode_data(data, list[Series])

    def container_series(self, namespace: str, container: str) -> list[Series]:
        """Series of kube_pod_container_info for one container"""
        selector = build_selector(CONTAINER_INFO_METRIC, {"namespace": namespace, "container": container})
        return self.series(selector)

    def firing_alert_series(self, namespace: str, container: str, alertname: str) -> list[Series]:
        """ALERTS series of a firing alert for one container"""
        selector = build_selector(
            ALERTS_METRIC,
            {
                "namespace": namespace,
                "container": container,
                "alertname": alertname,
                "alertstate": ALERT_STATE_FIRING,
            },
        )
        return self.series(selector)

    def alertmanagers(self) -> AlertmanagerDiscovery:
        """Query api/v1/alertmanagers

        Returns:
            AlertmanagerDiscovery: Active and dropped Alertmanager endpoints
        """
        data = self._get("api/v1/alertmanagers")
        return decode_data(data, AlertmanagerDiscovery)
