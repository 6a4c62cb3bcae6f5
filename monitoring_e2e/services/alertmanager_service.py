"""Service for querying Alertmanager"""

from pydantic import TypeAdapter, ValidationError

from monitoring_e2e.config import AlertmanagerEndpoint
from monitoring_e2e.exceptions import AlertmanagerError, QueryError, ResponseDecodeError
from monitoring_e2e.models import Alert
from monitoring_e2e.services.prometheus_service import decode_data, decode_envelope
from monitoring_e2e.services.service_client import ServiceClient
from monitoring_e2e.utils import get_logger

logger = get_logger("alertmanager")

_alert_list = TypeAdapter(list[Alert])


def build_filter(labels: dict[str, str]) -> str:
    """Matcher set for the v1 filter parameter, e.g. {namespace="a",container="b"}"""
    matchers = ",".join(_matcher(name, value) for name, value in labels.items())
    return f"{{{matchers}}}"


def _matcher(name: str, value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'{name}="{escaped}"'


class AlertmanagerService:
    """Service for querying active alerts from the Alertmanager API"""

    def __init__(self, client: ServiceClient, endpoint: AlertmanagerEndpoint) -> None:
        self.client = client
        self.endpoint = endpoint

    def alerts(self, labels: dict[str, str], active: bool = True) -> list[Alert]:
        """Query alerts matching all the given labels

        Args:
            labels: Label equality matchers
            active: Only return active alerts

        Returns:
            list[Alert]: Matching alerts

        Raises:
            AlertmanagerError: If the request fails or Alertmanager reports an error
            ResponseDecodeError: If the response cannot be decoded
        """
        params = [("active", str(active).lower())]
        if self.endpoint.api_version == "v1":
            params.append(("filter", build_filter(labels)))
        else:
            params.extend(("filter", _matcher(name, value)) for name, value in labels.items())

        path = self.endpoint.alerts_path
        logger.debug("Alerts query: %s %s", path, params)
        try:
            raw = self.client.get(path, params)
        except QueryError as exc:
            msg = f"Failed to query Alertmanager {path}: {exc!s}"
            raise AlertmanagerError(msg) from exc

        if self.endpoint.api_version == "v1":
            data = decode_envelope(raw, source="Alertmanager", error=AlertmanagerError).data
            return decode_data(data, list[Alert], source="Alertmanager")

        # v2 returns a bare list
        try:
            return _alert_list.validate_json(raw)
        except ValidationError as e:
            msg = f"Failed to parse Alertmanager response: {e}"
            raise ResponseDecodeError(msg) from e
