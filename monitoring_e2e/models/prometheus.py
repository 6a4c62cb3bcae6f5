"""Models for Prometheus API responses"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PromResponse(BaseModel):
    """Envelope returned by every Prometheus API call

    data is kept undecoded and parsed per query into one of the models below.
    Error responses carry errorType and error instead of data.
    """

    status: str
    data: Any = None
    error_type: str | None = Field(default=None, alias="errorType")
    error: str | None = None


class Series(BaseModel):
    """Label set of one series returned by api/v1/series, other labels are ignored"""

    alertname: str = ""
    container: str = ""
    namespace: str = ""


class Endpoint(BaseModel):
    """Alertmanager instance discovered by Prometheus"""

    url: str


class AlertmanagerDiscovery(BaseModel):
    """Result of api/v1/alertmanagers"""

    model_config = ConfigDict(populate_by_name=True)

    active: list[Endpoint] = Field(alias="activeAlertmanagers")
    dropped: list[Endpoint] = Field(default_factory=list, alias="droppedAlertmanagers")
