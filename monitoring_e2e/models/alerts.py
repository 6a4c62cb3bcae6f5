"""Models for alerts"""

from pydantic import BaseModel, ConfigDict


class AlertLabels(BaseModel):
    """Labels for the alert"""

    model_config = ConfigDict(extra="allow")

    alertname: str = ""
    container: str = ""
    namespace: str = ""


class AlertStatus(BaseModel):
    """Status of the alert"""

    model_config = ConfigDict(extra="allow")

    state: str = ""


class Alert(BaseModel):
    """Alert model, as returned by the Alertmanager v1 and v2 APIs"""

    model_config = ConfigDict(extra="allow")

    labels: AlertLabels
    status: AlertStatus = AlertStatus()
