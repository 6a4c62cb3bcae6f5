"""model init"""

from .alerts import Alert, AlertLabels, AlertStatus
from .prometheus import AlertmanagerDiscovery, Endpoint, PromResponse, Series
from .workload import Container, DeploymentManifest

__all__ = [
    "Alert",
    "AlertLabels",
    "AlertStatus",
    "Container",
    "DeploymentManifest",
    "AlertmanagerDiscovery",
    "Endpoint",
    "PromResponse",
    "Series",
]
