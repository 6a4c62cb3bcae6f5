"""Services for the monitoring e2e suite"""

from .alertmanager_service import AlertmanagerService
from .cluster_service import ClusterService, get_cluster_service, load_cluster_config
from .manifest_service import ManifestService
from .prometheus_service import PrometheusService
from .service_client import ClusterProxyClient, HttpServiceClient, ServiceClient, get_service_client

__all__ = [
    "AlertmanagerService",
    "ClusterService",
    "get_cluster_service",
    "load_cluster_config",
    "ManifestService",
    "PrometheusService",
    "ClusterProxyClient",
    "HttpServiceClient",
    "ServiceClient",
    "get_service_client",
]
