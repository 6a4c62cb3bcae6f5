"""Clients issuing GET requests to the monitoring services"""

from typing import Protocol

import httpx

from monitoring_e2e.config import ServiceEndpoint
from monitoring_e2e.exceptions import QueryError
from monitoring_e2e.services.cluster_service import ClusterService
from monitoring_e2e.utils import get_logger

logger = get_logger("service_client")

Params = list[tuple[str, str]]


class ServiceClient(Protocol):
    """Anything able to GET a path of a monitoring service and return the raw body"""

    def get(self, path: str, params: Params | None = None) -> bytes: ...


class ClusterProxyClient:
    """Reach a service through the Kubernetes API server service proxy"""

    def __init__(self, cluster_service: ClusterService, endpoint: ServiceEndpoint) -> None:
        self.cluster_service = cluster_service
        self.endpoint = endpoint

    def get(self, path: str, params: Params | None = None) -> bytes:
        return self.cluster_service.proxy_get(self.endpoint.namespace, self.endpoint.proxy_name, path, params)


class HttpServiceClient:
    """Reach a service directly over HTTP, e.g. through a port-forward"""

    def __init__(self, base_url: str, client: httpx.Client | None = None, timeout: float = 30.0) -> None:
        self.base_url = base_url.rstrip("/")
        # Don't verify SSL certs for in-cluster services
        self.client = client or httpx.Client(verify=False, timeout=timeout)

    def get(self, path: str, params: Params | None = None) -> bytes:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("GET %s %s", url, params)
        try:
            response = self.client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"{url} returned HTTP {exc.response.status_code}"
            raise QueryError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Failed to connect to {url}: {exc!s}"
            raise QueryError(msg) from exc
        return response.content

    def close(self) -> None:
        """Close the HTTP client"""
        self.client.close()


def get_service_client(cluster_service: ClusterService | None, endpoint: ServiceEndpoint) -> ServiceClient:
    """Direct client when the endpoint has a url, service proxy client otherwise"""
    if endpoint.url:
        return HttpServiceClient(endpoint.url)
    if cluster_service is None:
        msg = f"No url configured for {endpoint.name} and no cluster to proxy through"
        raise QueryError(msg)
    return ClusterProxyClient(cluster_service, endpoint)
