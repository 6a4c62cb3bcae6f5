"""Cluster service for the monitoring e2e suite"""

from typing import Any

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException

from monitoring_e2e.config import ClusterConfig, get_cluster_config
from monitoring_e2e.exceptions import ClusterError, ClusterSetupError, DeploymentError, QueryError
from monitoring_e2e.utils import get_logger

logger = get_logger("cluster")

HTTP_NOT_FOUND = 404
PROXY_PATH = "/api/v1/namespaces/{namespace}/services/{name}/proxy/"


def load_cluster_config() -> None:
    """Load ambient cluster credentials, in-cluster first then the local kubeconfig

    Raises:
        ClusterSetupError: If neither configuration can be loaded
    """
    try:
        k8s_config.load_incluster_config()
        logger.debug("Loaded in-cluster configuration")
    except k8s_config.ConfigException:
        try:
            k8s_config.load_kube_config()
            logger.debug("Loaded kubeconfig")
        except k8s_config.ConfigException as e:
            msg = f"Could not load kubernetes configuration: {e}"
            raise ClusterSetupError(msg) from e


class ClusterService:
    """Service for the Kubernetes operations of a scenario (namespaces, deployments, service proxy)"""

    def __init__(self, config: ClusterConfig, api_client: k8s_client.ApiClient | None = None) -> None:
        self.config = config
        self.api_client = api_client or k8s_client.ApiClient()
        self.k8s_core_api = k8s_client.CoreV1Api(self.api_client)
        self.k8s_apps_api = k8s_client.AppsV1Api(self.api_client)

    def create_namespace(self, prefix: str | None = None) -> str:
        """Create a namespace with a server generated random suffix

        Args:
            prefix: Name prefix, defaults to the configured one

        Returns:
            str: Name of the created namespace

        Raises:
            ClusterSetupError: If the namespace cannot be created
        """
        prefix = prefix or self.config.namespace_prefix
        body = k8s_client.V1Namespace(metadata=k8s_client.V1ObjectMeta(generate_name=prefix))
        try:
            namespace = self.k8s_core_api.create_namespace(body=body)
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            logger.exception("Failed to create namespace with prefix %s", prefix)
            msg = f"Failed to create namespace: {e}"
            raise ClusterSetupError(msg) from e

        name = namespace.metadata.name
        logger.info("Created namespace %s", name)
        return name

    def delete_namespace(self, namespace: str) -> None:
        """Delete a namespace, a namespace that is already gone is not an error

        Raises:
            ClusterError: If the deletion is refused
        """
        try:
            self.k8s_core_api.delete_namespace(name=namespace)
        except ApiException as e:
            if e.status == HTTP_NOT_FOUND:
                logger.info("Namespace %s already deleted", namespace)
                return
            logger.exception("Failed to delete namespace %s", namespace)
            msg = f"Failed to delete namespace {namespace}: {e}"
            raise ClusterError(msg, namespace=namespace) from e
        except urllib3.exceptions.HTTPError as e:
            logger.exception("Failed to delete namespace %s", namespace)
            msg = f"Failed to delete namespace {namespace}: {e}"
            raise ClusterError(msg, namespace=namespace) from e
        logger.info("Deleted namespace %s", namespace)

    def namespace_phase(self, namespace: str) -> str | None:
        """Phase of the namespace (Active or Terminating), None once it is gone"""
        try:
            result = self.k8s_core_api.read_namespace(name=namespace)
        except ApiException as e:
            if e.status == HTTP_NOT_FOUND:
                return None
            msg = f"Failed to read namespace {namespace}: {e}"
            raise ClusterError(msg, namespace=namespace) from e
        return result.status.phase if result.status else None

    def namespace_exists(self, namespace: str) -> bool:
        """Tell whether the namespace can still be read, terminating namespaces included"""
        return self.namespace_phase(namespace) is not None

    def create_deployment(self, namespace: str, manifest: dict[str, Any]) -> k8s_client.V1Deployment:
        """Create a Deployment

        Args:
            namespace: Target namespace
            manifest: Decoded Deployment manifest

        Returns:
            V1Deployment: The deployment as accepted by the API server

        Raises:
            DeploymentError: If the API server rejects the deployment
        """
        name = manifest.get("metadata", {}).get("name")
        try:
            deployment = self.k8s_apps_api.create_namespaced_deployment(namespace=namespace, body=manifest)
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            logger.exception("Failed to create deployment %s in %s", name, namespace)
            msg = f"Failed to create deployment {name}: {e}"
            raise DeploymentError(msg, namespace=namespace) from e

        logger.info("Created deployment %s in namespace %s", deployment.metadata.name, namespace)
        return deployment

    def proxy_get(
        self,
        namespace: str,
        service: str,
        path: str,
        params: list[tuple[str, str]] | None = None,
    ) -> bytes:
        """GET a path of an in-cluster service through the API server service proxy

        Args:
            namespace: Namespace of the service
            service: Service reference, as scheme:name:port
            path: Path on the service
            params: Query parameters, keys may repeat

        Returns:
            bytes: Raw response body

        Raises:
            QueryError: If the proxied request fails
        """
        resource_path = PROXY_PATH + path.lstrip("/")
        logger.debug("Proxy GET %s/%s %s %s", namespace, service, path, params)
        try:
            response = self.api_client.call_api(
                resource_path,
                "GET",
                path_params={"namespace": namespace, "name": service},
                query_params=params or [],
                header_params={"Accept": "application/json"},
                auth_settings=["BearerToken"],
                _return_http_data_only=True,
                _preload_content=False,
            )
            return response.data
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            msg = f"Proxy GET {service}/{path} in {namespace} failed: {e}"
            raise QueryError(msg) from e


def get_cluster_service(config: ClusterConfig | None = None) -> ClusterService:
    """Get cluster service instance, loading the ambient cluster credentials

    Returns:
        ClusterService: Cluster service instance
    """
    load_cluster_config()
    return ClusterService(config or get_cluster_config())
