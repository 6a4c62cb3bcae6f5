from unittest.mock import MagicMock

import httpx
import pytest

from monitoring_e2e.config import ServiceEndpoint
from monitoring_e2e.exceptions import QueryError
from monitoring_e2e.services import ClusterProxyClient, ClusterService, HttpServiceClient, get_service_client


def http_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.mark.component
def test_http_client_get():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b'{"status": "success", "data": []}')

    client = HttpServiceClient("http://localhost:9090/", client=http_client(handler))
    body = client.get("api/v1/series", [("match[]", 'up{job="x"}')])

    assert body == b'{"status": "success", "data": []}'
    assert seen[0].url.path == "/api/v1/series"
    assert seen[0].url.params.get_list("match[]") == ['up{job="x"}']


@pytest.mark.component
def test_http_client_keeps_repeated_params():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"[]")

    client = HttpServiceClient("http://localhost:9093", client=http_client(handler))
    client.get("/alertmanager/api/v2/alerts", [("filter", 'a="1"'), ("filter", 'b="2"')])

    assert seen[0].url.path == "/alertmanager/api/v2/alerts"
    assert seen[0].url.params.get_list("filter") == ['a="1"', 'b="2"']


@pytest.mark.component
def test_http_client_status_error():
    client = HttpServiceClient("http://localhost:9090", client=http_client(lambda request: httpx.Response(503)))
    with pytest.raises(QueryError, match="503"):
        client.get("api/v1/series")


@pytest.mark.component
def test_http_client_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = HttpServiceClient("http://localhost:9090", client=http_client(handler))
    with pytest.raises(QueryError, match="connection refused"):
        client.get("api/v1/series")


@pytest.mark.component
def test_cluster_proxy_client_delegates():
    cluster_service = MagicMock(spec=ClusterService)
    cluster_service.proxy_get.return_value = b"{}"
    endpoint = ServiceEndpoint(name="prometheus", port=9090, namespace="kubeprod")

    body = ClusterProxyClient(cluster_service, endpoint).get("api/v1/alertmanagers", [])

    assert body == b"{}"
    cluster_service.proxy_get.assert_called_once_with("kubeprod", "http:prometheus:9090", "api/v1/alertmanagers", [])


@pytest.mark.component
def test_get_service_client_selection():
    cluster_service = MagicMock(spec=ClusterService)
    proxied = ServiceEndpoint(name="prometheus", port=9090)
    direct = ServiceEndpoint(name="prometheus", port=9090, url="http://localhost:9090")

    assert isinstance(get_service_client(cluster_service, proxied), ClusterProxyClient)
    assert isinstance(get_service_client(None, direct), HttpServiceClient)
    with pytest.raises(QueryError):
        get_service_client(None, proxied)
