"""Tests for the Nexus HTTP client and RemoteFactory."""
import httpx
import pytest

from nexus_gcptoolkit.nexus.domains.client import NexusClient, RemoteFactory
from nexus_gcptoolkit.secrets.domains.errors import CouldNotConnect, PermissionsError, UnexpectedStatusCode

MERGED = {
    "url": "https://nexus.example.com/nexus",
    "repository": "releases",
    "username": "admin",
    "password": "admin123",
}


def _transport(status_code=200, json=None, requests=None):
    def handler(request):
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, json=json if json is not None else {"data": {"version": "2.14.5"}})
    return httpx.MockTransport(handler)


class TestNexusClient:
    """Test suite for NexusClient status checks."""

    def test_status_requests_relative_to_base_url(self):
        requests = []
        client = NexusClient(transport=_transport(requests=requests), **MERGED)

        assert client.status() == {"version": "2.14.5"}
        assert str(requests[0].url) == "https://nexus.example.com/nexus/service/local/status"
        assert requests[0].headers["Authorization"].startswith("Basic ")
        assert requests[0].headers["Accept"] == "application/json"

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_rejected_credentials(self, status_code):
        client = NexusClient(transport=_transport(status_code), **MERGED)

        with pytest.raises(PermissionsError):
            client.status()

    def test_unexpected_status(self):
        client = NexusClient(transport=_transport(503), **MERGED)

        with pytest.raises(UnexpectedStatusCode) as exc_info:
            client.status()
        assert exc_info.value.status_code == 503

    def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client = NexusClient(transport=httpx.MockTransport(handler), **MERGED)

        with pytest.raises(CouldNotConnect):
            client.status()

    def test_context_manager_closes(self):
        with NexusClient(transport=_transport(), **MERGED) as client:
            client.status()
        assert client._http.is_closed


class TestRemoteFactory:
    """Test suite for RemoteFactory.create."""

    def test_create_returns_verified_client(self):
        client = RemoteFactory(transport=_transport()).create(MERGED, ssl_verify=False)

        assert isinstance(client, NexusClient)
        assert client.repository == "releases"
        assert client.username == "admin"
        client.close()

    def test_create_raises_on_rejected_credentials(self):
        with pytest.raises(PermissionsError):
            RemoteFactory(transport=_transport(401)).create(MERGED)
