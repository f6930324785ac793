"""HTTP client for the Nexus repository manager."""
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ...secrets.domains.errors import CouldNotConnect, PermissionsError, UnexpectedStatusCode

logger = logging.getLogger(__name__)

STATUS_PATH = "service/local/status"
DEFAULT_TIMEOUT = 30.0


class NexusClient:
    """Authenticated connection to a Nexus server."""

    def __init__(
        self,
        url: str,
        repository: str,
        username: str,
        password: str,
        ssl_verify: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.url = url
        self.repository = repository
        self.username = username
        self._http = httpx.Client(
            base_url=url,
            auth=(username, password),
            verify=ssl_verify,
            transport=transport,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request relative to the Nexus base URL.

        Raises:
            CouldNotConnect: If the server cannot be reached
            PermissionsError: On 401 or 403
            UnexpectedStatusCode: On any other non-2xx status
        """
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise CouldNotConnect(f"Could not connect to Nexus at {self.url}: {e}") from e

        if response.status_code in (401, 403):
            raise PermissionsError(
                f"Nexus rejected credentials for user '{self.username}' ({response.status_code})"
            )
        if not response.is_success:
            raise UnexpectedStatusCode(response.status_code)
        return response

    def status(self) -> Dict[str, Any]:
        """Fetch the server status, verifying that the credentials are accepted."""
        response = self.request("GET", STATUS_PATH)
        try:
            body = response.json()
        except ValueError:
            raise UnexpectedStatusCode(response.status_code, "Nexus status response is not JSON") from None
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        return body if isinstance(body, dict) else {}

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "NexusClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class RemoteFactory:
    """Builds NexusClient instances and checks they can authenticate."""

    def __init__(self, transport: Optional[httpx.BaseTransport] = None, timeout: float = DEFAULT_TIMEOUT):
        self.transport = transport
        self.timeout = timeout

    def create(self, merged_credentials: Mapping[str, str], ssl_verify: bool = True) -> NexusClient:
        """
        Create a client from url, repository, username and password.

        Raises:
            PermissionsError, CouldNotConnect, UnexpectedStatusCode
        """
        client = NexusClient(
            url=merged_credentials["url"],
            repository=merged_credentials["repository"],
            username=merged_credentials["username"],
            password=merged_credentials["password"],
            ssl_verify=ssl_verify,
            transport=self.transport,
            timeout=self.timeout,
        )
        try:
            status = client.status()
        except Exception:
            client.close()
            raise

        logger.debug(f"Connected to Nexus {status.get('version', 'unknown version')} at {client.url}")
        return client
