"""Shared fixtures for the nexus-gcptoolkit test suite."""
import pytest

from nexus_gcptoolkit.constants import CREDENTIALS_ITEM, NAMESPACE
from nexus_gcptoolkit.secrets.domains.models import NodeConfig
from nexus_gcptoolkit.secrets.domains.store import MemorySecretStore, scoped_item_name


CREDENTIALS_RECORD = {
    "default_admin": {"username": "admin", "password": "admin123"},
    "updated_admin": {"username": "admin", "password": "rotated-secret"},
}


class FakeClient:
    def __init__(self, merged_credentials, ssl_verify):
        self.merged_credentials = merged_credentials
        self.ssl_verify = ssl_verify
        self.closed = False

    def close(self):
        self.closed = True


class FakeFactory:
    """RemoteFactory stand-in that replays a scripted list of outcomes.

    Each outcome is either an exception instance to raise or None to
    succeed. Every call is recorded in `calls`.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, merged_credentials, ssl_verify=True):
        self.calls.append(dict(merged_credentials))
        outcome = self.outcomes.pop(0) if self.outcomes else None
        if outcome is not None:
            raise outcome
        return FakeClient(merged_credentials, ssl_verify)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def node_config():
    return NodeConfig(
        environment="production",
        hostname="nexus01",
        url="https://nexus.example.com/nexus",
        repository="releases",
        retries=3,
        retry_delay=5,
        ssl_verify=True,
    )


@pytest.fixture
def store():
    return MemorySecretStore()


@pytest.fixture
def credentials_store(store):
    store.put(NAMESPACE, scoped_item_name(CREDENTIALS_ITEM, "production"), CREDENTIALS_RECORD)
    return store


@pytest.fixture
def sleep():
    return RecordingSleep()
