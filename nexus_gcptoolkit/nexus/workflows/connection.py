"""Workflow for connecting to Nexus with credential failover and retries."""
import time
import logging
from typing import Callable, Optional

from ...secrets.domains.errors import (
    CouldNotConnect,
    NexusUnavailableError,
    PermissionsError,
    UnexpectedStatusCode,
)
from ...secrets.domains.models import ConnectionOverrides, CredentialMode, NodeConfig
from ...secrets.domains.store import SecretStore
from ...secrets.workflows.secret_operations import load_credential_bundle
from ..domains.client import NexusClient, RemoteFactory
from ..domains.retry import call_with_retries

logger = logging.getLogger(__name__)

# Failures reported by RemoteFactory.create
CONNECTION_FAILURES = (PermissionsError, CouldNotConnect, UnexpectedStatusCode)
# Failures the availability check retries
RETRYABLE_ERRORS = (CouldNotConnect, UnexpectedStatusCode)


def establish_connection(
    config: NodeConfig,
    store: SecretStore,
    mode: Optional[CredentialMode] = None,
    overrides: Optional[ConnectionOverrides] = None,
    factory: Optional[RemoteFactory] = None,
) -> NexusClient:
    """
    Build a Nexus client authenticated with the admin credentials.

    In AUTO_DETECT mode the preferred credential set is tried first and the
    other set once if that fails. PRIMARY and SECONDARY only try the default
    or the updated set and let failures propagate.

    Args:
        config: Node settings
        store: Secret store holding the credentials item
        mode: Credential mode, defaults to the one derived from config
        overrides: URL/repository/SSL settings, defaults to those in config
        factory: Client factory, defaults to RemoteFactory()

    Raises:
        SecretNotFound: If the credentials item cannot be resolved
        NexusConnectionError: If the final attempt fails
    """
    mode = mode or config.credential_mode
    overrides = overrides or ConnectionOverrides.from_config(config)
    factory = factory or RemoteFactory()
    bundle = load_credential_bundle(store, config.environment)

    if mode is CredentialMode.PRIMARY:
        return factory.create(overrides.merge(bundle.default_credentials), overrides.ssl_verify)
    if mode is CredentialMode.SECONDARY:
        return factory.create(overrides.merge(bundle.updated_credentials), overrides.ssl_verify)

    if bundle.prefer_updated:
        first, second = bundle.updated_credentials, bundle.default_credentials
    else:
        first, second = bundle.default_credentials, bundle.updated_credentials

    try:
        return factory.create(overrides.merge(first), overrides.ssl_verify)
    except CONNECTION_FAILURES as e:
        logger.info(f"Connecting to Nexus as '{first.username}' failed ({e}), trying '{second.username}'")

    return factory.create(overrides.merge(second), overrides.ssl_verify)


def nexus_available(
    config: NodeConfig,
    store: SecretStore,
    factory: Optional[RemoteFactory] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Check whether Nexus accepts a connection, retrying while it is unreachable.

    Makes up to `config.retries + 1` attempts, sleeping `config.retry_delay`
    seconds between them. Permission failures are not retried.

    Returns:
        True if a connection could be made, False once retries are exhausted
    """
    try:
        client = call_with_retries(
            lambda: establish_connection(config, store, factory=factory),
            retries=config.retries,
            delay=config.retry_delay,
            retry_on=RETRYABLE_ERRORS,
            sleep=sleep,
        )
    except RETRYABLE_ERRORS as e:
        logger.info(f"Giving up on Nexus at {config.url}: {e}")
        return False

    client.close()
    return True


def ensure_nexus_available(
    config: NodeConfig,
    store: SecretStore,
    factory: Optional[RemoteFactory] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Raise unless Nexus becomes available within the configured retries.

    Raises:
        NexusUnavailableError: If Nexus could not be reached
    """
    if not nexus_available(config, store, factory=factory, sleep=sleep):
        raise NexusUnavailableError("Could not connect to Nexus. Please ensure Nexus is running.")


def check_credentials_still_valid(
    username: str,
    password: str,
    config: NodeConfig,
    factory: Optional[RemoteFactory] = None,
) -> bool:
    """
    Check whether Nexus still accepts a username and password.

    Makes a single attempt without consulting the secret store.

    Returns:
        True if a connection can be made, False otherwise
    """
    factory = factory or RemoteFactory()
    overrides = {"url": config.url, "repository": config.repository, "username": username, "password": password}
    try:
        client = factory.create(overrides, config.ssl_verify)
    except CONNECTION_FAILURES as e:
        logger.debug(f"Credentials for '{username}' rejected: {e}")
        return False

    client.close()
    return True


def parse_identifier(nexus_identifier: str) -> str:
    """
    Return a safe-for-Nexus identifier.

    Example:
        parse_identifier("Artifacts Repository") == "artifacts_repository"
    """
    return nexus_identifier.replace(" ", "_").lower()
