"""Workflow for resolving Nexus secrets with wildcard fallback."""
import base64
import binascii
import logging
from typing import Any, Callable, Dict, Optional, Union

from ...constants import (
    CERTIFICATES_ITEM,
    CREDENTIALS_ITEM,
    GROUP_REPOSITORIES,
    HOSTED_REPOSITORIES,
    NAMESPACE,
    PROXY_REPOSITORIES,
    REPOSITORIES_ITEM,
    SSL_CERTIFICATE_CRT,
    SSL_CERTIFICATE_ITEM,
    SSL_CERTIFICATE_KEY,
    WILDCARD,
)
from ..domains.errors import DecodeError, SecretNotFound, SecretStoreItemNotFound, SecretValidationError
from ..domains.models import CertificatePair, CredentialBundle, NodeConfig, Resolution, ResolutionKind
from ..domains.store import SecretStore, scoped_item_name

logger = logging.getLogger(__name__)


def resolve_with_fallback(lookup: Callable[[str], Optional[Dict[str, Any]]], name: str) -> Resolution:
    """
    Look up `name`, falling back to the `_wildcard` entry.

    Args:
        lookup: Returns the record stored under a key, or None if there is none
        name: Environment name or hostname to try first

    Returns:
        Resolution tagged FOUND, FELL_BACK_TO_WILDCARD or NOT_FOUND
    """
    record = lookup(name)
    if record is not None:
        return Resolution(ResolutionKind.FOUND, record)

    record = lookup(WILDCARD)
    if record is not None:
        return Resolution(ResolutionKind.FELL_BACK_TO_WILDCARD, record)

    return Resolution(ResolutionKind.NOT_FOUND)


def _load_or_none(store: SecretStore, namespace: str, item_name: str) -> Optional[Dict[str, Any]]:
    try:
        return store.load(namespace, item_name)
    except SecretStoreItemNotFound:
        return None


def resolve_secret(store: SecretStore, namespace: str, item_name: str, environment: str) -> Dict[str, Any]:
    """
    Load a secret item for an environment, or its `_wildcard` version.

    Args:
        store: Secret store to read from
        namespace: Store namespace, e.g. "nexus"
        item_name: Item to resolve, e.g. "credentials"
        environment: Environment name of the node

    Returns:
        The decrypted record

    Raises:
        SecretNotFound: If neither the environment nor the wildcard item exists
    """
    resolution = resolve_with_fallback(
        lambda scope: _load_or_none(store, namespace, scoped_item_name(item_name, scope)),
        environment,
    )

    if resolution.kind is ResolutionKind.NOT_FOUND:
        raise SecretNotFound(namespace, item_name)

    if resolution.kind is ResolutionKind.FELL_BACK_TO_WILDCARD:
        logger.warning(
            f"Encrypted secret '{namespace}/{item_name}' not found for environment '{environment}'! "
            f"Using default item '{WILDCARD}'."
        )
    return resolution.record


def resolve_host_scoped_secret(store: SecretStore, namespace: str, item_name: str, hostname: str) -> Dict[str, Any]:
    """
    Load a secret item once and return its entry for `hostname`.

    The item holds one entry per hostname plus an optional `_wildcard` entry
    used by hosts without their own.

    Raises:
        SecretNotFound: If the item is missing or has neither entry
    """
    record = _load_or_none(store, namespace, item_name)
    if record is None:
        raise SecretNotFound(namespace, item_name)

    resolution = resolve_with_fallback(record.get, hostname)

    if resolution.kind is ResolutionKind.NOT_FOUND:
        raise SecretNotFound(namespace, item_name)

    if resolution.kind is ResolutionKind.FELL_BACK_TO_WILDCARD:
        logger.warning(
            f"Secret '{namespace}/{item_name}' does not contain an entry for '{hostname}'. "
            f"Using default entry '{WILDCARD}'."
        )
    return resolution.record


def decode_secret_field(raw: Union[str, bytes]) -> bytes:
    """
    Base64-decode a secret field.

    Line breaks and other whitespace are ignored so PEM bodies stored with
    their original wrapping decode cleanly.

    Raises:
        DecodeError: If the value is not valid base64
    """
    if isinstance(raw, str):
        try:
            raw = raw.encode("ascii")
        except UnicodeEncodeError as e:
            raise DecodeError(f"Secret field is not valid base64: {e}") from e
    if not isinstance(raw, bytes):
        raise DecodeError(f"Secret field must be a string, got {type(raw).__name__}")

    try:
        return base64.b64decode(b"".join(raw.split()), validate=True)
    except binascii.Error as e:
        raise DecodeError(f"Secret field is not valid base64: {e}") from e


def load_credential_bundle(store: SecretStore, environment: str) -> CredentialBundle:
    """Resolve the Nexus admin credentials for an environment."""
    return CredentialBundle.from_record(resolve_secret(store, NAMESPACE, CREDENTIALS_ITEM, environment))


def get_nexus_data_bag(store: SecretStore, config: NodeConfig) -> Dict[str, Any]:
    """Resolve the repositories item for the node's environment."""
    return resolve_secret(store, NAMESPACE, REPOSITORIES_ITEM, config.environment)


def get_proxy_repositories(store: SecretStore, config: NodeConfig) -> Dict[str, Any]:
    return get_nexus_data_bag(store, config).get(PROXY_REPOSITORIES) or {}


def get_hosted_repositories(store: SecretStore, config: NodeConfig) -> Dict[str, Any]:
    return get_nexus_data_bag(store, config).get(HOSTED_REPOSITORIES) or {}


def get_group_repositories(store: SecretStore, config: NodeConfig) -> Dict[str, Any]:
    return get_nexus_data_bag(store, config).get(GROUP_REPOSITORIES) or {}


def _certificate_pair(record: Dict[str, Any], source: str) -> CertificatePair:
    missing = [field for field in (SSL_CERTIFICATE_CRT, SSL_CERTIFICATE_KEY) if not record.get(field)]
    if missing:
        raise SecretValidationError(f"Certificate entry '{source}' is missing: {', '.join(missing)}")
    return CertificatePair(
        crt=decode_secret_field(record[SSL_CERTIFICATE_CRT]),
        key=decode_secret_field(record[SSL_CERTIFICATE_KEY]),
    )


def get_ssl_certificate(store: SecretStore) -> CertificatePair:
    """
    Load the shared SSL certificate used by the Nexus web server.

    Raises:
        SecretNotFound: If the ssl_certificate item does not exist
        SecretValidationError: If crt or key is missing
        DecodeError: If crt or key is not valid base64
    """
    record = _load_or_none(store, NAMESPACE, SSL_CERTIFICATE_ITEM)
    if record is None:
        raise SecretNotFound(NAMESPACE, SSL_CERTIFICATE_ITEM)
    return _certificate_pair(record, SSL_CERTIFICATE_ITEM)


def get_certificates(store: SecretStore, config: NodeConfig) -> CertificatePair:
    """Load the certificate pair for the node's hostname, or the `_wildcard` pair."""
    entry = resolve_host_scoped_secret(store, NAMESPACE, CERTIFICATES_ITEM, config.hostname)
    if not isinstance(entry, dict):
        raise SecretValidationError(f"Certificate entry for '{config.hostname}' is not a mapping")
    return _certificate_pair(entry, f"{CERTIFICATES_ITEM}/{config.hostname}")
