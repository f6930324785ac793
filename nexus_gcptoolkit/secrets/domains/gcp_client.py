"""GCP Secret Manager backed secret store."""
import os
import logging
from typing import Any, Dict, Optional

import yaml
from google.api_core import exceptions as gcp_exceptions
from google.cloud import secretmanager

from .errors import SecretStoreError, SecretStoreItemNotFound

logger = logging.getLogger(__name__)


def secret_id_for(namespace: str, item_name: str) -> str:
    """
    Build the Secret Manager secret id for a store item.

    Secret ids only allow [a-zA-Z0-9_-], so namespace and item are joined
    with a double hyphen, e.g. "nexus--credentials--_wildcard".
    """
    return f"{namespace}--{item_name}"


class GCPSecretStore:
    """Secret store reading YAML or JSON records from GCP Secret Manager."""

    def __init__(self, project_id: Optional[str] = None, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        self._project_id = project_id
        self._client = client

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    @property
    def project_id(self) -> str:
        """
        GCP project ID holding the secrets.

        Priority order:
        1. GCP_PROJECT environment variable (allows override)
        2. project_id passed to the store (from the config file)

        Raises:
            ValueError: If no project ID is configured
        """
        gcp_project_env = os.getenv("GCP_PROJECT")
        if gcp_project_env:
            return gcp_project_env
        if self._project_id:
            return self._project_id
        raise ValueError(
            "Project ID not found. Please set GCP_PROJECT environment variable "
            "or configure gcp.project_id in config file"
        )

    def load(self, namespace: str, item_name: str) -> Dict[str, Any]:
        """
        Load and parse a secret record.

        Args:
            namespace: Store namespace, e.g. "nexus"
            item_name: Item within the namespace

        Returns:
            The secret payload parsed as a mapping

        Raises:
            SecretStoreItemNotFound: If the secret does not exist
            SecretStoreError: If the payload is not a YAML/JSON mapping
        """
        secret_id = secret_id_for(namespace, item_name)
        name = f"projects/{self.project_id}/secrets/{secret_id}/versions/latest"
        logger.debug(f"Fetching secret {secret_id} from GCP Secret Manager")

        try:
            response = self.client.access_secret_version(request={"name": name})
        except gcp_exceptions.NotFound:
            raise SecretStoreItemNotFound(namespace, item_name) from None

        try:
            record = yaml.safe_load(response.payload.data.decode("UTF-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise SecretStoreError(f"Failed to parse secret {secret_id}: {e}") from e

        if not isinstance(record, dict):
            raise SecretStoreError(f"Secret {secret_id} does not contain a mapping")
        return record
