"""Secret store interface and an in-memory implementation."""
import copy
import logging
from typing import Any, Dict, Protocol, Tuple

from .errors import SecretStoreItemNotFound

logger = logging.getLogger(__name__)

SCOPE_SEPARATOR = "--"


def scoped_item_name(item_name: str, scope: str) -> str:
    """Name of the store item holding `item_name` for an environment or `_wildcard`."""
    return f"{item_name}{SCOPE_SEPARATOR}{scope}"


class SecretStore(Protocol):
    """Encrypted key-value storage for secret records.

    `load` returns the decrypted record as a dict and raises
    SecretStoreItemNotFound when the item does not exist. Any other error
    is left to propagate.
    """

    def load(self, namespace: str, item_name: str) -> Dict[str, Any]:
        ...


class MemorySecretStore:
    """Dict-backed secret store for local runs and tests."""

    def __init__(self):
        self._items: Dict[Tuple[str, str], Dict[str, Any]] = {}

    def put(self, namespace: str, item_name: str, record: Dict[str, Any]) -> None:
        self._items[(namespace, item_name)] = copy.deepcopy(record)

    def load(self, namespace: str, item_name: str) -> Dict[str, Any]:
        logger.debug(f"Loading secret item {namespace}/{item_name} from memory")
        try:
            return copy.deepcopy(self._items[(namespace, item_name)])
        except KeyError:
            raise SecretStoreItemNotFound(namespace, item_name) from None
