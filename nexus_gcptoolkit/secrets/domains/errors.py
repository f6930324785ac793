"""Exceptions raised by the secret resolver and the Nexus connection helpers."""


class NexusToolkitError(Exception):
    """Base exception for nexus-gcptoolkit."""
    pass


class SecretError(NexusToolkitError):
    """Base exception for secret store and resolution errors."""
    pass


class SecretNotFound(SecretError):
    """Raised when neither the scoped nor the wildcard entry exists."""

    def __init__(self, namespace: str, item: str):
        self.namespace = namespace
        self.item = item
        super().__init__(f"Encrypted secret '{namespace}/{item}' not found")


class SecretStoreItemNotFound(SecretError):
    """Raised by a secret store when an item does not exist."""

    def __init__(self, namespace: str, item: str):
        self.namespace = namespace
        self.item = item
        super().__init__(f"Secret store has no item '{item}' in '{namespace}'")


class SecretStoreError(SecretError):
    """Raised when a secret store returns an unusable record."""
    pass


class SecretValidationError(SecretError):
    """Raised when a resolved record is missing required fields."""
    pass


class DecodeError(SecretError, ValueError):
    """Raised when a secret field is not valid base64."""
    pass


class NexusConnectionError(NexusToolkitError):
    """Base exception for failures to build an authenticated Nexus client."""
    pass


class PermissionsError(NexusConnectionError):
    """Raised when Nexus rejects the supplied credentials."""
    pass


class CouldNotConnect(NexusConnectionError):
    """Raised when the Nexus server cannot be reached."""
    pass


class UnexpectedStatusCode(NexusConnectionError):
    """Raised when Nexus answers with a status code we don't handle."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(message or f"Nexus returned unexpected status code {status_code}")


class NexusUnavailableError(NexusConnectionError):
    """Raised when Nexus stays unreachable after all retries."""
    pass
