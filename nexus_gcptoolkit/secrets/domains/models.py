"""Domain models for Nexus secrets and connections."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ...constants import DEFAULT_ADMIN, PREFER_UPDATED, UPDATED_ADMIN
from .errors import SecretValidationError


class ResolutionKind(Enum):
    """Outcome of a wildcard-fallback lookup."""
    FOUND = "found"
    FELL_BACK_TO_WILDCARD = "fell_back_to_wildcard"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Resolution:
    """Tagged result of a wildcard-fallback lookup."""
    kind: ResolutionKind
    record: Optional[Dict[str, Any]] = None


class CredentialMode(Enum):
    """Which admin credential set to connect with.

    AUTO_DETECT tries one set and falls back to the other, PRIMARY only uses
    the default admin credentials and SECONDARY only the updated ones.
    """
    AUTO_DETECT = "auto_detect"
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class CredentialSet:
    username: str
    password: str

    @classmethod
    def from_record(cls, record: Any, field: str) -> "CredentialSet":
        if not isinstance(record, Mapping):
            raise SecretValidationError(f"Credentials entry '{field}' is missing or not a mapping")
        missing = [key for key in ("username", "password") if not record.get(key)]
        if missing:
            raise SecretValidationError(
                f"Credentials entry '{field}' is missing: {', '.join(missing)}"
            )
        return cls(username=str(record["username"]), password=str(record["password"]))

    def __repr__(self) -> str:
        return f"CredentialSet(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class CredentialBundle:
    """Default and rotated Nexus admin credentials."""
    default_credentials: CredentialSet
    updated_credentials: CredentialSet
    prefer_updated: bool = False

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CredentialBundle":
        return cls(
            default_credentials=CredentialSet.from_record(record.get(DEFAULT_ADMIN), DEFAULT_ADMIN),
            updated_credentials=CredentialSet.from_record(record.get(UPDATED_ADMIN), UPDATED_ADMIN),
            prefer_updated=bool(record.get(PREFER_UPDATED, False)),
        )


@dataclass(frozen=True)
class ConnectionOverrides:
    """Connection settings merged with a credential set for each attempt."""
    url: str
    repository: str
    ssl_verify: bool = True

    @classmethod
    def from_config(cls, config: "NodeConfig") -> "ConnectionOverrides":
        return cls(url=config.url, repository=config.repository, ssl_verify=config.ssl_verify)

    def merge(self, credentials: CredentialSet) -> Dict[str, str]:
        return {
            "url": self.url,
            "repository": self.repository,
            "username": credentials.username,
            "password": credentials.password,
        }


@dataclass(frozen=True)
class CertificatePair:
    crt: bytes
    key: bytes


@dataclass(frozen=True)
class NodeConfig:
    """Settings for the node talking to Nexus, loaded from the YAML config."""
    environment: str
    hostname: str
    url: str
    repository: str
    retries: int = 3
    retry_delay: float = 10
    ssl_verify: bool = True
    credentials_rotated: Optional[bool] = None
    project_id: Optional[str] = None

    @property
    def credential_mode(self) -> CredentialMode:
        if self.credentials_rotated is None:
            return CredentialMode.AUTO_DETECT
        if self.credentials_rotated:
            return CredentialMode.SECONDARY
        return CredentialMode.PRIMARY
