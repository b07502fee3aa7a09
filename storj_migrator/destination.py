"""Destination network seam.

The transfer core only sequences these primitives; key derivation,
encryption and capability serialization belong to the network library
behind the adapter (see :mod:`storj_migrator.uplink`).
"""

from dataclasses import dataclass
from typing import Any, BinaryIO, Protocol


class DestinationError(Exception):
    """Raised by adapters for any failed network or library call."""


@dataclass(frozen=True)
class Caveat:
    disallow_reads: bool = False
    disallow_writes: bool = False
    disallow_deletes: bool = False


@dataclass(frozen=True)
class EncryptionRestriction:
    bucket: str
    path_prefix: str


@dataclass(frozen=True)
class ParsedScope:
    satellite: str
    api_key: Any
    encryption_access: Any


class DestinationBucket(Protocol):
    name: str

    def upload_object(self, key: str, data: bytes) -> None:
        """Write ``data`` as the object ``key`` (overwrite)."""

    def list_objects(self, prefix: str, recursive: bool = False) -> list[str]:
        """Return object keys under ``prefix``."""

    def download(self, key: str) -> BinaryIO:
        """Open ``key`` for reading; caller closes the stream."""

    def close(self) -> None:
        ...


class DestinationProject(Protocol):
    def salted_key_from_passphrase(self, passphrase: str) -> Any:
        """Derive the encryption key for this project from ``passphrase``."""

    def open_bucket(self, name: str, encryption_access: Any) -> DestinationBucket:
        ...

    def create_bucket(self, name: str) -> None:
        ...

    def close(self) -> None:
        ...


class DestinationNetwork(Protocol):
    def parse_api_key(self, raw: str) -> Any:
        ...

    def open_project(self, satellite: str, api_key: Any) -> DestinationProject:
        ...

    def new_encryption_access(self, key: Any) -> Any:
        ...

    def serialize_encryption_access(self, access: Any) -> str:
        ...

    def parse_encryption_access(self, serialized: str) -> Any:
        ...

    def restrict_api_key(self, api_key: Any, caveat: Caveat) -> Any:
        ...

    def restrict_encryption_access(self, access: Any, api_key: Any,
                                   restriction: EncryptionRestriction) -> tuple[Any, Any]:
        """Narrow ``access`` to one bucket and path prefix; returns (api_key, access)."""

    def serialize_scope(self, satellite: str, api_key: Any, access: Any) -> str:
        ...

    def parse_scope(self, serialized: str) -> ParsedScope:
        ...

    def close(self) -> None:
        ...
