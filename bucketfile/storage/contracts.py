"""Storage interfaces and error types."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from bucketfile.storage.deadline import Deadline


class StorageError(Exception):
    """Wraps underlying storage exceptions with operation context."""

    step = "storage"

    def __init__(self, op: str, bucket: str | None, key: str | None, message: str):
        self.op = op
        self.bucket = bucket
        self.key = key
        self.message = message
        super().__init__(self.__str__())

    def __str__(self) -> str:
        bucket_repr = self.bucket or "<unknown>"
        key_repr = self.key or "<unknown>"
        return f"{self.op} failed for bucket={bucket_repr} key={key_repr}: {self.message}"


class ConnectError(StorageError):
    """The storage client could not be constructed."""

    step = "connect"


class OpenError(StorageError):
    """A read or write channel could not be opened."""

    step = "open"


class TransferError(StorageError):
    """Copying bytes to or from the store failed, deadline included."""

    step = "transfer"


class CommitError(StorageError):
    """Finalizing a write failed; the object must be treated as not written."""

    step = "commit"


class ListingError(StorageError):
    """A listing page failed. ``partial`` holds the names gathered before it."""

    step = "list"

    def __init__(
        self,
        op: str,
        bucket: str | None,
        key: str | None,
        message: str,
        partial: Sequence[str] = (),
    ):
        self.partial = list(partial)
        super().__init__(op, bucket, key, message)


@runtime_checkable
class WriteChannel(Protocol):
    """Byte sink for one object. Nothing is visible until ``finalize``."""

    def write(self, data: bytes) -> int:
        ...

    def finalize(self) -> None:
        ...

    def abort(self) -> None:
        ...


@runtime_checkable
class ReadChannel(Protocol):
    """Byte source for one object."""

    def read(self, size: int = -1) -> bytes:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class StorageClient(Protocol):
    """A connected client, owned by a single operation."""

    def open_writer(self, bucket: str, key: str) -> WriteChannel:
        ...

    def open_reader(self, bucket: str, key: str) -> ReadChannel:
        ...

    def list_page(self, bucket: str, page_token: str | None) -> tuple[list[str], str | None]:
        """Return one page of names and the next token, ``None`` at the end."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class StorageBackend(Protocol):
    """Factory for per-call clients bounded by a deadline."""

    def connect(self, deadline: Deadline) -> StorageClient:
        ...


__all__ = [
    "StorageError",
    "ConnectError",
    "OpenError",
    "TransferError",
    "CommitError",
    "ListingError",
    "WriteChannel",
    "ReadChannel",
    "StorageClient",
    "StorageBackend",
]
