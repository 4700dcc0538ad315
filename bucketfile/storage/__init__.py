"""Storage package: object storage abstraction."""

from bucketfile.storage.contracts import (
    CommitError,
    ConnectError,
    ListingError,
    OpenError,
    ReadChannel,
    StorageBackend,
    StorageClient,
    StorageError,
    TransferError,
    WriteChannel,
)
from bucketfile.storage.deadline import Deadline, DeadlineExceeded
from bucketfile.storage.minio_impl import MinioBackend

__all__ = [
    "CommitError",
    "ConnectError",
    "Deadline",
    "DeadlineExceeded",
    "ListingError",
    "MinioBackend",
    "OpenError",
    "ReadChannel",
    "StorageBackend",
    "StorageClient",
    "StorageError",
    "TransferError",
    "WriteChannel",
]
