"""Upload, fetch and list objects in an S3-compatible bucket."""

from bucketfile.files import fetch, list_names, upload
from bucketfile.storage.contracts import (
    CommitError,
    ConnectError,
    ListingError,
    OpenError,
    StorageError,
    TransferError,
)

__all__ = [
    "upload",
    "fetch",
    "list_names",
    "StorageError",
    "ConnectError",
    "OpenError",
    "TransferError",
    "CommitError",
    "ListingError",
]
