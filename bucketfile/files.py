"""Upload, fetch and list objects in a bucket.

Each call opens its own client, bounds itself with a wall-clock deadline
measured from entry, does its remote work and closes the client on every
exit path. Failures are raised as a ``StorageError`` subclass naming the
step that failed; nothing is retried here.
"""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from bucketfile.core.config import get_settings
from bucketfile.storage.contracts import (
    CommitError,
    ConnectError,
    ListingError,
    OpenError,
    ReadChannel,
    StorageBackend,
    StorageClient,
    TransferError,
    WriteChannel,
)
from bucketfile.storage.deadline import Deadline

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _default_backend() -> StorageBackend:
    from bucketfile.storage.factory import build_backend

    return build_backend()


@contextmanager
def _connect(
    backend: StorageBackend, deadline: Deadline, op: str, bucket: str, key: str | None
) -> Iterator[StorageClient]:
    try:
        deadline.check("connect")
        client = backend.connect(deadline)
    except Exception as exc:
        logger.warning("%s: storage client construction failed: %s", op, exc)
        raise ConnectError(op, bucket, key, f"client construction: {exc}") from exc
    try:
        yield client
    finally:
        try:
            client.close()
        except Exception as exc:
            logger.warning("%s: failed to close storage client: %s", op, exc)


def _copy(source: BinaryIO, writer: WriteChannel, deadline: Deadline) -> int:
    total = 0
    while True:
        deadline.check("transfer")
        chunk = source.read(CHUNK_SIZE)
        if not chunk:
            return total
        writer.write(chunk)
        total += len(chunk)


def _read_all(reader: ReadChannel, deadline: Deadline) -> bytes:
    buf = io.BytesIO()
    while True:
        deadline.check("transfer")
        chunk = reader.read(CHUNK_SIZE)
        if not chunk:
            return buf.getvalue()
        buf.write(chunk)


def upload(
    source: BinaryIO,
    bucket: str,
    object_name: str,
    *,
    backend: StorageBackend | None = None,
    timeout: float | None = None,
) -> None:
    """Upload everything readable from ``source`` to ``bucket/object_name``.

    ``source`` stays owned by the caller and is not closed. The object exists
    only once the write is finalized; any earlier failure leaves nothing
    committed.

    Raises:
        ConnectError: The storage client could not be built.
        OpenError: The write channel could not be opened.
        TransferError: Copying bytes failed or the deadline ran out.
        CommitError: Finalizing the write failed.
    """
    deadline = Deadline(timeout if timeout is not None else get_settings().UPLOAD_TIMEOUT_SECONDS)
    backend = backend or _default_backend()

    with _connect(backend, deadline, "upload", bucket, object_name) as client:
        try:
            writer = client.open_writer(bucket, object_name)
        except Exception as exc:
            logger.warning("upload: opening writer for %s/%s failed: %s", bucket, object_name, exc)
            raise OpenError("upload", bucket, object_name, f"Object({object_name!r}).open_writer: {exc}") from exc

        try:
            size = _copy(source, writer, deadline)
        except Exception as exc:
            writer.abort()
            logger.warning("upload: copy to %s/%s failed: %s", bucket, object_name, exc)
            raise TransferError("upload", bucket, object_name, f"copy: {exc}") from exc

        try:
            writer.finalize()
        except Exception as exc:
            logger.warning("upload: commit of %s/%s failed: %s", bucket, object_name, exc)
            raise CommitError("upload", bucket, object_name, f"finalize: {exc}") from exc

    logger.debug("Uploaded %d bytes to %s/%s", size, bucket, object_name)


def fetch(
    bucket: str,
    object_name: str,
    *,
    backend: StorageBackend | None = None,
    timeout: float | None = None,
) -> bytes:
    """Return the full contents of ``bucket/object_name``.

    The whole object is buffered in memory; there is no size cap.

    Raises:
        ConnectError: The storage client could not be built.
        OpenError: The object could not be opened (missing, access denied).
        TransferError: Reading failed partway or the deadline ran out.
    """
    deadline = Deadline(timeout if timeout is not None else get_settings().FETCH_TIMEOUT_SECONDS)
    backend = backend or _default_backend()

    with _connect(backend, deadline, "fetch", bucket, object_name) as client:
        try:
            reader = client.open_reader(bucket, object_name)
        except Exception as exc:
            logger.warning("fetch: opening %s/%s failed: %s", bucket, object_name, exc)
            raise OpenError("fetch", bucket, object_name, f"Object({object_name!r}).open_reader: {exc}") from exc

        try:
            data = _read_all(reader, deadline)
        except Exception as exc:
            logger.warning("fetch: reading %s/%s failed: %s", bucket, object_name, exc)
            raise TransferError("fetch", bucket, object_name, f"read: {exc}") from exc
        finally:
            reader.close()

    logger.debug("Fetched %d bytes from %s/%s", len(data), bucket, object_name)
    return data


def list_names(
    bucket: str,
    *,
    backend: StorageBackend | None = None,
    timeout: float | None = None,
) -> list[str]:
    """List every object name in ``bucket`` in the order the store returns them.

    An empty bucket gives an empty list. If a page fails, the raised
    ``ListingError`` carries the names gathered so far in ``partial``.

    Raises:
        ConnectError: The storage client could not be built.
        ListingError: A listing page failed or the deadline ran out.
    """
    deadline = Deadline(timeout if timeout is not None else get_settings().LIST_TIMEOUT_SECONDS)
    backend = backend or _default_backend()
    names: list[str] = []

    with _connect(backend, deadline, "list", bucket, None) as client:
        token: str | None = None
        while True:
            try:
                deadline.check("list")
                page, token = client.list_page(bucket, token)
            except Exception as exc:
                logger.warning(
                    "list: listing %s failed after %d names: %s", bucket, len(names), exc
                )
                raise ListingError(
                    "list", bucket, None, f"Bucket({bucket!r}).list_page: {exc}", partial=names
                ) from exc
            names.extend(page)
            if token is None:
                break

    logger.debug("Listed %d objects in %s", len(names), bucket)
    return names


__all__ = ["upload", "fetch", "list_names"]
