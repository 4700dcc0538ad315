"""MinIO-backed implementation of the storage interfaces."""

from __future__ import annotations

import logging
import os
import threading
from contextlib import closing

import certifi
import urllib3
from minio import Minio
from minio.credentials import ChainedProvider, EnvAWSProvider, EnvMinioProvider, IamAwsProvider

from bucketfile.storage.contracts import ReadChannel, StorageBackend, StorageClient, WriteChannel
from bucketfile.storage.deadline import Deadline, DeadlineExceeded

logger = logging.getLogger(__name__)

# Smallest multipart part S3 accepts; also the pipe's back-pressure threshold.
PART_SIZE = 5 * 1024 * 1024
DEFAULT_PAGE_SIZE = 1000


class _Pipe:
    """Bounded in-memory pipe between a writer and a background ``put_object``."""

    def __init__(self, capacity: int = PART_SIZE):
        self._capacity = capacity
        self._buffer = bytearray()
        self._closed = False
        self._error: BaseException | None = None
        self._cond = threading.Condition()

    def write(self, data: bytes, timeout: float) -> bool:
        """Buffer ``data``; False if no room freed up within ``timeout``."""
        with self._cond:
            has_room = self._cond.wait_for(
                lambda: self._error is not None or len(self._buffer) < self._capacity,
                timeout,
            )
            if self._error is not None:
                raise self._error
            if not has_room:
                return False
            self._buffer += data
            self._cond.notify_all()
            return True

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def abort(self, exc: BaseException) -> None:
        with self._cond:
            if self._error is None:
                self._error = exc
            self._cond.notify_all()

    def read(self, size: int = -1) -> bytes:
        with self._cond:
            self._cond.wait_for(lambda: self._buffer or self._closed or self._error is not None)
            if self._error is not None:
                raise self._error
            count = len(self._buffer) if size is None or size < 0 else min(size, len(self._buffer))
            chunk = bytes(self._buffer[:count])
            del self._buffer[:count]
            self._cond.notify_all()
            return chunk


class MinioWriter(WriteChannel):
    """Streams written bytes into ``put_object`` running on a daemon thread.

    The object only becomes visible once ``finalize`` sees ``put_object``
    return. ``abort`` poisons the pipe so the SDK fails the upload and drops
    any multipart parts already sent.
    """

    def __init__(self, client: Minio, bucket: str, key: str, deadline: Deadline):
        self._client = client
        self._bucket = bucket
        self._key = key
        self._deadline = deadline
        self._pipe = _Pipe()
        self._failure: Exception | None = None
        self._thread = threading.Thread(
            target=self._run,
            name=f"bucketfile-put-{bucket}/{key}",
            daemon=True,
        )
        self._thread.start()

    def _run(self) -> None:
        try:
            self._client.put_object(
                bucket_name=self._bucket,
                object_name=self._key,
                data=self._pipe,
                length=-1,
                part_size=PART_SIZE,
            )
        except Exception as exc:
            self._failure = exc
            self._pipe.abort(exc)

    def write(self, data: bytes) -> int:
        if self._failure is not None:
            raise self._failure
        if not self._pipe.write(data, timeout=self._deadline.remaining()):
            raise DeadlineExceeded("transfer", self._deadline.seconds)
        return len(data)

    def finalize(self) -> None:
        self._pipe.close()
        self._thread.join(self._deadline.remaining())
        if self._thread.is_alive():
            # A put_object already in its last PUT may still commit the
            # object after this; the caller only learns it is not confirmed.
            exc = DeadlineExceeded("commit", self._deadline.seconds)
            self._pipe.abort(exc)
            raise exc
        if self._failure is not None:
            raise self._failure
        logger.debug("Committed object %s/%s", self._bucket, self._key)

    def abort(self) -> None:
        self._pipe.abort(OSError(f"write to {self._bucket}/{self._key} aborted"))


class MinioReader(ReadChannel):
    """Read channel over the streaming response of ``get_object``."""

    def __init__(self, response):
        self._response = response

    def read(self, size: int = -1) -> bytes:
        return self._response.read(None if size < 0 else size)

    def close(self) -> None:
        try:
            self._response.close()
        finally:
            self._response.release_conn()


class MinioClient(StorageClient):
    """Per-call client over a private ``urllib3`` pool."""

    def __init__(
        self,
        client: Minio,
        http_client: urllib3.PoolManager | None,
        deadline: Deadline,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._client = client
        self._http = http_client
        self._deadline = deadline
        self._page_size = page_size

    def open_writer(self, bucket: str, key: str) -> MinioWriter:
        return MinioWriter(self._client, bucket, key, self._deadline)

    def open_reader(self, bucket: str, key: str) -> MinioReader:
        return MinioReader(self._client.get_object(bucket_name=bucket, object_name=key))

    def list_page(self, bucket: str, page_token: str | None) -> tuple[list[str], str | None]:
        names: list[str] = []
        objects = self._client.list_objects(
            bucket_name=bucket, recursive=True, start_after=page_token
        )
        with closing(objects):
            for obj in objects:
                names.append(obj.object_name)
                if len(names) >= self._page_size:
                    break
        next_token = names[-1] if len(names) >= self._page_size else None
        return names, next_token

    def ensure_bucket(self, name: str) -> None:
        if not self._client.bucket_exists(bucket_name=name):
            self._client.make_bucket(bucket_name=name)
            logger.info("Created bucket %s", name)

    def close(self) -> None:
        if self._http is not None:
            self._http.clear()


def _http_client(deadline: Deadline) -> urllib3.PoolManager:
    """Pool like the SDK default, bounded by the time left on the deadline.

    ``total`` caps connect plus response wait of each request, and retries are
    off so a stalled endpoint cannot stretch one call past the deadline.
    """
    return urllib3.PoolManager(
        timeout=urllib3.Timeout(total=deadline.remaining()),
        maxsize=10,
        cert_reqs="CERT_REQUIRED",
        ca_certs=os.environ.get("SSL_CERT_FILE") or certifi.where(),
        retries=False,
    )


class MinioBackend(StorageBackend):
    """Builds a fresh MinIO client for every operation."""

    def __init__(
        self,
        endpoint: str,
        *,
        access_key: str | None = None,
        secret_key: str | None = None,
        secure: bool = False,
        region: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.endpoint = endpoint
        self.secure = secure
        self.region = region
        self.page_size = page_size
        self._access_key = access_key or None
        self._secret_key = secret_key or None

    def _credentials(self) -> ChainedProvider | None:
        if self._access_key and self._secret_key:
            return None
        return ChainedProvider([EnvAWSProvider(), EnvMinioProvider(), IamAwsProvider()])

    def connect(self, deadline: Deadline) -> MinioClient:
        deadline.check("connect")
        http_client = _http_client(deadline)
        try:
            client = Minio(
                self.endpoint,
                access_key=self._access_key,
                secret_key=self._secret_key,
                secure=self.secure,
                region=self.region,
                http_client=http_client,
                credentials=self._credentials(),
            )
        except Exception:
            http_client.clear()
            raise
        return MinioClient(client, http_client, deadline, page_size=self.page_size)

    def __repr__(self) -> str:
        return f"MinioBackend(endpoint={self.endpoint!r}, secure={self.secure})"


__all__ = ["MinioBackend", "MinioClient", "MinioReader", "MinioWriter", "PART_SIZE"]
