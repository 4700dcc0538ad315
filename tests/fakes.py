"""In-memory storage backend implementing the capability interface."""

from __future__ import annotations

import io
import time

from bucketfile.storage.deadline import Deadline


class MemoryWriter:
    def __init__(self, backend: "MemoryBackend", bucket: str, key: str):
        self._backend = backend
        self._bucket = bucket
        self._key = key
        self._buf = io.BytesIO()
        self.aborted = False
        self.finalized = False

    def write(self, data: bytes) -> int:
        if self._backend.write_delay:
            time.sleep(self._backend.write_delay)
        if self._backend.write_error is not None:
            raise self._backend.write_error
        return self._buf.write(data)

    def finalize(self) -> None:
        if self._backend.commit_error is not None:
            raise self._backend.commit_error
        self._backend.buckets.setdefault(self._bucket, {})[self._key] = self._buf.getvalue()
        self.finalized = True

    def abort(self) -> None:
        self.aborted = True


class MemoryReader:
    def __init__(self, backend: "MemoryBackend", data: bytes):
        self._backend = backend
        self._stream = io.BytesIO(data)
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        if self._backend.read_delay:
            time.sleep(self._backend.read_delay)
        if self._backend.read_error is not None:
            raise self._backend.read_error
        return self._stream.read(size)

    def close(self) -> None:
        self.closed = True


class MemoryClient:
    def __init__(self, backend: "MemoryBackend", deadline: Deadline):
        self._backend = backend
        self.deadline = deadline
        self.closed = False
        self.writers: list[MemoryWriter] = []
        self.readers: list[MemoryReader] = []

    def open_writer(self, bucket: str, key: str) -> MemoryWriter:
        writer = MemoryWriter(self._backend, bucket, key)
        self.writers.append(writer)
        return writer

    def open_reader(self, bucket: str, key: str) -> MemoryReader:
        objects = self._backend.buckets.get(bucket, {})
        if key not in objects:
            raise FileNotFoundError(f"{bucket}/{key}: no such object")
        reader = MemoryReader(self._backend, objects[key])
        self.readers.append(reader)
        return reader

    def list_page(self, bucket: str, page_token: str | None) -> tuple[list[str], str | None]:
        backend = self._backend
        if backend.list_delay:
            time.sleep(backend.list_delay)
        if backend.fail_list_after_pages is not None and backend.pages_served >= backend.fail_list_after_pages:
            raise ConnectionError("listing interrupted")
        backend.pages_served += 1

        names = sorted(backend.buckets.get(bucket, {}))
        if page_token is not None:
            names = [n for n in names if n > page_token]
        page = names[: backend.page_size]
        more = len(names) > backend.page_size
        return page, (page[-1] if more else None)

    def close(self) -> None:
        self.closed = True


class MemoryBackend:
    """Buckets held in dicts, with failure and delay injection."""

    def __init__(self, page_size: int = 2):
        self.buckets: dict[str, dict[str, bytes]] = {}
        self.page_size = page_size
        self.clients: list[MemoryClient] = []
        self.pages_served = 0

        self.connect_error: Exception | None = None
        self.write_error: Exception | None = None
        self.commit_error: Exception | None = None
        self.read_error: Exception | None = None
        self.fail_list_after_pages: int | None = None

        self.write_delay = 0.0
        self.read_delay = 0.0
        self.list_delay = 0.0

    def connect(self, deadline: Deadline) -> MemoryClient:
        if self.connect_error is not None:
            raise self.connect_error
        client = MemoryClient(self, deadline)
        self.clients.append(client)
        return client
