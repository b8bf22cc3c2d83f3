"""Chunked byte buffer for serialization with reuse of individual chunks."""

from __future__ import annotations

import io
import threading
from collections import deque
from dataclasses import dataclass
from typing import BinaryIO, Iterable


@dataclass(frozen=True)
class PoolConfig:
    """Allocation and reuse strategy for buffer chunks."""

    start_size: int = 128  # Minimum chunk size that is allocated.
    pooled_size: int = 512  # Minimum chunk size that is reused.
    max_size: int = 32768  # Maximum chunk size that will be allocated.

    def __post_init__(self) -> None:
        if self.start_size <= 0 or self.pooled_size <= 0 or self.max_size <= 0:
            raise ValueError("pool sizes must be positive")


_POOL_LIMIT = 64

_lock = threading.Lock()
_config = PoolConfig()
_pools: dict[int, list[bytearray]] = {}


def _init_pools() -> None:
    size = _config.pooled_size
    while size <= _config.max_size:
        _pools.setdefault(size, [])
        size *= 2


_init_pools()


def init(cfg: PoolConfig) -> None:
    """Install a non-default pooling strategy; call before serializing."""
    global _config
    with _lock:
        _config = cfg
        _init_pools()


def _put_chunk(chunk: bytearray, capacity: int) -> None:
    """Return a chunk to its reuse pool if chunks of that size are pooled."""
    if capacity < _config.pooled_size:
        return
    with _lock:
        pool = _pools.get(capacity)
        if pool is not None and len(pool) < _POOL_LIMIT:
            chunk.clear()
            pool.append(chunk)


def _get_chunk(size: int) -> bytearray:
    """Take a chunk from the reuse pool or create a new one."""
    if size >= _config.pooled_size:
        with _lock:
            pool = _pools.get(size)
            if pool:
                return pool.pop()
    return bytearray()


class Buffer:
    """A buffer made of a chain of chunks, grown without copying old data."""

    def __init__(self) -> None:
        self.buf = bytearray()
        self._capacity = 0
        self._chunks: list[tuple[bytearray, int]] = []

    def ensure_space(self, s: int) -> None:
        """Make sure the current chunk has at least ``s`` free bytes."""
        if self._capacity - len(self.buf) < s:
            self._grow()

    def _grow(self) -> None:
        if self.buf:
            self._chunks.append((self.buf, self._capacity))
            size = self._capacity * 2
        else:
            if self._capacity:
                _put_chunk(self.buf, self._capacity)
            size = _config.start_size
        size = min(size, _config.max_size)
        self.buf = _get_chunk(size)
        self._capacity = size

    def append_byte(self, data: int) -> None:
        """Append a single byte."""
        self.ensure_space(1)
        self.buf.append(data)

    def append_bytes(self, data: bytes | bytearray | memoryview) -> None:
        """Append bytes, spilling over into new chunks as needed."""
        if len(data) <= self._capacity - len(self.buf):
            self.buf += data
            return
        view = memoryview(data)
        while view:
            self.ensure_space(1)
            room = self._capacity - len(self.buf)
            self.buf += view[:room]
            view = view[room:]

    def append_string(self, data: str) -> None:
        """Append a string encoded as UTF-8."""
        self.append_bytes(data.encode("utf-8", errors="surrogateescape"))

    def size(self) -> int:
        """Total number of bytes held in all chunks."""
        return len(self.buf) + sum(len(chunk) for chunk, _ in self._chunks)

    def _detach(self) -> list[tuple[bytearray, int]]:
        chunks = self._chunks
        if self.buf or self._capacity:
            chunks.append((self.buf, self._capacity))
        self._chunks = []
        self.buf = bytearray()
        self._capacity = 0
        return chunks

    @staticmethod
    def _release(chunks: Iterable[tuple[bytearray, int]]) -> None:
        for chunk, capacity in chunks:
            _put_chunk(chunk, capacity)

    def dump_to(self, w: BinaryIO) -> int:
        """Write the contents to ``w``, reset the buffer and return bytes written."""
        chunks = self._detach()
        written = 0
        try:
            for chunk, _ in chunks:
                if not chunk:
                    continue
                n = w.write(bytes(chunk))
                written += len(chunk) if n is None else n
        finally:
            self._release(chunks)
        return written

    def build_bytes(self, reuse: bytearray | None = None) -> bytes | bytearray:
        """Return all contents as one byte string and reset the buffer.

        If ``reuse`` is given, its contents are replaced and it is returned.
        """
        chunks = self._detach()
        data = b"".join(chunk for chunk, _ in chunks)
        self._release(chunks)
        if reuse is not None:
            reuse[:] = data
            return reuse
        return data

    def read_closer(self) -> ChunkReader:
        """Return a reader over the contents and reset the buffer."""
        chunks = self._detach()
        reader = ChunkReader(bytes(chunk) for chunk, _ in chunks)
        self._release(chunks)
        return reader


class ChunkReader(io.RawIOBase):
    """A readable stream over a sequence of chunks."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        super().__init__()
        self._chunks: deque[bytes] = deque(bytes(c) for c in chunks if c)
        self._offset = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left when ``size`` is negative."""
        if self.closed:
            raise ValueError("I/O operation on closed reader")
        if size is None or size < 0:
            size = sum(len(c) for c in self._chunks) - self._offset
        out = bytearray()
        while self._chunks and len(out) < size:
            chunk = self._chunks[0]
            piece = chunk[self._offset:self._offset + size - len(out)]
            out += piece
            self._offset += len(piece)
            if self._offset == len(chunk):
                self._chunks.popleft()
                self._offset = 0
        return bytes(out)

    def readinto(self, b) -> int:
        data = self.read(len(b))
        n = len(data)
        b[:n] = data
        return n

    def close(self) -> None:
        self._chunks.clear()
        self._offset = 0
        super().close()