"""
In-place byte editing of seekable binary streams.

A replacement overwrites `size` bytes at `offset` with new data. The tail of the
stream is moved in chunks of `buffer_size` bytes, so files are never loaded whole.
"""

import logging
from typing import IO, Iterable, Optional, Tuple

from cosmos.exceptions import CosmosError, ErrorCode

logger = logging.getLogger(__name__)

# (offset, size, data). A size of None replaces everything up to the end of the stream.
Replacement = Tuple[int, Optional[int], Optional[bytes]]

DEFAULT_BUFFER_SIZE = 8192


class StreamEditor:
    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE):
        self.buffer_size = buffer_size

    def replace(
        self,
        stream: IO[bytes],
        offset: int,
        size: Optional[int] = None,
        data: Optional[bytes] = None,
        path: Optional[str] = None,
    ) -> int:
        """Replaces a byte range and returns the change in stream size."""
        self._check_seekable(stream, path)
        return self._replace(stream, offset, size, data, path)

    def replace_multiple(self, stream: IO[bytes], replacements: Iterable[Replacement], path: Optional[str] = None) -> int:
        """
        Applies several replacements, all expressed in offsets of the unedited stream.

        Replacements are applied from the highest offset down, so earlier offsets stay
        valid. Replacements sharing an offset are applied in the order given.
        """
        self._check_seekable(stream, path)

        ordered = sorted(enumerate(replacements), key=lambda item: (-item[1][0], item[0]))
        delta = 0
        for _, (offset, size, data) in ordered:
            delta += self._replace(stream, offset, size, data, path)
        return delta

    def _replace(self, stream, offset: int, size: Optional[int], data: Optional[bytes], path: Optional[str]) -> int:
        stream_size = self._size(stream, path)
        if size is None:
            size = stream_size - offset
        if offset < 0 or size < 0 or offset + size > stream_size:
            raise CosmosError(ErrorCode.STREAM_OFFSET_OUT_OF_BOUNDS, path=path, offset=offset)

        data = data or b""
        delta = len(data) - size
        if delta > 0:
            self._expand(stream, stream_size, offset + size, delta, path)
        elif delta < 0:
            self._contract(stream, stream_size, offset + size, delta, path)

        self._seek(stream, offset, path)
        self._write(stream, data, path)
        logger.debug("Replaced %d byte(s) at offset %d with %d byte(s)", size, offset, len(data))
        return delta

    def _expand(self, stream, stream_size: int, tail_start: int, delta: int, path: Optional[str]):
        # Move the tail right, starting from the end so nothing is overwritten before it is read
        position = stream_size
        while position > tail_start:
            chunk_start = max(tail_start, position - self.buffer_size)
            self._seek(stream, chunk_start, path)
            chunk = self._read(stream, position - chunk_start, path)
            self._seek(stream, chunk_start + delta, path)
            self._write(stream, chunk, path)
            position = chunk_start

    def _contract(self, stream, stream_size: int, tail_start: int, delta: int, path: Optional[str]):
        position = tail_start
        while position < stream_size:
            self._seek(stream, position, path)
            chunk = self._read(stream, min(self.buffer_size, stream_size - position), path)
            if not chunk:
                break
            self._seek(stream, position + delta, path)
            self._write(stream, chunk, path)
            position += len(chunk)

        self._truncate(stream, stream_size + delta, path)

    # --- Stream primitives ---

    def _check_seekable(self, stream, path: Optional[str]):
        if not stream.seekable():
            raise CosmosError(ErrorCode.WRITE_FAILURE, path=path, target=_target(path), reason="the stream is not seekable")

    def _size(self, stream, path: Optional[str]) -> int:
        try:
            return stream.seek(0, 2)
        except OSError as e:
            raise _read_failure(e, path) from e

    def _seek(self, stream, offset: int, path: Optional[str]):
        try:
            stream.seek(offset)
        except OSError as e:
            raise _read_failure(e, path) from e

    def _read(self, stream, size: int, path: Optional[str]) -> bytes:
        try:
            return stream.read(size)
        except OSError as e:
            raise _read_failure(e, path) from e

    def _write(self, stream, data: bytes, path: Optional[str]):
        try:
            stream.write(data)
        except OSError as e:
            raise _write_failure(e, path) from e

    def _truncate(self, stream, size: int, path: Optional[str]):
        try:
            stream.truncate(size)
        except OSError as e:
            raise _write_failure(e, path) from e


def _target(path: Optional[str]) -> str:
    return f"'{path}'" if path else "stream"


def _read_failure(e: OSError, path: Optional[str]) -> CosmosError:
    return CosmosError(ErrorCode.READ_FAILURE, path=path, target=_target(path), reason=e.strerror or str(e))


def _write_failure(e: OSError, path: Optional[str]) -> CosmosError:
    return CosmosError(ErrorCode.WRITE_FAILURE, path=path, target=_target(path), reason=e.strerror or str(e))
