"""
Accumulation of a streamed HTTP response body.

The I/O layer feeds every chunk it receives into a ResponseBuffer and
hands the finalized bytes to the protocol parsers.  The buffer belongs
to one exchange only; use it as a context manager so it's released on
every exit path.
"""

import logging
from typing import Optional

from tinycaldav.lib import error

log = logging.getLogger(__name__)

#: capacity allocated on the first chunk
BASELINE_CAPACITY = 4096

#: default upper bound of a response body, 64 MiB
DEFAULT_MAX_SIZE = BASELINE_CAPACITY * 2**14


class ResponseBuffer:
    """
    Growable byte buffer.  Storage is allocated lazily on the first
    non-empty chunk with BASELINE_CAPACITY bytes, and the capacity is
    doubled until the next chunk fits, so the capacity is always
    BASELINE_CAPACITY times a power of two.

    Args:
        max_size: largest accepted body size in bytes, None for no limit.
                  Exceeding it raises OutOfMemoryError.
        url: for error messages only
    """

    def __init__(
        self, max_size: Optional[int] = DEFAULT_MAX_SIZE, url: Optional[str] = None
    ) -> None:
        self.max_size = max_size
        self.url = url
        self._data: Optional[bytearray] = None
        self._length = 0

    @property
    def capacity(self) -> int:
        return len(self._data) if self._data is not None else 0

    def __len__(self) -> int:
        return self._length

    def accept(self, chunk: bytes) -> None:
        """Appends one chunk of the response body"""
        if not chunk:
            return
        needed = self._length + len(chunk)
        if self.max_size is not None and needed > self.max_size:
            self.release()
            raise error.OutOfMemoryError(
                url=self.url,
                reason=f"response body exceeds the maximum size of {self.max_size} bytes",
            )
        try:
            if self._data is None:
                self._data = bytearray(BASELINE_CAPACITY)
            if needed > len(self._data):
                self._grow(needed)
        except MemoryError as e:
            self.release()
            raise error.OutOfMemoryError(url=self.url, reason=str(e)) from e
        self._data[self._length : needed] = chunk
        self._length = needed

    def _grow(self, needed: int) -> None:
        new_capacity = len(self._data) * 2
        while needed > new_capacity:
            new_capacity *= 2
        self._data.extend(bytes(new_capacity - len(self._data)))
        error.assert_(len(self._data) == new_capacity)
        log.debug("response buffer expanded to %i bytes", new_capacity)

    def finalize(self) -> bytes:
        """The accumulated body, exactly as received"""
        if self._data is None:
            return b""
        return bytes(self._data[: self._length])

    def text(self) -> str:
        return self.finalize().decode("utf-8", errors="replace")

    def release(self) -> None:
        self._data = None
        self._length = 0

    def __enter__(self) -> "ResponseBuffer":
        return self

    def __exit__(self, *args) -> None:
        self.release()
