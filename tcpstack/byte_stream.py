"""A bounded, in-memory byte stream with a writing and a reading side."""

from __future__ import annotations

from collections import deque


class ByteStream:
    """A flow-controlled stream of bytes limited to ``capacity`` buffered bytes."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._chunks: deque[bytes] = deque()
        self._offset = 0
        self._closed = False
        self._error = False
        self._pushed = 0
        self._popped = 0

    # Writing side

    def push(self, data: bytes) -> None:
        """Push as much of ``data`` as the available capacity allows."""
        available = self.available_capacity()
        if available == 0 or not data:
            return
        chunk = bytes(data[:available])
        self._chunks.append(chunk)
        self._pushed += len(chunk)

    def close(self) -> None:
        """Signal that nothing more will be written."""
        self._closed = True

    def set_error(self) -> None:
        """Signal that the stream suffered an error."""
        self._error = True

    def is_closed(self) -> bool:
        return self._closed

    def available_capacity(self) -> int:
        return self.capacity - self.bytes_buffered()

    def bytes_pushed(self) -> int:
        return self._pushed

    # Reading side

    def peek(self) -> bytes:
        """Return the next contiguous bytes in the buffer without removing them."""
        if not self._chunks:
            return b""
        return self._chunks[0][self._offset:]

    def pop(self, length: int) -> None:
        """Remove ``length`` bytes; requests larger than the buffer are ignored."""
        if length > self.bytes_buffered():
            return
        while length > 0:
            remaining = len(self._chunks[0]) - self._offset
            if length >= remaining:
                self._chunks.popleft()
                self._offset = 0
                self._popped += remaining
                length -= remaining
            else:
                self._offset += length
                self._popped += length
                length = 0

    def is_finished(self) -> bool:
        """True once the stream is closed and fully popped."""
        return self._closed and not self._chunks

    def has_error(self) -> bool:
        return self._error

    def bytes_buffered(self) -> int:
        return self._pushed - self._popped

    def bytes_popped(self) -> int:
        return self._popped


def read(reader: ByteStream, length: int) -> bytes:
    """Peek and pop up to ``length`` bytes from ``reader``."""
    parts: list[bytes] = []
    taken = 0
    while reader.bytes_buffered() and taken < length:
        view = reader.peek()
        if not view:
            raise RuntimeError("peek() returned no bytes while data is buffered")
        view = view[: length - taken]
        parts.append(view)
        taken += len(view)
        reader.pop(len(view))
    return b"".join(parts)