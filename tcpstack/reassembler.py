"""Reassembly of indexed, possibly out-of-order substrings into a byte stream."""

from __future__ import annotations

from bisect import insort

from tcpstack.byte_stream import ByteStream


class Reassembler:
    """Reorders indexed substrings and writes them to a ByteStream in order."""

    def __init__(self) -> None:
        self._next_index = 0
        self._segments: list[tuple[int, bytes]] = []
        self._pending = 0
        self._saw_last = False

    def insert(self, first_index: int, data: bytes, is_last_substring: bool, output: ByteStream) -> None:
        """Insert a substring starting at ``first_index`` and push what can be assembled."""
        data = bytes(data)
        if not data:
            if is_last_substring:
                output.close()
            return

        if output.available_capacity() == 0:
            return

        end_index = first_index + len(data)
        first_unacceptable = self._next_index + output.available_capacity()

        if end_index <= self._next_index or first_index >= first_unacceptable:
            return

        if end_index > first_unacceptable:
            data = data[: first_unacceptable - first_index]
            is_last_substring = False

        if first_index > self._next_index:
            self._store(first_index, data, is_last_substring)
            return

        if first_index < self._next_index:
            data = data[self._next_index - first_index :]

        self._next_index += len(data)
        output.push(data)

        if is_last_substring:
            output.close()

        if self._segments and self._segments[0][0] <= self._next_index:
            self._flush(output)

    def bytes_pending(self) -> int:
        """Number of bytes held by the reassembler and not yet written."""
        return self._pending

    def _store(self, first_index: int, data: bytes, is_last_substring: bool) -> None:
        end_index = first_index + len(data)
        cursor = first_index
        gaps: list[tuple[int, bytes]] = []
        for start, chunk in self._segments:
            if cursor >= end_index:
                break
            if start > cursor:
                gap_end = min(start, end_index)
                gaps.append((cursor, data[cursor - first_index : gap_end - first_index]))
                cursor = gap_end
            cursor = max(cursor, start + len(chunk))
        if cursor < end_index:
            gaps.append((cursor, data[cursor - first_index :]))

        for gap in gaps:
            self._pending += len(gap[1])
            insort(self._segments, gap)

        if is_last_substring:
            self._saw_last = True

    def _flush(self, output: ByteStream) -> None:
        while self._segments and self._segments[0][0] <= self._next_index:
            start, chunk = self._segments.pop(0)
            self._pending -= len(chunk)
            if start + len(chunk) > self._next_index:
                chunk = chunk[self._next_index - start :]
                self._next_index += len(chunk)
                output.push(chunk)
        if not self._segments and self._saw_last:
            output.close()