"""32-bit sequence numbers that wrap around relative to a zero point."""

from __future__ import annotations

from dataclasses import dataclass

_RANGE = 1 << 32
_MASK = _RANGE - 1


@dataclass(frozen=True)
class Wrap32:
    """A 32-bit unsigned integer that wraps back to zero after 2**32 - 1."""

    raw_value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_value", self.raw_value & _MASK)

    @staticmethod
    def wrap(n: int, zero_point: Wrap32) -> Wrap32:
        """Wrap the absolute sequence number ``n`` relative to ``zero_point``."""
        return zero_point + (n & _MASK)

    def unwrap(self, zero_point: Wrap32, checkpoint: int) -> int:
        """Return the absolute sequence number wrapping to this value closest to ``checkpoint``."""
        offset = (self.raw_value - zero_point.raw_value) & _MASK
        if checkpoint <= offset:
            return offset
        shifted = (checkpoint - offset) + (_RANGE >> 1)
        return (shifted // _RANGE) * _RANGE + offset

    def __add__(self, n: int) -> Wrap32:
        if not isinstance(n, int):
            return NotImplemented
        return Wrap32(self.raw_value + n)