"""Segments a TCP sender emits and the replies a TCP receiver sends back."""

from __future__ import annotations

from dataclasses import dataclass, field

from tcpstack.wrapping_integers import Wrap32


@dataclass
class TCPSenderMessage:
    """Sequence number, SYN/FIN flags and payload of one outgoing segment."""

    seqno: Wrap32 = field(default_factory=Wrap32)
    syn: bool = False
    payload: bytes = b""
    fin: bool = False

    def sequence_length(self) -> int:
        """Sequence numbers used by the segment; SYN and FIN take one each."""
        return len(self.payload) + self.syn + self.fin


@dataclass(frozen=True)
class TCPReceiverMessage:
    """Acknowledgment number (absent before SYN) and advertised window."""

    ackno: Wrap32 | None = None
    window_size: int = 0