"""The receiving side of a TCP connection."""

from __future__ import annotations

from tcpstack.byte_stream import ByteStream
from tcpstack.reassembler import Reassembler
from tcpstack.tcp_messages import TCPReceiverMessage, TCPSenderMessage
from tcpstack.wrapping_integers import Wrap32

_MAX_WINDOW = 0xFFFF
_U64_MASK = (1 << 64) - 1


class TCPReceiver:
    """Turns incoming segments into stream bytes and reports acknowledgments."""

    def __init__(self, isn: int = 0) -> None:
        self._isn = Wrap32(isn)
        self._isn_set = False

    def receive(
        self,
        message: TCPSenderMessage,
        reassembler: Reassembler,
        inbound_stream: ByteStream,
    ) -> None:
        """Insert the payload of ``message`` at its stream index."""
        if not self._isn_set:
            if not message.syn:
                return
            self._isn = message.seqno
            self._isn_set = True

        checkpoint = inbound_stream.bytes_pushed() + 1
        absolute_seqno = message.seqno.unwrap(self._isn, checkpoint)
        stream_index = (absolute_seqno - 1 + int(message.syn)) & _U64_MASK
        reassembler.insert(stream_index, message.payload, message.fin, inbound_stream)

    def send(self, inbound_stream: ByteStream) -> TCPReceiverMessage:
        """Report the next expected sequence number and the window size."""
        window = min(inbound_stream.available_capacity(), _MAX_WINDOW)
        if not self._isn_set:
            return TCPReceiverMessage(None, window)
        consumed = inbound_stream.bytes_pushed() + 1 + int(inbound_stream.is_closed())
        return TCPReceiverMessage(self._isn + consumed, window)