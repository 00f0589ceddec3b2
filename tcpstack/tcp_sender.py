"""The sending side of a TCP connection, with retransmission timing."""

from __future__ import annotations

import enum
import random
from collections import deque

from tcpstack.byte_stream import ByteStream, read
from tcpstack.tcp_messages import TCPReceiverMessage, TCPSenderMessage
from tcpstack.wrapping_integers import Wrap32

MAX_PAYLOAD_SIZE = 1000


class _TimerState(enum.Enum):
    IDLE = enum.auto()
    RUNNING = enum.auto()
    EXPIRED = enum.auto()


class RetransmissionTimer:
    """A retransmission timer with exponential back-off."""

    def __init__(self, initial_rto_ms: int) -> None:
        self.initial_rto_ms = initial_rto_ms
        self.rto_ms = initial_rto_ms
        self._elapsed = 0
        self._state = _TimerState.IDLE

    def start(self) -> None:
        """(Re)start counting from zero."""
        self._state = _TimerState.RUNNING
        self._elapsed = 0

    def double(self) -> None:
        """Double the current timeout."""
        self.rto_ms *= 2

    def reset(self) -> None:
        """Restore the timeout to its initial value."""
        self.rto_ms = self.initial_rto_ms

    def is_running(self) -> bool:
        return self._state is _TimerState.RUNNING

    def is_expired(self) -> bool:
        return self._state is _TimerState.EXPIRED

    def stop(self) -> None:
        self._state = _TimerState.IDLE

    def tick(self, ms_since_last_tick: int) -> None:
        """Advance a running timer; it expires once the timeout is reached."""
        if self._state is not _TimerState.RUNNING:
            return
        self._elapsed += ms_since_last_tick
        if self._elapsed >= self.rto_ms:
            self._state = _TimerState.EXPIRED


class TCPSender:
    """Reads from an outbound stream and produces segments within the peer's window."""

    def __init__(
        self,
        initial_rto_ms: int,
        fixed_isn: Wrap32 | None = None,
        max_payload_size: int = MAX_PAYLOAD_SIZE,
    ) -> None:
        if fixed_isn is None:
            fixed_isn = Wrap32(random.SystemRandom().getrandbits(32))
        self._isn = fixed_isn
        self._max_payload = max_payload_size
        self._next_seqno = 0
        self._window = 1
        self._in_flight = 0
        self._retransmissions = 0
        self._syn_sent = False
        self._fin_sent = False
        self._ready: deque[TCPSenderMessage] = deque()
        self._outstanding: deque[TCPSenderMessage] = deque()
        self._timer = RetransmissionTimer(initial_rto_ms)

    def sequence_numbers_in_flight(self) -> int:
        return self._in_flight

    def consecutive_retransmissions(self) -> int:
        return self._retransmissions

    def maybe_send(self) -> TCPSenderMessage | None:
        """Return the next segment to transmit, if any."""
        if not self._ready:
            return None
        if not self._timer.is_running():
            self._timer.start()
        return self._ready.popleft()

    def push(self, outbound_stream: ByteStream) -> None:
        """Fill the receiver's window with segments read from ``outbound_stream``."""
        window = self._window or 1
        while self._in_flight < window:
            msg = TCPSenderMessage(Wrap32.wrap(self._next_seqno, self._isn))
            if not self._syn_sent:
                msg.syn = self._syn_sent = True

            readable = min(window - self._in_flight, self._max_payload)
            msg.payload = read(outbound_stream, readable)
            if (
                not self._fin_sent
                and outbound_stream.is_finished()
                and self._in_flight + msg.sequence_length() < window
            ):
                msg.fin = self._fin_sent = True

            length = msg.sequence_length()
            if length == 0:
                break
            self._in_flight += length
            self._ready.append(msg)
            self._outstanding.append(msg)
            self._next_seqno += length

            if msg.fin or outbound_stream.bytes_buffered() == 0:
                break

    def send_empty_message(self) -> TCPSenderMessage:
        """A segment that carries no data, with the next sequence number."""
        return TCPSenderMessage(Wrap32.wrap(self._next_seqno, self._isn))

    def receive(self, msg: TCPReceiverMessage) -> None:
        """Take in the peer's window and acknowledgment."""
        self._window = msg.window_size
        if msg.ackno is None:
            return
        acked = msg.ackno.unwrap(self._isn, self._next_seqno)
        if acked > self._next_seqno:
            return
        while self._outstanding:
            front = self._outstanding[0]
            end = front.seqno.unwrap(self._isn, self._next_seqno) + front.sequence_length()
            if end > acked:
                break
            self._outstanding.popleft()
            self._in_flight -= front.sequence_length()
            self._timer.reset()
            if self._outstanding:
                self._timer.start()
            self._retransmissions = 0
        if not self._outstanding:
            self._timer.stop()

    def tick(self, ms_since_last_tick: int) -> None:
        """Advance time and retransmit the oldest outstanding segment on expiry."""
        self._timer.tick(ms_since_last_tick)
        if not self._timer.is_expired():
            return
        if not self._outstanding:
            self._timer.stop()
            return
        self._ready.append(self._outstanding[0])
        if self._window != 0:
            self._retransmissions += 1
            self._timer.double()
        self._timer.start()