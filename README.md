# tcpstack

The building blocks of a TCP/IP stack, written in plain Python with no
third-party dependencies. All data is handled as `bytes`.

- `tcpstack.wrapping_integers.Wrap32`: 32-bit wrapping sequence numbers,
  converting between absolute sequence numbers and their on-the-wire form
  (`Wrap32.wrap` / `Wrap32.unwrap`).
- `tcpstack.byte_stream.ByteStream`: a flow-controlled in-memory byte stream
  with a fixed capacity; `push` keeps only what fits. The `read` helper pulls
  up to a given number of bytes out of it.
- `tcpstack.reassembler.Reassembler`: puts out-of-order, overlapping
  substrings back together and writes them into a `ByteStream` as soon as
  they become contiguous. Bytes beyond the stream's available capacity are
  dropped.
- `tcpstack.tcp_messages`: the `TCPSenderMessage` segment (`seqno`, `syn`,
  `payload`, `fin`, `sequence_length()`) and the `TCPReceiverMessage` reply
  (`ackno`, `window_size`).
- `tcpstack.tcp_receiver.TCPReceiver` and `tcpstack.tcp_sender.TCPSender`:
  the two halves of a TCP endpoint. The receiver produces acknowledgements
  and window sizes (capped at 65535). The sender fills the peer's window with
  segments of at most 1000 payload bytes, tracks outstanding segments and
  retransmits the oldest one with exponential back-off
  (`RetransmissionTimer`). A zero window is probed as if it were one byte,
  without backing off.
- `tcpstack.frames`: `EthernetHeader`, `EthernetFrame`, `ARPMessage`,
  `IPv4Header` and `InternetDatagram`, with serialization, parsing
  (raising `ValueError` on malformed input) and the IPv4 header checksum.
- `tcpstack.network_interface.NetworkInterface`: turns IPv4 datagrams into
  Ethernet frames, queues datagrams while it resolves the next hop with ARP,
  answers ARP requests, and forgets learned mappings after 30 seconds and
  pending requests after 5 seconds (driven by `tick`).
- `tcpstack.router`: `AsyncNetworkInterface`, which queues received
  datagrams for `maybe_receive`, and `Router`, which forwards datagrams
  between its interfaces by longest-prefix match, decrementing the TTL and
  dropping datagrams whose TTL would reach zero.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Fetching a web page

The `webget` command sends an HTTP/1.1 `GET` request to a host over an
ordinary operating-system socket and writes the raw response to standard
output:

```
webget example.com /index.html
```

If it is not given exactly two arguments, it prints a usage message and
exits with status 1. `tcpstack.webget.build_request(host, path)` returns the
request bytes it sends.

## Using the library

```python
from tcpstack.byte_stream import ByteStream, read
from tcpstack.reassembler import Reassembler

stream = ByteStream(15)
reassembler = Reassembler()

reassembler.insert(3, b"def", True, stream)   # held back: bytes 0..2 are unknown
reassembler.insert(0, b"abc", False, stream)  # fills the gap; the stream is closed

assert read(stream, 6) == b"abcdef"
assert stream.is_finished()
```

Sequence numbers:

```python
from tcpstack.wrapping_integers import Wrap32

isn = Wrap32(2**32 - 2)
seqno = Wrap32.wrap(5, isn)
assert seqno.unwrap(isn, 0) == 5
```

Sending and acknowledging data:

```python
from tcpstack.byte_stream import ByteStream
from tcpstack.tcp_messages import TCPReceiverMessage
from tcpstack.tcp_sender import TCPSender
from tcpstack.wrapping_integers import Wrap32

isn = Wrap32(0)
sender = TCPSender(1000, isn)
outbound = ByteStream(4096)

sender.push(outbound)              # sends the SYN
syn = sender.maybe_send()
assert syn.syn

sender.receive(TCPReceiverMessage(ackno=isn + 1, window_size=1000))
outbound.push(b"hello")
sender.push(outbound)
segment = sender.maybe_send()
assert segment.payload == b"hello"
```

Interfaces and routers take IPv4 addresses as `ipaddress.IPv4Address`
objects, dotted strings or integers, and Ethernet addresses as 6-byte
`bytes`. Debug messages go to the standard `logging` module.

## What it does not do

The pieces are not joined into a complete TCP connection: there is no
handshake or teardown state machine, no socket-like interface over the
stack, and no way to put frames on a real network. `NetworkInterface`,
`AsyncNetworkInterface` and `Router` exchange frames only with code that
calls `maybe_send` and `recv_frame` on them, as a simulation or test does.
The `webget` command uses the operating system's own TCP, not this stack.