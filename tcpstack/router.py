"""A router forwarding datagrams between interfaces by longest-prefix match."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from ipaddress import IPv4Address

from tcpstack.frames import EthernetFrame, InternetDatagram
from tcpstack.network_interface import NetworkInterface

_log = logging.getLogger(__name__)


class AsyncNetworkInterface(NetworkInterface):
    """A network interface that queues received datagrams for later retrieval."""

    def __init__(self, ethernet_address: bytes, ip_address: IPv4Address | str | int) -> None:
        super().__init__(ethernet_address, ip_address)
        self._received: deque[InternetDatagram] = deque()

    def recv_frame(self, frame: EthernetFrame) -> None:  # type: ignore[override]
        """Handle a frame, queueing any datagram it carries."""
        dgram = super().recv_frame(frame)
        if dgram is not None:
            self._received.append(dgram)

    def maybe_receive(self) -> InternetDatagram | None:
        """Return the oldest received datagram, if any."""
        return self._received.popleft() if self._received else None


@dataclass(frozen=True)
class _Route:
    prefix: int
    prefix_length: int
    next_hop: IPv4Address | None
    interface_num: int


def _match_length(address: int, prefix: int, length: int) -> int:
    if length == 0:
        return 0
    if length > 32:
        return -1
    shift = 32 - length
    return length if address >> shift == prefix >> shift else -1


class Router:
    """Holds interfaces and a forwarding table and routes datagrams between them."""

    def __init__(self) -> None:
        self._interfaces: list[AsyncNetworkInterface] = []
        self._routes: list[_Route] = []

    def add_interface(self, interface: AsyncNetworkInterface) -> int:
        """Add an interface and return its index."""
        self._interfaces.append(interface)
        return len(self._interfaces) - 1

    def interface(self, n: int) -> AsyncNetworkInterface:
        """The interface with index ``n``."""
        if not 0 <= n < len(self._interfaces):
            raise IndexError(f"no interface with index {n}")
        return self._interfaces[n]

    def add_route(
        self,
        route_prefix: int | IPv4Address,
        prefix_length: int,
        next_hop: IPv4Address | str | None,
        interface_num: int,
    ) -> None:
        """Add a forwarding rule; a missing ``next_hop`` means directly attached."""
        hop = None if next_hop is None else IPv4Address(next_hop)
        prefix = int(route_prefix)
        _log.debug(
            "adding route %s/%d => %s on interface %d",
            IPv4Address(prefix),
            prefix_length,
            hop if hop is not None else "(direct)",
            interface_num,
        )
        self._routes.append(_Route(prefix, prefix_length, hop, interface_num))

    def route(self) -> None:
        """Forward one waiting datagram from each interface along its best route."""
        for iface in self._interfaces:
            dgram = iface.maybe_receive()
            if dgram is None or dgram.header.ttl <= 1:
                continue
            dgram.header.ttl -= 1
            dgram.header.compute_checksum()
            dst = dgram.header.dst

            best: _Route | None = None
            best_length = -1
            for candidate in self._routes:
                length = _match_length(dst, candidate.prefix, candidate.prefix_length)
                if length > best_length:
                    best, best_length = candidate, length
            if best is None:
                continue

            hop = best.next_hop if best.next_hop is not None else IPv4Address(dst)
            self.interface(best.interface_num).send_datagram(dgram, hop)