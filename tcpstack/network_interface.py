"""A network interface joining IPv4 to Ethernet, resolving addresses with ARP."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from ipaddress import IPv4Address

from tcpstack.frames import (
    ETHERNET_BROADCAST,
    ARPMessage,
    EthernetFrame,
    EthernetHeader,
    InternetDatagram,
)

_log = logging.getLogger(__name__)

_ARP_REQUEST_TTL_MS = 5000
_MAPPING_TTL_MS = 30000


def _format_ethernet(address: bytes) -> str:
    return ":".join(f"{byte:02x}" for byte in address)


@dataclass
class _Mapping:
    ethernet_address: bytes
    age_ms: int = 0


class NetworkInterface:
    """Encapsulates datagrams in Ethernet frames and answers and learns from ARP."""

    def __init__(self, ethernet_address: bytes, ip_address: IPv4Address | str | int) -> None:
        self.ethernet_address = bytes(ethernet_address)
        self.ip_address = IPv4Address(ip_address)
        self._outbound: deque[EthernetFrame] = deque()
        self._waiting: dict[int, list[InternetDatagram]] = {}
        self._mappings: dict[int, _Mapping] = {}
        self._arp_requests: dict[int, int] = {}
        _log.debug(
            "network interface has Ethernet address %s and IP address %s",
            _format_ethernet(self.ethernet_address),
            self.ip_address,
        )

    def send_datagram(self, dgram: InternetDatagram, next_hop: IPv4Address | str | int) -> None:
        """Send ``dgram`` towards ``next_hop``, resolving its Ethernet address first if needed."""
        ip = int(IPv4Address(next_hop))
        mapping = self._mappings.get(ip)
        if mapping is not None:
            header = EthernetHeader(mapping.ethernet_address, self.ethernet_address, EthernetHeader.TYPE_IPv4)
            self._outbound.append(EthernetFrame(header, dgram.serialize()))
            return

        self._waiting.setdefault(ip, []).append(dgram)
        if ip in self._arp_requests:
            return
        self._arp_requests[ip] = 0
        request = ARPMessage(
            opcode=ARPMessage.OPCODE_REQUEST,
            sender_ethernet_address=self.ethernet_address,
            sender_ip_address=int(self.ip_address),
            target_ip_address=ip,
        )
        header = EthernetHeader(ETHERNET_BROADCAST, self.ethernet_address, EthernetHeader.TYPE_ARP)
        self._outbound.append(EthernetFrame(header, request.serialize()))

    def recv_frame(self, frame: EthernetFrame) -> InternetDatagram | None:
        """Handle an incoming frame; return the datagram it carries, if any."""
        if frame.header.dst not in (ETHERNET_BROADCAST, self.ethernet_address):
            return None

        if frame.header.type == EthernetHeader.TYPE_IPv4:
            try:
                return InternetDatagram.parse(frame.payload)
            except ValueError:
                return None

        if frame.header.type == EthernetHeader.TYPE_ARP:
            try:
                msg = ARPMessage.parse(frame.payload)
            except ValueError:
                return None
            self._learn(msg)
        return None

    def _learn(self, msg: ARPMessage) -> None:
        self._mappings[msg.sender_ip_address] = _Mapping(msg.sender_ethernet_address)
        if msg.target_ip_address != int(self.ip_address):
            return

        if msg.opcode == ARPMessage.OPCODE_REPLY:
            sender = IPv4Address(msg.sender_ip_address)
            for dgram in self._waiting.pop(msg.sender_ip_address, []):
                self.send_datagram(dgram, sender)
        elif msg.opcode == ARPMessage.OPCODE_REQUEST:
            reply = ARPMessage(
                opcode=ARPMessage.OPCODE_REPLY,
                sender_ethernet_address=self.ethernet_address,
                sender_ip_address=int(self.ip_address),
                target_ethernet_address=msg.sender_ethernet_address,
                target_ip_address=msg.sender_ip_address,
            )
            header = EthernetHeader(msg.sender_ethernet_address, self.ethernet_address, EthernetHeader.TYPE_ARP)
            self._outbound.append(EthernetFrame(header, reply.serialize()))

    def tick(self, ms_since_last_tick: int) -> None:
        """Age pending ARP requests and learned mappings, dropping expired ones."""
        for ip in list(self._arp_requests):
            self._arp_requests[ip] += ms_since_last_tick
            if self._arp_requests[ip] >= _ARP_REQUEST_TTL_MS:
                del self._arp_requests[ip]
        for ip in list(self._mappings):
            mapping = self._mappings[ip]
            mapping.age_ms += ms_since_last_tick
            if mapping.age_ms >= _MAPPING_TTL_MS:
                del self._mappings[ip]

    def maybe_send(self) -> EthernetFrame | None:
        """Return the next frame awaiting transmission, if any."""
        return self._outbound.popleft() if self._outbound else None