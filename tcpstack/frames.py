"""Ethernet frames, ARP messages and IPv4 datagrams with their wire formats."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

ETHERNET_BROADCAST = b"\xff" * 6

_ARP_FORMAT = struct.Struct("!HHBBH6sI6sI")
_IPV4_FORMAT = struct.Struct("!BBHHHBBHII")


def _checksum(data: bytes) -> int:
    """Internet one's-complement checksum of ``data``."""
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack(f"!{len(data) // 2}H", data))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


@dataclass
class EthernetHeader:
    """Destination, source and payload type of an Ethernet frame."""

    TYPE_IPv4: ClassVar[int] = 0x0800
    TYPE_ARP: ClassVar[int] = 0x0806

    dst: bytes = bytes(6)
    src: bytes = bytes(6)
    type: int = 0


@dataclass
class EthernetFrame:
    """An Ethernet header and the bytes it carries."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: bytes = b""


@dataclass
class ARPMessage:
    """An Address Resolution Protocol message for Ethernet and IPv4."""

    OPCODE_REQUEST: ClassVar[int] = 1
    OPCODE_REPLY: ClassVar[int] = 2
    TYPE_ETHERNET: ClassVar[int] = 1

    opcode: int = 0
    sender_ethernet_address: bytes = bytes(6)
    sender_ip_address: int = 0
    target_ethernet_address: bytes = bytes(6)
    target_ip_address: int = 0
    hardware_type: int = 1
    protocol_type: int = EthernetHeader.TYPE_IPv4
    hardware_address_size: int = 6
    protocol_address_size: int = 4

    def serialize(self) -> bytes:
        """The message in network byte order."""
        return _ARP_FORMAT.pack(
            self.hardware_type,
            self.protocol_type,
            self.hardware_address_size,
            self.protocol_address_size,
            self.opcode,
            bytes(self.sender_ethernet_address),
            self.sender_ip_address,
            bytes(self.target_ethernet_address),
            self.target_ip_address,
        )

    @staticmethod
    def parse(data: bytes) -> ARPMessage:
        """Parse an ARP message; raise ValueError if it is malformed or unsupported."""
        data = bytes(data)
        if len(data) < _ARP_FORMAT.size:
            raise ValueError(f"ARP message needs {_ARP_FORMAT.size} bytes, got {len(data)}")
        (
            hardware_type,
            protocol_type,
            hardware_size,
            protocol_size,
            opcode,
            sender_eth,
            sender_ip,
            target_eth,
            target_ip,
        ) = _ARP_FORMAT.unpack_from(data)
        if hardware_type != ARPMessage.TYPE_ETHERNET or protocol_type != EthernetHeader.TYPE_IPv4:
            raise ValueError("unsupported ARP hardware or protocol type")
        if hardware_size != 6 or protocol_size != 4:
            raise ValueError("unsupported ARP address sizes")
        if opcode not in (ARPMessage.OPCODE_REQUEST, ARPMessage.OPCODE_REPLY):
            raise ValueError(f"unsupported ARP opcode {opcode}")
        return ARPMessage(
            opcode=opcode,
            sender_ethernet_address=sender_eth,
            sender_ip_address=sender_ip,
            target_ethernet_address=target_eth,
            target_ip_address=target_ip,
        )


@dataclass
class IPv4Header:
    """The fixed 20-byte part of an IPv4 header."""

    ver: int = 4
    hlen: int = 5
    tos: int = 0
    length: int = 20
    identification: int = 0
    df: bool = True
    mf: bool = False
    offset: int = 0
    ttl: int = 128
    proto: int = 6
    cksum: int = 0
    src: int = 0
    dst: int = 0

    def _pack(self, cksum: int) -> bytes:
        flags = (int(self.df) << 14) | (int(self.mf) << 13) | (self.offset & 0x1FFF)
        return _IPV4_FORMAT.pack(
            (self.ver << 4) | self.hlen,
            self.tos,
            self.length,
            self.identification,
            flags,
            self.ttl,
            self.proto,
            cksum,
            self.src,
            self.dst,
        )

    def compute_checksum(self) -> None:
        """Set ``cksum`` to the checksum of the header's current fields."""
        self.cksum = _checksum(self._pack(0))


@dataclass
class InternetDatagram:
    """An IPv4 header and its payload."""

    header: IPv4Header = field(default_factory=IPv4Header)
    payload: bytes = b""

    def serialize(self) -> bytes:
        """The datagram in network byte order."""
        return self.header._pack(self.header.cksum) + bytes(self.payload)

    @staticmethod
    def parse(data: bytes) -> InternetDatagram:
        """Parse a datagram; raise ValueError if it is malformed."""
        data = bytes(data)
        if len(data) < _IPV4_FORMAT.size:
            raise ValueError("IPv4 datagram shorter than its header")
        (ver_hlen, tos, length, ident, flags, ttl, proto, cksum, src, dst) = _IPV4_FORMAT.unpack_from(data)
        ver, hlen = ver_hlen >> 4, ver_hlen & 0x0F
        if ver != 4:
            raise ValueError(f"not an IPv4 datagram (version {ver})")
        header_size = hlen * 4
        if hlen < 5 or header_size > len(data):
            raise ValueError("bad IPv4 header length")
        if length < header_size or length > len(data):
            raise ValueError("bad IPv4 total length")
        if _checksum(data[:header_size]) != 0:
            raise ValueError("bad IPv4 checksum")
        header = IPv4Header(
            ver=ver,
            hlen=hlen,
            tos=tos,
            length=length,
            identification=ident,
            df=bool(flags & 0x4000),
            mf=bool(flags & 0x2000),
            offset=flags & 0x1FFF,
            ttl=ttl,
            proto=proto,
            cksum=cksum,
            src=src,
            dst=dst,
        )
        return InternetDatagram(header, data[header_size:length])