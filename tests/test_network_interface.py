from ipaddress import IPv4Address

from tcpstack.frames import (
    ETHERNET_BROADCAST,
    ARPMessage,
    EthernetFrame,
    EthernetHeader,
    InternetDatagram,
    IPv4Header,
)
from tcpstack.network_interface import NetworkInterface

LOCAL_ETH = bytes.fromhex("02000000000a")
PEER_ETH = bytes.fromhex("02000000000b")
OTHER_ETH = bytes.fromhex("02000000000c")
LOCAL_IP = IPv4Address("10.0.0.1")
PEER_IP = IPv4Address("10.0.0.2")
OTHER_IP = IPv4Address("10.0.0.3")


def _iface():
    return NetworkInterface(LOCAL_ETH, LOCAL_IP)


def _dgram(payload=b"hello"):
    header = IPv4Header(src=int(LOCAL_IP), dst=int(IPv4Address("192.168.7.7")), length=20 + len(payload))
    header.compute_checksum()
    return InternetDatagram(header, payload)


def _arp_frame(opcode, sender_eth, sender_ip, target_ip, dst, target_eth=bytes(6)):
    msg = ARPMessage(
        opcode=opcode,
        sender_ethernet_address=sender_eth,
        sender_ip_address=int(sender_ip),
        target_ethernet_address=target_eth,
        target_ip_address=int(target_ip),
    )
    return EthernetFrame(EthernetHeader(dst, sender_eth, EthernetHeader.TYPE_ARP), msg.serialize())


def _drain(iface):
    frames = []
    while (frame := iface.maybe_send()) is not None:
        frames.append(frame)
    return frames


def _peer_replies(iface):
    iface.recv_frame(
        _arp_frame(ARPMessage.OPCODE_REPLY, PEER_ETH, PEER_IP, LOCAL_IP, LOCAL_ETH, target_eth=LOCAL_ETH)
    )


def test_unknown_next_hop_broadcasts_arp_request():
    iface = _iface()
    iface.send_datagram(_dgram(), PEER_IP)
    frames = _drain(iface)
    assert len(frames) == 1
    frame = frames[0]
    assert frame.header.dst == ETHERNET_BROADCAST
    assert frame.header.src == LOCAL_ETH
    assert frame.header.type == EthernetHeader.TYPE_ARP
    msg = ARPMessage.parse(frame.payload)
    assert msg.opcode == ARPMessage.OPCODE_REQUEST
    assert msg.sender_ethernet_address == LOCAL_ETH
    assert msg.sender_ip_address == int(LOCAL_IP)
    assert msg.target_ip_address == int(PEER_IP)


def test_reply_releases_queued_datagrams_in_order():
    iface = _iface()
    sent = [_dgram(b"one"), _dgram(b"two"), _dgram(b"three")]
    iface.send_datagram(sent[0], PEER_IP)
    iface.tick(4999)
    iface.send_datagram(sent[1], PEER_IP)
    iface.send_datagram(sent[2], PEER_IP)
    assert len(_drain(iface)) == 1

    _peer_replies(iface)
    frames = _drain(iface)
    assert [f.header.type for f in frames] == [EthernetHeader.TYPE_IPv4] * 3
    assert all(f.header.dst == PEER_ETH and f.header.src == LOCAL_ETH for f in frames)
    assert [InternetDatagram.parse(f.payload) for f in frames] == sent


def test_known_mapping_sends_directly():
    iface = _iface()
    _peer_replies(iface)
    dgram = _dgram()
    iface.send_datagram(dgram, PEER_IP)
    frames = _drain(iface)
    assert len(frames) == 1
    assert frames[0].header.dst == PEER_ETH
    assert InternetDatagram.parse(frames[0].payload) == dgram


def test_arp_request_repeated_after_five_seconds():
    iface = _iface()
    iface.send_datagram(_dgram(), PEER_IP)
    _drain(iface)
    iface.tick(5000)
    iface.send_datagram(_dgram(), PEER_IP)
    frames = _drain(iface)
    assert len(frames) == 1
    assert ARPMessage.parse(frames[0].payload).target_ip_address == int(PEER_IP)


def test_mapping_expires_after_thirty_seconds():
    iface = _iface()
    _peer_replies(iface)
    iface.tick(29999)
    iface.send_datagram(_dgram(), PEER_IP)
    assert [f.header.type for f in _drain(iface)] == [EthernetHeader.TYPE_IPv4]
    iface.tick(1)
    iface.send_datagram(_dgram(), PEER_IP)
    frames = _drain(iface)
    assert [f.header.type for f in frames] == [EthernetHeader.TYPE_ARP]
    assert frames[0].header.dst == ETHERNET_BROADCAST


def test_arp_request_for_us_is_answered():
    iface = _iface()
    iface.recv_frame(_arp_frame(ARPMessage.OPCODE_REQUEST, PEER_ETH, PEER_IP, LOCAL_IP, ETHERNET_BROADCAST))
    frames = _drain(iface)
    assert len(frames) == 1
    assert frames[0].header.dst == PEER_ETH
    assert frames[0].header.type == EthernetHeader.TYPE_ARP
    reply = ARPMessage.parse(frames[0].payload)
    assert reply.opcode == ARPMessage.OPCODE_REPLY
    assert reply.sender_ethernet_address == LOCAL_ETH
    assert reply.sender_ip_address == int(LOCAL_IP)
    assert reply.target_ethernet_address == PEER_ETH
    assert reply.target_ip_address == int(PEER_IP)


def test_arp_request_for_someone_else_is_learned_but_not_answered():
    iface = _iface()
    iface.recv_frame(_arp_frame(ARPMessage.OPCODE_REQUEST, OTHER_ETH, OTHER_IP, PEER_IP, ETHERNET_BROADCAST))
    assert iface.maybe_send() is None
    iface.send_datagram(_dgram(), OTHER_IP)
    frames = _drain(iface)
    assert [f.header.dst for f in frames] == [OTHER_ETH]


def test_ipv4_frame_is_returned():
    iface = _iface()
    dgram = _dgram(b"inbound")
    frame = EthernetFrame(EthernetHeader(LOCAL_ETH, PEER_ETH, EthernetHeader.TYPE_IPv4), dgram.serialize())
    assert iface.recv_frame(frame) == dgram


def test_frame_for_other_host_is_ignored():
    iface = _iface()
    dgram = _dgram()
    frame = EthernetFrame(EthernetHeader(OTHER_ETH, PEER_ETH, EthernetHeader.TYPE_IPv4), dgram.serialize())
    assert iface.recv_frame(frame) is None
    iface.recv_frame(_arp_frame(ARPMessage.OPCODE_REQUEST, PEER_ETH, PEER_IP, LOCAL_IP, OTHER_ETH))
    assert iface.maybe_send() is None


def test_malformed_ipv4_payload_yields_nothing():
    iface = _iface()
    wire = _dgram().serialize()[:12]
    frame = EthernetFrame(EthernetHeader(LOCAL_ETH, PEER_ETH, EthernetHeader.TYPE_IPv4), wire)
    assert iface.recv_frame(frame) is None