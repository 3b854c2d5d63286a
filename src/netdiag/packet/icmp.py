"""
ICMP echo packet construction and parsing.

Builds echo requests byte-for-byte with struct rather than scapy, so
the probes need nothing beyond a raw socket.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum


# type, code, checksum, identifier, sequence
ICMP_HEADER = struct.Struct("!BBHHH")
ICMP_HEADER_SIZE = ICMP_HEADER.size  # 8

# Send timestamp leads the payload
TIMESTAMP = struct.Struct("!d")

PAYLOAD_SIZE = 56
PACKET_SIZE = ICMP_HEADER_SIZE + PAYLOAD_SIZE  # 64

# IPv4 header (20-60 bytes) + ICMP packet
MAX_DATAGRAM_SIZE = 60 + PACKET_SIZE

_FILLER = bytes(range(PAYLOAD_SIZE - TIMESTAMP.size))


class ICMPType(IntEnum):
    """ICMP message types used by the echo probe."""
    ECHO_REPLY = 0
    DEST_UNREACHABLE = 3
    ECHO_REQUEST = 8
    TIME_EXCEEDED = 11


@dataclass
class EchoReply:
    """A parsed ICMP echo reply."""
    identifier: int
    sequence: int
    timestamp: float | None = None
    checksum_ok: bool = True


def internet_checksum(data: bytes) -> int:
    """
    RFC 1071 Internet checksum.

    Sums the buffer as 16-bit big-endian words, folds carries back
    into the low 16 bits and returns the one's complement. An odd
    trailing byte is treated as a word with a zero low byte.

    Running it over a packet that already carries its checksum
    yields 0.
    """
    if len(data) % 2:
        data = bytes(data) + b"\x00"

    total = 0
    for (word,) in struct.iter_unpack("!H", data):
        total += word

    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)

    return ~total & 0xFFFF


def build_echo_request(identifier: int, sequence: int, timestamp: float) -> bytes:
    """
    Build a 64-byte ICMP echo request.

    Args:
        identifier: 16-bit echo identifier (usually derived from the PID)
        sequence: 16-bit sequence number
        timestamp: Send time, embedded in the first 8 payload bytes

    Returns:
        Packet bytes with the checksum filled in
    """
    identifier &= 0xFFFF
    sequence &= 0xFFFF
    payload = TIMESTAMP.pack(timestamp) + _FILLER

    header = ICMP_HEADER.pack(ICMPType.ECHO_REQUEST, 0, 0, identifier, sequence)
    checksum = internet_checksum(header + payload)
    header = ICMP_HEADER.pack(ICMPType.ECHO_REQUEST, 0, checksum, identifier, sequence)

    return header + payload


def strip_ip_header(datagram: bytes) -> bytes:
    """Drop the IPv4 header that raw sockets deliver ahead of the ICMP message."""
    if not datagram or datagram[0] >> 4 != 4:
        return datagram
    ihl = (datagram[0] & 0x0F) * 4
    if ihl < 20 or len(datagram) < ihl:
        return b""
    return datagram[ihl:]


def parse_echo_reply(datagram: bytes) -> EchoReply | None:
    """
    Parse an echo reply from a raw-socket datagram.

    Accepts the datagram with or without its IPv4 header.

    Returns:
        EchoReply, or None if the datagram is truncated or not an echo reply
    """
    packet = strip_ip_header(datagram)
    if len(packet) < ICMP_HEADER_SIZE:
        return None

    icmp_type, code, _, identifier, sequence = ICMP_HEADER.unpack_from(packet)
    if icmp_type != ICMPType.ECHO_REPLY or code != 0:
        return None

    timestamp = None
    if len(packet) >= ICMP_HEADER_SIZE + TIMESTAMP.size:
        (timestamp,) = TIMESTAMP.unpack_from(packet, ICMP_HEADER_SIZE)

    return EchoReply(
        identifier=identifier,
        sequence=sequence,
        timestamp=timestamp,
        checksum_ok=internet_checksum(packet) == 0,
    )
