"""
Packet construction for the raw-socket probes.
"""

from netdiag.packet.icmp import (
    ICMPType,
    EchoReply,
    internet_checksum,
    build_echo_request,
    parse_echo_reply,
    PACKET_SIZE,
)

__all__ = [
    "ICMPType",
    "EchoReply",
    "internet_checksum",
    "build_echo_request",
    "parse_echo_reply",
    "PACKET_SIZE",
]
