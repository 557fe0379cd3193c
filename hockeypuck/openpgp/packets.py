"""Reading and writing raw OpenPGP packets and grouping them into keyrings."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, Iterator

PUBLIC_KEY_TAG = 6
PUBLIC_SUBKEY_TAG = 14
USER_ID_TAG = 13
USER_ATTRIBUTE_TAG = 17
SIGNATURE_TAG = 2

_KEYRING_TAGS = frozenset(
    {PUBLIC_KEY_TAG, PUBLIC_SUBKEY_TAG, USER_ID_TAG, USER_ATTRIBUTE_TAG, SIGNATURE_TAG}
)


class PacketError(ValueError):
    """OpenPGP packet data is malformed or truncated."""


@dataclass(frozen=True)
class OpaquePacket:
    """An OpenPGP packet kept as its tag and undecoded body."""

    tag: int
    contents: bytes

    def serialize(self) -> bytes:
        """Encode the packet with a new-format header."""
        if not 0 <= self.tag <= 0x3F:
            raise PacketError(f"packet tag out of range: {self.tag}")
        length = len(self.contents)
        header = bytearray([0xC0 | self.tag])
        if length < 192:
            header.append(length)
        elif length < 8384:
            adjusted = length - 192
            header += bytes([192 + (adjusted >> 8), adjusted & 0xFF])
        else:
            header.append(0xFF)
            header += length.to_bytes(4, "big")
        return bytes(header) + self.contents


@dataclass
class OpaqueKeyring:
    """The raw packets belonging to one primary public key."""

    packets: list[OpaquePacket] = field(default_factory=list)
    rfingerprint: str = ""
    md5: str = ""
    sha256: str = ""
    error: Exception | None = None
    position: int = -1


def _read_exact(stream: BinaryIO, count: int) -> bytes:
    data = stream.read(count)
    if len(data) < count:
        raise PacketError("unexpected end of packet data")
    return data


def _read_new_length(stream: BinaryIO) -> tuple[int, bool]:
    """Return a new-format body length and whether it is a partial length."""
    first = _read_exact(stream, 1)[0]
    if first < 192:
        return first, False
    if first < 224:
        second = _read_exact(stream, 1)[0]
        return ((first - 192) << 8) + second + 192, False
    if first < 255:
        return 1 << (first & 0x1F), True
    return int.from_bytes(_read_exact(stream, 4), "big"), False


def _read_packet(stream: BinaryIO) -> OpaquePacket | None:
    header = stream.read(1)
    if not header:
        return None
    first = header[0]
    if not first & 0x80:
        raise PacketError("tag byte does not have MSB set")
    if first & 0x40:
        tag = first & 0x3F
        chunks = []
        while True:
            length, partial = _read_new_length(stream)
            chunks.append(_read_exact(stream, length))
            if not partial:
                break
        return OpaquePacket(tag, b"".join(chunks))
    tag = (first & 0x3F) >> 2
    length_type = first & 0x03
    if length_type == 3:
        return OpaquePacket(tag, stream.read())
    size = (1, 2, 4)[length_type]
    length = int.from_bytes(_read_exact(stream, size), "big")
    return OpaquePacket(tag, _read_exact(stream, length))


def read_opaque_packets(stream: BinaryIO) -> Iterator[OpaquePacket]:
    """Yield packets from a binary stream until it ends; raise PacketError if malformed."""
    while (packet := _read_packet(stream)) is not None:
        yield packet


def _stream_position(stream: BinaryIO) -> int:
    try:
        if stream.seekable():
            return stream.tell()
    except (AttributeError, OSError, ValueError):
        pass
    return -1


def read_opaque_keyrings(stream: BinaryIO) -> Iterator[OpaqueKeyring]:
    """Group packets into keyrings, each starting at a primary public key.

    A read error ends the sequence with a keyring carrying the error.
    Packets of kinds that do not belong in a public keyring are skipped.
    """
    current: OpaqueKeyring | None = None
    produced = False
    try:
        for packet in read_opaque_packets(stream):
            if packet.tag == PUBLIC_KEY_TAG:
                if current is not None:
                    produced = True
                    yield current
                current = OpaqueKeyring(position=_stream_position(stream))
            if current is not None and packet.tag in _KEYRING_TAGS:
                current.packets.append(packet)
    except PacketError as exc:
        if current is None:
            current = OpaqueKeyring()
        current.error = exc
        yield current
        return
    if current is not None:
        yield current
    elif not produced:
        yield OpaqueKeyring(error=PacketError("unexpected end of input"))


def sks_digest_opaque(packets: Iterable[OpaquePacket], hash_name: str) -> str:
    """Digest packets in the order the synchronizing key server uses, as hex."""
    digest = hashlib.new(hash_name)
    for packet in sorted(packets, key=lambda p: p.contents):
        digest.update(struct.pack(">ii", packet.tag, len(packet.contents)))
        digest.update(packet.contents)
    return digest.hexdigest()