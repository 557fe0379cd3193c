import hashlib
import io

import pytest

from hockeypuck.openpgp.packets import (
    OpaqueKeyring,
    OpaquePacket,
    PacketError,
    read_opaque_keyrings,
    read_opaque_packets,
    sks_digest_opaque,
)


def _stream(*packets):
    return io.BytesIO(b"".join(p.serialize() for p in packets))


class _Unseekable(io.RawIOBase):
    def __init__(self, data):
        self._inner = io.BytesIO(data)

    def readable(self):
        return True

    def readinto(self, buf):
        data = self._inner.read(len(buf))
        buf[: len(data)] = data
        return len(data)


def test_serialize_short_packet_header():
    packet = OpaquePacket(13, b"alice")
    assert packet.serialize() == bytes([0xC0 | 13, 5]) + b"alice"


def test_serialize_two_byte_length_header_size():
    data = OpaquePacket(17, b"x" * 200).serialize()
    assert 192 <= data[1] < 224
    assert data[3:] == b"x" * 200


@pytest.mark.parametrize("size", [0, 1, 191, 192, 8383, 8384, 70000])
def test_round_trip(size):
    packet = OpaquePacket(2, bytes(range(256)) * (size // 256) + bytes(size % 256))
    assert list(read_opaque_packets(io.BytesIO(packet.serialize()))) == [packet]


def test_serialize_rejects_large_tag():
    with pytest.raises(PacketError):
        OpaquePacket(64, b"").serialize()


def test_old_format_one_byte_length():
    data = bytes([0x80 | (2 << 2), 3]) + b"abc"
    assert list(read_opaque_packets(io.BytesIO(data))) == [OpaquePacket(2, b"abc")]


def test_old_format_two_byte_length():
    data = bytes([0x80 | (6 << 2) | 1, 0, 4]) + b"wxyz"
    assert list(read_opaque_packets(io.BytesIO(data))) == [OpaquePacket(6, b"wxyz")]


def test_old_format_indeterminate_length_reads_rest():
    data = bytes([0x80 | (13 << 2) | 3]) + b"to the end"
    assert list(read_opaque_packets(io.BytesIO(data))) == [
        OpaquePacket(13, b"to the end")
    ]


def test_new_format_partial_lengths_concatenate():
    data = bytes([0xC0 | 17, 0xE0 | 1]) + b"ab" + bytes([1]) + b"c"
    assert list(read_opaque_packets(io.BytesIO(data))) == [OpaquePacket(17, b"abc")]


def test_new_format_four_byte_length():
    data = bytes([0xC0 | 14, 0xFF]) + (3).to_bytes(4, "big") + b"key"
    assert list(read_opaque_packets(io.BytesIO(data))) == [OpaquePacket(14, b"key")]


def test_missing_msb_is_an_error():
    with pytest.raises(PacketError):
        list(read_opaque_packets(io.BytesIO(b"\x00\x01a")))


def test_truncated_packet_is_an_error():
    data = OpaquePacket(13, b"alice").serialize()[:-2]
    with pytest.raises(PacketError):
        list(read_opaque_packets(io.BytesIO(data)))


def test_keyrings_grouped_by_public_key():
    pub1 = OpaquePacket(6, b"pub-one")
    uid = OpaquePacket(13, b"Alice <alice@example.com>")
    sig = OpaquePacket(2, b"sig")
    trust = OpaquePacket(12, b"trust")
    pub2 = OpaquePacket(6, b"pub-two")
    sub = OpaquePacket(14, b"sub")
    rings = list(read_opaque_keyrings(_stream(pub1, uid, sig, trust, pub2, sub)))
    assert [r.packets for r in rings] == [[pub1, uid, sig], [pub2, sub]]
    assert all(r.error is None for r in rings)


def test_keyring_position_after_public_key():
    pub = OpaquePacket(6, b"primary")
    rings = list(read_opaque_keyrings(_stream(pub, OpaquePacket(13, b"uid"))))
    assert rings[0].position == len(pub.serialize())


def test_keyring_position_unseekable():
    data = OpaquePacket(6, b"primary").serialize()
    rings = list(read_opaque_keyrings(io.BufferedReader(_Unseekable(data))))
    assert rings[0].position == -1


def test_keyring_error_on_truncation():
    good = OpaquePacket(6, b"primary")
    data = good.serialize() + OpaquePacket(13, b"user id").serialize()[:-1]
    rings = list(read_opaque_keyrings(io.BytesIO(data)))
    assert len(rings) == 1
    assert rings[0].packets == [good]
    assert isinstance(rings[0].error, PacketError)


def test_empty_input_yields_error_keyring():
    rings = list(read_opaque_keyrings(io.BytesIO(b"")))
    assert len(rings) == 1
    assert rings[0].packets == []
    assert isinstance(rings[0].error, PacketError)


def test_keyring_defaults():
    ring = OpaqueKeyring()
    assert (ring.packets, ring.error, ring.position) == ([], None, -1)


def test_digest_of_nothing_is_empty_hash():
    assert sks_digest_opaque([], "md5") == hashlib.md5(b"").hexdigest()


def test_digest_independent_of_order():
    packets = [OpaquePacket(6, b"zzz"), OpaquePacket(13, b"aaa"), OpaquePacket(2, b"mmm")]
    assert sks_digest_opaque(packets, "sha256") == sks_digest_opaque(
        list(reversed(packets)), "sha256"
    )


def test_digest_depends_on_tag_and_contents():
    base = sks_digest_opaque([OpaquePacket(6, b"abc")], "md5")
    assert base != sks_digest_opaque([OpaquePacket(14, b"abc")], "md5")
    assert base != sks_digest_opaque([OpaquePacket(6, b"abd")], "md5")
    assert len(base) == 32


def test_digest_unknown_hash():
    with pytest.raises(ValueError):
        sks_digest_opaque([], "no-such-hash")