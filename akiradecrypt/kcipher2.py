"""KCipher-2 stream cipher and a buffered keystream XOR helper."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from typing import Union

from .kcipher2_tables import AMUL0, AMUL1, AMUL2, AMUL3, S_BOX

_MASK = 0xFFFFFFFF
_INIT_ROUNDS = 24
_STREAM_BLOCK = 64
_MAX_REQUEST = 128 * 1024

KeyMaterial = Union[bytes, bytearray, memoryview, Sequence[int]]


def gf_multiply_by_2(t: int) -> int:
    """Multiply a byte by 2 in GF(2^8), complemented as the cipher tables expect."""
    lq = (t & 0xFF) << 1
    if lq & 0x100:
        lq ^= 0x011B
    return (lq & 0xFF) ^ 0xFF


def gf_multiply_by_3(t: int) -> int:
    """Multiply a byte by 3 in GF(2^8), complemented as the cipher tables expect."""
    t &= 0xFF
    lq = (t << 1) ^ t
    if lq & 0x100:
        lq ^= 0x011B
    return (lq & 0xFF) ^ 0xFF


def _build_sub_tables() -> tuple[tuple[int, ...], ...]:
    # The complement in the two multiply helpers cancels pairwise in every
    # output byte, so the plain products are used for the per-byte tables.
    t0, t1, t2, t3 = [], [], [], []
    for value in range(256):
        s = S_BOX[value]
        m2 = gf_multiply_by_2(s) ^ 0xFF
        m3 = gf_multiply_by_3(s) ^ 0xFF
        t0.append(m3 << 24 | s << 16 | s << 8 | m2)
        t1.append(s << 24 | s << 16 | m2 << 8 | m3)
        t2.append(s << 24 | m2 << 16 | m3 << 8 | s)
        t3.append(m2 << 24 | m3 << 16 | s << 8 | s)
    return tuple(t0), tuple(t1), tuple(t2), tuple(t3)


_T0, _T1, _T2, _T3 = _build_sub_tables()


def sub_k2(value: int) -> int:
    """Apply the AES S-box and MixColumns step to a 32-bit word."""
    return (
        _T0[value & 0xFF]
        ^ _T1[(value >> 8) & 0xFF]
        ^ _T2[(value >> 16) & 0xFF]
        ^ _T3[(value >> 24) & 0xFF]
    )


def nlf(a: int, b: int, c: int, d: int) -> int:
    """The non-linear function ``(a + b) ^ c ^ d`` on 32-bit words."""
    return ((a + b) & _MASK) ^ c ^ d


def _words(value: KeyMaterial, name: str) -> tuple[int, ...]:
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) != 16:
            raise ValueError(f"{name} must be 16 bytes, got {len(raw)}")
        return struct.unpack(">4I", raw)
    words = tuple(value)
    if len(words) != 4:
        raise ValueError(f"{name} must have 4 words, got {len(words)}")
    if any(not isinstance(w, int) or not 0 <= w <= _MASK for w in words):
        raise ValueError(f"{name} words must be 32-bit unsigned integers")
    return words


def key_expansion(key: KeyMaterial, iv: KeyMaterial) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Expand a key into the 12 internal key words.

    ``key`` and ``iv`` are either four 32-bit words or 16 bytes read as
    big-endian words. Returns ``(ik, iv_words)``.
    """
    ik = list(_words(key, "key"))
    iv_words = _words(iv, "iv")

    def rot8(w: int) -> int:
        return ((w << 8) & _MASK) ^ (w >> 24)

    ik.append(ik[0] ^ sub_k2(rot8(ik[3])) ^ 0x01000000)
    ik.append(ik[1] ^ ik[4])
    ik.append(ik[2] ^ ik[5])
    ik.append(ik[3] ^ ik[6])
    ik.append(ik[4] ^ sub_k2(rot8(ik[7])) ^ 0x02000000)
    ik.append(ik[5] ^ ik[8])
    ik.append(ik[6] ^ ik[9])
    ik.append(ik[7] ^ ik[10])
    return tuple(ik), iv_words


class KCipher2:
    """KCipher-2 cipher state, initialised from a key and IV."""

    def __init__(self, key: KeyMaterial, iv: KeyMaterial) -> None:
        ik, ivw = key_expansion(key, iv)
        self.a = [ik[4], ik[3], ik[2], ik[1], ik[0]]
        self.b = [
            ik[10], ik[11], ivw[0], ivw[1], ik[8], ik[9],
            ivw[2], ivw[3], ik[7], ik[5], ik[6],
        ]
        self.l1 = self.r1 = self.l2 = self.r2 = 0
        for _ in range(_INIT_ROUNDS):
            self._next(init=True)

    def _next(self, init: bool) -> None:
        a, b = self.a, self.b
        n_l1 = sub_k2((self.r2 + b[4]) & _MASK)
        n_r1 = sub_k2((self.l2 + b[9]) & _MASK)
        n_l2 = sub_k2(self.l1)
        n_r2 = sub_k2(self.r1)

        a0 = a[0]
        new_a = ((a0 << 8) & _MASK) ^ AMUL0[a0 >> 24] ^ a[3]

        b0 = b[0]
        table = AMUL1 if a[2] & 0x40000000 else AMUL2
        temp1 = ((b0 << 8) & _MASK) ^ table[b0 >> 24]
        b8 = b[8]
        temp2 = ((b8 << 8) & _MASK) ^ AMUL3[b8 >> 24] if a[2] & 0x80000000 else b8
        new_b = temp1 ^ b[1] ^ b[6] ^ temp2

        if init:
            new_a ^= nlf(b0, self.r2, self.r1, a[4])
            new_b ^= nlf(b[10], self.l2, self.l1, a0)

        self.a = a[1:] + [new_a]
        self.b = b[1:] + [new_b]
        self.l1, self.r1, self.l2, self.r2 = n_l1, n_r1, n_l2, n_r2

    def _stream(self) -> int:
        zh = nlf(self.b[10], self.l2, self.l1, self.a[0])
        zl = nlf(self.b[0], self.r2, self.r1, self.a[4])
        return zh << 32 | zl

    def encrypt(self, data: bytes) -> bytes:
        """Combine ``data`` with the next keystream words, advancing the state.

        Each full 8-byte word is read little-endian, XORed with the keystream
        word and written big-endian; a trailing partial word is XORed with the
        little-endian bytes of one more keystream word.
        """
        data = bytes(data)
        full = len(data) - len(data) % 8
        out = bytearray()
        for (word,) in struct.iter_unpack("<Q", data[:full]):
            ks = self._stream()
            self._next(init=False)
            out += struct.pack(">Q", word ^ ks)
        tail = data[full:]
        if tail:
            ks_bytes = self._stream().to_bytes(8, "little")
            self._next(init=False)
            out += bytes(x ^ k for x, k in zip(tail, ks_bytes))
        return bytes(out)


class KCipher2Stream:
    """Buffered keystream that XORs successive chunks of data."""

    def __init__(self, cipher: KCipher2) -> None:
        self.cipher = cipher
        self._buffer = bytearray()

    @property
    def remaining(self) -> int:
        """Number of keystream bytes generated but not yet used."""
        return len(self._buffer)

    def xor(self, data: bytes) -> bytes:
        """XOR ``data`` with the next ``len(data)`` keystream bytes."""
        data = bytes(data)
        size = len(data)
        remaining = len(self._buffer)
        if remaining < size:
            needed = size + remaining
            block_size = -(-needed // _STREAM_BLOCK) * _STREAM_BLOCK
            if block_size >= _MAX_REQUEST:
                raise ValueError(f"keystream request of {block_size} bytes is too large")
            self._buffer += self.cipher.encrypt(bytes(block_size))
        keystream = bytes(self._buffer[:size])
        del self._buffer[:size]
        value = int.from_bytes(data, "little") ^ int.from_bytes(keystream, "little")
        return value.to_bytes(size, "little")