"""ChaCha with eight rounds, keyed with a 128-bit key and a 64-bit nonce."""

from __future__ import annotations

import struct

_MASK = 0xFFFFFFFF
_BLOCK_SIZE = 64
_TAU = b"expand 16-byte k"
_COLUMN_ROUNDS = ((3, 7, 11, 15), (2, 6, 10, 14), (1, 5, 9, 13), (0, 4, 8, 12))
_DIAGONAL_ROUNDS = ((0, 5, 10, 15), (1, 6, 11, 12), (2, 7, 8, 13), (3, 4, 9, 14))


def _rotl(value: int, count: int) -> int:
    return ((value << count) | (value >> (32 - count))) & _MASK


def _quarter_round(x: list[int], a: int, b: int, c: int, d: int) -> None:
    x[a] = (x[a] + x[b]) & _MASK
    x[d] = _rotl(x[d] ^ x[a], 16)
    x[c] = (x[c] + x[d]) & _MASK
    x[b] = _rotl(x[b] ^ x[c], 12)
    x[a] = (x[a] + x[b]) & _MASK
    x[d] = _rotl(x[d] ^ x[a], 8)
    x[c] = (x[c] + x[d]) & _MASK
    x[b] = _rotl(x[b] ^ x[c], 7)


def _block(state: list[int]) -> bytes:
    x = list(state)
    for _ in range(4):
        for rnd in _COLUMN_ROUNDS:
            _quarter_round(x, *rnd)
        for rnd in _DIAGONAL_ROUNDS:
            _quarter_round(x, *rnd)
    return struct.pack("<16I", *((a + b) & _MASK for a, b in zip(x, state)))


class ChaCha8:
    """ChaCha8 keystream generator.

    Only the first 16 bytes of ``key`` and the first 8 bytes of ``iv`` are
    used; the key is placed twice in the state with the 16-byte constant.
    """

    def __init__(self, key: bytes, iv: bytes) -> None:
        key = bytes(key)
        iv = bytes(iv)
        if len(key) < 16:
            raise ValueError("key must be at least 16 bytes")
        if len(iv) < 8:
            raise ValueError("iv must be at least 8 bytes")
        key_words = struct.unpack("<4I", key[:16])
        self.state: tuple[int, ...] = (
            *struct.unpack("<4I", _TAU),
            *key_words,
            *key_words,
            0,
            0,
            *struct.unpack("<2I", iv[:8]),
        )

    def keystream(self, pos: int, n_blocks: int) -> bytes:
        """Return ``n_blocks`` 64-byte keystream blocks starting at block ``pos``."""
        if pos < 0 or n_blocks < 0:
            raise ValueError("pos and n_blocks must not be negative")
        state = list(self.state)
        state[12] = pos & _MASK
        state[13] = (pos >> 32) & _MASK
        out = bytearray()
        for _ in range(n_blocks):
            out += _block(state)
            state[12] = (state[12] + 1) & _MASK
            if state[12] == 0:
                state[13] = (state[13] + 1) & _MASK
        return bytes(out)

    def xor_keystream(self, data: bytes, pos: int) -> bytes:
        """XOR ``data`` with the keystream starting at block ``pos``."""
        length = len(data)
        if length == 0:
            return b""
        stream = self.keystream(pos, -(-length // _BLOCK_SIZE))[:length]
        value = int.from_bytes(data, "little") ^ int.from_bytes(stream, "little")
        return value.to_bytes(length, "little")

    def first_block(self) -> bytes:
        """Return the keystream block at position zero."""
        return self.keystream(0, 1)