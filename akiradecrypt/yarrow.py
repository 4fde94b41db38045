"""Yarrow-256 generator seeded from a timestamp, as used to derive keys."""

from __future__ import annotations

import hashlib
import struct

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

RESEED_ITERATIONS = 1500
_BLOCK_SIZE = 16
_DIGEST_SIZE = 32
_COUNTER_MOD = 1 << 128


def yarrow_iterate(digest: bytes) -> bytes:
    """Strengthen a SHA-256 digest by repeated hashing of ``v_i | v_0 | i``."""
    digest = bytes(digest)
    if len(digest) != _DIGEST_SIZE:
        raise ValueError(f"digest must be {_DIGEST_SIZE} bytes")
    v0 = digest
    for i in range(1, RESEED_ITERATIONS):
        digest = hashlib.sha256(digest + v0 + struct.pack(">I", i)).digest()
    return digest


class Yarrow256:
    """Yarrow-256 generator without entropy sources, using the fast pool only."""

    def __init__(self) -> None:
        self._pool = hashlib.sha256()
        self._encryptor = None
        self._counter = 0

    @property
    def seeded(self) -> bool:
        return self._encryptor is not None

    def _set_key(self, key: bytes) -> None:
        self._encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()

    def _generate_block(self) -> bytes:
        block = self._encryptor.update(self._counter.to_bytes(_BLOCK_SIZE, "big"))
        self._counter = (self._counter + 1) % _COUNTER_MOD
        return block

    def _fast_reseed(self) -> None:
        if self.seeded:
            self._pool.update(self._generate_block() + self._generate_block())
        digest = self._pool.digest()
        self._pool = hashlib.sha256()
        self._set_key(yarrow_iterate(digest))
        self._counter = int.from_bytes(self._encryptor.update(bytes(_BLOCK_SIZE)), "big")

    def _gate(self) -> None:
        self._set_key(self._generate_block() + self._generate_block())

    def seed(self, data: bytes) -> None:
        """Feed seed material into the fast pool and reseed."""
        data = bytes(data)
        if not data:
            raise ValueError("seed must not be empty")
        self._pool.update(data)
        self._fast_reseed()

    def random(self, length: int) -> bytes:
        """Return ``length`` random bytes, then rekey the generator."""
        if not self.seeded:
            raise RuntimeError("generator has not been seeded")
        if length < 0:
            raise ValueError("length must not be negative")
        blocks = -(-length // _BLOCK_SIZE)
        out = b"".join(self._generate_block() for _ in range(blocks))[:length]
        self._gate()
        return out


def gen_key(t: int, size: int) -> bytes:
    """Derive ``size`` bytes from a generator seeded with the decimal text of ``t``.

    ``t`` is treated as a signed 64-bit value.
    """
    signed = (t + (1 << 63)) % (1 << 64) - (1 << 63)
    generator = Yarrow256()
    generator.seed(str(signed).encode("ascii"))
    return generator.random(size)