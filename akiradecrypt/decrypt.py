"""Recover files encrypted with ChaCha8 and KCipher-2 using timestamp-derived keys."""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .chacha8 import ChaCha8
from .kcipher2 import KCipher2, KCipher2Stream
from .yarrow import gen_key

TEST_TIMESTAMP = 1739876543000000000
TRAILER_SIZE = 512
PERCENT = 15
ENCRYPTED_EXTENSION = ".akira"

_CHUNK = 0xFFFF
_CHACHA_BLOCK = 64
_U64 = 1 << 64

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def swap32(x: int) -> int:
    """Reverse the byte order of a 32-bit word."""
    return int.from_bytes((x & 0xFFFFFFFF).to_bytes(4, "little"), "big")


@dataclass(frozen=True)
class BlockLayout:
    """Where the encrypted regions of a file lie."""

    enc_block_size: int
    part_size: int
    encrypted_parts: int

    def regions(self) -> list[tuple[int, int]]:
        """Return ``(start, end)`` byte ranges of the encrypted regions."""
        return [
            (self.part_size * i, self.part_size * i + self.enc_block_size)
            for i in range(self.encrypted_parts)
        ]


def compute_blocks(filesize: int, percent: int) -> BlockLayout:
    """Split ``filesize`` bytes into encrypted blocks covering ``percent`` of the data."""
    if filesize < 0:
        raise ValueError("filesize must not be negative")
    if not 0 <= percent <= 0xFF:
        raise ValueError("percent must fit in one byte")
    parts = 5 if percent > 49 else 3
    enc_size = (filesize * percent % _U64) // 100
    enc_block_size = enc_size // parts
    encrypted_parts = parts - 1
    part_size = (filesize - enc_block_size * encrypted_parts) // parts
    return BlockLayout(enc_block_size, part_size, encrypted_parts)


def _hexdump(title: str, data: bytes) -> str:
    return f"{title}: " + "".join(f"{b:02x} " for b in data)


def decrypt_file_bykey(
    filename: PathLike,
    chacha8_key: bytes,
    chacha8_nonce: bytes,
    kcipher2_key: bytes,
    kcipher2_iv: bytes,
) -> Path:
    """Decrypt ``filename`` in place, drop its trailer and strip the extension.

    Returns the path the decrypted file ends up at.
    """
    path = Path(filename)
    filesize = path.stat().st_size
    if filesize < TRAILER_SIZE:
        raise ValueError(f"{path} is smaller than the {TRAILER_SIZE}-byte trailer")

    layout = compute_blocks(filesize - TRAILER_SIZE, PERCENT)
    logger.info("Allocating: %d bytes", layout.enc_block_size)

    chacha = ChaCha8(chacha8_key, chacha8_nonce)
    stream = KCipher2Stream(KCipher2(kcipher2_key, kcipher2_iv))
    chacha_block = 0

    with path.open("r+b") as fp:
        for block_pos, block_end in layout.regions():
            offs = 0
            while offs < layout.enc_block_size:
                enc_size = min(_CHUNK, layout.enc_block_size - offs)
                fp.seek(block_pos + offs)
                chunk = fp.read(enc_size)
                if len(chunk) != enc_size:
                    raise ValueError(
                        f"short read at offset {block_pos + offs}: "
                        f"wanted {enc_size} bytes, got {len(chunk)}"
                    )
                if offs == 0 or layout.enc_block_size <= offs + len(chunk):
                    logger.info(
                        "Decrypting with kcipher2: %d at offs %d", len(chunk), block_pos + offs
                    )
                    plain = stream.xor(chunk)
                else:
                    logger.info("Decrypting with chacha8 %d offs=%d", len(chunk), offs)
                    plain = chacha.xor_keystream(chunk, chacha_block)
                    chacha_block += -(-len(chunk) // _CHACHA_BLOCK)
                fp.seek(block_pos + offs)
                fp.write(plain)
                offs += len(chunk)
        fp.truncate(filesize - TRAILER_SIZE)

    logger.info("Decryption done")
    name = str(path)
    if ENCRYPTED_EXTENSION in name:
        target = Path(name[: -len(ENCRYPTED_EXTENSION)])
        path.rename(target)
        return target
    return path


def decrypt_file(filename: PathLike, t1: int, t2: int, t3: int, t4: int) -> Path:
    """Derive the four keys from timestamps and decrypt ``filename``."""
    chacha8_key = gen_key(t1, 32)
    logger.info("T1 = %d", t1)
    logger.info(_hexdump("chacha8_k8", chacha8_key))
    chacha8_nonce = gen_key(t2, 16)
    logger.info("T2 = %d", t2)
    logger.info(_hexdump("chacha8_nonce", chacha8_nonce))
    kcipher2_key = gen_key(t3, 16)
    logger.info("T3 = %d", t3)
    logger.info(_hexdump("kcipher2_key  ", kcipher2_key))
    kcipher2_iv = gen_key(t4, 16)
    logger.info("T4 = %d", t4)
    logger.info(_hexdump("kcipher2_iv ", kcipher2_iv))
    return decrypt_file_bykey(filename, chacha8_key, chacha8_nonce, kcipher2_key, kcipher2_iv)


def _atoll(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) % _U64 if match else 0


def main(argv: list[str] | None = None) -> int:
    """Command line entry: ``<filename> <t1> <t2> <t3> <t4>``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 5:
        print("Usage: akira-decrypt <filename> <t1> <t2> <t3> <t4>")
        return 0
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    t1, t2, t3, t4 = (_atoll(a) for a in args[1:5])
    decrypt_file(args[0], t1, t2, t3, t4)
    return 0