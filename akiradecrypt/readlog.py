"""Print the keys derived from timestamps recorded in a binary log."""

from __future__ import annotations

import struct
import sys

from .yarrow import gen_key

LOWEST_TIMESTAMP = 1700000000000000000
HIGHEST_TIMESTAMP = 1800000000000000000


def read_timestamps(data: bytes) -> list[int]:
    """Return the leading 64-bit little-endian timestamps that fall in the valid range."""
    data = bytes(data)
    usable = len(data) - len(data) % 8
    timestamps = []
    for (value,) in struct.iter_unpack("<Q", data[:usable]):
        if not LOWEST_TIMESTAMP <= value <= HIGHEST_TIMESTAMP:
            break
        timestamps.append(value)
    return timestamps


def main(argv: list[str] | None = None) -> int:
    """Command line entry: ``<logfile>``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: read-log <logfile>")
        return 1
    try:
        with open(args[0], "rb") as fp:
            data = fp.read()
    except OSError:
        print(f"Error: Unable to open file {args[0]}")
        return 1
    for t in read_timestamps(data):
        print(f"t = {t}: {gen_key(t, 32).hex()}")
    return 0