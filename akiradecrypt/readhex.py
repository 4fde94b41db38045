"""Print the 64-bit little-endian word stored at an offset in a file."""

from __future__ import annotations

import os
import re
import sys
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]


def read_u64(path: PathLike, offset: int = 0) -> int:
    """Return the unsigned 64-bit little-endian value at ``offset`` in ``path``."""
    if offset < 0:
        raise ValueError(f"offset must not be negative, got {offset}")
    with open(path, "rb") as fp:
        fp.seek(offset)
        raw = fp.read(8)
    if len(raw) != 8:
        raise ValueError(f"only {len(raw)} bytes available at offset {offset}")
    return int.from_bytes(raw, "little")


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def main(argv: list[str] | None = None) -> int:
    """Command line entry: ``<filename> [offset]``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: readhex <filename> [offset]", file=sys.stderr)
        return 1
    offset = _atoi(args[1]) if len(args) > 1 else 0
    try:
        value = read_u64(args[0], offset)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    print(f"0x{value:016x}")
    return 0