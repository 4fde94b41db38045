"""Binary patches applied to an executable: timing patches, public key and zero time."""

from __future__ import annotations

import argparse
import os
import shutil
import sys
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

TIMING_PATCHES = (
    ("patch1.bin", 0x9149F),
    ("patch2.bin", 0x7F0E),
    ("patch3.bin", 0x466EA),
    ("patch4.bin", 0x9650),
)
PUBLIC_KEY_ADDRESS = 0x02A76C0
PUBLIC_KEY_PAD_SIZE = 4096
PUBLIC_KEY_DER_SIZE = 526
ZERO_TIME_OFFSET = 0x916F4
ZERO_TIME_PATCH = b"\x31\xc0\xc3"


class PatchError(Exception):
    """Raised when a patch cannot be applied."""


def _hexdump(data: bytes) -> str:
    return "".join(f"{b:02x} " for b in data)


def patch_file(
    path: PathLike, patch: Union[bytes, bytearray, memoryview, PathLike], offset: int
) -> tuple[bytes, bytes]:
    """Overwrite bytes of ``path`` at ``offset`` with ``patch``.

    ``patch`` is either the patch bytes or the path of a file holding them.
    Returns the bytes found at the offset before and after patching.
    """
    if isinstance(patch, (bytes, bytearray, memoryview)):
        data = bytes(patch)
    else:
        data = Path(patch).read_bytes()
    if offset < 0:
        raise PatchError(f"offset must not be negative, got {offset}")
    with open(path, "r+b") as fp:
        fp.seek(offset)
        before = fp.read(len(data))
        if len(before) != len(data):
            raise PatchError(
                f"{path} holds only {len(before)} of {len(data)} bytes at offset {offset:#x}"
            )
        fp.seek(offset)
        fp.write(data)
        fp.flush()
        fp.seek(offset)
        after = fp.read(len(data))
    if after != data:
        raise PatchError(f"patch at offset {offset:#x} did not stick")
    return before, after


def apply_timing_patches(
    input_path: PathLike, output_path: PathLike, patch_dir: PathLike = "."
) -> list[tuple[int, bytes, bytes]]:
    """Copy ``input_path`` to ``output_path`` and apply the four timing patches.

    The patch files are read from ``patch_dir``. Returns ``(offset, before,
    after)`` for each patch, in the order applied.
    """
    shutil.copyfile(input_path, output_path)
    directory = Path(patch_dir)
    results = []
    for name, offset in TIMING_PATCHES:
        before, after = patch_file(output_path, directory / name, offset)
        results.append((offset, before, after))
    return results


def patch_public_key(input_elf: PathLike, public_der: PathLike, output_elf: PathLike) -> None:
    """Write a copy of ``input_elf`` with the embedded public key replaced.

    The key must be a DER-encoded RSA public key of exactly 526 bytes; it is
    zero-padded to 4096 bytes at the fixed key address.
    """
    elf = bytearray(Path(input_elf).read_bytes())
    der = Path(public_der).read_bytes()
    if len(der) != PUBLIC_KEY_DER_SIZE:
        raise PatchError(
            f"Invalid DER size: expected {PUBLIC_KEY_DER_SIZE} bytes, got {len(der)}"
        )
    if PUBLIC_KEY_ADDRESS + PUBLIC_KEY_PAD_SIZE > len(elf):
        raise PatchError("Patch address out of bounds")
    padded = der.ljust(PUBLIC_KEY_PAD_SIZE, b"\x00")
    elf[PUBLIC_KEY_ADDRESS : PUBLIC_KEY_ADDRESS + PUBLIC_KEY_PAD_SIZE] = padded
    Path(output_elf).write_bytes(bytes(elf))


def patch_zero_time(input_path: PathLike, output_path: PathLike) -> None:
    """Write a copy of ``input_path`` whose time function returns zero."""
    data = Path(input_path).read_bytes()
    if len(data) < ZERO_TIME_OFFSET:
        raise PatchError(
            f"{input_path} is {len(data)} bytes, shorter than the patch offset "
            f"{ZERO_TIME_OFFSET:#x}"
        )
    patched = (
        data[:ZERO_TIME_OFFSET]
        + ZERO_TIME_PATCH
        + data[ZERO_TIME_OFFSET + len(ZERO_TIME_PATCH) :]
    )
    Path(output_path).write_bytes(patched)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="akira-patch", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    timing = sub.add_parser("timing", help="apply the four timing patches")
    timing.add_argument("input")
    timing.add_argument("output")
    timing.add_argument("--patch-dir", default=".")

    key = sub.add_parser("public-key", help="replace the embedded public key")
    key.add_argument("input_elf")
    key.add_argument("public_der")
    key.add_argument("output_elf")

    zero = sub.add_parser("zero-time", help="make the time function return zero")
    zero.add_argument("input")
    zero.add_argument("output")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Command line entry with ``timing``, ``public-key`` and ``zero-time`` commands."""
    args = _parser().parse_args(sys.argv[1:] if argv is None else list(argv))
    try:
        if args.command == "timing":
            for _offset, before, after in apply_timing_patches(
                args.input, args.output, args.patch_dir
            ):
                print("Before patching:")
                print(_hexdump(before))
                print("After patching:")
                print(_hexdump(after))
        elif args.command == "public-key":
            patch_public_key(args.input_elf, args.public_der, args.output_elf)
            print(f"Patched {args.input_elf} and saved to {args.output_elf}")
        else:
            patch_zero_time(args.input, args.output)
            print(f"Successfully created patched file: {args.output}")
    except (PatchError, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0