from pathlib import Path

import pytest

from akiradecrypt.patching import (
    PUBLIC_KEY_ADDRESS,
    PUBLIC_KEY_PAD_SIZE,
    TIMING_PATCHES,
    ZERO_TIME_OFFSET,
    PatchError,
    apply_timing_patches,
    main,
    patch_file,
    patch_public_key,
    patch_zero_time,
)


def _pattern(size: int) -> bytes:
    return bytes(i % 251 for i in range(size))


def test_patch_file_with_bytes(tmp_path: Path) -> None:
    target = tmp_path / "bin"
    original = _pattern(64)
    target.write_bytes(original)
    before, after = patch_file(target, b"\xaa\xbb\xcc", 10)
    assert before == original[10:13]
    assert after == b"\xaa\xbb\xcc"
    assert target.read_bytes() == original[:10] + b"\xaa\xbb\xcc" + original[13:]


def test_patch_file_from_path(tmp_path: Path) -> None:
    target = tmp_path / "bin"
    target.write_bytes(bytes(32))
    patch = tmp_path / "p.bin"
    patch.write_bytes(b"\x90\x90")
    before, after = patch_file(target, patch, 30)
    assert before == b"\x00\x00"
    assert target.read_bytes()[30:] == b"\x90\x90"
    assert len(target.read_bytes()) == 32


def test_patch_file_past_end(tmp_path: Path) -> None:
    target = tmp_path / "bin"
    target.write_bytes(bytes(8))
    with pytest.raises(PatchError):
        patch_file(target, b"\x01\x02\x03", 6)
    assert target.read_bytes() == bytes(8)


def test_patch_file_missing_target(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        patch_file(tmp_path / "missing", b"\x01", 0)


def _write_patches(directory: Path) -> dict[str, bytes]:
    patches = {}
    for index, (name, _offset) in enumerate(TIMING_PATCHES):
        content = bytes([0xE0 + index]) * (index + 2)
        (directory / name).write_bytes(content)
        patches[name] = content
    return patches


def test_apply_timing_patches(tmp_path: Path) -> None:
    size = max(offset for _, offset in TIMING_PATCHES) + 16
    original = _pattern(size)
    src = tmp_path / "in"
    dst = tmp_path / "out"
    src.write_bytes(original)
    patches = _write_patches(tmp_path)
    results = apply_timing_patches(src, dst, tmp_path)

    assert [offset for offset, _, _ in results] == [offset for _, offset in TIMING_PATCHES]
    assert src.read_bytes() == original
    out = dst.read_bytes()
    assert len(out) == size
    for (name, offset), (_, before, after) in zip(TIMING_PATCHES, results):
        content = patches[name]
        assert before == original[offset : offset + len(content)]
        assert after == content
        assert out[offset : offset + len(content)] == content


def test_apply_timing_patches_missing_patch(tmp_path: Path) -> None:
    src = tmp_path / "in"
    src.write_bytes(bytes(0x9149F + 16))
    with pytest.raises(FileNotFoundError):
        apply_timing_patches(src, tmp_path / "out", tmp_path / "nowhere")


def test_patch_public_key(tmp_path: Path) -> None:
    size = PUBLIC_KEY_ADDRESS + PUBLIC_KEY_PAD_SIZE + 100
    elf = b"\xff" * size
    der = _pattern(526)
    (tmp_path / "in.elf").write_bytes(elf)
    (tmp_path / "key.der").write_bytes(der)
    patch_public_key(tmp_path / "in.elf", tmp_path / "key.der", tmp_path / "out.elf")
    out = (tmp_path / "out.elf").read_bytes()
    assert len(out) == size
    region = out[PUBLIC_KEY_ADDRESS : PUBLIC_KEY_ADDRESS + PUBLIC_KEY_PAD_SIZE]
    assert region[:526] == der
    assert region[526:] == bytes(PUBLIC_KEY_PAD_SIZE - 526)
    assert out[:PUBLIC_KEY_ADDRESS] == elf[:PUBLIC_KEY_ADDRESS]
    assert out[PUBLIC_KEY_ADDRESS + PUBLIC_KEY_PAD_SIZE :] == b"\xff" * 100


def test_patch_public_key_wrong_der_size(tmp_path: Path) -> None:
    (tmp_path / "in.elf").write_bytes(bytes(PUBLIC_KEY_ADDRESS + PUBLIC_KEY_PAD_SIZE))
    (tmp_path / "key.der").write_bytes(bytes(300))
    with pytest.raises(PatchError):
        patch_public_key(tmp_path / "in.elf", tmp_path / "key.der", tmp_path / "out.elf")
    assert not (tmp_path / "out.elf").exists()


def test_patch_public_key_elf_too_small(tmp_path: Path) -> None:
    (tmp_path / "in.elf").write_bytes(bytes(PUBLIC_KEY_ADDRESS + PUBLIC_KEY_PAD_SIZE - 1))
    (tmp_path / "key.der").write_bytes(bytes(526))
    with pytest.raises(PatchError):
        patch_public_key(tmp_path / "in.elf", tmp_path / "key.der", tmp_path / "out.elf")


def test_patch_zero_time(tmp_path: Path) -> None:
    original = _pattern(ZERO_TIME_OFFSET + 50)
    (tmp_path / "in").write_bytes(original)
    patch_zero_time(tmp_path / "in", tmp_path / "out")
    out = (tmp_path / "out").read_bytes()
    assert len(out) == len(original)
    assert out[ZERO_TIME_OFFSET : ZERO_TIME_OFFSET + 3] == b"\x31\xc0\xc3"
    assert out[:ZERO_TIME_OFFSET] == original[:ZERO_TIME_OFFSET]
    assert out[ZERO_TIME_OFFSET + 3 :] == original[ZERO_TIME_OFFSET + 3 :]


def test_patch_zero_time_at_end(tmp_path: Path) -> None:
    original = _pattern(ZERO_TIME_OFFSET)
    (tmp_path / "in").write_bytes(original)
    patch_zero_time(tmp_path / "in", tmp_path / "out")
    assert (tmp_path / "out").read_bytes() == original + b"\x31\xc0\xc3"


def test_patch_zero_time_short_input(tmp_path: Path) -> None:
    (tmp_path / "in").write_bytes(bytes(1000))
    with pytest.raises(PatchError):
        patch_zero_time(tmp_path / "in", tmp_path / "out")


def test_main_zero_time(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "in").write_bytes(bytes(ZERO_TIME_OFFSET + 4))
    out_path = tmp_path / "out"
    assert main(["zero-time", str(tmp_path / "in"), str(out_path)]) == 0
    assert out_path.read_bytes()[ZERO_TIME_OFFSET:] == b"\x31\xc0\xc3\x00"
    assert str(out_path) in capsys.readouterr().out


def test_main_timing_prints_dumps(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = tmp_path / "in"
    src.write_bytes(bytes(0x9149F + 16))
    _write_patches(tmp_path)
    code = main(["timing", str(src), str(tmp_path / "out"), "--patch-dir", str(tmp_path)])
    assert code == 0
    text = capsys.readouterr().out
    assert text.count("Before patching:") == 4
    assert text.count("After patching:") == 4
    assert "e0 e0 " in text


def test_main_reports_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "in").write_bytes(bytes(10))
    assert main(["zero-time", str(tmp_path / "in"), str(tmp_path / "out")]) == 1
    assert capsys.readouterr().err