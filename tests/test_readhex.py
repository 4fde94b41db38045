from pathlib import Path

import pytest

from akiradecrypt.readhex import main, read_u64


@pytest.fixture
def sample(tmp_path: Path) -> Path:
    path = tmp_path / "data.bin"
    path.write_bytes(bytes(range(32)))
    return path


def test_read_at_start(sample: Path) -> None:
    assert read_u64(sample) == int.from_bytes(bytes(range(8)), "little")


@pytest.mark.parametrize("offset", [1, 8, 24])
def test_read_at_offset(sample: Path, offset: int) -> None:
    expected = int.from_bytes(bytes(range(offset, offset + 8)), "little")
    assert read_u64(sample, offset) == expected


def test_read_max_value(tmp_path: Path) -> None:
    path = tmp_path / "ones.bin"
    path.write_bytes(b"\xff" * 8)
    assert read_u64(path) == 2**64 - 1


def test_short_read(sample: Path) -> None:
    with pytest.raises(ValueError):
        read_u64(sample, 28)


def test_negative_offset(sample: Path) -> None:
    with pytest.raises(ValueError):
        read_u64(sample, -1)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_u64(tmp_path / "missing.bin")


def test_main_prints_hex(sample: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(sample)]) == 0
    assert capsys.readouterr().out == "0x0706050403020100\n"


def test_main_with_offset(sample: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(sample), "8"]) == 0
    expected = int.from_bytes(bytes(range(8, 16)), "little")
    assert capsys.readouterr().out == f"0x{expected:016x}\n"


def test_main_usage(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_main_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(tmp_path / "missing.bin")]) == 1
    assert capsys.readouterr().out == ""