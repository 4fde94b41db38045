"""Lookup tables for the KCipher-2 stream cipher, built at import time."""


def _gf_mul(a: int, b: int, poly: int) -> int:
    """Multiply two bytes in GF(2^8) reduced by ``poly``."""
    result = 0
    while b:
        if b & 1:
            result ^= a
        a <<= 1
        if a & 0x100:
            a ^= poly
        b >>= 1
    return result


def _rotl8(value: int, count: int) -> int:
    return ((value << count) | (value >> (8 - count))) & 0xFF


def _aes_sbox() -> tuple[int, ...]:
    """The AES S-box: multiplicative inverse followed by the affine map."""
    table = []
    for x in range(256):
        inverse = 0
        if x:
            # x^254 is the inverse of x in GF(2^8).
            inverse, base, exponent = 1, x, 254
            while exponent:
                if exponent & 1:
                    inverse = _gf_mul(inverse, base, 0x11B)
                base = _gf_mul(base, base, 0x11B)
                exponent >>= 1
        value = inverse
        for shift in range(1, 5):
            value ^= _rotl8(inverse, shift)
        table.append(value ^ 0x63)
    return tuple(table)


def _word_table(word: int, poly: int) -> tuple[int, ...]:
    """Multiply every byte lane of ``word`` by each byte value in GF(2^8)."""
    lanes = word.to_bytes(4, "big")
    return tuple(
        int.from_bytes(bytes(_gf_mul(t, lane, poly) for lane in lanes), "big")
        for t in range(256)
    )


S_BOX = _aes_sbox()

AMUL0 = _word_table(0xB6086D1A, 0x1C3)
AMUL1 = _word_table(0xA0F5FC2E, 0x12D)
AMUL2 = _word_table(0x5BF87F93, 0x14D)
AMUL3 = _word_table(0x4559568B, 0x165)