"""Recovery of Akira-encrypted files: ChaCha8, KCipher-2, Yarrow-256 key derivation and tools."""

__version__ = "0.1.0"

__all__ = [
    "chacha8",
    "kcipher2",
    "kcipher2_tables",
    "yarrow",
    "decrypt",
    "readlog",
    "patching",
    "readhex",
]