# akiradecrypt

Tools for recovering files encrypted by the Linux/ESXi variant of the Akira
ransomware. They are useful when the moments at which its four keys were
generated are known.

That variant derives each key from a Yarrow-256 generator. The generator is
seeded with the current time in nanoseconds, written as a decimal string.
Given those four timestamps, the keys can be generated again and the file
decrypted in place.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## How an encrypted file is laid out

* The last 512 bytes of the file are a trailer added by the encryptor.
* 15 % of the remaining data is encrypted. It is split into blocks spread
  over the file. `akiradecrypt.decrypt.compute_blocks(filesize, percent)`
  returns a `BlockLayout` with these fields:
  * `enc_block_size`: the size of each encrypted block.
  * `part_size`: the distance between the starts of the blocks.
  * `encrypted_parts`: the number of encrypted blocks.

  `BlockLayout.regions()` lists the blocks as `(start, end)` byte ranges.
* Each block is processed in chunks of at most 65535 bytes. The first and
  last chunk of every block use KCipher-2. The chunks in between use ChaCha8.
* There are four keys, each from its own timestamp:
  * a 32-byte ChaCha8 key (only its first 16 bytes are used)
  * a 16-byte ChaCha8 nonce (only its first 8 bytes are used)
  * a 16-byte KCipher-2 key
  * a 16-byte KCipher-2 IV

## Commands

### Decrypt a file

```
akira-decrypt <filename> <t1> <t2> <t3> <t4>
```

`t1` to `t4` are the nanosecond timestamps behind the four keys, in this
order:

1. the ChaCha8 key
2. the ChaCha8 nonce
3. the KCipher-2 key
4. the KCipher-2 IV

The file is decrypted in place and its 512-byte trailer is cut off. If the
path contains `.akira`, the file is then renamed with the last six
characters of its path removed. The keys and progress are logged at INFO
level.

With fewer than five arguments, the command prints a usage line and does
nothing else. Work on a copy of the file: a wrong set of timestamps leaves
it garbled, and nothing warns you.

### Turn a timestamp log into keys

```
akira-read-log <logfile>
```

Reads a binary log of little-endian 64-bit nanosecond timestamps. For each
one, it prints a line of the form `t = <timestamp>: <hex>`, where `<hex>` is
the 32 bytes Yarrow-256 produces from that timestamp. Reading stops at the
first value outside 1700000000000000000 to 1800000000000000000.

### Patch a sample for analysis

```
akira-patch timing <input> <output> [--patch-dir DIR]
akira-patch public-key <input_elf> <public_der> <output_elf>
akira-patch zero-time <input> <output>
```

* `timing` copies the input to the output and writes four patches to the
  copy. The patches are read from `patch1.bin` to `patch4.bin` in `--patch-dir`
  (default: the current directory) and go at offsets `0x9149f`, `0x7f0e`,
  `0x466ea` and `0x9650`. The bytes at each offset are printed before and
  after patching.
* `public-key` writes a copy of the executable with a replacement public key.
  The key must be a DER-encoded RSA public key of exactly 526 bytes. It is
  zero-padded to 4096 bytes and written at offset `0x2a76c0`.
* `zero-time` writes a copy with the bytes `31 c0 c3` (`xor eax, eax; ret`)
  at offset `0x916f4`.

On a failed patch, the command prints the error to stderr and exits with
status 1.

### Read a 64-bit value from a file

```
akira-readhex <filename> [offset]
```

Prints the little-endian 64-bit value at `offset` (default 0) as `0x`
followed by sixteen hex digits.

## Using the library

```python
from akiradecrypt.yarrow import gen_key
from akiradecrypt.decrypt import compute_blocks, decrypt_file, decrypt_file_bykey

key = gen_key(1739876543000000000, 32)
layout = compute_blocks(1_000_000, 15)
print(layout.regions())
```

Both `decrypt_file(filename, t1, t2, t3, t4)` and
`decrypt_file_bykey(filename, chacha8_key, chacha8_nonce, kcipher2_key, kcipher2_iv)`
return the path the decrypted file ends up at.

The building blocks can also be used on their own:

* `akiradecrypt.chacha8.ChaCha8`, with these methods:
  * `keystream(pos, n_blocks)`
  * `xor_keystream(data, pos)`
  * `first_block()`
* `akiradecrypt.kcipher2.KCipher2`, with `encrypt(data)`.
* `akiradecrypt.kcipher2.KCipher2Stream`, which buffers the keystream across
  calls to `xor(data)`.
* `akiradecrypt.kcipher2` also provides the helper functions `sub_k2`, `nlf`,
  `key_expansion`, `gf_multiply_by_2` and `gf_multiply_by_3`.
* `akiradecrypt.yarrow.Yarrow256`, with `seed(data)` and `random(length)`,
  and the `yarrow_iterate` helper.
* `akiradecrypt.patching`, with these functions:
  * `patch_file(path, patch, offset)`
  * `apply_timing_patches(input_path, output_path, patch_dir)`
  * `patch_public_key(input_elf, public_der, output_elf)`
  * `patch_zero_time(input_path, output_path)`

  They raise `PatchError` on failure.
* `akiradecrypt.readhex.read_u64(path, offset)`.
* `akiradecrypt.readlog.read_timestamps(data)`.

## What the package does not do

* It does not search for the timestamps. You must supply all four, for
  example from a timing log read with `akira-read-log`.
* It does not build the four timing patch files. They must already exist as
  raw binary files.
* It does not check that a decryption succeeded. Any set of timestamps
  produces some output.