"""Variable-width LZW compression as used by GIF image data."""

from __future__ import annotations

from typing import Iterable

MAX_CODE_SIZE = 12
MAX_CODE = (1 << MAX_CODE_SIZE) - 1
SUB_BLOCK_SIZE = 255


class _BitPacker:
    """Accumulates codes least-significant bit first."""

    def __init__(self) -> None:
        self.out = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0

    def write(self, code: int, code_size: int) -> None:
        self.bit_buffer |= code << self.bit_count
        self.bit_count += code_size
        while self.bit_count >= 8:
            self.out.append(self.bit_buffer & 0xFF)
            self.bit_buffer >>= 8
            self.bit_count -= 8

    def getvalue(self) -> bytes:
        if self.bit_count:
            self.out.append(self.bit_buffer & 0xFF)
            self.bit_buffer = 0
            self.bit_count = 0
        return bytes(self.out)


def compress(indices: Iterable[int], min_code_size: int) -> bytes:
    """LZW-compress palette indexes into a GIF code stream.

    The stream starts with a clear code and ends with the end-of-information
    code. The dictionary is reset with a clear code when code 4095 would be
    assigned.
    """
    if not 2 <= min_code_size <= 8:
        raise ValueError(f"min_code_size must be in range 2..8, got {min_code_size}")

    clear_code = 1 << min_code_size
    end_code = clear_code + 1

    packer = _BitPacker()
    code_size = min_code_size + 1
    overflow = 1 << code_size
    # Last assigned code.
    hi = end_code
    # (prefix code << 8 | next index) -> code
    table: dict[int, int] = {}

    packer.write(clear_code, code_size)

    it = iter(indices)
    prefix = next(it, None)
    if prefix is None:
        packer.write(end_code, code_size)
        return packer.getvalue()

    for k in it:
        key = (prefix << 8) | k
        code = table.get(key)
        if code is not None:
            prefix = code
            continue

        packer.write(prefix, code_size)
        prefix = k

        hi += 1
        if hi == overflow:
            code_size += 1
            overflow <<= 1
        if hi == MAX_CODE:
            packer.write(clear_code, code_size)
            table.clear()
            code_size = min_code_size + 1
            overflow = 1 << code_size
            hi = end_code
        else:
            table[key] = hi

    packer.write(prefix, code_size)
    hi += 1
    if hi == overflow and code_size < MAX_CODE_SIZE:
        code_size += 1
    packer.write(end_code, code_size)
    return packer.getvalue()


def chunk(data: bytes) -> bytes:
    """Split data into length-prefixed sub-blocks followed by a terminator."""
    out = bytearray()
    for i in range(0, len(data), SUB_BLOCK_SIZE):
        block = data[i : i + SUB_BLOCK_SIZE]
        out.append(len(block))
        out.extend(block)
    out.append(0)  # block terminator
    return bytes(out)
