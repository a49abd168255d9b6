"""Tests for LZW compression and sub-block chunking."""

import io

import numpy as np
import pytest

from conftest import decode_frames
from gifstream import Frame, GlobalConfig, encode_all
from gifstream.lzw import SUB_BLOCK_SIZE, chunk, compress


def test_compress_starts_with_clear_and_ends_with_end_code():
    """Two pixels with 2-bit indexes: clear(4), 0, 1, end(5) at 3 bits each."""
    data = compress([0, 1], 2)
    bits = int.from_bytes(data, "little")
    codes = [(bits >> (3 * i)) & 0x7 for i in range(4)]
    assert codes == [4, 0, 1, 5]
    assert len(data) == 2


def test_compress_empty_input():
    data = compress([], 2)
    bits = int.from_bytes(data, "little")
    assert [(bits >> (3 * i)) & 0x7 for i in range(2)] == [4, 5]


def test_compress_rejects_bad_code_size():
    with pytest.raises(ValueError):
        compress([0], 1)
    with pytest.raises(ValueError):
        compress([0], 9)


def test_chunk_splits_into_sub_blocks():
    data = bytes(range(256)) * 2
    out = chunk(data)

    assert out[0] == SUB_BLOCK_SIZE
    assert out[1 + SUB_BLOCK_SIZE] == SUB_BLOCK_SIZE
    assert out[2 + 2 * SUB_BLOCK_SIZE] == len(data) - 2 * SUB_BLOCK_SIZE
    assert out[-1] == 0
    assert len(out) == len(data) + 4


def test_chunk_empty():
    assert chunk(b"") == b"\x00"


@pytest.mark.parametrize("n_colors", [2, 4, 16, 256])
def test_noise_round_trips_through_decoder(n_colors):
    """Random pixels fill the code table, forcing width growth and resets."""
    rng = np.random.default_rng(n_colors)
    palette = [(i, 255 - i, (i * 7) % 256) for i in range(n_colors)]
    pixels = rng.integers(0, n_colors, size=(120, 130), dtype=np.uint8)
    frame = Frame(pixels, palette=palette)

    sink = io.BytesIO()
    encode_all(sink, [frame], config=GlobalConfig())

    _, _, rgb = decode_frames(sink.getvalue())
    table = np.array(palette, dtype=np.uint8)
    assert np.array_equal(rgb[0], table[pixels])


def test_long_runs_round_trip_through_decoder():
    palette = [(0, 0, 0), (255, 255, 255)]
    pixels = np.zeros((200, 200), dtype=np.uint8)
    pixels[50:150, 20:180] = 1
    frame = Frame(pixels, palette=palette)

    sink = io.BytesIO()
    encode_all(sink, [frame])

    _, _, rgb = decode_frames(sink.getvalue())
    assert np.array_equal(rgb[0], np.array(palette, dtype=np.uint8)[pixels])
