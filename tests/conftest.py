"""Shared fixtures and helpers for gifstream tests."""

import io

import numpy as np
import pytest
from PIL import Image

from gifstream import Frame

PALETTE = [
    (0, 0, 0),
    (255, 255, 255),
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
]


def make_frame(seed=0, width=10, height=10, palette=PALETTE, **kwargs):
    """Frame with a deterministic pattern of indexes into ``palette``."""
    n_colors = len(palette) if palette is not None else len(PALETTE)
    y, x = np.mgrid[0:height, 0:width]
    pixels = ((x + 2 * y + seed) % n_colors).astype(np.uint8)
    return Frame(pixels, palette=palette, **kwargs)


def walk_blocks(data):
    """Split a GIF byte stream into its top-level blocks.

    Returns a list of ``(kind, payload)`` where kind is one of ``header``,
    ``gce``, ``netscape``, ``extension``, ``image`` or ``trailer``.
    """
    assert data[:6] == b"GIF89a"
    flags = data[10]
    pos = 13
    if flags & 0x80:
        pos += 3 * (2 << (flags & 0x07))
    blocks = [("header", data[:pos])]

    while pos < len(data):
        start = pos
        marker = data[pos]
        if marker == 0x3B:
            blocks.append(("trailer", data[pos : pos + 1]))
            pos += 1
        elif marker == 0x21:
            label = data[pos + 1]
            pos += 2
            pos = _skip_sub_blocks(data, pos)
            payload = data[start:pos]
            if label == 0xF9:
                kind = "gce"
            elif label == 0xFF and payload[3:14] == b"NETSCAPE2.0":
                kind = "netscape"
            else:
                kind = "extension"
            blocks.append((kind, payload))
        elif marker == 0x2C:
            local_flags = data[pos + 9]
            pos += 10
            if local_flags & 0x80:
                pos += 3 * (2 << (local_flags & 0x07))
            pos += 1  # LZW minimum code size
            pos = _skip_sub_blocks(data, pos)
            blocks.append(("image", data[start:pos]))
        else:
            raise AssertionError(f"unexpected block marker {marker:#04x} at {pos}")
    return blocks


def _skip_sub_blocks(data, pos):
    while True:
        size = data[pos]
        pos += 1
        if size == 0:
            return pos
        pos += size


def block_kinds(data):
    return [kind for kind, _ in walk_blocks(data)]


def decode_frames(data):
    """Decode with Pillow; returns (canvas size, loop info, RGB arrays per frame)."""
    with Image.open(io.BytesIO(data)) as img:
        size = img.size
        loop = img.info.get("loop")
        rgb = []
        for i in range(img.n_frames):
            img.seek(i)
            rgb.append(np.asarray(img.convert("RGB")))
    return size, loop, rgb


def frame_controls(data):
    """(delay, disposal, transparent index) for every image block, in order.

    Images without a graphic control extension report ``(0, 0, None)``.
    """
    controls = []
    current = (0, 0, None)
    for kind, payload in walk_blocks(data):
        if kind == "gce":
            flags = payload[3]
            delay = payload[4] | (payload[5] << 8)
            transparent = payload[6] if flags & 0x01 else None
            current = (delay, (flags >> 2) & 0x07, transparent)
        elif kind == "image":
            controls.append(current)
            current = (0, 0, None)
    return controls


def expected_rgb(frame, palette=None):
    table = np.array([c[:3] for c in (frame.palette or palette)], dtype=np.uint8)
    return table[frame.pixels]


class FailingSink:
    """Sink that raises OSError after ``fail_after`` successful writes."""

    def __init__(self, fail_after=0):
        self.fail_after = fail_after
        self.writes = []
        self.flushed = False

    def write(self, data):
        if len(self.writes) >= self.fail_after:
            raise OSError("disk full")
        self.writes.append(bytes(data))
        return len(data)

    def flush(self):
        self.flushed = True


@pytest.fixture
def sink():
    return io.BytesIO()
