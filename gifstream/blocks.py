"""GIF89a block serialization over a byte sink."""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from . import lzw
from .errors import FrameError, SinkError
from .frame import MAX_DIMENSION, Frame, encode_color_table, table_size_bits, transparent_index
from .options import GlobalConfig

logger = logging.getLogger(__name__)

SIGNATURE = b"GIF89a"
EXTENSION_INTRODUCER = 0x21
GRAPHIC_CONTROL_LABEL = 0xF9
APPLICATION_LABEL = 0xFF
IMAGE_SEPARATOR = 0x2C
TRAILER = 0x3B

COLOR_TABLE_FLAG = 0x80
COLOR_RESOLUTION = 0x70
TRANSPARENT_FLAG = 0x01


def u16(value: int) -> bytes:
    return bytes((value & 0xFF, (value >> 8) & 0xFF))


def header_block(
    config: GlobalConfig,
    background_index: int,
    loop_count: int,
    animated: bool,
) -> bytes:
    """Signature, logical screen descriptor, global table and looping extension."""
    data = bytearray(SIGNATURE)
    data.extend(u16(config.width))
    data.extend(u16(config.height))

    table = config.color_table
    if table:
        data.append(COLOR_TABLE_FLAG | COLOR_RESOLUTION | table_size_bits(len(table)))
        data.append(background_index)
        data.append(0)  # pixel aspect ratio
        data.extend(encode_color_table(table))
    else:
        data.extend(b"\x00\x00\x00")

    if animated and loop_count >= 0:
        # Netscape loop extension
        data.extend(b"!\xFF\x0BNETSCAPE2.0\x03\x01")
        data.extend(u16(loop_count))
        data.append(0)
    return bytes(data)


def graphic_control_extension(delay: int, disposal: int, transparent: Optional[int]) -> bytes:
    flags = (disposal & 0x07) << 2
    if transparent is not None:
        flags |= TRANSPARENT_FLAG
    return (
        bytes((EXTENSION_INTRODUCER, GRAPHIC_CONTROL_LABEL, 4, flags))
        + u16(delay)
        + bytes((transparent or 0, 0))
    )


class BlockWriter:
    """Writes GIF blocks to a byte sink.

    Every block is assembled in memory and handed to the sink in a single
    ``write`` call. Failures of the sink are raised as SinkError.
    """

    def __init__(self, sink: BinaryIO):
        self.sink = sink
        self.config: Optional[GlobalConfig] = None
        self.global_table: Optional[bytes] = None
        self.bytes_written = 0

    def _write(self, data: bytes) -> None:
        try:
            self.sink.write(data)
        except (OSError, ValueError) as exc:
            raise SinkError(f"failed to write {len(data)} bytes to sink: {exc}") from exc
        self.bytes_written += len(data)

    def configure(self, config: GlobalConfig) -> None:
        """Set the canvas and global table that frame blocks are checked against."""
        self.config = config
        table = config.color_table
        self.global_table = encode_color_table(table) if table else None

    def write_header(
        self,
        config: GlobalConfig,
        background_index: int,
        loop_count: int,
        animated: bool,
    ) -> None:
        """Emit the stream header. ``config`` must already be resolved."""
        self.configure(config)
        table = config.color_table
        logger.debug(
            "header: %dx%d, global table %s, animated=%s, loop_count=%d",
            config.width,
            config.height,
            len(table) if table else "absent",
            animated,
            loop_count,
        )
        self._write(header_block(config, background_index, loop_count, animated))

    def frame_block(self, frame: Frame) -> bytes:
        """Graphic control extension, image descriptor, local table and image data."""
        if self.config is None:
            raise RuntimeError("configure must be called before frames are encoded")

        palette = frame.palette if frame.palette is not None else self.config.color_table
        if not palette:
            raise FrameError("cannot encode image block with empty palette")
        if frame.max_index >= len(palette):
            raise FrameError(f"palette index out of range: {frame.max_index}")

        left, top, right, bottom = frame.bounds
        if right > MAX_DIMENSION or bottom > MAX_DIMENSION:
            raise FrameError("image block is too large to encode")
        if right > self.config.width or bottom > self.config.height:
            raise FrameError(
                f"image block {frame.bounds} is out of canvas bounds "
                f"{self.config.width}x{self.config.height}"
            )

        data = bytearray()
        transparent = transparent_index(palette)
        if frame.delay > 0 or frame.disposal != 0 or transparent is not None:
            data.extend(graphic_control_extension(frame.delay, frame.disposal, transparent))

        data.append(IMAGE_SEPARATOR)
        data.extend(u16(left))
        data.extend(u16(top))
        data.extend(u16(frame.width))
        data.extend(u16(frame.height))

        size_bits = table_size_bits(len(palette))
        table = encode_color_table(palette)
        if table != self.global_table:
            data.append(COLOR_TABLE_FLAG | size_bits)
            data.extend(table)
        else:
            data.append(0)

        min_code_size = max(2, size_bits + 1)
        data.append(min_code_size)
        data.extend(lzw.chunk(lzw.compress(frame.pixels.ravel().tolist(), min_code_size)))
        return bytes(data)

    def write_block(self, data: bytes) -> None:
        """Write an already encoded frame block."""
        self._write(data)

    def write_frame(self, frame: Frame) -> None:
        self._write(self.frame_block(frame))

    def write_trailer(self) -> None:
        self._write(bytes((TRAILER,)))

    def flush(self) -> None:
        flush = getattr(self.sink, "flush", None)
        if flush is None:
            return
        try:
            flush()
        except (OSError, ValueError) as exc:
            raise SinkError(f"failed to flush sink: {exc}") from exc
