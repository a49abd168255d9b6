"""Eager encoding of complete frame sequences."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Sequence, Union

from .blocks import BlockWriter
from .errors import EmptyStreamError
from .frame import Frame
from .options import GlobalConfig, resolve_config
from .streamer import StreamWriter


def encode_all(
    sink: BinaryIO,
    frames: Sequence[Frame],
    loop_count: int = 0,
    config: Optional[GlobalConfig] = None,
    background_index: int = 0,
) -> None:
    """Encode a complete sequence of frames to ``sink``.

    The output is byte-identical to adding the same frames to a
    ``StreamWriter`` and closing it.
    """
    frames = list(frames)
    if not frames:
        raise EmptyStreamError("must provide at least one image")

    resolved = resolve_config(
        config if config is not None else GlobalConfig(),
        frames[0],
        loop_count,
        background_index,
    )
    blocks = BlockWriter(sink)
    blocks.write_header(resolved, background_index, loop_count, animated=len(frames) > 1)
    for frame in frames:
        blocks.write_frame(frame)
    blocks.write_trailer()
    blocks.flush()


def write_gif(
    output_path: Union[str, Path],
    frames: Iterable[Frame],
    loop_count: int = 0,
    config: Optional[GlobalConfig] = None,
    background_index: int = 0,
) -> Path:
    """Stream ``frames`` into a GIF file and return its path.

    ``frames`` may be a generator; it is consumed one frame at a time.
    """
    out = Path(output_path)
    with open(out, "wb") as f:
        writer = StreamWriter(
            f,
            loop_count=loop_count,
            config=config,
            background_index=background_index,
        )
        for frame in frames:
            writer.add_frame(frame)
        writer.close()
    return out
