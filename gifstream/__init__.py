"""Streaming GIF89a encoder for palette-indexed frames."""

from gifstream.batch import encode_all, write_gif
from gifstream.errors import (
    AlreadyClosedError,
    ConfigurationError,
    EmptyStreamError,
    FrameError,
    GIFStreamError,
    SinkError,
)
from gifstream.frame import Disposal, Frame
from gifstream.options import GlobalConfig, StreamOptions, load_options
from gifstream.streamer import StreamState, StreamWriter

__version__ = "0.1.0"

__all__ = [
    "StreamWriter",
    "StreamState",
    "Frame",
    "Disposal",
    "GlobalConfig",
    "StreamOptions",
    "load_options",
    "encode_all",
    "write_gif",
    "GIFStreamError",
    "ConfigurationError",
    "FrameError",
    "EmptyStreamError",
    "AlreadyClosedError",
    "SinkError",
]
