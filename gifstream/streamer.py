"""Streaming GIF encoder.

The GIF header has to say up front whether the file is an animation, and an
animation needs its looping extension before the first image block. Knowing
that only takes two frames, so ``StreamWriter`` keeps at most two frames
back, commits the header once it has seen the second one (or on close), and
from then on writes every frame straight to the sink.

Example::

    with open("out.gif", "wb") as f, StreamWriter(f, loop_count=0) as writer:
        for frame in frames:
            writer.add_frame(frame)
"""

from __future__ import annotations

import enum
import logging
from typing import BinaryIO, List, Optional

from .blocks import BlockWriter
from .errors import AlreadyClosedError, EmptyStreamError, GIFStreamError
from .frame import Frame
from .options import GlobalConfig, StreamOptions, resolve_config

logger = logging.getLogger(__name__)


class StreamState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"


class StreamWriter:
    """Encodes frames to ``sink`` one at a time.

    Not safe for concurrent use; calls must be serialized by the caller. The
    sink stays open after ``close``; the caller owns it.

    Args:
        sink: Binary file-like object with ``write`` (``flush`` is optional).
        loop_count: 0 loops forever, -1 plays once, N loops N + 1 times.
        config: Canvas size and global color table. None means
            ``GlobalConfig()``: canvas from the first frame, no global table.
        background_index: Global color table index for ``Disposal.BACKGROUND``.
    """

    LOOKAHEAD = 2

    def __init__(
        self,
        sink: BinaryIO,
        loop_count: int = 0,
        config: Optional[GlobalConfig] = None,
        background_index: int = 0,
    ):
        self._blocks = BlockWriter(sink)
        self._loop_count = loop_count
        self._config = config if config is not None else GlobalConfig()
        self._background_index = background_index
        self._state = StreamState.UNINITIALIZED
        self._pending: List[Frame] = []
        self._frames_written = 0
        self._error: Optional[GIFStreamError] = None

    @classmethod
    def from_options(cls, sink: BinaryIO, options: StreamOptions) -> "StreamWriter":
        return cls(
            sink,
            loop_count=options.loop_count,
            config=options.config,
            background_index=options.background_index,
        )

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is StreamState.CLOSED

    @property
    def pending(self) -> int:
        """Frames accepted but not yet written."""
        return len(self._pending)

    @property
    def frames_written(self) -> int:
        return self._frames_written

    @property
    def config(self) -> GlobalConfig:
        """The resolved configuration once the header is committed."""
        return self._config

    @property
    def loop_count(self) -> int:
        return self._loop_count

    @property
    def background_index(self) -> int:
        return self._background_index

    def add_frame(self, frame: Frame) -> None:
        """Accept the next frame.

        The first frame is only buffered. The second one commits the header
        and writes both. Later frames are written immediately.

        Once an add or close has failed, every later call raises that same
        error.

        Raises:
            AlreadyClosedError: The writer was closed.
            ConfigurationError: The configuration cannot be encoded; nothing
                has been written.
            FrameError: The frame cannot be placed on the canvas.
            SinkError: The sink failed.
        """
        if self._state is StreamState.CLOSED:
            raise AlreadyClosedError("streamer is already closed")
        if self._error is not None:
            raise self._error
        if not isinstance(frame, Frame):
            raise TypeError(f"expected a Frame, got {type(frame).__name__}")

        try:
            if self._state is StreamState.INITIALIZED:
                self._blocks.write_frame(frame)
                self._frames_written += 1
                return

            self._pending.append(frame)
            if len(self._pending) < self.LOOKAHEAD:
                return
            self._commit()
        except GIFStreamError as exc:
            self._error = exc
            raise

    def _commit(self) -> None:
        config = resolve_config(
            self._config,
            self._pending[0],
            self._loop_count,
            self._background_index,
        )
        animated = len(self._pending) >= 2
        logger.debug(
            "committing header with %d buffered frame(s), animated=%s",
            len(self._pending),
            animated,
        )

        # Encode the buffered frames first so a frame that cannot be placed
        # fails before the header reaches the sink.
        self._blocks.configure(config)
        encoded = [self._blocks.frame_block(frame) for frame in self._pending]

        self._config = config
        self._blocks.write_header(config, self._background_index, self._loop_count, animated)
        self._state = StreamState.INITIALIZED

        self._pending = []
        for data in encoded:
            self._blocks.write_block(data)
            self._frames_written += 1

    def close(self) -> None:
        """Write the trailer and flush the sink.

        Closing an already closed writer does nothing. If an earlier call
        failed, no trailer is written and that error is raised again.

        Raises:
            EmptyStreamError: No frame was ever added; nothing was written.
            ConfigurationError: The configuration cannot be encoded.
            FrameError: A buffered frame cannot be placed on the canvas.
            SinkError: The sink failed.
        """
        if self._state is StreamState.CLOSED:
            return
        if self._error is not None:
            raise self._error
        if self._state is StreamState.UNINITIALIZED and not self._pending:
            raise EmptyStreamError("must provide at least one image")

        try:
            if self._state is StreamState.UNINITIALIZED:
                self._commit()
            self._blocks.write_trailer()
            self._blocks.flush()
        except GIFStreamError as exc:
            self._error = exc
            raise

        self._state = StreamState.CLOSED
        logger.debug(
            "closed stream: %d frame(s), %d bytes",
            self._frames_written,
            self._blocks.bytes_written,
        )

    def __enter__(self) -> "StreamWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
