"""Exceptions raised by the encoder."""


class GIFStreamError(Exception):
    """Base class for every error raised by gifstream."""


class ConfigurationError(GIFStreamError, ValueError):
    """Global configuration cannot be encoded (color model, sizes, loop count)."""


class FrameError(GIFStreamError, ValueError):
    """A frame is malformed or cannot be placed on the canvas."""


class EmptyStreamError(GIFStreamError):
    """The stream was closed before any frame was provided."""


class AlreadyClosedError(GIFStreamError):
    """A frame was submitted to a writer that is already closed."""


class SinkError(GIFStreamError):
    """Writing to or flushing the byte sink failed."""
