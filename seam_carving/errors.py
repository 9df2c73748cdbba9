"""Exceptions raised by the seam carving engine."""


class SeamCarvingError(ValueError):
    """Base class for all seam carving failures."""


class InvalidTargetSize(SeamCarvingError):
    """Target dimensions are larger than the source (or empty)."""


class UnsupportedChannelLayout(SeamCarvingError):
    """Pixel buffer is neither single-channel nor RGB."""
