"""
Error taxonomy for the FSBM simulator.

Every failure in a run is fatal: the pipeline is a deterministic,
single-pass batch computation, so nothing here is retried. Each error
also derives from the closest built-in exception so callers that only
know the standard hierarchy can still catch it.
"""


class FSBMError(Exception):
    """Base class for all simulator errors."""


def _plane_name(plane) -> str:
    return getattr(plane, "name", repr(plane))


class ConfigurationError(FSBMError, ValueError):
    """Frame geometry or run configuration is unusable."""


class InputExhaustedError(FSBMError, EOFError):
    """The YUV source ran out of bytes before a plane was complete."""

    def __init__(self, plane, expected: int, received: int, position: int):
        self.plane = plane
        self.expected = expected
        self.received = received
        self.position = position
        super().__init__(
            f"Input exhausted loading {_plane_name(plane)}: expected {expected} bytes, "
            f"got {received} (stream offset {position})"
        )


class InvalidPlaneError(FSBMError, KeyError):
    """An access named a plane identifier outside the six-plane layout."""

    def __init__(self, plane):
        self.plane = plane
        super().__init__(plane)

    def __str__(self):
        return f"Frame type not defined: {self.plane!r}"


class AddressOutOfRangeError(FSBMError, IndexError):
    """A relative offset falls outside its plane."""

    def __init__(self, plane, offset: int, size: int):
        self.plane = plane
        self.offset = offset
        self.size = size
        super().__init__(
            f"Offset {offset} outside {_plane_name(plane)} (plane size {size})"
        )


class PixelValueError(FSBMError, ValueError):
    """A written pixel value does not fit in one byte."""

    def __init__(self, plane, offset: int, value: int):
        self.plane = plane
        self.offset = offset
        self.value = value
        super().__init__(
            f"Pixel value {value} at {_plane_name(plane)}[{offset}] does not fit in a byte"
        )
