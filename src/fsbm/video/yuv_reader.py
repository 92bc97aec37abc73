import logging
from typing import BinaryIO

import numpy as np

from ..errors import InputExhaustedError
from ..memory.frame_memory import FrameMemory
from ..memory.layout import Plane, resolve_plane

logger = logging.getLogger(__name__)


class YUVReader:
    """
    Sequential reader over a raw planar YUV 4:2:0 stream.

    Tracks how many bytes have been consumed so truncation errors can
    point at the stream position.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.position = 0

    def read_exact(self, size: int, plane) -> bytes:
        """Read exactly size bytes or raise InputExhaustedError."""
        data = self.stream.read(size)
        received = len(data)
        if received < size:
            raise InputExhaustedError(plane, size, received, self.position)
        self.position += received
        return data


class FrameLoader:
    """Streams plane bytes from a YUVReader into traced frame memory."""

    FRAME_ORDER = {
        "previous": (Plane.PREVIOUS_Y, Plane.PREVIOUS_CB, Plane.PREVIOUS_CR),
        "current": (Plane.CURRENT_Y, Plane.CURRENT_CB, Plane.CURRENT_CR),
    }

    def __init__(self, reader: YUVReader, memory: FrameMemory):
        self.reader = reader
        self.memory = memory

    def load_plane(self, plane) -> int:
        """
        Load one plane, writing offsets 0..size-1 in order.

        The whole plane is read before anything is written, so a short
        stream leaves frame memory and the trace untouched.

        Returns:
            Number of bytes loaded
        """
        plane = resolve_plane(plane)
        size = self.memory.layout.sizes[plane]
        data = self.reader.read_exact(size, plane)
        pixels = np.frombuffer(data, dtype=np.uint8)
        self.memory.write_many(plane, np.arange(size), pixels)
        logger.debug(f"Loaded {plane.name}: {size} bytes (stream offset {self.reader.position})")
        return size

    def load_frame(self, slot: str = "current") -> int:
        """Load Y, Cb, Cr of the next frame into the 'previous' or 'current' slot."""
        try:
            planes = self.FRAME_ORDER[slot]
        except KeyError:
            raise ValueError(f"Unknown frame slot: {slot!r}") from None
        return sum(self.load_plane(p) for p in planes)
