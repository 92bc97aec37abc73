"""
Traced frame memory.

FrameMemory is the context object that owns both the six-plane byte
buffer and the trace sink. Loader, search engine and rotation all go
through it, so every byte they touch shows up in the trace.

Scalar read/write implement the access contract directly. The batched
methods exist for throughput: a QCIF frame needs ~12M accesses, and
issuing those one Python call at a time is impractical. A batch traces
exactly the records the equivalent scalar calls would, in the same order,
including the record of the access that fails.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from ..config import FrameGeometry
from ..errors import AddressOutOfRangeError, PixelValueError
from .layout import Plane, PlaneLayout, resolve_plane
from .trace import Access, TraceCounter


class FrameMemory:
    """Six-plane frame buffer with traced access."""

    def __init__(self, geometry: FrameGeometry, trace: Optional[TraceCounter] = None):
        self.geometry = geometry
        self.layout = PlaneLayout(geometry)
        self.buffer = np.zeros(self.layout.total_size, dtype=np.uint8)
        self.trace = trace if trace is not None else TraceCounter()

    # ------------------------------------------------------------------
    # Scalar access
    # ------------------------------------------------------------------

    def read(self, plane, offset: int) -> int:
        """Read one byte and record it."""
        plane = resolve_plane(plane)
        address = self.layout.bases[plane] + offset
        self.trace.record(Access.READ, address)
        self._check_offset(plane, offset)
        return int(self.buffer[address])

    def write(self, plane, offset: int, value: int) -> int:
        """Write one byte, record it, and return the stored value."""
        plane = resolve_plane(plane)
        address = self.layout.bases[plane] + offset
        self.trace.record(Access.WRITE, address)
        self._check_offset(plane, offset)
        if not 0 <= value <= 0xFF:
            raise PixelValueError(plane, offset, value)
        self.buffer[address] = value
        return int(value)

    def _check_offset(self, plane: Plane, offset: int):
        size = self.layout.sizes[plane]
        if not 0 <= offset < size:
            raise AddressOutOfRangeError(plane, offset, size)

    # ------------------------------------------------------------------
    # Batched access
    # ------------------------------------------------------------------

    def read_many(self, plane, offsets) -> np.ndarray:
        """Read offsets in array order."""
        plane = resolve_plane(plane)
        offsets = np.asarray(offsets, dtype=np.int64).reshape(-1, 1)
        addresses = self._trace_columns([plane], [Access.READ], offsets)
        return self.buffer[addresses[:, 0]]

    def write_many(self, plane, offsets, values) -> np.ndarray:
        """Write values to offsets in array order."""
        plane = resolve_plane(plane)
        offsets = np.asarray(offsets, dtype=np.int64).reshape(-1, 1)
        values = np.asarray(values).reshape(-1)
        if len(values) != len(offsets):
            raise ValueError("offsets and values must have the same length")

        size = self.layout.sizes[plane]
        bad = (offsets[:, 0] < 0) | (offsets[:, 0] >= size) | (values < 0) | (values > 0xFF)
        stop = int(np.argmax(bad)) if bad.any() else len(values)

        addresses = self._trace_columns([plane], [Access.WRITE], offsets[:stop])
        self.buffer[addresses[:, 0]] = values[:stop]
        if stop < len(values):
            # Replays the failing access so it is traced and raises as a scalar write
            self.write(plane, int(offsets[stop, 0]), int(values[stop]))
        return values.astype(np.uint8)

    def read_pairs(self, plane_a, offsets_a, plane_b, offsets_b) -> Tuple[np.ndarray, np.ndarray]:
        """
        Interleaved reads a[0], b[0], a[1], b[1], ...

        This is the pixel order of a SAD computation: reference pixel, then
        candidate pixel, for each position.
        """
        plane_a = resolve_plane(plane_a)
        plane_b = resolve_plane(plane_b)
        offsets_a = np.asarray(offsets_a, dtype=np.int64).reshape(-1)
        offsets_b = np.asarray(offsets_b, dtype=np.int64).reshape(-1)
        if len(offsets_a) != len(offsets_b):
            raise ValueError("paired offset arrays must have the same length")

        offsets = np.stack([offsets_a, offsets_b], axis=1)
        addresses = self._trace_columns(
            [plane_a, plane_b], [Access.READ, Access.READ], offsets
        )
        return self.buffer[addresses[:, 0]], self.buffer[addresses[:, 1]]

    def copy_interleaved(self, pairs: Sequence[Tuple[Plane, Plane]], count: int):
        """
        Copy count bytes for each (src, dst) pair, interleaving the pairs.

        For each index i, and each pair in order: read src[i], write dst[i].
        """
        planes = []
        directions = []
        for src, dst in pairs:
            planes.extend([resolve_plane(src), resolve_plane(dst)])
            directions.extend([Access.READ, Access.WRITE])

        limit = min([count] + [self.layout.sizes[p] for p in planes])
        index = np.arange(limit, dtype=np.int64).reshape(-1, 1)
        offsets = np.repeat(index, len(planes), axis=1)
        addresses = self._trace_columns(planes, directions, offsets)
        for col in range(0, len(planes), 2):
            self.buffer[addresses[:, col + 1]] = self.buffer[addresses[:, col]]

        if limit < count:
            # First index past a plane end: replay it scalar so it traces and raises
            for col in range(0, len(planes), 2):
                value = self.read(planes[col], limit)
                self.write(planes[col + 1], limit, value)

    def _trace_columns(self, planes, directions, offsets: np.ndarray) -> np.ndarray:
        """
        Trace a row-major grid of accesses and return absolute addresses.

        Column j of offsets belongs to planes[j] / directions[j]; the trace
        order is row by row. Raises on the first out-of-range offset after
        tracing everything up to and including it.
        """
        bases = np.array([self.layout.bases[p] for p in planes], dtype=np.int64)
        sizes = np.array([self.layout.sizes[p] for p in planes], dtype=np.int64)
        n_rows, n_cols = offsets.shape

        addresses = offsets + bases
        flat_dirs = np.tile(np.array(directions, dtype=np.uint8), n_rows)
        flat_addresses = addresses.reshape(-1)

        bad = ((offsets < 0) | (offsets >= sizes)).reshape(-1)
        if bad.any():
            k = int(np.argmax(bad))
            self.trace.record_many(flat_dirs[:k + 1], flat_addresses[:k + 1])
            raise AddressOutOfRangeError(
                planes[k % n_cols], int(offsets.reshape(-1)[k]), int(sizes[k % n_cols])
            )

        self.trace.record_many(flat_dirs, flat_addresses)
        return addresses

    # ------------------------------------------------------------------
    # Untraced inspection
    # ------------------------------------------------------------------

    def plane_view(self, plane) -> np.ndarray:
        """
        Untraced view of a plane's bytes.

        For inspection only (tests, debugging). Luma planes come back as
        (frame_height, frame_width); chroma planes as a flat array.
        """
        plane = resolve_plane(plane)
        base = self.layout.bases[plane]
        view = self.buffer[base:base + self.layout.sizes[plane]]
        if plane.is_luma:
            return view.reshape(self.geometry.frame_height, self.geometry.frame_width)
        return view
