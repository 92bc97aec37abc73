"""
Six-plane frame-memory layout.

The frame memory holds two YUV 4:2:0 frames back to back:

    | prev Y (4) | prev Cb (1) | prev Cr (1) | cur Y (4) | cur Cb (1) | cur Cr (1) |

Sizes are in quarter-luma units, so every base offset is an exact integer
(1.25x luma is 5 quarters, 2.75x is 11) for any luma size divisible by 4.
"""

from enum import IntEnum
from typing import Dict, Tuple

from ..config import FrameGeometry
from ..errors import InvalidPlaneError


class Plane(IntEnum):
    """Logical planes held in frame memory."""
    PREVIOUS_Y = 0
    PREVIOUS_CB = 1
    PREVIOUS_CR = 2
    CURRENT_Y = 3
    CURRENT_CB = 4
    CURRENT_CR = 5

    @property
    def is_luma(self) -> bool:
        return self in (Plane.PREVIOUS_Y, Plane.CURRENT_Y)


# (base, size) per plane in quarter-luma units
PLANE_QUARTERS: Dict[Plane, Tuple[int, int]] = {
    Plane.PREVIOUS_Y:  (0, 4),
    Plane.PREVIOUS_CB: (4, 1),
    Plane.PREVIOUS_CR: (5, 1),
    Plane.CURRENT_Y:   (6, 4),
    Plane.CURRENT_CB:  (10, 1),
    Plane.CURRENT_CR:  (11, 1),
}

TOTAL_QUARTERS = 12


def resolve_plane(plane) -> Plane:
    """Coerce a plane identifier, failing fast on anything unknown."""
    if isinstance(plane, Plane):
        return plane
    if isinstance(plane, bool) or not isinstance(plane, int):
        raise InvalidPlaneError(plane)
    try:
        return Plane(plane)
    except ValueError:
        raise InvalidPlaneError(plane) from None


class PlaneLayout:
    """Absolute base offsets and sizes of each plane for a geometry."""

    def __init__(self, geometry: FrameGeometry):
        self.geometry = geometry
        quarter = geometry.luma_size // 4
        self.bases: Dict[Plane, int] = {}
        self.sizes: Dict[Plane, int] = {}
        for plane, (base_q, size_q) in PLANE_QUARTERS.items():
            self.bases[plane] = base_q * quarter
            self.sizes[plane] = size_q * quarter
        self.total_size = TOTAL_QUARTERS * quarter

    def base(self, plane) -> int:
        return self.bases[resolve_plane(plane)]

    def size(self, plane) -> int:
        return self.sizes[resolve_plane(plane)]

    def address(self, plane, offset: int) -> int:
        """Absolute address of a plane-relative offset (unchecked)."""
        return self.bases[resolve_plane(plane)] + offset

    def extents(self):
        """(plane, start, end) tuples in address order."""
        return sorted(
            ((p, self.bases[p], self.bases[p] + self.sizes[p]) for p in Plane),
            key=lambda e: e[1],
        )
