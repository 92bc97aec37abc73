"""
Per-frame motion-vector state.

The search engine fills one MotionVectorTable per frame; the reporter
reads it, and the pipeline discards it once the frame is rotated out.
"""

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

from .config import FrameGeometry
from .errors import ConfigurationError


@dataclass(frozen=True)
class MotionVector:
    """Best match for one macroblock, in whole pixels."""
    dx: int     # horizontal displacement (candidate column - block column)
    dy: int     # vertical displacement (candidate row - block row)
    sad: int    # minimum Sum of Absolute Differences

    def __iter__(self):
        return iter((self.dx, self.dy))


class MotionVectorTable:
    """
    Motion vectors and SAD costs for a line_max x col_max macroblock grid.

    Stored as arrays like an MV field: mv_field[l, c] = (dx, dy), with
    a separate cost array and a mask of entries set since the last reset.
    """

    def __init__(self, line_max: int, col_max: int):
        if line_max <= 0 or col_max <= 0:
            raise ConfigurationError(
                f"MV table needs a positive grid, got {line_max}x{col_max}"
            )
        self.line_max = line_max
        self.col_max = col_max

        # Displacements are bounded by search_range, which may exceed int16
        self.mv_field: np.ndarray = np.zeros((line_max, col_max, 2), dtype=np.int64)
        self.sad: np.ndarray = np.zeros((line_max, col_max), dtype=np.int64)
        self.valid_mask: np.ndarray = np.zeros((line_max, col_max), dtype=bool)

    @classmethod
    def for_geometry(cls, geometry: FrameGeometry) -> "MotionVectorTable":
        return cls(geometry.line_max, geometry.col_max)

    def reset(self):
        """Clear every entry (start of a frame)."""
        self.mv_field.fill(0)
        self.sad.fill(0)
        self.valid_mask.fill(False)

    def copy(self) -> "MotionVectorTable":
        other = MotionVectorTable(self.line_max, self.col_max)
        other.mv_field[...] = self.mv_field
        other.sad[...] = self.sad
        other.valid_mask[...] = self.valid_mask
        return other

    def set(self, block_l: int, block_c: int, mv: MotionVector):
        if not (0 <= block_l < self.line_max and 0 <= block_c < self.col_max):
            raise IndexError(
                f"Macroblock ({block_l}, {block_c}) outside {self.line_max}x{self.col_max} grid"
            )
        self.mv_field[block_l, block_c, 0] = mv.dx
        self.mv_field[block_l, block_c, 1] = mv.dy
        self.sad[block_l, block_c] = mv.sad
        self.valid_mask[block_l, block_c] = True

    def get(self, block_l: int, block_c: int) -> MotionVector:
        return MotionVector(
            dx=int(self.mv_field[block_l, block_c, 0]),
            dy=int(self.mv_field[block_l, block_c, 1]),
            sad=int(self.sad[block_l, block_c]),
        )

    def __len__(self) -> int:
        return self.line_max * self.col_max

    @property
    def is_complete(self) -> bool:
        return bool(np.all(self.valid_mask))

    def rows(self) -> Iterator[Tuple[int, Tuple[MotionVector, ...]]]:
        """Yield (block_l, vectors of that row) in row-major order."""
        for block_l in range(self.line_max):
            yield block_l, tuple(self.get(block_l, c) for c in range(self.col_max))

    def magnitudes(self) -> np.ndarray:
        """Displacement length per macroblock in pixels (0 where unset)."""
        lengths = np.hypot(self.mv_field[:, :, 0], self.mv_field[:, :, 1])
        lengths[~self.valid_mask] = 0.0
        return lengths

    def mean_magnitude(self) -> float:
        if not np.any(self.valid_mask):
            return 0.0
        return float(self.magnitudes()[self.valid_mask].mean())

    def total_cost(self) -> int:
        return int(self.sad[self.valid_mask].sum())

    def max_displacement(self) -> int:
        """Largest |dx| or |dy| among set entries."""
        if not np.any(self.valid_mask):
            return 0
        return int(np.abs(self.mv_field[self.valid_mask]).max())
