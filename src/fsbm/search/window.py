from dataclasses import dataclass
from typing import Iterator, Tuple

from ..config import FrameGeometry


@dataclass(frozen=True)
class SearchWindow:
    """
    Inclusive pixel rectangle of the reference luma plane scanned for one
    macroblock. Clipped to the frame, never padded. The co-located block
    always fits, so every window has at least one candidate.
    """
    top: int
    left: int
    bottom: int
    right: int
    block_size: int

    @classmethod
    def for_macroblock(cls, geometry: FrameGeometry, block_l: int, block_c: int) -> "SearchWindow":
        m = geometry.block_size
        p = geometry.search_range
        row = block_l * m
        col = block_c * m
        return cls(
            top=max(0, row - p),
            left=max(0, col - p),
            bottom=min(row + m - 1 + p, geometry.frame_height - 1),
            right=min(col + m - 1 + p, geometry.frame_width - 1),
            block_size=m,
        )

    @property
    def candidate_rows(self) -> range:
        """Top rows of every block that fits inside the window."""
        return range(self.top, self.bottom - (self.block_size - 1) + 1)

    @property
    def candidate_cols(self) -> range:
        return range(self.left, self.right - (self.block_size - 1) + 1)

    @property
    def candidate_count(self) -> int:
        return len(self.candidate_rows) * len(self.candidate_cols)

    def candidates(self) -> Iterator[Tuple[int, int]]:
        """Candidate origins (row, col) in scan order."""
        for row in self.candidate_rows:
            for col in self.candidate_cols:
                yield row, col


def iter_windows(geometry: FrameGeometry) -> Iterator[Tuple[int, int, SearchWindow]]:
    """(block_l, block_c, window) for every macroblock in row-major order."""
    for block_l in range(geometry.line_max):
        for block_c in range(geometry.col_max):
            yield block_l, block_c, SearchWindow.for_macroblock(geometry, block_l, block_c)


def count_search_accesses(geometry: FrameGeometry) -> int:
    """Frame-memory reads one full search makes: 2 per pixel per candidate."""
    pixels = geometry.block_size * geometry.block_size
    return sum(2 * pixels * w.candidate_count for _, _, w in iter_windows(geometry))
