"""
Full-Search Block-Matching motion estimation over traced frame memory.

For every macroblock of the current luma plane, every candidate block
inside its search window in the previous luma plane is compared pixel by
pixel (SAD). Each pixel comparison is two traced reads, reference pixel
first, so the search also produces the memory trace.

Tie-breaking keeps the LAST candidate with the minimum cost in scan order
(running minimum updated on <=).
"""

import logging
import sys

import numpy as np

from ..memory.frame_memory import FrameMemory
from ..memory.layout import Plane
from ..state import MotionVector, MotionVectorTable
from .window import SearchWindow

logger = logging.getLogger(__name__)

# Running-minimum seed: any real SAD replaces it
SAD_INITIAL = sys.maxsize


class BlockMatcher:
    """
    Exhaustive luma block matcher.

    Pixel reads for one candidate row of the window are issued as a single
    interleaved batch; the trace is identical to reading pixel by pixel.
    """

    def __init__(self, memory: FrameMemory):
        self.memory = memory
        self.geometry = memory.geometry

        m = self.geometry.block_size
        rows, cols = np.divmod(np.arange(m * m, dtype=np.int64), m)
        # Plane-relative offsets of an MxM block at origin (0, 0), row-major
        self._block_pattern = rows * self.geometry.frame_width + cols

    def _origin_offset(self, row: int, col: int) -> int:
        return row * self.geometry.frame_width + col

    def search_macroblock(self, block_l: int, block_c: int) -> MotionVector:
        """Find the best match for one macroblock."""
        m = self.geometry.block_size
        window = SearchWindow.for_macroblock(self.geometry, block_l, block_c)

        origin_row = block_l * m
        origin_col = block_c * m
        ref_offsets = self._origin_offset(origin_row, origin_col) + self._block_pattern

        cand_cols = np.array(window.candidate_cols, dtype=np.int64)
        n_cols = len(cand_cols)
        ref_batch = np.tile(ref_offsets, n_cols)

        sad_min = SAD_INITIAL
        best_row = best_col = None

        for cand_row in window.candidate_rows:
            cand_bases = cand_row * self.geometry.frame_width + cand_cols
            cand_batch = (cand_bases[:, None] + self._block_pattern[None, :]).reshape(-1)

            ref_px, cand_px = self.memory.read_pairs(
                Plane.CURRENT_Y, ref_batch, Plane.PREVIOUS_Y, cand_batch
            )
            diff = ref_px.astype(np.int32) - cand_px.astype(np.int32)
            sads = np.abs(diff).reshape(n_cols, m * m).sum(axis=1)

            for i, sad in enumerate(sads.tolist()):
                if sad <= sad_min:
                    sad_min = sad
                    best_row = cand_row
                    best_col = int(cand_cols[i])

        return MotionVector(dx=best_col - origin_col, dy=best_row - origin_row, sad=sad_min)

    def candidate_sad(self, block_l: int, block_c: int, cand_row: int, cand_col: int) -> int:
        """
        SAD of one candidate using scalar traced reads.

        Slow reference path; produces the same trace records as the
        corresponding slice of search_macroblock.
        """
        m = self.geometry.block_size
        width = self.geometry.frame_width
        ref_row = block_l * m
        ref_col = block_c * m

        sad = 0
        for l in range(m):
            for c in range(m):
                rb_pixel = self.memory.read(Plane.CURRENT_Y, (ref_row + l) * width + ref_col + c)
                sa_pixel = self.memory.read(Plane.PREVIOUS_Y, (cand_row + l) * width + cand_col + c)
                sad += abs(rb_pixel - sa_pixel)
        return sad

    def estimate_frame(self, table: MotionVectorTable) -> MotionVectorTable:
        """Search every macroblock in row-major order into table."""
        for block_l in range(self.geometry.line_max):
            for block_c in range(self.geometry.col_max):
                table.set(block_l, block_c, self.search_macroblock(block_l, block_c))
        logger.debug(
            f"Searched {len(table)} macroblocks, total SAD {table.total_cost()}"
        )
        return table
