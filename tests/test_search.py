"""
Tests for the full-search block matcher and its search windows.
"""

import numpy as np
import pytest

from fsbm.config import FrameGeometry
from fsbm.memory import Access, FrameMemory, Plane, TraceBuffer, TraceCounter
from fsbm.search import BlockMatcher, SearchWindow, count_search_accesses, iter_windows
from fsbm.state import MotionVectorTable

from conftest import random_luma


def load_luma(memory: FrameMemory, previous: np.ndarray, current: np.ndarray):
    """Fill both luma planes without tracing."""
    memory.plane_view(Plane.PREVIOUS_Y)[...] = previous
    memory.plane_view(Plane.CURRENT_Y)[...] = current


class TestSearchWindow:

    def test_interior_window(self, qcif_geometry):
        w = SearchWindow.for_macroblock(qcif_geometry, 4, 5)
        assert (w.top, w.left, w.bottom, w.right) == (56, 72, 87, 103)
        assert w.candidate_rows == range(56, 73)
        assert w.candidate_count == 17 * 17

    def test_top_left_corner_clips(self, qcif_geometry):
        w = SearchWindow.for_macroblock(qcif_geometry, 0, 0)
        assert (w.top, w.left) == (0, 0)
        assert (w.bottom, w.right) == (23, 23)
        assert w.candidate_count == 9 * 9

    def test_bottom_right_corner_clips_to_frame(self, qcif_geometry):
        w = SearchWindow.for_macroblock(qcif_geometry, 8, 10)
        assert (w.bottom, w.right) == (143, 175)
        # No candidate may extend past the last row/column
        assert max(w.candidate_rows) + 15 == 143
        assert max(w.candidate_cols) + 15 == 175
        assert w.candidate_count == 9 * 9

    def test_candidates_row_major(self, small_geometry):
        w = SearchWindow.for_macroblock(small_geometry, 0, 0)
        candidates = list(w.candidates())
        assert candidates[:4] == [(0, 0), (0, 1), (0, 2), (1, 0)]
        assert candidates[-1] == (2, 2)

    def test_iter_windows_order(self, small_geometry):
        coords = [(l, c) for l, c, _ in iter_windows(small_geometry)]
        assert coords == [(l, c) for l in range(3) for c in range(3)]

    @pytest.mark.parametrize("dims", [(4, 2, 3, 3), (16, 8, 9, 11), (8, 20, 2, 3), (1, 5, 2, 2), (3, 1, 2, 2)])
    def test_every_window_holds_colocated_block(self, dims):
        geometry = FrameGeometry(*dims)
        m = geometry.block_size
        for block_l, block_c, window in iter_windows(geometry):
            assert window.candidate_count >= 1
            assert block_l * m in window.candidate_rows
            assert block_c * m in window.candidate_cols

    def test_search_access_count_closed_form(self, qcif_geometry):
        # Candidates per axis: 9 at the frame edges, 17 inside
        rows = [9] + [17] * 7 + [9]
        cols = [9] + [17] * 9 + [9]
        candidates = sum(r * c for r in rows for c in cols)
        assert count_search_accesses(qcif_geometry) == 2 * 256 * candidates


class TestBlockMatcher:

    def test_identical_frames_zero_motion(self, small_geometry):
        memory = FrameMemory(small_geometry)
        luma = random_luma(small_geometry, seed=3)
        load_luma(memory, luma, luma)

        table = BlockMatcher(memory).estimate_frame(MotionVectorTable.for_geometry(small_geometry))
        assert table.is_complete
        assert np.all(table.mv_field == 0)
        assert np.all(table.sad == 0)

    def test_known_shift(self):
        geometry = FrameGeometry(block_size=8, search_range=4, line_max=4, col_max=4)
        memory = FrameMemory(geometry)
        previous = random_luma(geometry, seed=7)
        # current[y, x] = previous[y + 1, x - 2]
        current = np.roll(previous, shift=(-1, 2), axis=(0, 1))
        load_luma(memory, previous, current)

        table = BlockMatcher(memory).estimate_frame(MotionVectorTable.for_geometry(geometry))
        # Blocks whose match does not wrap around the frame edge
        for block_l in range(3):
            for block_c in range(1, 4):
                mv = table.get(block_l, block_c)
                assert (mv.dx, mv.dy, mv.sad) == (-2, 1, 0)

    def test_vectors_bounded_by_search_range(self, small_geometry):
        memory = FrameMemory(small_geometry)
        load_luma(memory, random_luma(small_geometry, 1), random_luma(small_geometry, 2))
        table = BlockMatcher(memory).estimate_frame(MotionVectorTable.for_geometry(small_geometry))
        assert len(table) == 9
        assert table.is_complete
        assert table.max_displacement() <= small_geometry.search_range

    def test_ties_keep_last_candidate(self, small_geometry):
        """Flat frames tie everywhere; the last scanned candidate wins."""
        memory = FrameMemory(small_geometry)
        flat = np.full((12, 12), 50, dtype=np.uint8)
        load_luma(memory, flat, flat)
        matcher = BlockMatcher(memory)

        # Window for (0, 0) spans candidates (0..2, 0..2); last is (2, 2)
        mv = matcher.search_macroblock(0, 0)
        assert (mv.dx, mv.dy, mv.sad) == (2, 2, 0)

        # Interior block at origin (4, 4): candidates 2..6, last is (6, 6)
        mv = matcher.search_macroblock(1, 1)
        assert (mv.dx, mv.dy) == (2, 2)

        # Bottom-right block at origin (8, 8): window clipped, last is (8, 8)
        mv = matcher.search_macroblock(2, 2)
        assert (mv.dx, mv.dy) == (0, 0)

    def test_two_equal_minima_later_wins(self, small_geometry):
        """Only two exact matches exist; the row-major later one is kept."""
        memory = FrameMemory(small_geometry)
        block = random_luma(small_geometry, seed=13)[:4, :4]
        previous = random_luma(small_geometry, seed=11)
        previous[2:6, 3:7] = block          # candidate (2, 3)
        previous[6:10, 2:6] = block         # candidate (6, 2), scanned later
        current = random_luma(small_geometry, seed=12)
        current[4:8, 4:8] = block           # macroblock (1, 1)
        load_luma(memory, previous, current)

        mv = BlockMatcher(memory).search_macroblock(1, 1)
        assert (mv.dx, mv.dy, mv.sad) == (-2, 2, 0)

    def test_trace_order_matches_scalar_reads(self, small_geometry):
        luma_prev = random_luma(small_geometry, 4)
        luma_cur = random_luma(small_geometry, 5)

        batch = FrameMemory(small_geometry, TraceBuffer())
        load_luma(batch, luma_prev, luma_cur)
        mv = BlockMatcher(batch).search_macroblock(1, 2)

        scalar = FrameMemory(small_geometry, TraceBuffer())
        load_luma(scalar, luma_prev, luma_cur)
        matcher = BlockMatcher(scalar)
        window = SearchWindow.for_macroblock(small_geometry, 1, 2)
        sads = [matcher.candidate_sad(1, 2, r, c) for r, c in window.candidates()]

        assert batch.trace.records == scalar.trace.records
        assert mv.sad == min(sads)

    def test_reference_pixel_read_first(self, small_geometry):
        memory = FrameMemory(small_geometry, TraceBuffer())
        BlockMatcher(memory).search_macroblock(1, 1)
        first, second = memory.trace.records[:2]
        assert first.address == memory.layout.address(Plane.CURRENT_Y, 4 * 12 + 4)
        assert second.address == memory.layout.address(Plane.PREVIOUS_Y, 2 * 12 + 2)
        assert all(r.direction == Access.READ for r in memory.trace.records)

    def test_frame_access_count(self, qcif_geometry):
        memory = FrameMemory(qcif_geometry, TraceCounter())
        BlockMatcher(memory).estimate_frame(MotionVectorTable.for_geometry(qcif_geometry))
        assert memory.trace.reads == count_search_accesses(qcif_geometry)
        assert memory.trace.writes == 0

    def test_displacement_beyond_int16(self):
        geometry = FrameGeometry(block_size=1, search_range=40000, line_max=1, col_max=80000)
        memory = FrameMemory(geometry)
        table = MotionVectorTable.for_geometry(geometry)

        # Flat frame: every candidate ties, the farthest one scanned wins
        mv = BlockMatcher(memory).search_macroblock(0, 0)
        assert (mv.dx, mv.dy, mv.sad) == (40000, 0, 0)

        table.set(0, 0, mv)
        assert table.get(0, 0) == mv
        assert memory.trace.reads == 2 * 40001
