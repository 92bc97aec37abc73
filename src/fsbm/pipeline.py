"""
Frame pipeline: load -> reset -> search -> report -> rotate.

The first frame of the stream seeds the reference ("previous") slot; each
of the following frame_count frames is loaded as "current", searched
against the reference, reported, and rotated in as the next reference.
Strictly sequential; any error aborts the run.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, TextIO

from .config import FrameGeometry, RunConfig
from .memory.frame_memory import FrameMemory
from .memory.trace import TraceCounter, TraceWriter
from .report import ResultReporter
from .search.block_matching import BlockMatcher
from .search.window import count_search_accesses
from .state import MotionVectorTable
from .video.rotation import rotate_frame
from .video.yuv_reader import FrameLoader, YUVReader

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Outcome of one searched frame."""
    frame_number: int
    table: MotionVectorTable
    trace_records: int
    total_sad: int = 0
    mean_magnitude: float = 0.0


@dataclass
class RunSummary:
    """Totals for a complete run."""
    frames: List[FrameResult] = field(default_factory=list)
    reads: int = 0
    writes: int = 0

    @property
    def total_records(self) -> int:
        return self.reads + self.writes

    @property
    def total_sad(self) -> int:
        return sum(f.total_sad for f in self.frames)


def expected_trace_length(geometry: FrameGeometry, frame_count: int) -> int:
    """
    Closed-form number of trace records for a run.

    Loads: frame_count + 1 frames, one write per byte.
    Rotation: one read and one write per byte of each searched frame.
    Search: 2 reads per pixel per candidate, per macroblock.
    """
    loads = (frame_count + 1) * geometry.frame_bytes
    rotation = frame_count * 2 * geometry.frame_bytes
    search = frame_count * count_search_accesses(geometry)
    return loads + rotation + search


class MotionEstimator:
    """Owns the frame memory and drives the per-frame pipeline."""

    def __init__(self, geometry: FrameGeometry, trace: Optional[TraceCounter] = None):
        self.geometry = geometry
        self.memory = FrameMemory(geometry, trace)
        self.matcher = BlockMatcher(self.memory)
        self.table = MotionVectorTable.for_geometry(geometry)

    @property
    def trace(self) -> TraceCounter:
        return self.memory.trace

    def run(self, video: BinaryIO, results: TextIO, frame_count: int) -> RunSummary:
        """
        Process frame_count frames after the reference frame.

        Args:
            video: Raw planar YUV 4:2:0 byte stream
            results: Text stream receiving the MV/SAD tables
            frame_count: Number of frames to search

        Returns:
            RunSummary with one FrameResult per searched frame
        """
        loader = FrameLoader(YUVReader(video), self.memory)
        reporter = ResultReporter(results)
        summary = RunSummary()

        # Frame 0 (intra) is the reference for frame 1
        loader.load_frame("previous")

        for frame_number in range(1, frame_count + 1):
            summary.frames.append(self.process_frame(frame_number, loader, reporter))

        self.trace.flush()
        summary.reads = self.trace.reads
        summary.writes = self.trace.writes
        return summary

    def process_frame(self, frame_number: int, loader: FrameLoader, reporter: ResultReporter) -> FrameResult:
        before = self.trace.total

        loader.load_frame("current")
        self.table.reset()
        self.matcher.estimate_frame(self.table)
        reporter.write_frame(frame_number, self.table)
        rotate_frame(self.memory)

        result = FrameResult(
            frame_number=frame_number,
            table=self.table.copy(),
            trace_records=self.trace.total - before,
            total_sad=self.table.total_cost(),
            mean_magnitude=self.table.mean_magnitude(),
        )
        logger.info(
            f"Frame {frame_number}: mean |MV| {result.mean_magnitude:.2f}, "
            f"total SAD {result.total_sad}, {result.trace_records} accesses"
        )
        return result


def run_files(config: RunConfig) -> RunSummary:
    """Run the simulator with the paths and geometry from config."""
    geometry = config.geometry
    logger.info(
        f"FSBM: {geometry.line_max}x{geometry.col_max} macroblocks of "
        f"{geometry.block_size}x{geometry.block_size}, p={geometry.search_range}, "
        f"{config.frame_count} frame(s)"
    )
    logger.info(
        f"Expecting {expected_trace_length(geometry, config.frame_count)} trace records"
    )

    with open(config.video_path, "rb") as video, \
            open(config.results_path, "w", encoding="ascii", newline="\n") as results:
        if config.trace_path is None:
            summary = MotionEstimator(geometry).run(video, results, config.frame_count)
        else:
            with open(Path(config.trace_path), "wb") as trace_file:
                estimator = MotionEstimator(geometry, TraceWriter(trace_file))
                summary = estimator.run(video, results, config.frame_count)

    logger.info(
        f"Run complete: {summary.reads} reads, {summary.writes} writes "
        f"({summary.total_records} records), total SAD {summary.total_sad}"
    )
    return summary
