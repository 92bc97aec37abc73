import time
import io
import os
import sys

import numpy as np

# Add src to path
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from fsbm.config import FrameGeometry
from fsbm.memory.trace import TraceCounter, TraceWriter
from fsbm.pipeline import MotionEstimator, expected_trace_length


def random_video(geometry, frames):
    rng = np.random.default_rng(0)
    return rng.integers(0, 256, geometry.frame_bytes * frames, dtype=np.uint8).tobytes()


def benchmark_run(geometry, frames=1, write_trace=False):
    label = "trace to memory" if write_trace else "count only"
    print(f"\n--- FSBM {geometry.line_max}x{geometry.col_max} MBs, M={geometry.block_size}, "
          f"p={geometry.search_range} ({label}) ---")

    video = io.BytesIO(random_video(geometry, frames + 1))
    results = io.StringIO()
    trace_stream = io.BytesIO()
    sink = TraceWriter(trace_stream) if write_trace else TraceCounter()

    start_time = time.time()
    summary = MotionEstimator(geometry, sink).run(video, results, frames)
    duration = time.time() - start_time

    expected = expected_trace_length(geometry, frames)
    print(f"Time: {duration:.2f} s")
    print(f"Records: {summary.total_records} (expected {expected})")
    print(f"Throughput: {summary.total_records / duration / 1e6:.1f} M records/s")
    if write_trace:
        print(f"Trace size: {len(trace_stream.getvalue()) / (1024 * 1024):.1f} MB")


if __name__ == "__main__":
    qcif = FrameGeometry()
    benchmark_run(qcif)
    benchmark_run(qcif, write_trace=True)
    benchmark_run(FrameGeometry(block_size=8, search_range=16, line_max=18, col_max=22))
