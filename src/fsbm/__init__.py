"""
FSBM - Full-Search Block-Matching motion estimation with memory tracing.

Runs exhaustive block-matching motion estimation over planar YUV 4:2:0
video and records every byte-level access to the modeled frame memory,
producing address traces for cache and memory-hierarchy studies.

References:
    Jain, J.R., Jain, A.K. (1981). Displacement Measurement and Its
        Application in Interframe Image Coding. IEEE Trans. Commun.,
        29(12), 1799-1808.
"""

from importlib.metadata import version as _get_version, PackageNotFoundError

try:
    __version__ = _get_version("fsbm-trace")
except PackageNotFoundError:
    # Package not installed (running from source)
    __version__ = "0.0.0-dev"

from .errors import (
    FSBMError,
    ConfigurationError,
    InputExhaustedError,
    InvalidPlaneError,
    AddressOutOfRangeError,
    PixelValueError,
)
from .config import FrameGeometry, RunConfig
from .memory import (
    Plane,
    PlaneLayout,
    FrameMemory,
    Access,
    AccessRecord,
    TraceCounter,
    TraceWriter,
    TraceBuffer,
)
from .state import MotionVector, MotionVectorTable
from .search import BlockMatcher, SearchWindow, count_search_accesses
from .video import FrameLoader, YUVReader, rotate_frame
from .report import ResultReporter
from .pipeline import MotionEstimator, FrameResult, RunSummary, expected_trace_length, run_files

__all__ = [
    "__version__",
    # Main interface
    "MotionEstimator",
    "run_files",
    "expected_trace_length",
    "FrameResult",
    "RunSummary",
    # Configuration
    "FrameGeometry",
    "RunConfig",
    # Errors
    "FSBMError",
    "ConfigurationError",
    "InputExhaustedError",
    "InvalidPlaneError",
    "AddressOutOfRangeError",
    "PixelValueError",
    # Frame memory and trace
    "Plane",
    "PlaneLayout",
    "FrameMemory",
    "Access",
    "AccessRecord",
    "TraceCounter",
    "TraceWriter",
    "TraceBuffer",
    # Search
    "BlockMatcher",
    "SearchWindow",
    "count_search_accesses",
    "MotionVector",
    "MotionVectorTable",
    # I/O
    "FrameLoader",
    "YUVReader",
    "rotate_frame",
    "ResultReporter",
]
