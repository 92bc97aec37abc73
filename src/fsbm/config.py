"""
Run configuration and frame geometry.

The legacy simulator fixed its geometry with preprocessor constants
(QCIF: 9x11 macroblocks of 16x16, displacement 8). Here the same values
are defaults of injectable dataclasses, validated on construction.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConfigurationError


# ============================================================================
# DEFAULTS (QCIF, as used by the reference lab setup)
# ============================================================================

DEFAULT_BLOCK_SIZE = 16     # M
DEFAULT_SEARCH_RANGE = 8    # p
DEFAULT_LINE_MAX = 9        # macroblock rows
DEFAULT_COL_MAX = 11        # macroblock columns
DEFAULT_FRAME_COUNT = 1

DEFAULT_VIDEO_PATH = "table_tennis_qcif_3frames.yuv"
DEFAULT_RESULTS_PATH = "results.log"
DEFAULT_TRACE_PATH = "trace.log"

# Trace lines carry an 8-hex-digit address
MAX_MEMORY_SIZE = 1 << 32


@dataclass(frozen=True)
class FrameGeometry:
    """Macroblock grid and search parameters shared by every component."""
    block_size: int = DEFAULT_BLOCK_SIZE
    search_range: int = DEFAULT_SEARCH_RANGE
    line_max: int = DEFAULT_LINE_MAX
    col_max: int = DEFAULT_COL_MAX

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"{f.name} must be an integer, got {value!r}"
                )
            if value <= 0:
                raise ConfigurationError(f"{f.name} must be positive, got {value}")

        # Chroma planes are a quarter of luma; plane offsets need exact quarters
        if self.luma_size % 4 != 0:
            raise ConfigurationError(
                f"Luma plane size {self.luma_size} is not divisible by 4"
            )
        if self.memory_size > MAX_MEMORY_SIZE:
            raise ConfigurationError(
                f"Frame memory of {self.memory_size} bytes exceeds the 32-bit trace address space"
            )

    @property
    def frame_height(self) -> int:
        return self.line_max * self.block_size

    @property
    def frame_width(self) -> int:
        return self.col_max * self.block_size

    @property
    def luma_size(self) -> int:
        return self.block_size * self.block_size * self.line_max * self.col_max

    @property
    def chroma_size(self) -> int:
        return self.luma_size // 4

    @property
    def frame_bytes(self) -> int:
        """Bytes per YUV 4:2:0 frame in the input stream."""
        return self.luma_size + 2 * self.chroma_size

    @property
    def memory_size(self) -> int:
        """Size of the six-plane frame memory (previous + current frame)."""
        return 2 * self.frame_bytes

    @property
    def macroblock_count(self) -> int:
        return self.line_max * self.col_max


@dataclass
class RunConfig:
    """Everything needed to run the simulator over a YUV file."""
    geometry: FrameGeometry = field(default_factory=FrameGeometry)
    frame_count: int = DEFAULT_FRAME_COUNT
    video_path: Union[str, Path] = DEFAULT_VIDEO_PATH
    results_path: Union[str, Path] = DEFAULT_RESULTS_PATH
    trace_path: Optional[Union[str, Path]] = DEFAULT_TRACE_PATH

    GEOMETRY_KEYS = ("block_size", "search_range", "line_max", "col_max")
    RUN_KEYS = ("frame_count", "video_path", "results_path", "trace_path")

    def __post_init__(self):
        if isinstance(self.frame_count, bool) or not isinstance(self.frame_count, int):
            raise ConfigurationError(
                f"frame_count must be an integer, got {self.frame_count!r}"
            )
        if self.frame_count <= 0:
            raise ConfigurationError(
                f"frame_count must be positive, got {self.frame_count}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunConfig":
        """
        Build a config from a flat mapping.

        Geometry keys and run keys live side by side; unknown keys are
        rejected so typos do not silently fall back to defaults.
        """
        unknown = set(data) - set(cls.GEOMETRY_KEYS) - set(cls.RUN_KEYS)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )

        geometry = FrameGeometry(**{k: data[k] for k in cls.GEOMETRY_KEYS if k in data})
        run_args = {k: data[k] for k in cls.RUN_KEYS if k in data}
        return cls(geometry=geometry, **run_args)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "RunConfig":
        """Load a config mapping from a JSON file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "block_size": self.geometry.block_size,
            "search_range": self.geometry.search_range,
            "line_max": self.geometry.line_max,
            "col_max": self.geometry.col_max,
            "frame_count": self.frame_count,
            "video_path": str(self.video_path),
            "results_path": str(self.results_path),
            "trace_path": None if self.trace_path is None else str(self.trace_path),
        }
