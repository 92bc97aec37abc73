from .layout import Plane, PlaneLayout, resolve_plane
from .trace import Access, AccessRecord, TraceBuffer, TraceCounter, TraceWriter
from .frame_memory import FrameMemory

__all__ = [
    "Plane",
    "PlaneLayout",
    "resolve_plane",
    "Access",
    "AccessRecord",
    "TraceBuffer",
    "TraceCounter",
    "TraceWriter",
    "FrameMemory",
]
