from .yuv_reader import FrameLoader, YUVReader
from .rotation import rotate_frame

__all__ = ["FrameLoader", "YUVReader", "rotate_frame"]
