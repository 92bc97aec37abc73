import logging

from ..memory.frame_memory import FrameMemory
from ..memory.layout import Plane

logger = logging.getLogger(__name__)


def rotate_frame(memory: FrameMemory) -> int:
    """
    Make the current frame the reference for the next one.

    Copies byte by byte through traced memory: all of luma first, then
    Cb and Cr interleaved per index. No buffer swapping, since the copy
    traffic is part of the trace.

    Returns:
        Number of trace records produced
    """
    geometry = memory.geometry
    before = memory.trace.total

    memory.copy_interleaved([(Plane.CURRENT_Y, Plane.PREVIOUS_Y)], geometry.luma_size)
    memory.copy_interleaved(
        [(Plane.CURRENT_CB, Plane.PREVIOUS_CB), (Plane.CURRENT_CR, Plane.PREVIOUS_CR)],
        geometry.chroma_size,
    )

    records = memory.trace.total - before
    logger.debug(f"Rotated current frame into reference slot ({records} accesses)")
    return records
