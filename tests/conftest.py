"""
Shared fixtures: synthetic YUV 4:2:0 frames.

Frames are textured with noise so the true displacement is the unique
zero-SAD match; flat regions would tie and (with the last-tie-wins rule)
produce non-zero vectors.
"""

import numpy as np
import pytest
from PIL import Image

from fsbm.config import FrameGeometry


def noise_image(geometry: FrameGeometry, seed: int) -> Image.Image:
    """RGB noise image with the frame's dimensions."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, (geometry.frame_height, geometry.frame_width, 3), dtype=np.uint8)
    return Image.fromarray(pixels)


def image_to_yuv420(img: Image.Image) -> bytes:
    """Planar Y, Cb, Cr bytes with 2x2 box-subsampled chroma."""
    y, cb, cr = img.convert("YCbCr").split()
    half = (img.width // 2, img.height // 2)
    return (
        y.tobytes()
        + cb.resize(half, Image.Resampling.BOX).tobytes()
        + cr.resize(half, Image.Resampling.BOX).tobytes()
    )


def luma_to_yuv420(luma: np.ndarray, cb: int = 128, cr: int = 128) -> bytes:
    """Planar frame from a luma array and flat chroma."""
    luma = np.ascontiguousarray(luma, dtype=np.uint8)
    chroma_size = luma.size // 4
    return luma.tobytes() + bytes([cb]) * chroma_size + bytes([cr]) * chroma_size


def random_luma(geometry: FrameGeometry, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, (geometry.frame_height, geometry.frame_width), dtype=np.uint8)


@pytest.fixture
def small_geometry():
    """12x12 frame of 4x4 macroblocks, p=2."""
    return FrameGeometry(block_size=4, search_range=2, line_max=3, col_max=3)


@pytest.fixture
def qcif_geometry():
    return FrameGeometry(block_size=16, search_range=8, line_max=9, col_max=11)
