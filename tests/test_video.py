"""
Tests for YUV loading and frame rotation.
"""

import io

import numpy as np
import pytest

from fsbm.errors import InputExhaustedError, InvalidPlaneError
from fsbm.memory import Access, AccessRecord, FrameMemory, Plane, TraceBuffer
from fsbm.video import FrameLoader, YUVReader, rotate_frame

from conftest import image_to_yuv420, noise_image


@pytest.fixture
def memory(small_geometry):
    return FrameMemory(small_geometry, TraceBuffer())


class TestYUVReader:

    def test_read_exact_advances(self):
        reader = YUVReader(io.BytesIO(b"abcdef"))
        assert reader.read_exact(4, Plane.CURRENT_Y) == b"abcd"
        assert reader.position == 4

    def test_short_read_raises(self):
        reader = YUVReader(io.BytesIO(b"abc"))
        with pytest.raises(InputExhaustedError) as exc:
            reader.read_exact(4, Plane.CURRENT_CB)
        assert exc.value.expected == 4
        assert exc.value.received == 3
        assert exc.value.position == 0
        assert "CURRENT_CB" in str(exc.value)

    def test_is_eof_error(self):
        with pytest.raises(EOFError):
            YUVReader(io.BytesIO(b"")).read_exact(1, Plane.PREVIOUS_Y)


class TestFrameLoader:

    def test_load_plane_writes_in_order(self, memory):
        data = bytes(range(144))
        loader = FrameLoader(YUVReader(io.BytesIO(data)), memory)
        assert loader.load_plane(Plane.CURRENT_Y) == 144

        base = memory.layout.base(Plane.CURRENT_Y)
        assert memory.trace.records == [AccessRecord(Access.WRITE, base + i) for i in range(144)]
        assert memory.plane_view(Plane.CURRENT_Y).tobytes() == data

    def test_chroma_plane_is_quarter_size(self, memory):
        loader = FrameLoader(YUVReader(io.BytesIO(bytes(100))), memory)
        assert loader.load_plane(Plane.PREVIOUS_CR) == 36

    def test_load_frame_from_image(self, memory, small_geometry):
        frame = image_to_yuv420(noise_image(small_geometry, seed=2))
        assert len(frame) == small_geometry.frame_bytes

        loader = FrameLoader(YUVReader(io.BytesIO(frame)), memory)
        assert loader.load_frame("current") == small_geometry.frame_bytes

        stored = memory.buffer[memory.layout.base(Plane.CURRENT_Y):]
        assert stored.tobytes() == frame
        assert memory.trace.writes == small_geometry.frame_bytes

    def test_previous_slot(self, memory, small_geometry):
        frame = bytes([7]) * small_geometry.frame_bytes
        FrameLoader(YUVReader(io.BytesIO(frame)), memory).load_frame("previous")
        assert np.all(memory.plane_view(Plane.PREVIOUS_CR) == 7)
        assert memory.trace.records[0].address == 0

    def test_unknown_slot(self, memory):
        loader = FrameLoader(YUVReader(io.BytesIO(b"")), memory)
        with pytest.raises(ValueError):
            loader.load_frame("next")

    def test_unknown_plane(self, memory):
        loader = FrameLoader(YUVReader(io.BytesIO(bytes(200))), memory)
        with pytest.raises(InvalidPlaneError):
            loader.load_plane(7)

    def test_truncated_plane_writes_nothing(self, memory):
        loader = FrameLoader(YUVReader(io.BytesIO(bytes(150))), memory)
        loader.load_plane(Plane.CURRENT_Y)
        with pytest.raises(InputExhaustedError) as exc:
            loader.load_plane(Plane.CURRENT_CB)
        assert exc.value.received == 6
        assert exc.value.position == 144
        assert memory.trace.total == 144


class TestRotation:

    def test_copies_current_into_previous(self, memory, small_geometry):
        rng = np.random.default_rng(0)
        current_base = memory.layout.base(Plane.CURRENT_Y)
        memory.buffer[current_base:] = rng.integers(0, 256, small_geometry.frame_bytes, dtype=np.uint8)

        records = rotate_frame(memory)

        assert records == 2 * small_geometry.frame_bytes
        assert np.array_equal(memory.buffer[:current_base], memory.buffer[current_base:])

    def test_record_order(self, memory, small_geometry):
        rotate_frame(memory)
        layout = memory.layout
        luma = small_geometry.luma_size
        records = memory.trace.records

        assert records[:4] == [
            AccessRecord(Access.READ, layout.address(Plane.CURRENT_Y, 0)),
            AccessRecord(Access.WRITE, layout.address(Plane.PREVIOUS_Y, 0)),
            AccessRecord(Access.READ, layout.address(Plane.CURRENT_Y, 1)),
            AccessRecord(Access.WRITE, layout.address(Plane.PREVIOUS_Y, 1)),
        ]
        assert records[2 * luma:2 * luma + 4] == [
            AccessRecord(Access.READ, layout.address(Plane.CURRENT_CB, 0)),
            AccessRecord(Access.WRITE, layout.address(Plane.PREVIOUS_CB, 0)),
            AccessRecord(Access.READ, layout.address(Plane.CURRENT_CR, 0)),
            AccessRecord(Access.WRITE, layout.address(Plane.PREVIOUS_CR, 0)),
        ]
        assert records[-1] == AccessRecord(
            Access.WRITE, layout.address(Plane.PREVIOUS_CR, small_geometry.chroma_size - 1)
        )
