"""Pixel buffer ingest and frame sources."""
import numpy as np
import pytest

from frame_features.buffer import (
    ArrayFrameSource,
    ImageFileSource,
    NullFrameSource,
    PixelBuffer,
    buffer_from_array,
    luminance,
)
from frame_features.errors import FrameAnalysisError, MalformedBuffer


class TestPixelBuffer:
    def test_accepts_matching_length(self):
        buffer = PixelBuffer(width=3, height=2, data=bytes(3 * 2 * 4))
        assert buffer.pixel_count == 6
        assert buffer.pixels().shape == (2, 3, 4)

    def test_rejects_wrong_length(self):
        with pytest.raises(MalformedBuffer) as exc_info:
            PixelBuffer(width=3, height=2, data=bytes(23))
        assert exc_info.value.length == 23
        assert exc_info.value.width == 3

    def test_malformed_buffer_is_a_value_error(self):
        with pytest.raises(ValueError):
            PixelBuffer(width=2, height=2, data=bytes(4))
        assert issubclass(MalformedBuffer, FrameAnalysisError)

    @pytest.mark.parametrize("width,height", [(0, 0), (0, 4), (4, 0), (-1, -4)])
    def test_rejects_non_positive_dimensions(self, width, height):
        with pytest.raises(MalformedBuffer):
            PixelBuffer(width=width, height=height, data=b"")

    def test_rejects_non_integer_dimensions(self):
        with pytest.raises(MalformedBuffer):
            PixelBuffer(width=2.0, height=2, data=bytes(16))

    def test_array_data_is_copied_to_bytes(self):
        frame = np.full((2, 2, 4), 7, dtype=np.uint8)
        buffer = PixelBuffer(width=2, height=2, data=frame)
        frame[0, 0, 0] = 99
        assert isinstance(buffer.data, bytes)
        assert buffer.pixels()[0, 0, 0] == 7

    def test_pixel_view_is_read_only(self):
        buffer = PixelBuffer(width=1, height=1, data=bytes([1, 2, 3, 255]))
        with pytest.raises(ValueError):
            buffer.pixels()[0, 0, 0] = 10

    def test_describe_has_no_pixel_data(self):
        buffer = PixelBuffer(width=1, height=1, data=bytes(4), source="upload", timestamp=123)
        assert buffer.describe() == {
            "width": 1,
            "height": 1,
            "source": "upload",
            "timestamp": 123,
            "bytes": 4,
        }


def test_luminance_is_channel_mean():
    pixels = np.array([[[30, 60, 90, 0]]], dtype=np.uint8)
    assert luminance(pixels)[0, 0] == pytest.approx(60.0)


class TestBufferFromArray:
    def test_bgr_is_converted_to_rgba(self):
        frame = np.zeros((2, 2, 3), dtype=np.uint8)
        frame[..., 0] = 255  # blue in BGR order
        buffer = buffer_from_array(frame, "BGR")
        assert tuple(buffer.pixels()[0, 0]) == (0, 0, 255, 255)

    def test_gray_is_expanded(self):
        frame = np.full((3, 5), 40, dtype=np.uint8)
        buffer = buffer_from_array(frame, "GRAY")
        assert (buffer.width, buffer.height) == (5, 3)
        assert tuple(buffer.pixels()[1, 1]) == (40, 40, 40, 255)

    def test_rgba_passthrough(self):
        frame = np.arange(2 * 2 * 4, dtype=np.uint8).reshape(2, 2, 4)
        buffer = buffer_from_array(frame, "rgba", source="test", timestamp=5)
        assert buffer.data == frame.tobytes()
        assert buffer.source == "test"
        assert buffer.timestamp == 5

    def test_unknown_color_order(self):
        with pytest.raises(ValueError):
            buffer_from_array(np.zeros((2, 2, 3), dtype=np.uint8), "YUV")

    def test_empty_array(self):
        with pytest.raises(MalformedBuffer):
            buffer_from_array(np.zeros((0, 0, 4), dtype=np.uint8))


class TestFrameSources:
    def test_null_source_is_absent(self):
        source = NullFrameSource()
        assert source.available is False
        assert source.capture() is None

    def test_array_source(self):
        source = ArrayFrameSource(np.zeros((4, 6, 3), dtype=np.uint8))
        buffer = source.capture()
        assert (buffer.width, buffer.height) == (6, 4)
        assert buffer.timestamp is not None

    def test_image_file_fills_canvas(self, sample_png):
        buffer = ImageFileSource(sample_png, canvas_size=(64, 36)).capture()
        assert (buffer.width, buffer.height) == (64, 36)
        assert buffer.source == "upload"
        assert tuple(buffer.pixels()[18, 2]) == (255, 0, 0, 255)
        assert tuple(buffer.pixels()[18, 61]) == (0, 0, 255, 255)

    def test_image_file_native_size(self, sample_png):
        buffer = ImageFileSource(sample_png, canvas_size=None).capture()
        assert (buffer.width, buffer.height) == (40, 20)

    def test_missing_image_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ImageFileSource(tmp_path / "missing.png").capture()
