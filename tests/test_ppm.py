"""Tests for PPM and PNG image output."""

import numpy as np
import pytest
from PIL import Image as PILImage

from spheretracer.image.ppm import (
    format_ppm,
    ppm_header,
    save_image,
    to_rgb8,
    write_ppm,
)


class TestToRgb8:
    """Tests for sample averaging, gamma and quantization."""

    def test_known_values(self):
        """Test full white, black and quarter gray."""
        sums = np.array([[[4.0, 0.0, 1.0]]], dtype=np.float32)

        pixels = to_rgb8(sums, samples_per_pixel=4)

        # 1.0 clamps to 0.999; 0.25 gamma-corrects to 0.5
        assert pixels.dtype == np.uint8
        assert pixels.tolist() == [[[255, 0, 128]]]

    def test_out_of_range_values_are_clamped(self):
        """Test values above one saturate and negative values go black."""
        sums = np.array([[[10.0, -1.0, np.nan]]])

        assert to_rgb8(sums, samples_per_pixel=1).tolist() == [[[255, 0, 0]]]

    @pytest.mark.parametrize("samples_per_pixel", [0, -3])
    def test_invalid_sample_count(self, samples_per_pixel):
        """Test non-positive sample counts are rejected."""
        with pytest.raises(ValueError, match="samples_per_pixel"):
            to_rgb8(np.zeros((1, 1, 3)), samples_per_pixel)


class TestPpm:
    """Tests for the plain-text P3 writer."""

    def test_header(self):
        """Test the header is magic, dimensions and max value on three lines."""
        assert ppm_header(400, 266) == "P3\n400 266\n255\n"

    def test_pixel_order(self):
        """Test pixels are written row by row, left to right, top row first."""
        sums = np.zeros((2, 3, 3))
        sums[0, 0] = (1.0, 0.0, 0.0)
        sums[1, 2] = (0.0, 0.0, 1.0)

        lines = format_ppm(sums, samples_per_pixel=1).splitlines()

        assert lines[:3] == ["P3", "3 2", "255"]
        assert len(lines) == 3 + 6
        assert lines[3] == "255 0 0"
        assert lines[4:8] == ["0 0 0"] * 4
        assert lines[8] == "0 0 255"

    def test_write_to_stream(self, tmp_path):
        """Test write_ppm output matches format_ppm."""
        sums = np.full((2, 2, 3), 0.5)
        path = tmp_path / "out.ppm"

        with path.open("w") as stream:
            write_ppm(stream, sums, samples_per_pixel=2)

        assert path.read_text() == format_ppm(sums, samples_per_pixel=2)


class TestSaveImage:
    """Tests for suffix-based image saving."""

    def test_save_ppm(self, tmp_path):
        """Test .ppm files hold the P3 text."""
        sums = np.full((2, 4, 3), 2.0)
        path = tmp_path / "image.ppm"

        save_image(sums, 2, path)

        assert path.read_text() == format_ppm(sums, 2)

    def test_save_png(self, tmp_path):
        """Test .png files decode to the same 8-bit pixels."""
        sums = np.zeros((3, 5, 3))
        sums[0, :, 0] = 1.0
        sums[2, :, 2] = 0.25
        path = tmp_path / "image.png"

        save_image(sums, 1, path)

        with PILImage.open(path) as image:
            assert image.size == (5, 3)
            assert image.mode == "RGB"
            pixels = np.asarray(image)
        assert np.array_equal(pixels, to_rgb8(sums, 1))

    def test_unsupported_suffix(self, tmp_path):
        """Test unknown formats raise ValueError and write nothing."""
        path = tmp_path / "image.bmp"

        with pytest.raises(ValueError, match="Unsupported image format"):
            save_image(np.zeros((2, 2, 3)), 1, path)
        assert not path.exists()
