"""Tests for image export and preview helpers."""

import os
import tempfile

import numpy as np
import pytest
from PIL import Image as PILImage


def _two_pixel_framebuffer():
    from whitted.core.framebuffer import Framebuffer

    pixels = np.array([[[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]]], dtype=np.float32)
    return Framebuffer(2, 1, pixels)


class TestFramebuffer:
    def test_shape_mismatch_raises(self):
        from whitted.core.framebuffer import Framebuffer

        with pytest.raises(ValueError):
            Framebuffer(4, 2, np.zeros((4, 2, 3), dtype=np.float32))

    def test_blank(self):
        from whitted.core.framebuffer import Framebuffer

        fb = Framebuffer.blank(3, 2, (0.25, 0.5, 1.0))
        assert fb.pixels.shape == (2, 3, 3)
        assert fb.get_pixel(1, 2) == (0.25, 0.5, 1.0)

    def test_to_uint8_rounds_and_clips(self):
        from whitted.core.framebuffer import Framebuffer

        pixels = np.array([[[0.0, 0.5, 1.0], [-0.2, 1.5, 0.2]]], dtype=np.float32)
        data = Framebuffer(2, 1, pixels).to_uint8()
        assert data.dtype == np.uint8
        assert data[0, 0].tolist() == [0, 128, 255]
        assert data[0, 1].tolist() == [0, 255, 51]


class TestPpmExport:
    def test_format_ppm_layout(self):
        from whitted.preview.export import format_ppm

        assert format_ppm(_two_pixel_framebuffer()) == "P3\n2 1\n255\n255 0 0\n0 0 255\n"

    def test_rows_written_top_first(self):
        from whitted.core.framebuffer import Framebuffer
        from whitted.preview.export import format_ppm

        pixels = np.array([[[1.0, 1.0, 1.0]], [[0.0, 0.0, 0.0]]], dtype=np.float32)
        lines = format_ppm(Framebuffer(1, 2, pixels)).splitlines()
        assert lines[1] == "1 2"
        assert lines[3:] == ["255 255 255", "0 0 0"]

    def test_save_ppm(self, tmp_path):
        from whitted.preview.export import save_ppm

        path = tmp_path / "out.ppm"
        save_ppm(_two_pixel_framebuffer(), path)
        assert path.read_text().startswith("P3\n2 1\n255\n")


class TestPngExport:
    def test_save_png_creates_file(self):
        from whitted.preview.export import save_png

        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            filepath = f.name

        try:
            save_png(_two_pixel_framebuffer(), filepath)

            img = PILImage.open(filepath)
            assert img.size == (2, 1)
            assert img.mode == "RGB"
            assert img.getpixel((0, 0)) == (255, 0, 0)
            assert img.getpixel((1, 0)) == (0, 0, 255)
        finally:
            if os.path.exists(filepath):
                os.remove(filepath)

    def test_save_png_with_gamma(self, tmp_path):
        from whitted.core.framebuffer import Framebuffer
        from whitted.preview.export import save_png

        path = tmp_path / "gamma.png"
        save_png(Framebuffer.blank(1, 1, (0.25, 0.25, 0.25)), path, gamma=2.0)
        assert PILImage.open(path).getpixel((0, 0)) == (128, 128, 128)


class TestSaveImage:
    @pytest.mark.parametrize("name", ["image.ppm", "IMAGE.PPM", "image.png"])
    def test_format_from_extension(self, tmp_path, name):
        from whitted.preview.export import save_image

        path = tmp_path / name
        save_image(_two_pixel_framebuffer(), path)
        assert path.exists()

    def test_unsupported_extension(self, tmp_path):
        from whitted.preview.export import save_image

        with pytest.raises(ValueError):
            save_image(_two_pixel_framebuffer(), tmp_path / "image.jpg")


class TestApplyGamma:
    def test_gamma_1_no_change(self):
        from whitted.preview.display import apply_gamma

        image = np.random.default_rng(0).random((4, 4, 3)).astype(np.float32)
        np.testing.assert_array_equal(apply_gamma(image, 1.0), image)

    def test_gamma_brightens_midtones(self):
        from whitted.preview.display import apply_gamma

        image = np.full((1, 1, 3), 0.25, dtype=np.float32)
        np.testing.assert_allclose(apply_gamma(image, 2.0), 0.5, rtol=1e-6)

    def test_gamma_clamps_negative(self):
        from whitted.preview.display import apply_gamma

        image = np.full((1, 1, 3), -1.0, dtype=np.float32)
        assert (apply_gamma(image, 2.2) == 0.0).all()

    def test_invalid_gamma(self):
        from whitted.preview.display import apply_gamma

        with pytest.raises(ValueError):
            apply_gamma(np.zeros((1, 1, 3), dtype=np.float32), 0.0)


class TestShowPreview:
    def test_show_preview_draws_image(self, monkeypatch):
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from whitted.preview.display import show_preview

        shown = []
        monkeypatch.setattr(plt, "show", lambda block=True: shown.append(block))

        show_preview(_two_pixel_framebuffer(), title="test", block=False)
        assert shown == [False]
        assert plt.gcf().axes[0].get_title() == "test"
        plt.close("all")


def test_compute_rmse():
    from whitted.preview.export import compute_rmse

    a = np.zeros((2, 2, 3), dtype=np.float32)
    b = np.full((2, 2, 3), 0.5, dtype=np.float32)
    assert compute_rmse(a, a) == 0.0
    assert compute_rmse(a, b) == pytest.approx(0.5)
    with pytest.raises(ValueError):
        compute_rmse(a, np.zeros((2, 3, 3)))
