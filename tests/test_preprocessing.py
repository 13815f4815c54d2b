"""Tests for sketch_calc.preprocessing — preprocess_for_upload()."""

import io

from PIL import Image, ImageStat

from sketch_calc.preprocessing import preprocess_for_upload

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _make_rgba_png(width: int, height: int, color: tuple[int, int, int, int]) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color=color).save(buf, format="PNG")
    return buf.getvalue()


def _open(image_bytes: bytes) -> Image.Image:
    return Image.open(io.BytesIO(image_bytes))


# ── Output format ──────────────────────────────────────────────────────────


class TestOutputFormat:
    def test_returns_valid_png(self, png_bytes):
        assert preprocess_for_upload(png_bytes)[:8] == PNG_MAGIC

    def test_output_dimensions_unchanged(self, png_bytes):
        assert _open(preprocess_for_upload(png_bytes)).size == (10, 10)

    def test_alpha_channel_dropped(self):
        result = _open(preprocess_for_upload(_make_rgba_png(8, 8, (0, 0, 0, 0))))
        assert result.mode == "RGB"


# ── Flattening ─────────────────────────────────────────────────────────────


class TestFlatten:
    def test_transparent_pixels_take_background_colour(self):
        result = _open(preprocess_for_upload(_make_rgba_png(8, 8, (0, 0, 0, 0)), "black"))
        assert result.getpixel((4, 4)) == (0, 0, 0)

    def test_custom_background(self):
        result = _open(preprocess_for_upload(_make_rgba_png(8, 8, (0, 0, 0, 0)), "white"))
        assert result.getpixel((4, 4)) == (255, 255, 255)

    def test_opaque_strokes_survive(self):
        img = Image.new("RGBA", (20, 20), (0, 0, 0, 0))
        for x in range(20):
            for y in range(8, 12):
                img.putpixel((x, y), (255, 255, 255, 255))
        buf = io.BytesIO()
        img.save(buf, format="PNG")

        result = _open(preprocess_for_upload(buf.getvalue(), "black")).convert("L")
        assert result.getpixel((10, 10)) > 200
        assert result.getpixel((10, 2)) < 30

    def test_colour_preserved(self):
        result = _open(preprocess_for_upload(_make_rgba_png(20, 20, (200, 10, 10, 255))))
        r, g, b = ImageStat.Stat(result).mean[:3]
        assert r > g and r > b
