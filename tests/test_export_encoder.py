"""
Tests for the export encoder.

Tests cover:
- Crop path sizing and the dropped-rotation known limitation
- Full-image path with rotation (extents unchanged)
- JPEG encoding and quality settings
- Encode failures
- ExportOptions configuration
- Asynchronous export
"""

import unittest
from io import BytesIO
from unittest.mock import patch

import pytest
from PIL import Image

from conftest import BLUE, RED
from RE_Libs.EditPipelineLib.edit_models import BitmapHandle, CropRect
from RE_Libs.EditPipelineLib.errors import EncodeError, InvalidStateError
from RE_Libs.EditPipelineLib.export_encoder import (
    ExportOptions,
    encode_image,
    export_image,
    export_image_async,
    render_export,
)
from RE_Libs.EditPipelineLib.transform_state import TransformState


def _decode(data):
    with Image.open(BytesIO(data)) as image:
        image.load()
        return image.format, image.size


class TestRenderExportCropPath(unittest.TestCase):
    """Test the crop export path."""

    def setUp(self):
        image = Image.new("RGBA", (200, 200), BLUE)
        image.paste(Image.new("RGBA", (100, 100), RED), (0, 0))
        self.bitmap = BitmapHandle(image)
        self.state = TransformState.for_bitmap(self.bitmap.size)
        self.state.toggle_crop_mode()

    def test_output_matches_crop_size(self):
        self.state.set_crop_rect(CropRect(0, 0, 100, 100))

        surface = render_export(self.bitmap, self.state)

        self.assertEqual(surface.size, (100, 100))
        self.assertEqual(surface.getpixel((50, 50)), RED)

    def test_crop_offsets_source_region(self):
        self.state.set_crop_rect(CropRect(100, 100, 50, 40))

        surface = render_export(self.bitmap, self.state)

        self.assertEqual(surface.size, (50, 40))
        self.assertEqual(surface.getpixel((0, 0)), BLUE)

    def test_fractional_rect_truncates_size(self):
        self.state.set_crop_rect(CropRect(50.25, 50.25, 100.5, 100.5))

        surface = render_export(self.bitmap, self.state)

        self.assertEqual(surface.size, (100, 100))

    def test_rotation_not_applied_when_cropping(self):
        """Known limitation: the crop path ignores rotation."""
        self.state.rotate()
        self.state.set_crop_rect(CropRect(0, 0, 100, 100))

        surface = render_export(self.bitmap, self.state)

        self.assertEqual(surface.getpixel((50, 50)), RED)

    def test_filters_applied_when_cropping(self):
        self.state.set_brightness(0)
        self.state.set_crop_rect(CropRect(0, 0, 10, 10))

        surface = render_export(self.bitmap, self.state)

        self.assertEqual(surface.getpixel((5, 5)), (0, 0, 0, 255))

    def test_rect_past_bitmap_edge_is_transparent(self):
        self.state.set_crop_rect(CropRect(180, 180, 40, 40))

        surface = render_export(self.bitmap, self.state)

        self.assertEqual(surface.size, (40, 40))
        self.assertEqual(surface.getpixel((30, 30))[3], 0)


class TestRenderExportFullPath(unittest.TestCase):
    """Test the full-image export path."""

    def test_rotation_keeps_extents(self):
        bitmap = BitmapHandle(Image.new("RGBA", (300, 200), BLUE))
        state = TransformState.for_bitmap(bitmap.size)
        state.rotate()

        surface = render_export(bitmap, state)

        self.assertEqual(surface.size, (300, 200))

    def test_rotation_applied(self):
        image = Image.new("RGBA", (200, 200), BLUE)
        image.paste(Image.new("RGBA", (100, 100), RED), (0, 0))
        bitmap = BitmapHandle(image)
        state = TransformState.for_bitmap(bitmap.size)
        state.rotate()

        surface = render_export(bitmap, state)

        self.assertEqual(surface.getpixel((150, 50)), RED)

    def test_empty_rect_in_crop_mode_exports_full_image(self):
        bitmap = BitmapHandle(Image.new("RGBA", (120, 80), BLUE))
        state = TransformState.for_bitmap(bitmap.size)
        state.toggle_crop_mode()
        state.set_crop_rect(CropRect(10, 10, 0, 0))

        self.assertEqual(render_export(bitmap, state).size, (120, 80))

    def test_no_bitmap_raises(self):
        with self.assertRaises(InvalidStateError):
            render_export(None, TransformState.for_bitmap((10, 10)))


class TestEncodeImage:
    """Tests for encode_image."""

    def test_produces_jpeg(self, quadrant_image):
        data = encode_image(quadrant_image)

        assert data[:2] == b"\xff\xd8"
        assert _decode(data) == ("JPEG", (200, 200))

    def test_transparent_areas_become_black(self):
        surface = Image.new("RGBA", (16, 16), (255, 255, 255, 0))

        data = encode_image(surface)

        with Image.open(BytesIO(data)) as decoded:
            r, g, b = decoded.convert("RGB").getpixel((8, 8))
        assert max(r, g, b) < 10

    def test_empty_surface_raises(self):
        with pytest.raises(EncodeError):
            encode_image(Image.new("RGBA", (0, 10)))

    def test_no_data_raises(self, quadrant_image):
        with patch.object(Image.Image, "save", lambda self, fp, **kwargs: None):
            with pytest.raises(EncodeError):
                encode_image(quadrant_image)

    def test_unknown_format_raises(self, quadrant_image):
        with pytest.raises(EncodeError):
            encode_image(quadrant_image, ExportOptions(save_format="NOT_A_FORMAT"))

    def test_png_option(self, quadrant_image):
        data = encode_image(quadrant_image, ExportOptions(save_format="PNG"))

        assert _decode(data)[0] == "PNG"


class TestExportOptions:
    """Tests for ExportOptions."""

    def test_defaults_are_jpeg_quality_point_nine(self):
        assert ExportOptions().get_save_kwargs() == {"format": "JPEG", "quality": 90}

    def test_jpg_alias(self):
        assert ExportOptions(save_format="jpg").get_save_kwargs()["format"] == "JPEG"

    def test_png_has_no_quality(self):
        assert ExportOptions(save_format="png").get_save_kwargs() == {"format": "PNG"}

    def test_quality_range_validated(self):
        with pytest.raises(ValueError):
            ExportOptions(quality=1.5)


class TestExportImage:
    """Tests for export_image and export_image_async."""

    def test_crop_export_decodes_to_crop_size(self, quadrant_image):
        bitmap = BitmapHandle(quadrant_image)
        state = TransformState.for_bitmap(bitmap.size)
        state.toggle_crop_mode()
        state.set_crop_rect(CropRect(0, 0, 100, 100))

        data = export_image(bitmap, state)

        assert _decode(data) == ("JPEG", (100, 100))

    def test_async_export(self, quadrant_image):
        bitmap = BitmapHandle(quadrant_image)
        state = TransformState.for_bitmap(bitmap.size)

        future = export_image_async(bitmap, state)

        assert _decode(future.result(timeout=10)) == ("JPEG", (200, 200))

    def test_async_snapshots_state(self, quadrant_image):
        bitmap = BitmapHandle(quadrant_image)
        state = TransformState.for_bitmap(bitmap.size)
        state.toggle_crop_mode()
        state.set_crop_rect(CropRect(0, 0, 50, 50))

        future = export_image_async(bitmap, state)
        state.toggle_crop_mode()

        assert _decode(future.result(timeout=10))[1] == (50, 50)

    def test_async_without_bitmap_raises(self):
        with pytest.raises(InvalidStateError):
            export_image_async(None, TransformState.for_bitmap((10, 10)))
