"""
Tests for TransformState.

Tests cover:
- Defaults and initial crop rect
- Percent clamping
- Rotation stepping and wrap-around
- Crop mode toggling
- Filter reset
- Dictionary conversion
"""

import pytest

from RE_Libs.EditPipelineLib.edit_models import CropRect
from RE_Libs.EditPipelineLib.transform_state import TransformState, clamp_percent


class TestDefaults:
    """Tests for freshly created state."""

    def test_for_bitmap_uses_full_extent(self):
        state = TransformState.for_bitmap((200, 100))

        assert state.crop_rect == CropRect(0, 0, 200, 100)
        assert (state.brightness, state.contrast, state.saturation) == (100, 100, 100)
        assert state.rotation == 0
        assert state.crop_mode is False

    def test_rejects_invalid_rotation(self):
        with pytest.raises(ValueError):
            TransformState(10, 10, rotation=45)

    def test_rejects_negative_size(self):
        with pytest.raises(ValueError):
            TransformState(-1, 10)

    def test_constructor_clamps_percent(self):
        state = TransformState(10, 10, brightness=500)

        assert state.brightness == 200


class TestPercentSetters:
    """Tests for brightness/contrast/saturation setters."""

    @pytest.mark.parametrize(
        "value, expected",
        [(0, 0), (150, 150), (200, 200), (250, 200), (-5, 0), (99.6, 100)],
    )
    def test_clamp_percent(self, value, expected):
        assert clamp_percent(value) == expected

    def test_setters_clamp(self):
        state = TransformState.for_bitmap((10, 10))

        state.set_brightness(300)
        state.set_contrast(-20)
        state.set_saturation(42)

        assert state.brightness == 200
        assert state.contrast == 0
        assert state.saturation == 42


class TestRotate:
    """Tests for rotate()."""

    def test_steps_by_ninety(self):
        state = TransformState.for_bitmap((10, 10))

        state.rotate()
        assert state.rotation == 90
        state.rotate()
        assert state.rotation == 180

    def test_four_turns_return_to_start(self):
        state = TransformState.for_bitmap((10, 10))
        state.rotate()
        start = state.rotation

        for _ in range(4):
            state.rotate()

        assert state.rotation == start

    def test_wraps_after_270(self):
        state = TransformState(10, 10, rotation=270)

        state.rotate()

        assert state.rotation == 0


class TestCropMode:
    """Tests for toggle_crop_mode()."""

    def test_enabling_centers_half_rect(self):
        state = TransformState.for_bitmap((200, 100))

        state.toggle_crop_mode()

        assert state.crop_mode is True
        assert state.crop_rect == CropRect(50, 25, 100, 50)

    def test_odd_dimensions_use_exact_quarters(self):
        state = TransformState.for_bitmap((201, 101))

        state.toggle_crop_mode()

        assert state.crop_rect == CropRect(201 / 4, 101 / 4, 201 / 2, 101 / 2)

    def test_disabling_keeps_rect(self):
        state = TransformState.for_bitmap((200, 200))
        state.toggle_crop_mode()
        state.set_crop_rect(CropRect(1, 2, 3, 4))

        state.toggle_crop_mode()

        assert state.crop_mode is False
        assert state.crop_rect == CropRect(1, 2, 3, 4)

    def test_crop_active_needs_mode_and_area(self):
        state = TransformState.for_bitmap((200, 200))
        assert not state.crop_active()

        state.toggle_crop_mode()
        assert state.crop_active()

        state.set_crop_rect(CropRect(10, 10, 0, 5))
        assert not state.crop_active()


class TestResetFilters:
    """Tests for reset_filters()."""

    def test_resets_filters_and_rotation_only(self):
        state = TransformState.for_bitmap((200, 200))
        state.set_brightness(10)
        state.set_contrast(190)
        state.set_saturation(0)
        state.rotate()
        state.toggle_crop_mode()
        rect = CropRect(5, 6, 7, 8)
        state.set_crop_rect(rect)

        state.reset_filters()

        assert (state.brightness, state.contrast, state.saturation, state.rotation) == (100, 100, 100, 0)
        assert state.crop_mode is True
        assert state.crop_rect == rect
