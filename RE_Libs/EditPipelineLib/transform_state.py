"""
Transform state for an editing session.

TransformState holds the live adjustment parameters read by the compositor
and the export encoder. Percent values are clamped into [0, 200] rather than
rejected, matching the range of the slider controls that drive them.
"""

from dataclasses import dataclass, field
import logging

from RE_Libs.constants import (
    FULL_TURN,
    PERCENT_DEFAULT,
    PERCENT_MAX,
    PERCENT_MIN,
    ROTATION_STEP,
    VALID_ROTATIONS,
)
from RE_Libs.EditPipelineLib.edit_models import BitmapSize, CropRect

logger = logging.getLogger(__name__)


def clamp_percent(value: float) -> int:
    return int(max(PERCENT_MIN, min(PERCENT_MAX, round(value))))


@dataclass
class TransformState:
    """Adjustments applied to one loaded bitmap.

    Attributes:
        bitmap_width: Native width of the bitmap being edited
        bitmap_height: Native height of the bitmap being edited
        brightness: Percent, 100 = identity
        contrast: Percent, 100 = identity
        saturation: Percent, 100 = identity
        rotation: Clockwise degrees, one of 0/90/180/270
        crop_mode: Whether pointer drags edit the crop rect
        crop_rect: Crop region in bitmap pixels
    """
    bitmap_width: int
    bitmap_height: int
    brightness: int = PERCENT_DEFAULT
    contrast: int = PERCENT_DEFAULT
    saturation: int = PERCENT_DEFAULT
    rotation: int = 0
    crop_mode: bool = False
    crop_rect: CropRect = field(default_factory=CropRect)

    def __post_init__(self):
        if self.bitmap_width < 0 or self.bitmap_height < 0:
            raise ValueError(
                f"bitmap size must be non-negative, got {self.bitmap_width}x{self.bitmap_height}"
            )
        if self.rotation not in VALID_ROTATIONS:
            raise ValueError(f"rotation must be one of {VALID_ROTATIONS}, got {self.rotation}")
        self.brightness = clamp_percent(self.brightness)
        self.contrast = clamp_percent(self.contrast)
        self.saturation = clamp_percent(self.saturation)

    @classmethod
    def for_bitmap(cls, size: BitmapSize) -> "TransformState":
        """Initial state for a freshly loaded bitmap: identity filters, full-extent crop."""
        width, height = size
        return cls(width, height, crop_rect=CropRect.full(width, height))

    @property
    def bitmap_size(self) -> BitmapSize:
        return self.bitmap_width, self.bitmap_height

    def set_brightness(self, value: float) -> None:
        self.brightness = clamp_percent(value)

    def set_contrast(self, value: float) -> None:
        self.contrast = clamp_percent(value)

    def set_saturation(self, value: float) -> None:
        self.saturation = clamp_percent(value)

    def rotate(self) -> None:
        self.rotation = (self.rotation + ROTATION_STEP) % FULL_TURN
        logger.debug(f"Rotation now {self.rotation} degrees")

    def toggle_crop_mode(self) -> None:
        """
        Flip crop mode.

        Turning crop mode on resets the crop rect to the centered rectangle
        inset by a quarter of the bitmap on each axis. Turning it off keeps
        the current rect.
        """
        self.crop_mode = not self.crop_mode
        if self.crop_mode:
            self.crop_rect = CropRect.centered_half(self.bitmap_width, self.bitmap_height)
        logger.debug(f"Crop mode {'on' if self.crop_mode else 'off'}, rect={self.crop_rect}")

    def set_crop_rect(self, rect: CropRect) -> None:
        self.crop_rect = rect

    def reset_filters(self) -> None:
        """Restore identity filters and zero rotation; crop state is left alone."""
        self.brightness = PERCENT_DEFAULT
        self.contrast = PERCENT_DEFAULT
        self.saturation = PERCENT_DEFAULT
        self.rotation = 0

    def crop_active(self) -> bool:
        return self.crop_mode and self.crop_rect.has_area()
