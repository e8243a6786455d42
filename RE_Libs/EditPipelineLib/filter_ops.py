"""
Pixel operations shared by the compositor and the export encoder.

Provides the percent-based color filters and the pivot-about-center rotation:
- Brightness: linear channel multiply
- Contrast: scale around mid-grey
- Saturation: luminance-weighted color matrix
- Rotation: clockwise rotation about the image center, extents unchanged

Each filter step clamps to the displayable range before the next one runs,
and the alpha channel is never modified.

Example:
    >>> from PIL import Image
    >>> img = Image.new("RGBA", (64, 48), (200, 120, 40, 255))
    >>> adjusted = apply_adjustments(img, brightness=120, contrast=90, saturation=150)
    >>> rotated = rotate_about_center(adjusted, 90)
"""

from typing import Any

import numpy as np
from PIL import Image

from RE_Libs.constants import PERCENT_DEFAULT, WORKING_MODE

# Rec. 709 luminance weights used by the saturate color matrix
_LUMA_R = 0.213
_LUMA_G = 0.715
_LUMA_B = 0.072


def is_identity(brightness: int, contrast: int, saturation: int) -> bool:
    return brightness == contrast == saturation == PERCENT_DEFAULT


def _saturation_matrix(amount: float) -> np.ndarray:
    return np.array(
        [
            [_LUMA_R + (1 - _LUMA_R) * amount, _LUMA_G - _LUMA_G * amount, _LUMA_B - _LUMA_B * amount],
            [_LUMA_R - _LUMA_R * amount, _LUMA_G + (1 - _LUMA_G) * amount, _LUMA_B - _LUMA_B * amount],
            [_LUMA_R - _LUMA_R * amount, _LUMA_G - _LUMA_G * amount, _LUMA_B + (1 - _LUMA_B) * amount],
        ],
        dtype=np.float32,
    )


def apply_adjustments(
    image: Any,
    brightness: int = PERCENT_DEFAULT,
    contrast: int = PERCENT_DEFAULT,
    saturation: int = PERCENT_DEFAULT,
) -> Any:
    """
    Apply brightness, contrast and saturation in that order.

    Args:
        image: PIL Image (converted to RGBA)
        brightness: Percent, 100 = unchanged, 0 = black
        contrast: Percent, 100 = unchanged, 0 = flat mid-grey
        saturation: Percent, 100 = unchanged, 0 = greyscale

    Returns:
        New RGBA PIL Image

    Raises:
        TypeError: If image is not a PIL Image
    """
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    rgba = image.convert(WORKING_MODE)
    if is_identity(brightness, contrast, saturation) or 0 in rgba.size:
        return rgba.copy()

    pixels = np.asarray(rgba, dtype=np.float32) / 255.0
    rgb = pixels[..., :3]

    rgb = np.clip(rgb * (brightness / 100.0), 0.0, 1.0)
    rgb = np.clip((rgb - 0.5) * (contrast / 100.0) + 0.5, 0.0, 1.0)
    if saturation != PERCENT_DEFAULT:
        rgb = np.clip(rgb @ _saturation_matrix(saturation / 100.0).T, 0.0, 1.0)

    out = np.empty(pixels.shape, dtype=np.uint8)
    out[..., :3] = np.rint(rgb * 255.0).astype(np.uint8)
    out[..., 3] = np.asarray(rgba, dtype=np.uint8)[..., 3]
    return Image.fromarray(out)


def rotate_about_center(image: Any, degrees: int) -> Any:
    """
    Rotate clockwise about the image center without changing its extents.

    Corners that leave the frame are clipped and uncovered areas are fully
    transparent, so a 90 degree turn of a non-square image is cropped.

    Args:
        image: RGBA PIL Image
        degrees: Clockwise rotation in degrees

    Returns:
        New RGBA PIL Image of the same size
    """
    if degrees % 360 == 0:
        return image.copy()
    # Pillow rotates counter-clockwise for positive angles
    return image.rotate(
        -degrees,
        resample=Image.Resampling.NEAREST,
        expand=False,
        fillcolor=(0, 0, 0, 0),
    )
