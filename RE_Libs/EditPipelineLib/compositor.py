"""
Preview Compositor.

Renders a bitmap and its live TransformState into a display surface. The
surface always has the bitmap's native pixel size; the UI scales it for
display. Rendering has no side effects, so repeated calls with unchanged
inputs return pixel-identical surfaces.

Render order:
    1. Transparent surface at native size
    2. Brightness / contrast / saturation filter
    3. Clockwise rotation about the center
    4. Crop overlay (dimmed bands, dashed border, corner handles) when
       crop mode is on and the rect has area
"""

from typing import Any, Optional, Sequence, Tuple
import logging

from PIL import Image, ImageDraw

from RE_Libs.constants import (
    CROP_BORDER_COLOR,
    CROP_BORDER_WIDTH,
    CROP_DASH_PATTERN,
    HANDLE_SIZE,
    OVERLAY_COLOR,
    WORKING_MODE,
)
from RE_Libs.EditPipelineLib.edit_models import BitmapHandle, CropRect
from RE_Libs.EditPipelineLib.errors import InvalidStateError
from RE_Libs.EditPipelineLib.filter_ops import apply_adjustments, rotate_about_center
from RE_Libs.EditPipelineLib.transform_state import TransformState

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int, int]


def render_preview(bitmap: Optional[BitmapHandle], state: TransformState) -> Any:
    """
    Render the live preview surface.

    Args:
        bitmap: Loaded bitmap
        state: Current adjustments

    Returns:
        RGBA PIL Image sized to the bitmap

    Raises:
        InvalidStateError: If no bitmap is loaded or it was released
    """
    if bitmap is None:
        raise InvalidStateError("Cannot render preview: no bitmap loaded")

    source = bitmap.image
    surface = Image.new(WORKING_MODE, source.size, (0, 0, 0, 0))

    adjusted = apply_adjustments(source, state.brightness, state.contrast, state.saturation)
    surface.alpha_composite(rotate_about_center(adjusted, state.rotation))

    if state.crop_active():
        surface = draw_crop_overlay(surface, state.crop_rect)

    logger.debug(
        f"Rendered preview {surface.width}x{surface.height} "
        f"brightness={state.brightness} contrast={state.contrast} "
        f"saturation={state.saturation} rotation={state.rotation} crop={state.crop_active()}"
    )
    return surface


def draw_crop_overlay(surface: Any, crop_rect: CropRect) -> Any:
    """
    Dim everything outside ``crop_rect`` and draw its border and handles.

    The dimmed area is four non-overlapping bands: full-width top and
    bottom bands, and left/right bands spanning only the rect's height.

    Returns:
        New RGBA PIL Image
    """
    width, height = surface.size
    rect = crop_rect.clamped(width, height)

    shade = Image.new(WORKING_MODE, surface.size, (0, 0, 0, 0))
    shade_draw = ImageDraw.Draw(shade)
    _fill_rect(shade_draw, 0, 0, width, rect.y, OVERLAY_COLOR)
    _fill_rect(shade_draw, 0, rect.bottom, width, height - rect.bottom, OVERLAY_COLOR)
    _fill_rect(shade_draw, 0, rect.y, rect.x, rect.height, OVERLAY_COLOR)
    _fill_rect(shade_draw, rect.right, rect.y, width - rect.right, rect.height, OVERLAY_COLOR)
    result = Image.alpha_composite(surface, shade)

    draw = ImageDraw.Draw(result)
    corners = [
        (rect.x, rect.y),
        (rect.right, rect.y),
        (rect.right, rect.bottom),
        (rect.x, rect.bottom),
    ]
    # Dash phase continues around the corners like a single stroked path
    phase = 0.0
    for start, end in zip(corners, corners[1:] + corners[:1]):
        phase = _dashed_line(
            draw, start, end, CROP_DASH_PATTERN, CROP_BORDER_COLOR, CROP_BORDER_WIDTH, phase
        )

    half = HANDLE_SIZE / 2
    for corner_x, corner_y in corners:
        _fill_rect(draw, corner_x - half, corner_y - half, HANDLE_SIZE, HANDLE_SIZE, CROP_BORDER_COLOR)

    return result


def _fill_rect(
    draw: Any,
    left: float,
    top: float,
    width: float,
    height: float,
    color: Color,
) -> None:
    x0 = int(round(left))
    y0 = int(round(top))
    x1 = int(round(left + width))
    y1 = int(round(top + height))
    if x1 <= x0 or y1 <= y0:
        return
    # ImageDraw rectangles include their far edge
    draw.rectangle((x0, y0, x1 - 1, y1 - 1), fill=color)


def _dashed_line(
    draw: Any,
    start: Tuple[float, float],
    end: Tuple[float, float],
    pattern: Sequence[int],
    color: Color,
    width: int,
    phase: float = 0.0,
) -> float:
    """
    Draw a dashed segment from start to end.

    ``phase`` is how far into the on/off pattern the segment starts. The
    phase reached at ``end`` is returned so adjoining segments can continue
    the pattern without a seam.
    """
    dash_on, dash_off = pattern
    period = dash_on + dash_off
    x0, y0 = start
    x1, y1 = end
    length = ((x1 - x0) ** 2 + (y1 - y0) ** 2) ** 0.5
    if length == 0:
        return phase

    step_x = (x1 - x0) / length
    step_y = (y1 - y0) / length
    position = -(phase % period)
    while position < length:
        dash_start = max(position, 0.0)
        dash_end = min(position + dash_on, length)
        if dash_end > dash_start:
            draw.line(
                (
                    x0 + step_x * dash_start,
                    y0 + step_y * dash_start,
                    x0 + step_x * dash_end,
                    y0 + step_y * dash_end,
                ),
                fill=color,
                width=width,
            )
        position += period
    return (phase + length) % period
