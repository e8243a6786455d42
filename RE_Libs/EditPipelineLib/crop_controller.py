"""
Interactive Crop Controller.

Turns pointer gestures on the display element into crop rect updates on a
TransformState. The controller is inert unless the state is in crop mode.

States:
    Idle: no pointer held
    Dragging: pointer held, anchor recorded in bitmap pixels

Pointer-up and pointer-leave both end a drag, so a gesture that exits the
element never leaves the controller stuck in Dragging.

Functions:
    to_bitmap_coords: Map a client-space pointer onto bitmap pixels

Classes:
    DragSession: Transient drag state
    CropController: Pointer event handler
"""

from dataclasses import dataclass
from typing import Optional
import logging

from RE_Libs.EditPipelineLib.edit_models import (
    BitmapSize,
    CropRect,
    ElementBounds,
    PointerPosition,
)
from RE_Libs.EditPipelineLib.transform_state import TransformState

logger = logging.getLogger(__name__)


def to_bitmap_coords(
    pointer: PointerPosition,
    bounds: ElementBounds,
    bitmap_size: BitmapSize,
) -> PointerPosition:
    """
    Convert a pointer position in client space to bitmap pixel coordinates.

    The element may be displayed scaled relative to the bitmap, so each axis
    is scaled by ``bitmap_dimension / displayed_dimension``. Callers pass the
    element's bounds as measured for this event.

    Args:
        pointer: Pointer location in client coordinates
        bounds: Element bounding box in client coordinates
        bitmap_size: Native (width, height) of the bitmap

    Returns:
        Position in bitmap pixels, clamped to the bitmap extent. Degenerate
        bounds map to the origin.
    """
    if bounds.is_degenerate():
        return PointerPosition(0.0, 0.0)

    bitmap_width, bitmap_height = bitmap_size
    scale_x = bitmap_width / bounds.width
    scale_y = bitmap_height / bounds.height

    x = (pointer.x - bounds.left) * scale_x
    y = (pointer.y - bounds.top) * scale_y
    return PointerPosition(
        min(max(x, 0.0), float(bitmap_width)),
        min(max(y, 0.0), float(bitmap_height)),
    )


def rect_from_drag(anchor: PointerPosition, current: PointerPosition) -> CropRect:
    """Normalized rect spanned by a drag, valid in any of the four directions."""
    dx = current.x - anchor.x
    dy = current.y - anchor.y
    return CropRect(
        current.x if dx < 0 else anchor.x,
        current.y if dy < 0 else anchor.y,
        abs(dx),
        abs(dy),
    )


@dataclass
class DragSession:
    dragging: bool = False
    anchor: Optional[PointerPosition] = None


class CropController:
    """Pointer event handler that edits ``state.crop_rect`` while in crop mode."""

    def __init__(self, state: TransformState) -> None:
        self.state = state
        self.drag = DragSession()

    @property
    def dragging(self) -> bool:
        return self.drag.dragging

    def pointer_down(self, pointer: PointerPosition, bounds: ElementBounds) -> bool:
        """
        Start a drag at the pointer.

        Returns:
            True if the crop rect changed
        """
        if not self.state.crop_mode:
            return False

        anchor = to_bitmap_coords(pointer, bounds, self.state.bitmap_size)
        self.drag = DragSession(dragging=True, anchor=anchor)
        self.state.set_crop_rect(CropRect(anchor.x, anchor.y, 0, 0))
        logger.debug(f"Crop drag started at ({anchor.x:.1f}, {anchor.y:.1f})")
        return True

    def pointer_move(self, pointer: PointerPosition, bounds: ElementBounds) -> bool:
        """
        Extend the current drag to the pointer.

        Returns:
            True if the crop rect changed
        """
        if not self.state.crop_mode or not self.drag.dragging or self.drag.anchor is None:
            return False

        current = to_bitmap_coords(pointer, bounds, self.state.bitmap_size)
        self.state.set_crop_rect(rect_from_drag(self.drag.anchor, current))
        return True

    def pointer_up(self) -> None:
        if self.drag.dragging:
            logger.debug(f"Crop drag ended, rect={self.state.crop_rect}")
        self.drag = DragSession()

    def pointer_leave(self) -> None:
        self.pointer_up()
