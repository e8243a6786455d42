"""
Edit pipeline data models for Raster Edit.

This module defines core data structures shared by the loader, transform
state, crop controller, compositor and export encoder.

Classes:
    CropRect: Axis-aligned crop region in source-bitmap pixel coordinates
    BitmapHandle: Owner of a decoded image and its intrinsic dimensions
    PointerPosition: Pointer location in client (display) coordinates
    ElementBounds: Rendered bounding box of the display element

Type Aliases:
    BitmapSize: (width, height) in pixels
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from PIL import Image

from RE_Libs.EditPipelineLib.errors import InvalidStateError

BitmapSize = Tuple[int, int]


@dataclass(frozen=True)
class CropRect:
    """Crop region in bitmap pixels.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent (>= 0)
        height: Vertical extent (>= 0)
    """
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def full(cls, width: int, height: int) -> "CropRect":
        """Rect covering the whole bitmap."""
        return cls(0, 0, width, height)

    @classmethod
    def centered_half(cls, width: int, height: int) -> "CropRect":
        """Rect spanning the middle 50% x 50% of the bitmap."""
        quarter_width = width / 4
        quarter_height = height / 4
        return cls(quarter_width, quarter_height, quarter_width * 2, quarter_height * 2)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def clamped(self, width: int, height: int) -> "CropRect":
        """
        Clip this rect to a width x height extent.

        Edges are pulled inside [0, width] and [0, height]; a rect lying
        entirely outside collapses to zero area at the nearest edge.
        """
        left = min(max(self.x, 0), width)
        top = min(max(self.y, 0), height)
        right = min(max(self.right, left), width)
        bottom = min(max(self.bottom, top), height)
        return CropRect(left, top, right - left, bottom - top)


@dataclass(frozen=True)
class PointerPosition:
    """Pointer location in client coordinates (same space as ElementBounds)."""
    x: float
    y: float


@dataclass(frozen=True)
class ElementBounds:
    """Rendered bounding box of the element showing the bitmap.

    Attributes:
        left: Client x of the element's left edge
        top: Client y of the element's top edge
        width: Displayed width (may differ from the bitmap's native width)
        height: Displayed height
    """
    left: float
    top: float
    width: float
    height: float

    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0


class BitmapHandle:
    """
    Exclusive owner of a decoded RGBA image.

    The handle is immutable once created. ``release()`` closes the underlying
    Pillow image; any later access to ``image`` raises InvalidStateError.
    """

    def __init__(self, image: Any, source_format: Optional[str] = None) -> None:
        if not hasattr(image, "size"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        self._image: Optional[Image.Image] = image
        self.width, self.height = image.size
        self.source_format = source_format

    @property
    def size(self) -> BitmapSize:
        return self.width, self.height

    @property
    def released(self) -> bool:
        return self._image is None

    @property
    def image(self) -> Image.Image:
        if self._image is None:
            raise InvalidStateError("Bitmap has been released")
        return self._image

    def release(self) -> None:
        if self._image is None:
            return
        self._image.close()
        self._image = None

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"BitmapHandle({self.width}x{self.height}, {self.source_format}, {state})"
