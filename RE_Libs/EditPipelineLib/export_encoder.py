"""
Export Encoder for Raster Edit.

Bakes the committed adjustments into a full-resolution surface and
serializes it to a lossy compressed byte stream.

Two mutually exclusive paths:
- Crop path (crop mode on, rect has area): output is the crop rect's size,
  filters applied. Rotation is not applied on this path.
- Full-image path: output keeps the bitmap's native size, rotation and
  filters applied. A 90/270 degree turn of a non-square image is clipped
  to the original extents.

Classes:
    ExportOptions: Output format settings

Functions:
    render_export: Build the output surface
    encode_image: Serialize a surface to bytes
    export_image: render_export + encode_image
    export_image_async: export_image on a worker thread
"""

import concurrent.futures
import dataclasses
import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from PIL import Image

from RE_Libs.constants import EXPORT_BACKGROUND, EXPORT_FORMAT, EXPORT_QUALITY, WORKING_MODE
from RE_Libs.EditPipelineLib.edit_models import BitmapHandle
from RE_Libs.EditPipelineLib.errors import EncodeError, InvalidStateError
from RE_Libs.EditPipelineLib.filter_ops import apply_adjustments, rotate_about_center
from RE_Libs.EditPipelineLib.transform_state import TransformState

logger = logging.getLogger(__name__)


@dataclass
class ExportOptions:
    """Configuration for export encoding.

    Attributes:
        save_format: Pillow format name (default: JPEG)
        quality: Lossy quality factor on a 0-1 scale (default: 0.9)
        background: RGB color transparent areas are flattened onto
    """
    save_format: str = EXPORT_FORMAT
    quality: float = EXPORT_QUALITY
    background: Tuple[int, int, int] = EXPORT_BACKGROUND

    def __post_init__(self):
        if not (0.0 <= self.quality <= 1.0):
            raise ValueError(f"quality must be 0.0-1.0, got {self.quality}")

    def get_save_kwargs(self) -> Dict[str, Any]:
        """Get PIL Image.save() kwargs based on format."""
        # PIL uses "JPEG" not "JPG"
        save_format = self.save_format.upper()
        if save_format == "JPG":
            save_format = "JPEG"

        kwargs: Dict[str, Any] = {"format": save_format}

        if save_format in ("JPEG", "WEBP"):
            kwargs["quality"] = max(1, min(100, int(round(self.quality * 100))))

        return kwargs


def render_export(bitmap: Optional[BitmapHandle], state: TransformState) -> Any:
    """
    Render the full-resolution output surface.

    Args:
        bitmap: Loaded bitmap
        state: Committed adjustments

    Returns:
        RGBA PIL Image

    Raises:
        InvalidStateError: If no bitmap is loaded or it was released
    """
    if bitmap is None:
        raise InvalidStateError("Cannot export: no bitmap loaded")

    source = bitmap.image

    if state.crop_active():
        rect = state.crop_rect
        left = int(rect.x)
        top = int(rect.y)
        # Pixels outside the bitmap come back transparent from crop()
        region = source.crop((left, top, left + int(rect.width), top + int(rect.height)))
        logger.debug(f"Export crop path: box=({left}, {top}) size={region.size}")
        return apply_adjustments(region, state.brightness, state.contrast, state.saturation)

    logger.debug(f"Export full path: size={source.size} rotation={state.rotation}")
    adjusted = apply_adjustments(source, state.brightness, state.contrast, state.saturation)
    return rotate_about_center(adjusted, state.rotation)


def encode_image(surface: Any, options: Optional[ExportOptions] = None) -> bytes:
    """
    Serialize a surface to a compressed byte stream.

    Transparent pixels are flattened onto the options' background color
    before encoding, since JPEG has no alpha channel.

    Raises:
        EncodeError: If the surface has no area or encoding yields no data
    """
    options = options or ExportOptions()
    width, height = surface.size
    if width <= 0 or height <= 0:
        raise EncodeError(f"Cannot encode an empty {width}x{height} surface")

    flattened = Image.new("RGB", surface.size, options.background)
    rgba = surface.convert(WORKING_MODE)
    flattened.paste(rgba, mask=rgba.getchannel("A"))

    buffer = io.BytesIO()
    try:
        flattened.save(buffer, **options.get_save_kwargs())
    except (OSError, ValueError, KeyError) as exc:
        logger.warning(f"Encoding {width}x{height} surface failed: {exc}")
        raise EncodeError(f"Failed to encode image: {exc}") from exc

    data = buffer.getvalue()
    if not data:
        logger.warning(f"Encoding {width}x{height} surface produced no data")
        raise EncodeError("Encoding produced no data")
    return data


def export_image(
    bitmap: Optional[BitmapHandle],
    state: TransformState,
    options: Optional[ExportOptions] = None,
) -> bytes:
    """Render and encode the committed edits."""
    data = encode_image(render_export(bitmap, state), options)
    logger.info(f"Exported {len(data)} bytes")
    return data


def export_image_async(
    bitmap: Optional[BitmapHandle],
    state: TransformState,
    executor: Optional[concurrent.futures.Executor] = None,
    options: Optional[ExportOptions] = None,
) -> "concurrent.futures.Future[bytes]":
    """
    Run export_image on a worker thread.

    The state is snapshotted at call time, so later edits do not leak into
    an export already in flight.

    Returns:
        Future resolving to the encoded bytes
    """
    if bitmap is None:
        raise InvalidStateError("Cannot export: no bitmap loaded")

    snapshot = dataclasses.replace(state)
    if executor is not None:
        return executor.submit(export_image, bitmap, snapshot, options)

    one_shot = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        return one_shot.submit(export_image, bitmap, snapshot, options)
    finally:
        one_shot.shutdown(wait=False)
