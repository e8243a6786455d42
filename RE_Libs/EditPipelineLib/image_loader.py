"""
Image Loader for Raster Edit.

Decodes an input resource (raw bytes, a binary file object or a filesystem
path) into a BitmapHandle. Only the formats accepted by the upload form
(JPEG, PNG, GIF, WebP) are decoded and inputs above MAX_INPUT_BYTES are
rejected. Animated inputs contribute their first frame.

Functions:
    load_bitmap: Decode synchronously
    load_bitmap_async: Decode on a worker thread and return a Future
    read_source_bytes: Read the raw bytes of an input resource
"""

import concurrent.futures
import io
import logging
from pathlib import Path
from typing import Any, Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from RE_Libs.constants import ACCEPTED_INPUT_FORMATS, MAX_INPUT_BYTES, WORKING_MODE
from RE_Libs.EditPipelineLib.edit_models import BitmapHandle
from RE_Libs.EditPipelineLib.errors import DecodeError

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, str, Path, Any]


def read_source_bytes(source: ImageSource, max_bytes: int = MAX_INPUT_BYTES) -> bytes:
    """
    Read the raw bytes of an input resource.

    Args:
        source: bytes, a path, or an object with a ``read()`` method
        max_bytes: Largest accepted input size

    Returns:
        The encoded image bytes

    Raises:
        DecodeError: If the resource cannot be read or is too large
        TypeError: If source is of an unsupported type
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    elif isinstance(source, (str, Path)):
        path = Path(source)
        try:
            size = path.stat().st_size
            if size > max_bytes:
                raise DecodeError(
                    f"{path.name} is too large: {size} bytes (max {max_bytes})"
                )
            data = path.read_bytes()
        except OSError as exc:
            raise DecodeError(f"Cannot read image file {path}: {exc}") from exc
    elif hasattr(source, "read"):
        data = source.read(max_bytes + 1)
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"Expected a binary file object, read() returned {type(data)}")
        data = bytes(data)
    else:
        raise TypeError(f"Unsupported image source: {type(source)}")

    if len(data) > max_bytes:
        raise DecodeError(f"Image data is too large: more than {max_bytes} bytes")
    if not data:
        raise DecodeError("Image data is empty")
    return data


def load_bitmap(source: ImageSource, max_bytes: int = MAX_INPUT_BYTES) -> BitmapHandle:
    """
    Decode an image resource into a BitmapHandle.

    The decode buffer and the Pillow file object are closed before this
    returns, whether decoding succeeds or fails. The returned bitmap is an
    independent RGBA copy with EXIF orientation applied.

    Args:
        source: bytes, a path, or a binary file object
        max_bytes: Largest accepted input size

    Returns:
        BitmapHandle owning the decoded image

    Raises:
        DecodeError: If the input is unreadable, too large, of an unaccepted
                     format or not a valid image
    """
    data = read_source_bytes(source, max_bytes=max_bytes)

    try:
        with io.BytesIO(data) as buffer, Image.open(buffer) as decoded:
            source_format = decoded.format
            if source_format not in ACCEPTED_INPUT_FORMATS:
                raise DecodeError(
                    f"Image format {source_format} not allowed. "
                    f"Accepted: {', '.join(sorted(ACCEPTED_INPUT_FORMATS))}"
                )
            decoded.load()
            oriented = ImageOps.exif_transpose(decoded)
            bitmap = oriented.convert(WORKING_MODE)
    except DecodeError as exc:
        logger.warning(f"Rejected image input: {exc}")
        raise
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        logger.warning(f"Failed to decode image input: {exc}")
        raise DecodeError(f"Not a valid image: {exc}") from exc

    handle = BitmapHandle(bitmap, source_format=source_format)
    logger.info(f"Loaded {source_format} bitmap {handle.width}x{handle.height}")
    return handle


def load_bitmap_async(
    source: ImageSource,
    executor: Optional[concurrent.futures.Executor] = None,
    max_bytes: int = MAX_INPUT_BYTES,
) -> "concurrent.futures.Future[BitmapHandle]":
    """
    Decode an image resource on a worker thread.

    Args:
        source: bytes, a path, or a binary file object
        executor: Executor to run on; a one-shot single worker if omitted
        max_bytes: Largest accepted input size

    Returns:
        Future resolving to a BitmapHandle, or failing with DecodeError
    """
    if executor is not None:
        return executor.submit(load_bitmap, source, max_bytes)

    one_shot = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        return one_shot.submit(load_bitmap, source, max_bytes)
    finally:
        one_shot.shutdown(wait=False)
