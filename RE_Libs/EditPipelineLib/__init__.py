"""
EditPipelineLib - Interactive raster edit pipeline

This module provides image loading, transform state, interactive crop
control, preview compositing and export encoding for Raster Edit.
"""

from RE_Libs.EditPipelineLib.errors import (
    EditPipelineError,
    DecodeError,
    EncodeError,
    InvalidStateError,
)
from RE_Libs.EditPipelineLib.edit_models import (
    BitmapHandle,
    BitmapSize,
    CropRect,
    ElementBounds,
    PointerPosition,
)
from RE_Libs.EditPipelineLib.image_loader import load_bitmap, load_bitmap_async
from RE_Libs.EditPipelineLib.transform_state import TransformState
from RE_Libs.EditPipelineLib.crop_controller import (
    CropController,
    DragSession,
    to_bitmap_coords,
)
from RE_Libs.EditPipelineLib.compositor import render_preview
from RE_Libs.EditPipelineLib.export_encoder import (
    ExportOptions,
    render_export,
    encode_image,
    export_image,
    export_image_async,
)
from RE_Libs.EditPipelineLib.editor_session import EditorSession

__all__ = [
    "EditPipelineError",
    "DecodeError",
    "EncodeError",
    "InvalidStateError",
    "BitmapHandle",
    "BitmapSize",
    "CropRect",
    "ElementBounds",
    "PointerPosition",
    "load_bitmap",
    "load_bitmap_async",
    "TransformState",
    "CropController",
    "DragSession",
    "to_bitmap_coords",
    "render_preview",
    "ExportOptions",
    "render_export",
    "encode_image",
    "export_image",
    "export_image_async",
    "EditorSession",
]
