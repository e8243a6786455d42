"""
Editor Session.

Owns the single bitmap being edited together with its TransformState and
CropController, and implements the commit/cancel contract with the caller:

- open(): decode a new image, releasing any previous one
- commit(): export asynchronously and hand the bytes to ``on_complete``
- cancel(): release the bitmap; a pending commit's result is discarded

Decode and encode run on a single worker thread, so they execute in the
order they were requested. Callbacks fire on that worker thread before the
returned future resolves; UI shells must marshal them back to their own
event loop.

Example:
    >>> with EditorSession() as session:
    ...     session.load("photo.png")
    ...     session.state.set_brightness(120)
    ...     session.commit(lambda data: Path("out.jpg").write_bytes(data)).result()
"""

import concurrent.futures
import dataclasses
import logging
import threading
from typing import Any, Callable, Optional

from RE_Libs.EditPipelineLib.compositor import render_preview
from RE_Libs.EditPipelineLib.crop_controller import CropController
from RE_Libs.EditPipelineLib.edit_models import BitmapHandle
from RE_Libs.EditPipelineLib.errors import InvalidStateError
from RE_Libs.EditPipelineLib.export_encoder import ExportOptions, export_image
from RE_Libs.EditPipelineLib.image_loader import ImageSource, load_bitmap
from RE_Libs.EditPipelineLib.transform_state import TransformState

logger = logging.getLogger(__name__)

CompleteCallback = Callable[[bytes], None]
ErrorCallback = Callable[[BaseException], None]


class EditorSession:
    """One editing session over one image at a time."""

    def __init__(self, export_options: Optional[ExportOptions] = None) -> None:
        self.export_options = export_options or ExportOptions()
        self.bitmap: Optional[BitmapHandle] = None
        self.state: Optional[TransformState] = None
        self.crop_controller: Optional[CropController] = None
        # Bumped on open/cancel so in-flight work can tell it is obsolete
        self._generation = 0
        self._closed = False
        # Guards the generation check against install and release
        self._lock = threading.Lock()
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="raster-edit"
        )

    @property
    def loaded(self) -> bool:
        return self.bitmap is not None and not self.bitmap.released

    def open(self, source: ImageSource) -> "concurrent.futures.Future[BitmapHandle]":
        """
        Start decoding ``source``. Any previously loaded bitmap is released first.

        Returns:
            Future resolving to the new BitmapHandle once it is installed on
            the session, or failing with DecodeError
        """
        self._ensure_open()
        self._release()
        return self._executor.submit(self._decode, source, self._generation)

    def load(self, source: ImageSource) -> BitmapHandle:
        """Blocking variant of open()."""
        return self.open(source).result()

    def render(self) -> Any:
        """Render the live preview for the current state."""
        if not self.loaded or self.state is None:
            raise InvalidStateError("Cannot render: no image loaded")
        return render_preview(self.bitmap, self.state)

    def commit(
        self,
        on_complete: CompleteCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> "concurrent.futures.Future[bytes]":
        """
        Export the current edits.

        Args:
            on_complete: Receives the encoded bytes
            on_error: Receives the exception if the export failed

        Returns:
            Future resolving to the encoded bytes

        Raises:
            InvalidStateError: If no image is loaded
        """
        self._ensure_open()
        if not self.loaded or self.state is None:
            raise InvalidStateError("Cannot commit: no image loaded")

        snapshot = dataclasses.replace(self.state)
        return self._executor.submit(
            self._export, self.bitmap, snapshot, self._generation, on_complete, on_error
        )

    def cancel(self) -> None:
        """Abandon the session: release the bitmap and drop pending results."""
        logger.info("Editing session cancelled")
        self._release()

    def close(self) -> None:
        if self._closed:
            return
        self._release()
        self._closed = True
        self._executor.shutdown(wait=True)

    def _decode(self, source: ImageSource, generation: int) -> BitmapHandle:
        handle = load_bitmap(source)
        with self._lock:
            stale = generation != self._generation
            if not stale:
                self.bitmap = handle
                self.state = TransformState.for_bitmap(handle.size)
                self.crop_controller = CropController(self.state)
        if stale:
            # Cancelled or reopened while decoding
            handle.release()
            raise InvalidStateError("Session was cancelled while decoding")
        return handle

    def _export(
        self,
        bitmap: BitmapHandle,
        state: TransformState,
        generation: int,
        on_complete: CompleteCallback,
        on_error: Optional[ErrorCallback],
    ) -> bytes:
        try:
            data = export_image(bitmap, state, self.export_options)
        except Exception as exc:
            logger.warning(f"Export failed: {exc}")
            if on_error is not None and generation == self._generation:
                on_error(exc)
            raise

        if generation != self._generation:
            logger.info("Discarding export result from a cancelled session")
        else:
            on_complete(data)
        return data

    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidStateError("Editor session is closed")

    def _release(self) -> None:
        with self._lock:
            self._generation += 1
            bitmap = self.bitmap
            self.bitmap = None
            self.state = None
            self.crop_controller = None
        if bitmap is None:
            return
        if self._closed:
            bitmap.release()
        else:
            # Queued behind any export still reading the bitmap
            self._executor.submit(bitmap.release)

    def __enter__(self) -> "EditorSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
