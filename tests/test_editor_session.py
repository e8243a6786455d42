"""
Tests for EditorSession.

Tests cover:
- Opening images and installing fresh state
- Commit delivering bytes to the caller
- Error propagation to on_error
- Cancel releasing the bitmap and discarding pending results
- Session shutdown
"""

import threading
import time
from io import BytesIO
from unittest.mock import Mock, patch

import pytest
from PIL import Image

from RE_Libs.EditPipelineLib.edit_models import CropRect
from RE_Libs.EditPipelineLib.editor_session import EditorSession
from RE_Libs.EditPipelineLib.errors import DecodeError, EncodeError, InvalidStateError
from RE_Libs.EditPipelineLib.transform_state import TransformState


@pytest.fixture
def session():
    with EditorSession() as editor:
        yield editor


class TestOpen:
    """Tests for opening images."""

    def test_load_installs_state(self, session, png_bytes):
        handle = session.load(png_bytes)

        assert session.loaded
        assert session.bitmap is handle
        assert session.state.crop_rect == CropRect(0, 0, 200, 200)
        assert session.crop_controller.state is session.state

    def test_open_returns_future(self, session, wide_png_bytes):
        future = session.open(wide_png_bytes)

        assert future.result(timeout=10).size == (300, 200)
        assert session.state.bitmap_size == (300, 200)

    def test_decode_failure_leaves_session_empty(self, session):
        future = session.open(b"not an image")

        with pytest.raises(DecodeError):
            future.result(timeout=10)
        assert not session.loaded
        assert session.state is None

    def test_reopen_releases_previous_bitmap(self, session, png_bytes, wide_png_bytes):
        first = session.load(png_bytes)
        first_state = session.state
        first_state.rotate()

        session.load(wide_png_bytes)

        assert first.released
        assert session.state is not first_state
        assert session.state.rotation == 0

    def test_render_preview(self, session, png_bytes):
        session.load(png_bytes)

        assert session.render().size == (200, 200)

    def test_render_without_image_raises(self, session):
        with pytest.raises(InvalidStateError):
            session.render()


class TestCommit:
    """Tests for committing edits."""

    def test_delivers_jpeg_bytes(self, session, png_bytes):
        session.load(png_bytes)
        session.state.toggle_crop_mode()
        on_complete = Mock()

        data = session.commit(on_complete).result(timeout=10)

        on_complete.assert_called_once_with(data)
        with Image.open(BytesIO(data)) as image:
            assert image.format == "JPEG"
            assert image.size == (100, 100)

    def test_commit_without_image_raises(self, session):
        with pytest.raises(InvalidStateError):
            session.commit(Mock())

    def test_encode_failure_reaches_on_error(self, session, png_bytes):
        session.load(png_bytes)
        on_complete = Mock()
        on_error = Mock()

        with patch(
            "RE_Libs.EditPipelineLib.editor_session.export_image",
            side_effect=EncodeError("no data"),
        ):
            future = session.commit(on_complete, on_error)
            with pytest.raises(EncodeError):
                future.result(timeout=10)

        on_complete.assert_not_called()
        on_error.assert_called_once()
        assert isinstance(on_error.call_args[0][0], EncodeError)

    def test_later_edits_do_not_affect_pending_commit(self, session, png_bytes):
        session.load(png_bytes)
        release = threading.Event()
        seen = []

        def slow_export(bitmap, state, options):
            release.wait(5)
            seen.append(state.brightness)
            return b"data"

        with patch("RE_Libs.EditPipelineLib.editor_session.export_image", side_effect=slow_export):
            future = session.commit(Mock())
            session.state.set_brightness(10)
            release.set()
            future.result(timeout=10)

        assert seen == [100]


class TestCancel:
    """Tests for cancel and close."""

    def test_cancel_releases_bitmap(self, png_bytes):
        session = EditorSession()
        handle = session.load(png_bytes)

        session.cancel()
        session.close()

        assert handle.released
        assert not session.loaded
        assert session.state is None

    def test_cancel_discards_pending_result(self, session, png_bytes):
        session.load(png_bytes)
        release = threading.Event()
        on_complete = Mock()

        def slow_export(bitmap, state, options):
            release.wait(5)
            return b"data"

        with patch("RE_Libs.EditPipelineLib.editor_session.export_image", side_effect=slow_export):
            future = session.commit(on_complete)
            session.cancel()
            release.set()
            assert future.result(timeout=10) == b"data"

        on_complete.assert_not_called()

    def test_cancel_during_install_wins(self, png_bytes):
        session = EditorSession()
        real_for_bitmap = TransformState.for_bitmap
        canceller_waiting = threading.Event()
        canceller = threading.Thread(
            target=lambda: (canceller_waiting.set(), session.cancel())
        )

        def install_state(size):
            # cancel() arrives while the decoded bitmap is being installed
            canceller.start()
            canceller_waiting.wait(5)
            time.sleep(0.05)
            return real_for_bitmap(size)

        with patch.object(TransformState, "for_bitmap", side_effect=install_state):
            handle = session.open(png_bytes).result(timeout=10)
            canceller.join(timeout=10)

        session.close()

        assert handle.released
        assert not session.loaded
        assert session.state is None

    def test_closed_session_rejects_open(self, png_bytes):
        session = EditorSession()
        session.close()

        with pytest.raises(InvalidStateError):
            session.open(png_bytes)

    def test_close_is_idempotent(self):
        session = EditorSession()

        session.close()
        session.close()
