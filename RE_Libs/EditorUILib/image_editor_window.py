from io import BytesIO
from pathlib import Path
from typing import Any, Optional
import logging

from PyQt5.QtCore import QObject, QRect, Qt, pyqtSignal
from PyQt5.QtGui import QPixmap
from PyQt5.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from RE_Libs.constants import (
    CANVAS_MIN_HEIGHT,
    CANVAS_MIN_WIDTH,
    CONTROLS_PANEL_WIDTH,
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    PERCENT_DEFAULT,
    PERCENT_MAX,
    PERCENT_MIN,
)
from RE_Libs.EditPipelineLib.edit_models import ElementBounds, PointerPosition
from RE_Libs.EditPipelineLib.editor_session import EditorSession
from RE_Libs.EditPipelineLib.image_loader import ImageSource

logger = logging.getLogger(__name__)


class _SessionSignals(QObject):
    """Carries worker-thread results back onto the GUI thread."""
    decoded = pyqtSignal()
    decode_failed = pyqtSignal(str)
    exported = pyqtSignal(bytes)
    export_failed = pyqtSignal(str)


class EditorCanvas(QLabel):
    """Label showing the preview scaled to fit, forwarding mouse gestures."""

    pointer_pressed = pyqtSignal(object, object)
    pointer_moved = pyqtSignal(object, object)
    pointer_released = pyqtSignal()
    pointer_left = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setMinimumSize(CANVAS_MIN_WIDTH, CANVAS_MIN_HEIGHT)
        self.setStyleSheet("border: 1px solid #4b5563; background: #1f2937;")
        self.setMouseTracking(True)
        self._source_pixmap: Optional[QPixmap] = None

    def set_surface(self, pixmap: Optional[QPixmap]) -> None:
        self._source_pixmap = pixmap
        self._refresh()

    def displayed_rect(self) -> QRect:
        """Where the scaled pixmap currently sits inside the label."""
        shown = self.pixmap()
        if shown is None or shown.isNull():
            return QRect()
        x = (self.width() - shown.width()) // 2
        y = (self.height() - shown.height()) // 2
        return QRect(x, y, shown.width(), shown.height())

    def _bounds(self) -> ElementBounds:
        rect = self.displayed_rect()
        return ElementBounds(rect.x(), rect.y(), rect.width(), rect.height())

    def _refresh(self) -> None:
        if self._source_pixmap is None:
            self.clear()
            return
        scaled = self._source_pixmap.scaled(
            self.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        self.setPixmap(scaled)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._refresh()

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.pointer_pressed.emit(PointerPosition(event.x(), event.y()), self._bounds())
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:
        self.pointer_moved.emit(PointerPosition(event.x(), event.y()), self._bounds())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:
        self.pointer_released.emit()
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event) -> None:
        self.pointer_left.emit()
        super().leaveEvent(event)


class ImageEditorDialog(QDialog):
    """
    Modal editor for a single image.

    Emits ``edit_completed`` with the encoded bytes when the user applies
    their changes, and ``edit_cancelled`` when the dialog is dismissed.
    """

    edit_completed = pyqtSignal(bytes)
    edit_cancelled = pyqtSignal()

    def __init__(self, source: ImageSource, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        title_suffix = f" - {Path(source).name}" if isinstance(source, (str, Path)) else ""
        self.setWindowTitle(f"Edit Image{title_suffix}")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self.session = EditorSession()
        self._signals = _SessionSignals(self)
        self._finished = False

        self._build_ui()
        self._connect_signals()
        self._set_controls_enabled(False)
        self._open(source)

    def _build_ui(self) -> None:
        root = QHBoxLayout(self)

        self.canvas = EditorCanvas()

        controls = QWidget()
        controls.setFixedWidth(CONTROLS_PANEL_WIDTH)
        controls_col = QVBoxLayout(controls)

        self.btn_rotate = QPushButton("Rotate")
        self.btn_crop = QPushButton("Crop")
        self.btn_crop.setCheckable(True)
        self.label_crop_hint = QLabel("Click and drag on the image to select the area you want to crop")
        self.label_crop_hint.setWordWrap(True)
        self.label_crop_hint.setVisible(False)

        quick_row = QHBoxLayout()
        quick_row.addWidget(self.btn_rotate)
        quick_row.addWidget(self.btn_crop)

        self.btn_reset = QPushButton("Reset")
        self.label_brightness = QLabel()
        self.label_contrast = QLabel()
        self.label_saturation = QLabel()
        self.slider_brightness = self._make_slider()
        self.slider_contrast = self._make_slider()
        self.slider_saturation = self._make_slider()

        self.btn_apply = QPushButton("Apply Changes")
        self.btn_cancel = QPushButton("Cancel")

        controls_col.addWidget(QLabel("Quick Actions"))
        controls_col.addWidget(self.label_crop_hint)
        controls_col.addLayout(quick_row)
        controls_col.addWidget(QLabel("Filters"))
        controls_col.addWidget(self.btn_reset)
        controls_col.addWidget(self.label_brightness)
        controls_col.addWidget(self.slider_brightness)
        controls_col.addWidget(self.label_contrast)
        controls_col.addWidget(self.slider_contrast)
        controls_col.addWidget(self.label_saturation)
        controls_col.addWidget(self.slider_saturation)
        controls_col.addStretch(1)
        controls_col.addWidget(self.btn_apply)
        controls_col.addWidget(self.btn_cancel)

        root.addWidget(self.canvas, stretch=1)
        root.addWidget(controls)
        self._sync_labels()

    def _make_slider(self) -> QSlider:
        slider = QSlider(Qt.Horizontal)
        slider.setRange(PERCENT_MIN, PERCENT_MAX)
        slider.setSingleStep(1)
        slider.setValue(PERCENT_DEFAULT)
        return slider

    def _connect_signals(self) -> None:
        self.btn_rotate.clicked.connect(self.rotate)
        self.btn_crop.clicked.connect(self.toggle_crop)
        self.btn_reset.clicked.connect(self.reset_filters)
        self.btn_apply.clicked.connect(self.apply_changes)
        self.btn_cancel.clicked.connect(self.reject)

        self.slider_brightness.valueChanged.connect(self.on_filter_changed)
        self.slider_contrast.valueChanged.connect(self.on_filter_changed)
        self.slider_saturation.valueChanged.connect(self.on_filter_changed)

        self.canvas.pointer_pressed.connect(self.on_pointer_pressed)
        self.canvas.pointer_moved.connect(self.on_pointer_moved)
        self.canvas.pointer_released.connect(self.on_pointer_released)
        self.canvas.pointer_left.connect(self.on_pointer_released)

        self._signals.decoded.connect(self.on_decoded)
        self._signals.decode_failed.connect(self.on_decode_failed)
        self._signals.exported.connect(self.on_exported)
        self._signals.export_failed.connect(self.on_export_failed)

    def _open(self, source: ImageSource) -> None:
        future = self.session.open(source)

        def _done(done) -> None:
            error = done.exception()
            if error is not None:
                self._signals.decode_failed.emit(str(error))
            else:
                self._signals.decoded.emit()

        future.add_done_callback(_done)

    def on_decoded(self) -> None:
        self._set_controls_enabled(True)
        self._load_sliders()
        self.refresh_preview()

    def on_decode_failed(self, message: str) -> None:
        self._show_error("Could not open image", message)
        self.reject()

    def rotate(self) -> None:
        if self.session.state is None:
            return
        self.session.state.rotate()
        self.refresh_preview()

    def toggle_crop(self) -> None:
        if self.session.state is None:
            return
        self.session.state.toggle_crop_mode()
        crop_mode = self.session.state.crop_mode
        self.btn_crop.setChecked(crop_mode)
        self.label_crop_hint.setVisible(crop_mode)
        self.canvas.setCursor(Qt.CrossCursor if crop_mode else Qt.ArrowCursor)
        self.refresh_preview()

    def reset_filters(self) -> None:
        if self.session.state is None:
            return
        self.session.state.reset_filters()
        self._load_sliders()
        self.refresh_preview()

    def on_filter_changed(self) -> None:
        state = self.session.state
        if state is not None:
            state.set_brightness(self.slider_brightness.value())
            state.set_contrast(self.slider_contrast.value())
            state.set_saturation(self.slider_saturation.value())
        self._sync_labels()
        self.refresh_preview()

    def on_pointer_pressed(self, pointer: PointerPosition, bounds: ElementBounds) -> None:
        controller = self.session.crop_controller
        if controller is not None and controller.pointer_down(pointer, bounds):
            self.refresh_preview()

    def on_pointer_moved(self, pointer: PointerPosition, bounds: ElementBounds) -> None:
        controller = self.session.crop_controller
        if controller is not None and controller.pointer_move(pointer, bounds):
            self.refresh_preview()

    def on_pointer_released(self) -> None:
        controller = self.session.crop_controller
        if controller is not None:
            controller.pointer_up()

    def apply_changes(self) -> None:
        if not self.session.loaded:
            return
        self._set_controls_enabled(False)
        self.session.commit(
            on_complete=self._signals.exported.emit,
            on_error=lambda exc: self._signals.export_failed.emit(str(exc)),
        )

    def on_exported(self, data: bytes) -> None:
        self._finished = True
        self.edit_completed.emit(data)
        self.accept()

    def on_export_failed(self, message: str) -> None:
        self._show_error("Could not save image", message)
        self._set_controls_enabled(True)

    def refresh_preview(self) -> None:
        if not self.session.loaded:
            self.canvas.set_surface(None)
            return
        surface = self.session.render()
        pixmap = QPixmap()
        if not pixmap.loadFromData(self._to_png_bytes(surface), "PNG"):
            self.canvas.setText("Preview failed")
            return
        self.canvas.set_surface(pixmap)

    def done(self, result: int) -> None:
        if not self._finished:
            self.session.cancel()
            self.edit_cancelled.emit()
        self.session.close()
        super().done(result)

    def _load_sliders(self) -> None:
        state = self.session.state
        if state is None:
            return
        for slider, value in (
            (self.slider_brightness, state.brightness),
            (self.slider_contrast, state.contrast),
            (self.slider_saturation, state.saturation),
        ):
            slider.blockSignals(True)
            slider.setValue(value)
            slider.blockSignals(False)
        self._sync_labels()

    def _sync_labels(self) -> None:
        self.label_brightness.setText(f"Brightness: {self.slider_brightness.value()}%")
        self.label_contrast.setText(f"Contrast: {self.slider_contrast.value()}%")
        self.label_saturation.setText(f"Saturation: {self.slider_saturation.value()}%")

    def _set_controls_enabled(self, enabled: bool) -> None:
        for widget in (
            self.btn_rotate,
            self.btn_crop,
            self.btn_reset,
            self.btn_apply,
            self.slider_brightness,
            self.slider_contrast,
            self.slider_saturation,
        ):
            widget.setEnabled(enabled)

    def _to_png_bytes(self, image: Any) -> bytes:
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def _show_error(self, title: str, message: str) -> None:
        logger.warning(f"{title}: {message}")
        QMessageBox.warning(self, title, message)
