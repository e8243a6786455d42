from pathlib import Path
from typing import List, Optional

import logging
import sys

from PyQt5.QtWidgets import QApplication, QFileDialog, QMessageBox

from RE_Libs.constants import INPUT_FILE_FILTER
from RE_Libs.EditorUILib.image_editor_window import ImageEditorDialog
from RE_Libs.launcher_utils import configure_logging, edited_output_path, save_edited_image

logger = logging.getLogger("raster_edit")


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    configure_logging()

    app = QApplication(argv)

    if len(argv) > 1:
        source = Path(argv[1])
    else:
        path_str, _ = QFileDialog.getOpenFileName(None, "Select Image", "", INPUT_FILE_FILTER)
        if not path_str:
            return 0
        source = Path(path_str)

    dialog = ImageEditorDialog(source)

    def confirm_replace(target: Path) -> bool:
        answer = QMessageBox.question(
            None,
            "Replace file?",
            f"{target.name} already exists. Replace it?",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        return answer == QMessageBox.Yes

    def save(data: bytes) -> None:
        target = edited_output_path(source)
        try:
            written = save_edited_image(data, target, confirm_replace)
        except OSError as exc:
            logger.error(f"Could not write {target}: {exc}")
            QMessageBox.warning(None, "Save failed", f"Could not write {target}: {exc}")
            return
        if written is not None:
            QMessageBox.information(None, "Saved", f"Edited image saved to {written}")

    dialog.edit_completed.connect(save)
    dialog.exec_()
    return 0


if __name__ == "__main__":
    sys.exit(main())
