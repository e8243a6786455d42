"""
Helpers for the Raster Edit launcher.

Functions:
    configure_logging: Set up root logging from the environment
    edited_output_path: Where the edited copy of an image is written
    write_edited_image: Write committed bytes without clobbering files
    save_edited_image: Write committed bytes, asking before replacing a file
"""

import logging
import os
from pathlib import Path
from typing import Callable, Optional, Union

from RE_Libs.constants import (
    DEFAULT_EDITED_FILENAME,
    DEFAULT_LOG_LEVEL,
    EDITED_FILE_PREFIX,
    EDITED_FILE_SUFFIX,
    LOG_FORMAT,
    LOG_LEVEL_ENV_VAR,
)

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> int:
    """
    Configure root logging.

    Args:
        level: Level name; falls back to $RASTER_EDIT_LOG_LEVEL, then INFO

    Returns:
        The numeric level that was applied
    """
    name = (level or os.environ.get(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.getLevelName(DEFAULT_LOG_LEVEL)
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    return numeric


def edited_output_path(source: Union[str, Path, None], output_dir: Optional[Path] = None) -> Path:
    """
    Build the output path for an edited image.

    The edited file keeps the source's name with an ``edited_`` prefix and a
    ``.jpg`` suffix, next to the source unless output_dir is given. Without
    a usable source name the default ``edited-image.jpg`` is used.
    """
    source_path = Path(source) if source else None
    if source_path is not None and source_path.stem:
        name = f"{EDITED_FILE_PREFIX}{source_path.stem}{EDITED_FILE_SUFFIX}"
        directory = output_dir if output_dir is not None else source_path.parent
    else:
        name = DEFAULT_EDITED_FILENAME
        directory = output_dir if output_dir is not None else Path.cwd()
    return Path(directory) / name


def write_edited_image(data: bytes, target: Path, overwrite: bool = False) -> Path:
    """
    Write encoded bytes to ``target``.

    Raises:
        ValueError: If target exists and overwrite=False
        OSError: If the file cannot be written
    """
    if target.exists() and not overwrite:
        raise ValueError(f"File already exists: {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    logger.info(f"Saved edited image to {target}")
    return target


def save_edited_image(
    data: bytes,
    target: Path,
    confirm_overwrite: Callable[[Path], bool],
) -> Optional[Path]:
    """
    Write encoded bytes, asking ``confirm_overwrite`` before replacing a file.

    Returns:
        The written path, or None if the user declined to replace the file

    Raises:
        OSError: If the file cannot be written
    """
    try:
        return write_edited_image(data, target)
    except ValueError:
        if not confirm_overwrite(target):
            logger.info(f"Kept existing file {target}")
            return None
    return write_edited_image(data, target, overwrite=True)
