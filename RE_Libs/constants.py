"""
Constants and configuration values for Raster Edit.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Adjustment ranges (percent, 100 = identity)
PERCENT_MIN = 0
PERCENT_MAX = 200
PERCENT_DEFAULT = 100

# Rotation
ROTATION_STEP = 90
FULL_TURN = 360
VALID_ROTATIONS = (0, 90, 180, 270)

# Crop overlay drawing
HANDLE_SIZE = 8
OVERLAY_COLOR = (0, 0, 0, 128)
CROP_BORDER_COLOR = (59, 130, 246, 255)  # "#3b82f6"
CROP_BORDER_WIDTH = 2
CROP_DASH_PATTERN = (5, 5)

# Working image mode
WORKING_MODE = "RGBA"

# Export
EXPORT_FORMAT = "JPEG"
EXPORT_QUALITY = 0.9
EXPORT_BACKGROUND = (0, 0, 0)

# Input acceptance
ACCEPTED_INPUT_FORMATS = {"JPEG", "PNG", "GIF", "WEBP"}
MAX_INPUT_BYTES = 10 * 1024 * 1024

# File naming
DEFAULT_EDITED_FILENAME = "edited-image.jpg"
EDITED_FILE_PREFIX = "edited_"
EDITED_FILE_SUFFIX = ".jpg"

# Logging
LOG_LEVEL_ENV_VAR = "RASTER_EDIT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# UI constants
DEFAULT_WINDOW_WIDTH = 1100
DEFAULT_WINDOW_HEIGHT = 720
CANVAS_MIN_WIDTH = 480
CANVAS_MIN_HEIGHT = 360
CONTROLS_PANEL_WIDTH = 320

# File dialog filter
INPUT_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.webp)"
