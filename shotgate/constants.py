"""Application-wide constants for ShotGate.

This module contains all shared constants used across different parts of the application.
Centralizing these values prevents duplication and circular import issues.
"""

# ============================================================================
# CLASSIFICATION SERVICE
# ============================================================================
DEFAULT_SERVICE_URL = "http://localhost:3000"
QUALITY_ENDPOINT = "/api/quality"
UPLOAD_ENDPOINT = "/api/upload"
IMAGE_FIELD_NAME = "image"  # multipart field carrying the raw image bytes

DEFAULT_REQUEST_TIMEOUT_SECONDS = 4.0
DEFAULT_MAX_UPLOAD_BYTES = 8 * 1024 * 1024

# Stub confidences reported by the bundled service
SERVICE_PASS_CONFIDENCE = 0.85
SERVICE_OTHER_CONFIDENCE = 0.65

# ============================================================================
# WEB SERVER
# ============================================================================
DEFAULT_WEB_HOST = "127.0.0.1"
DEFAULT_WEB_PORT = 3000

# ============================================================================
# HEURISTIC ANALYZER
# Channel cut-offs are structural; the five decision thresholds are tunable
# through settings (see QualityThresholds).
# ============================================================================
DEFAULT_RESIZE_TARGET_EDGE = 256
OVEREXPOSED_CHANNEL_MIN = 245  # all of R, G, B strictly above -> clipped highlight
UNDEREXPOSED_CHANNEL_MAX = 12  # all of R, G, B strictly below -> crushed shadow

DEFAULT_OVEREXPOSED_FRACTION_MAX = 0.18
DEFAULT_UNDEREXPOSED_FRACTION_MAX = 0.30
DEFAULT_BLUR_VARIANCE_MIN = 900.0  # tuned for a 0..~4000 variance range at 256px
DEFAULT_BRIGHTNESS_MIN = 40.0
DEFAULT_BRIGHTNESS_MAX = 225.0

# ============================================================================
# HINTS
# ============================================================================
HINT_FIX_EXPOSURE = "Fix exposure (too bright/dark)."
HINT_REDUCE_BLUR = "Reduce blur / hold steady."
HINT_INCREASE_LIGHTING = "Increase lighting."
HINT_REDUCE_GLARE = "Reduce glare."
HINT_LOOKS_GOOD = "Looks good"
HINT_EXPOSURE_OVERRIDE = "Exposure concerns: retake a clearer shot."
HINT_UNREADABLE_IMAGE = "Could not read this image; re-upload the photo."
HINT_SERVICE_ERROR = "Server error analysing image"

IMPROVE_TIPS = (
    "Try better lighting.",
    "Step back to capture more context.",
    "Hold the camera steady.",
    "Avoid reflections or glare.",
)

# ============================================================================
# PRESENTATION
# Primary action text per lifecycle state (None hides the button).
# ============================================================================
PRIMARY_ACTION_LABELS = {
    "empty": "Upload photo",
    "uploading": None,
    "analysing": None,
    "accepted": "Next photo",
    "needs_retake": "Retake photo",
    "needs_retry": "Try again",
    "failed": "Re-upload photo",
    "locked": None,
}

# ============================================================================
# FILE STORAGE
# ============================================================================
APP_NAME = "shotgate"
APP_AUTHOR = "shotgate"
DEFAULT_UPLOAD_EXTENSION = ".jpg"
PREVIEW_MAX_WIDTH = 800

# Accepted when the browser/client sends no usable image/* content type
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff"})
