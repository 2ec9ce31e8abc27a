import logging


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[94m",  # Blue
        "INFO": "\033[92m",  # Green
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[95m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        # Color a copy so other handlers still see the plain level name
        original = record.levelname
        color = self.COLORS.get(original, self.RESET)
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class ExcludeHttpRequestFilter(logging.Filter):
    """Drop httpx's per-request INFO lines ("HTTP Request: POST ...")."""

    def filter(self, record):
        return not record.getMessage().startswith("HTTP Request:")


SHOTGATE_LOGGER = logging.getLogger("shotgate")
SHOTGATE_LOGGER.setLevel(logging.INFO)

handler = logging.StreamHandler()
log_format = "%(asctime)s %(levelname)s %(message)s"
date_format = "%Y-%m-%d %H:%M:%S"
formatter = ColoredFormatter(fmt=log_format, datefmt=date_format)
handler.setFormatter(formatter)
handler.addFilter(ExcludeHttpRequestFilter())
SHOTGATE_LOGGER.handlers.clear()
SHOTGATE_LOGGER.addHandler(handler)
