from shotgate.logging._shotgate_logger import SHOTGATE_LOGGER, ColoredFormatter, ExcludeHttpRequestFilter

__all__ = ["SHOTGATE_LOGGER", "ColoredFormatter", "ExcludeHttpRequestFilter"]
