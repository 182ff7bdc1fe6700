from utils.logger import setup_logging, log_info, log_success, log_warning, log_error, timed

__all__ = [
    "setup_logging",
    "log_info",
    "log_success",
    "log_warning",
    "log_error",
    "timed",
]
