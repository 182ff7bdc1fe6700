import logging
import time
from contextlib import contextmanager
from typing import Iterator

LOGGER_NAME = "tracklist2spotify"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: str = "INFO") -> None:
    """Configure console logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=True,
    )


def log_info(message: str) -> None:
    logger.info(message)


def log_success(message: str) -> None:
    logger.info(f"✅ {message}")


def log_warning(message: str) -> None:
    logger.warning(message)


def log_error(message: str) -> None:
    logger.error(message)


@contextmanager
def timed(message: str) -> Iterator[None]:
    """Log how long the wrapped block took, whether it succeeded or raised."""
    start = time.monotonic()
    try:
        yield
    except BaseException:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        log_info(f"{message} failed in {elapsed_ms}ms")
        raise
    elapsed_ms = int((time.monotonic() - start) * 1000)
    log_info(f"{message} completed in {elapsed_ms}ms")
