"""
Centralized logging configuration for the Audio2Face server.

One stdout format is shared by the pipeline core, the model bootstrap and
the transport layer. Libraries pulled in for decoding and inference log
at INFO/DEBUG on every file or session; they are held at WARNING unless
the application itself runs quieter than that.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request access lines and decoder/JIT chatter
NOISY_LOGGERS = ("uvicorn.access", "numba", "audioread", "onnxruntime")


def setup_logging(level: str = "INFO") -> int:
    """
    Configure the root logger and quiet third-party loggers.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to INFO

    Returns:
        The numeric level applied to the root logger
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    library_level = max(numeric_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    return numeric_level


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Module name (typically __name__)
    """
    return logging.getLogger(name)
