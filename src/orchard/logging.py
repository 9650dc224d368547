import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "orchard"

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "asyncio", "openai", "anthropic")


def get_logger() -> logging.Logger:
    """Return the library logger, attaching a rich console handler once."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def configure_cli_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for interactive use.

    Only orchard messages reach the console; the root logger and chatty
    third-party HTTP/SDK loggers are limited to errors and detached.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.ERROR)

    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.setLevel(logging.ERROR)
        noisy.propagate = False

    logger = get_logger()
    logger.setLevel(level)
    return logger
