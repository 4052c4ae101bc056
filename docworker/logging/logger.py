import logging
import sys
from typing import ClassVar


class Log:
    """Process-wide logging for the worker.

    Records carry the thread name so lines from concurrent pipeline slots can
    be told apart.
    """

    _logger: ClassVar[logging.Logger] = logging.getLogger("docworker")
    _FORMAT: ClassVar[str] = "%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s"
    # Libraries that log per page / per request at INFO or DEBUG.
    _QUIET_LOGGERS: ClassVar[tuple[str, ...]] = (
        "pdfminer",
        "botocore",
        "boto3",
        "urllib3",
        "PIL",
        "psycopg.pool",
    )

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level and install a single stdout handler."""
        cls._logger.setLevel(log_level.upper())
        cls._logger.propagate = False
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(cls._FORMAT))
            cls._logger.addHandler(handler)
        for name in cls._QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log an info message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Log an error message."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        """Log a warning message."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Log a debug message."""
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log at ERROR with the active exception's traceback."""
        cls._logger.exception(message, extra=kwargs)
