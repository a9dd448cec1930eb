import logging
import sys
from typing import TextIO


class Log:
    """Centralized logging for the intake core.

    Keyword arguments are rendered after the message as ``key=value`` pairs,
    e.g. ``Log.info("Upload ready", upload_id="u-1", type="scope")``.
    """

    _logger: logging.Logger = logging.getLogger("bpmnhub")

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and attach a single stream handler (stdout by default)."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._emit(logging.INFO, message, context)

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._emit(logging.WARNING, message, context)

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._emit(logging.ERROR, message, context)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._emit(logging.DEBUG, message, context)

    @classmethod
    def exception(cls, message: str, **context: object) -> None:
        """Log at error level with the active exception's traceback."""
        cls._emit(logging.ERROR, message, context, exc_info=True)

    @classmethod
    def _emit(
        cls,
        level: int,
        message: str,
        context: dict[str, object],
        exc_info: bool = False,
    ) -> None:
        if not cls._logger.isEnabledFor(level):
            return
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} {pairs}"
        cls._logger.log(level, message, exc_info=exc_info)
