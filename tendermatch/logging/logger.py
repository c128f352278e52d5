import logging
import sys

CONTEXT_FIELDS = ("job_id", "document_id", "user_id", "stage")


class ContextFormatter(logging.Formatter):
    """Appends job context passed as keyword arguments to ``Log`` calls.

    Only the fields in ``CONTEXT_FIELDS`` are rendered, in that order, as
    ``key=value`` pairs after the message. Records without context are left
    untouched.
    """

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{name}={getattr(record, name)}"
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )
        if not context:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} [{context}]{sep}{tail}"


class Log:
    """Process-wide ``tendermatch`` logger writing to stdout."""

    _logger: logging.Logger = logging.getLogger("tendermatch")

    @classmethod
    def configure(cls, log_level: str) -> None:
        cls._logger.setLevel(log_level.upper())
        if cls._logger.handlers:
            return
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ContextFormatter("%(asctime)s [%(levelname)s] %(message)s"))
        cls._logger.addHandler(handler)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(message, extra=context)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(message, extra=context)

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(message, extra=context)

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(message, extra=context)

    @classmethod
    def exception(cls, message: str, **context: object) -> None:
        """Log at error level with the active traceback."""
        cls._logger.exception(message, extra=context)
