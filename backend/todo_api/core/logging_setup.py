import logging
import sys


class _ThirdPartyNoiseFilter(logging.Filter):
    """
    Keep our own loggers at the configured level, but only let
    SQLAlchemy and uvicorn access chatter through at WARNING+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("todo_api"):
            return True
        if record.name.startswith(("sqlalchemy.", "uvicorn.access")):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a single stderr handler.

    Call this ONCE, before the server starts.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    ch.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(ch)

    logging.captureWarnings(True)
