"""
Structured logging configuration for CLI commands.

Uses Rich for human-friendly terminal output and supports file-based JSON
logs. Engine modules only emit records through ``logging.getLogger``; this
module is the single place where handlers are attached.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(
    level: str = "WARNING",
    log_file: Path | None = None,
    use_json: bool = False,
) -> None:
    """
    Configure Python logging for the propguard command line.

    Sets up a Rich handler on an interactive stderr, a plain stream handler
    otherwise, and optionally writes logs to a file.

    Args:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR").
        log_file: Optional path to write logs to.
        use_json: If True, format file logs as JSON lines.

    Examples:
        >>> setup_logging(level="DEBUG")
        >>> logging.getLogger("propguard").debug("Evaluating account")
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if sys.stderr.isatty():
        rich_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        rich_handler.setLevel(numeric_level)
        rich_handler.setFormatter(
            logging.Formatter("%(message)s", datefmt="[%Y-%m-%d %H:%M:%S]")
        )
        root_logger.addHandler(rich_handler)
    else:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(numeric_level)
        stream_handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(stream_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(numeric_level)
        if use_json:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        root_logger.addHandler(file_handler)

    root_logger.debug(
        "Logging configured: level=%s, file=%s, json=%s",
        level,
        log_file if log_file else "None",
        use_json,
    )


class JSONFormatter(logging.Formatter):
    """
    JSON-lines formatter for structured log files.

    Each record becomes one object with timestamp, level, logger name and
    message, plus the formatted exception when one is attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)
