"""Logger configuration for Pulpit."""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def console_format(record: dict) -> str:
    """Build the console format for one record, appending its bound context.

    Context values are referenced as ``{extra[key]}`` fields rather than
    inlined, so loguru renders them without parsing them as markup.
    """
    context = " ".join(f"{key}={{extra[{key}]}}" for key in record["extra"])
    if context:
        return CONSOLE_FORMAT + " <dim>[" + context + "]</dim>\n{exception}"
    return CONSOLE_FORMAT + "\n{exception}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Configure the console sink and, optionally, a rotating file sink.

    Presentation logs are bound with ``document_id`` and ``presentation_id``;
    both sinks show that context next to the message.

    Args:
        level: Minimum level for both sinks
        log_file: Path of the rotating log file, or None for console only
        rotation: When the file rotates (e.g. "10 MB", "1 day")
        retention: How long rotated files are kept (e.g. "7 days")
    """
    logger.remove()

    logger.add(sys.stderr, format=console_format, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} | {extra}",
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=True,
        )

    logger.bind(level=level, log_file=log_file).debug("Logger configured")
