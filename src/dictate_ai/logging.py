"""Logging configuration for dictate-ai using Loguru.

Every logger is bound to a component name ("Providers.groq", "Lifecycle")
that shows up in each line. Messages use {} placeholders, formatted only when
the level is enabled.

API keys reach this process as Bearer headers, ``key=`` query parameters and
raw ``gsk_`` / ``AIza`` tokens. A patcher installed on import masks all of
them in every record, whichever sink it goes to.

Example:
    from dictate_ai.logging import get_logger

    logger = get_logger("Providers.ollama")
    logger.info("Fetched {} models", len(models))
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger as _base_logger

if TYPE_CHECKING:
    from loguru import Logger

LOG_DIR = Path.home() / ".local" / "state" / "dictate-ai" / "logs"

CONSOLE_FORMAT = "<level>{level: <8}</level> | <cyan>{extra[component]}</cyan> | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | [{extra[component]}]: {message}"

REDACTED = "***"

_SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(?i)(Bearer\s+)[^\s\"',]+"), rf"\g<1>{REDACTED}"),
    (re.compile(r"(?i)\b((?:api_?)?key=)[^&\s\"']+"), rf"\g<1>{REDACTED}"),
    (re.compile(r"\bgsk_[A-Za-z0-9]+"), f"gsk_{REDACTED}"),
    (re.compile(r"\bAIza[0-9A-Za-z_\-]+"), f"AIza{REDACTED}"),
]


def redact_secrets(text: str) -> str:
    """Mask API keys in ``text``."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _redact_record(record: dict[str, Any]) -> None:
    record["message"] = redact_secrets(record["message"])


def _ensure_log_dir() -> Path:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    return LOG_DIR


def _add_file_sink(path: Path, level: str, retention: str) -> None:
    _base_logger.add(
        path,
        level=level,
        format=FILE_FORMAT,
        rotation="10 MB",
        retention=retention,
        compression="gz",
    )


def configure_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
    console: bool = True,
) -> None:
    """Configure logging for dictate-ai.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory for log files. Defaults to ~/.local/state/dictate-ai/logs/
        console: Whether to also log to stderr. The CLI turns this off so
            log lines do not interleave with rich output.
    """
    global LOG_DIR
    if log_dir is not None:
        LOG_DIR = log_dir

    log_path = _ensure_log_dir()
    _base_logger.remove()

    if console:
        _base_logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT, colorize=True)

    _add_file_sink(log_path / "dictate-ai.log", log_level, retention="7 days")
    # Errors are kept longer, separately
    _add_file_sink(log_path / "dictate-ai.error.log", "ERROR", retention="30 days")


def get_logger(component: str) -> Logger:
    """Get a logger bound to ``component``.

    Example:
        logger = get_logger("Lifecycle")
        logger.info("Downloading {}", model_name)
        # Output: INFO | [Lifecycle]: Downloading openai_whisper-tiny
    """
    return _base_logger.bind(component=component)


_base_logger.configure(patcher=_redact_record, extra={"component": "dictate-ai"})
