"""
Utilities

Small helpers shared by the periodic notes and daily record modules.
"""

import json
import logging
import re
import time
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class MemosPeriodicError(Exception):
    """Raised when an operation reports an error through log_message()"""


class LogLevel(Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


def sleep(milliseconds: int):
    time.sleep(milliseconds / 1000)


def is_dark_theme(vault: Any) -> bool:
    """
    Whether the vault uses Obsidian's dark base theme

    Args:
        vault: Vault instance

    Returns:
        True if .obsidian/appearance.json selects the "obsidian" (dark) theme
    """
    appearance_file = vault.vault_path / ".obsidian" / "appearance.json"
    if not appearance_file.exists():
        return False

    try:
        with open(appearance_file, encoding="utf-8") as f:
            appearance = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Error reading appearance settings: {e}")
        return False

    return isinstance(appearance, dict) and appearance.get("theme") == "obsidian"


def log_message(message: str, level: LogLevel = LogLevel.INFO, vault: Any = None):
    """
    Notify the user and log a message

    Args:
        message: Message text
        level: Severity
        vault: Vault to show the notice in (optional)

    Raises:
        MemosPeriodicError: When level is ERROR
    """
    if vault is not None:
        vault.notice(message)

    if level == LogLevel.INFO:
        logger.info(message)
    elif level == LogLevel.WARN:
        logger.warning(message)
    elif level == LogLevel.ERROR:
        logger.error(message)
        raise MemosPeriodicError(message)


def generate_header_regexp(header: str) -> re.Pattern:
    """
    Regex matching a markdown section: group 1 is the heading line, group 2
    the section body up to the next "##" heading or end of note
    """
    header = header.strip()
    formatted_header = header if re.match(r"^#+", header) else f"# {header}"

    return re.compile(rf"({re.escape(formatted_header)}[^\n]*)([\s\S]*?)(?=\n##|$)")
