"""
Record Formatter

Convert Memos records into daily note markdown.

A record becomes one top-level bullet anchored by its timestamp:

- 09:41 first line of the memo #daily-record ^1700000000
	- second line
	- ![[12-photo.png]]
"""

import logging
import re
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

DAILY_RECORD_TAG = "#daily-record"

TASK_PATTERN = re.compile(r"^- \[.*?\]")
CODE_FENCE = "```"
BULLET_PATTERN = re.compile(r"^([-*•]|\d+\.) .*")
UNSAFE_FILENAME_CHARS = re.compile(r'[/\\?%*:|"<>]')


def is_bullet_list(content: str) -> bool:
    """Whether a line already starts with a bullet or numbered list marker"""
    return bool(BULLET_PATTERN.match(content))


def record_timestamp(record: dict[str, Any]) -> int:
    """
    Resolve the effective unix timestamp of a memo record

    createdAt (ISO 8601) wins over createdTs (unix seconds).

    Args:
        record: Memo dictionary

    Returns:
        Unix timestamp in seconds
    """
    created_at = record.get("createdAt")
    if created_at:
        dt = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        return int(dt.timestamp())

    return int(record["createdTs"])


def format_daily_record(record: dict[str, Any]) -> tuple[str, str, str]:
    """
    Format one memo record as a daily note block

    Args:
        record: Memo dictionary (createdTs/createdAt, content, resourceList)

    Returns:
        (date "YYYY-MM-DD", timestamp, markdown block)
    """
    timestamp = record_timestamp(record)
    created = datetime.fromtimestamp(timestamp)
    date = created.strftime("%Y-%m-%d")
    time = created.strftime("%H:%M")

    first_line, *other_lines = (record.get("content") or "").strip().split("\n")

    if TASK_PATTERN.match(first_line):
        text = TASK_PATTERN.sub("", first_line, count=1).lstrip()
        target_first_line = f"- [ ] {time} {text}"
    elif CODE_FENCE in first_line:
        # A code fence can't open on the anchored line
        target_first_line = f"- {time}"
        other_lines.insert(0, first_line)
    else:
        target_first_line = f"- {time} {re.sub(r'^- ', '', first_line)}"

    target_first_line += f" {DAILY_RECORD_TAG} ^{timestamp}"

    continuation = [
        f"\t{line if is_bullet_list(line) else f'- {line}'}"
        for line in other_lines
        if line.strip()
    ]
    target_other_lines = "\n" + "\n".join(continuation).rstrip() if continuation else ""

    resources = record.get("resourceList") or []
    target_resource_lines = (
        "\n" + "\n".join(f"\t- {generate_file_link(resource)}" for resource in resources)
        if resources
        else ""
    )

    return date, str(timestamp), target_first_line + target_other_lines + target_resource_lines


def generate_file_link(resource: dict[str, Any]) -> str:
    """
    Build the markdown link for a memo attachment

    External resources are linked (embedded when they are images); uploaded
    ones are embedded by their local attachment filename.
    """
    external_link = resource.get("externalLink")
    if not external_link:
        return f"![[{generate_file_name(resource)}]]"

    prefix = "!" if "image" in (resource.get("type") or "") else ""
    label = resource.get("name") or resource.get("filename")

    return f"{prefix}[{label}]({external_link})"


def generate_file_name(resource: dict[str, Any]) -> str:
    """
    Local attachment filename: "<id>-<sanitized filename>"

    Resources without an id use the second segment of their name,
    e.g. "resources/42" -> "42".
    """
    safe_filename = UNSAFE_FILENAME_CHARS.sub("-", resource.get("filename") or "")

    return f"{resource_identifier(resource)}-{safe_filename}"


def resource_identifier(resource: dict[str, Any]) -> str | None:
    """Resource id, or the second "/" segment of its name when there is none"""
    resource_id = resource.get("id")
    if resource_id:
        return str(resource_id)

    name_parts = (resource.get("name") or "").split("/")
    return name_parts[1] if len(name_parts) > 1 else None
