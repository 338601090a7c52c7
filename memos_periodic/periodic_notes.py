"""
Periodic Notes

Resolve where daily, weekly, monthly, quarterly and yearly notes live and
create them from templates.

Layout under the periodic notes root:

    <root>/2024/daily/08/2024-08-15.md
    <root>/2024/weekly/2024-W33.md
    <root>/2024/monthly/2024-08.md
    <root>/2024/quarterly/2024-Q3.md
    <root>/2024/2024.md
    <root>/Templates/<period>.md
"""

import logging
from datetime import date
from enum import Enum
from typing import NamedTuple

from memos_periodic.config import PluginSettings
from memos_periodic.vault import CreateResult, Vault

logger = logging.getLogger(__name__)


class PeriodType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class PeriodicPaths(NamedTuple):
    folder: str
    file: str
    template_file: str


def resolve_periodic_paths(
    day: date, period_type: PeriodType | str, settings: PluginSettings
) -> PeriodicPaths:
    """
    Compute folder, note and template paths of a periodic note

    Args:
        day: Any date inside the period
        period_type: Period kind
        settings: Plugin settings (periodicNotesPath must be set)

    Returns:
        PeriodicPaths with vault-relative paths

    Raises:
        ValueError: If the period kind is unknown
    """
    period = PeriodType(period_type)
    root = settings.periodic_notes_path
    year = f"{day.year:04d}"

    if period is PeriodType.DAILY:
        folder = f"{root}/{year}/{period.value}/{day.month:02d}"
        value = day.strftime("%Y-%m-%d")
    elif period is PeriodType.WEEKLY:
        week_year, week, _ = day.isocalendar()
        folder = f"{root}/{week_year}/{period.value}"
        value = f"{week_year}-W{week:02d}"
    elif period is PeriodType.MONTHLY:
        folder = f"{root}/{year}/{period.value}"
        value = day.strftime("%Y-%m")
    elif period is PeriodType.QUARTERLY:
        folder = f"{root}/{year}/{period.value}"
        value = f"{year}-Q{(day.month - 1) // 3 + 1}"
    else:
        folder = f"{root}/{year}"
        value = year

    default_template = f"{root}/Templates/{period.value}.md"
    if settings.use_periodic_advanced:
        template_file = settings.template_override(period.value) or default_template
    else:
        template_file = default_template

    return PeriodicPaths(folder=folder, file=f"{folder}/{value}.md", template_file=template_file)


def create_periodic_file(
    day: date,
    period_type: PeriodType | str,
    settings: PluginSettings,
    vault: Vault | None,
) -> CreateResult:
    """
    Open the periodic note for a date, creating it from its template if needed

    Args:
        day: Any date inside the period
        period_type: Period kind
        settings: Plugin settings
        vault: Target vault

    Returns:
        CreateResult (NOT_READY when the vault or notes root is missing)
    """
    if vault is None or not settings.periodic_notes_path:
        logger.debug("Vault or periodic notes path not configured, skipping")
        return CreateResult.NOT_READY

    paths = resolve_periodic_paths(day, period_type, settings)
    logger.debug(f"Periodic note for {day.isoformat()} ({period_type}): {paths.file}")

    return vault.create_file(
        template_file=paths.template_file,
        folder=paths.folder,
        file=paths.file,
        locale=settings.language,
    )
