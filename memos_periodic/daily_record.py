"""
Daily Record Importer

Fetch memos from the Memos API and merge them into the "Daily Record" section
of each day's daily note.

Records are keyed by their ^<timestamp> block anchor, so running the import
again updates lines in place instead of duplicating them.
"""

import logging
import re
from datetime import date, datetime
from typing import Any

import requests

from memos_periodic.config import PluginSettings, SettingsManager
from memos_periodic.memos_client import MemosClient, create_memos_client
from memos_periodic.periodic_notes import PeriodType, create_periodic_file, resolve_periodic_paths
from memos_periodic.record_formatter import (
    format_daily_record,
    generate_file_name,
    resource_identifier,
)
from memos_periodic.utils import LogLevel, MemosPeriodicError, generate_header_regexp, log_message
from memos_periodic.vault import CreateResult, Vault

logger = logging.getLogger(__name__)

ANCHOR_PATTERN = re.compile(r"\^(\d+)\s*$")


class DailyRecordImporter:
    """Import Memos records into daily notes"""

    PAGE_SIZE = 50
    MAX_PAGES = 1000

    def __init__(self, settings: PluginSettings, vault: Vault, client: MemosClient):
        """
        Initialize importer

        Args:
            settings: Plugin settings
            vault: Target vault
            client: Memos API client
        """
        self.settings = settings
        self.vault = vault
        self.client = client
        self.header = settings.get("dailyRecordHeader") or "Daily Record"

        logger.info(f"DailyRecordImporter initialized (header: {self.header})")

    @classmethod
    def from_settings(cls, settings_manager: SettingsManager) -> "DailyRecordImporter":
        """
        Build an importer from stored settings

        Raises:
            MemosPeriodicError: If the vault or Memos API is not configured
        """
        vault_path = settings_manager.get_vault_path()
        memos_config = settings_manager.get_memos_config()

        if vault_path is None or memos_config is None:
            raise MemosPeriodicError("Vault path and Memos API URL must be configured")

        client = create_memos_client(
            memos_config["version"], memos_config["base_url"], token=memos_config["token"]
        )
        return cls(settings_manager.settings, Vault(vault_path), client)

    @property
    def attachments_folder(self) -> str:
        return f"{self.settings.periodic_notes_path}/Attachments"

    def _unwrap_memos(self, payload: Any) -> list[dict[str, Any]]:
        """
        Extract the memo list from a list payload

        Raises:
            MemosPeriodicError: If the payload is an error instead of a memo list
        """
        if isinstance(payload, dict):
            for key in ("memos", "data"):
                if isinstance(payload.get(key), list):
                    payload = payload[key]
                    break

        if not isinstance(payload, list):
            detail = payload.get("message") or payload.get("error") if isinstance(payload, dict) else payload
            log_message(f"Failed to fetch memos: {detail}", LogLevel.ERROR, vault=self.vault)

        return [memo for memo in payload if isinstance(memo, dict)]

    def fetch_all_records(self) -> list[dict[str, Any]]:
        """
        Fetch every memo, page by page

        Returns:
            List of memo dictionaries

        Raises:
            MemosPeriodicError: If the API returns an error payload
        """
        records: list[dict[str, Any]] = []

        for page_index in range(self.MAX_PAGES):
            params = self.client.page_params(page_index, self.PAGE_SIZE)
            logger.info(f"Fetching memos page {page_index + 1}")
            memos = self._unwrap_memos(self.client.fetch_memos_list(params))
            records.extend(memos)

            if len(memos) < self.PAGE_SIZE:
                break
        else:
            logger.warning(f"Stopped after {self.MAX_PAGES} pages")

        logger.info(f"Fetched {len(records)} memos")
        return records

    def download_resources(self, records: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Save uploaded attachments of the records into the vault

        Resources with an external link are linked, not downloaded. Existing
        attachments are left alone.

        Returns:
            {"downloaded": int, "skipped": int, "failed": int, "errors": list}
        """
        results: dict[str, Any] = {"downloaded": 0, "skipped": 0, "failed": 0, "errors": []}

        for record in records:
            for resource in record.get("resourceList") or []:
                if resource.get("externalLink"):
                    continue

                path = f"{self.attachments_folder}/{generate_file_name(resource)}"
                if self.vault.get_file(path):
                    results["skipped"] += 1
                    continue

                try:
                    data = self.client.download_resource(resource_identifier(resource))
                    if not isinstance(data, bytes):
                        raise ValueError(
                            f"expected file bytes, got {type(data).__name__}: {data!r:.200}"
                        )

                    self.vault.create_binary(path, data)
                    results["downloaded"] += 1
                except (requests.exceptions.RequestException, OSError, ValueError) as e:
                    results["failed"] += 1
                    error_msg = f"Error downloading {path}: {e}"
                    results["errors"].append(error_msg)
                    logger.error(f"  ✗ {error_msg}")

        return results

    def _split_blocks(self, section: str) -> tuple[list[list[str]], dict[int, list[str]]]:
        """
        Split a section body into blocks, one per top-level "- " item

        Lines that do not start a new item (continuations, text the user
        typed under a memo, blank lines) stay with the item above them.

        Returns:
            (blocks without an anchor, {timestamp: block lines})
        """
        blocks: list[list[str]] = []
        body = section.strip("\n")
        if not body.strip():
            return [], {}

        for line in body.split("\n"):
            if not blocks or line.startswith("- "):
                blocks.append([line])
            else:
                blocks[-1].append(line)

        plain: list[list[str]] = []
        anchored: dict[int, list[str]] = {}
        for block in blocks:
            match = ANCHOR_PATTERN.search(block[0])
            if match:
                anchored[int(match.group(1))] = block
            else:
                plain.append(block)

        return plain, anchored

    @staticmethod
    def _user_lines(block: list[str]) -> list[str]:
        """Lines below an imported record that were not written by the import"""
        for index, line in enumerate(block[1:], start=1):
            if not line.startswith("\t"):
                return block[index:]
        return []

    def insert_records(self, day: date, records: dict[int, str]) -> bool | None:
        """
        Merge formatted records into the daily note of a day

        Args:
            day: Day of the records
            records: {timestamp: markdown block}

        Returns:
            True if the note changed, False if it was already up to date,
            None if the daily note could not be created
        """
        result = create_periodic_file(day, PeriodType.DAILY, self.settings, self.vault)
        if result not in (CreateResult.CREATED, CreateResult.OPENED_EXISTING):
            logger.error(f"Daily note for {day.isoformat()} unavailable ({result.value})")
            return None

        path = resolve_periodic_paths(day, PeriodType.DAILY, self.settings).file
        original = content = self.vault.read(path)

        header_regexp = generate_header_regexp(self.header)
        match = header_regexp.search(content)
        if not match:
            heading = self.header if self.header.startswith("#") else f"# {self.header}"
            content = f"{content.rstrip()}\n\n{heading}\n" if content.strip() else f"{heading}\n"
            match = header_regexp.search(content)

        plain, anchored = self._split_blocks(match.group(2))
        for timestamp, markdown in records.items():
            kept = self._user_lines(anchored.get(timestamp, []))
            anchored[timestamp] = markdown.split("\n") + kept

        blocks = plain + [anchored[timestamp] for timestamp in sorted(anchored)]
        lines = [line for block in blocks for line in block]
        rest = content[match.end(2) :]
        if not rest.strip():
            rest = ""

        updated = content[: match.start(2)] + "\n" + "\n".join(lines) + "\n" + rest

        if updated == original:
            return False

        self.vault.write(path, updated)
        logger.info(f"Updated daily note: {path}")
        return True

    def sync(self) -> dict[str, Any]:
        """
        Import all memos into their daily notes

        Returns:
            Dictionary with processing results
        """
        logger.info("Starting daily record sync...")

        results: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "fetched": 0,
            "processed": 0,
            "failed": 0,
            "skipped": 0,
            "notes_updated": [],
            "errors": [],
        }

        try:
            records = self.fetch_all_records()
        except MemosPeriodicError as e:
            results["errors"].append(str(e))
            return results
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error: {e}")
            results["errors"].append(f"Network error: {e}")
            return results

        results["fetched"] = len(records)

        by_day: dict[str, dict[int, str]] = {}
        for record in records:
            try:
                day, timestamp, markdown = format_daily_record(record)
                day_records = by_day.setdefault(day, {})
                if int(timestamp) in day_records:
                    results["skipped"] += 1
                    error_msg = (
                        f"Skipped memo {record.get('id', 'unknown')}: "
                        f"another memo on {day} already uses ^{timestamp}"
                    )
                    results["errors"].append(error_msg)
                    logger.warning(f"  ✗ {error_msg}")
                    continue
                day_records[int(timestamp)] = markdown
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                results["failed"] += 1
                error_msg = f"Error formatting memo {record.get('id', 'unknown')}: {e}"
                results["errors"].append(error_msg)
                logger.error(f"  ✗ {error_msg}")

        downloads = self.download_resources(records)
        results["failed"] += downloads["failed"]
        results["errors"].extend(downloads["errors"])

        for day, day_records in sorted(by_day.items()):
            try:
                changed = self.insert_records(date.fromisoformat(day), day_records)
            except OSError as e:
                results["failed"] += len(day_records)
                results["errors"].append(f"Error writing daily note {day}: {e}")
                logger.error(f"  ✗ Error writing daily note {day}: {e}")
                logger.exception("Detailed error:")
                continue

            if changed is None:
                results["failed"] += len(day_records)
                results["errors"].append(f"Daily note unavailable for {day}")
            elif changed:
                results["processed"] += len(day_records)
                results["notes_updated"].append(day)
                logger.info(f"  ✓ {day}: {len(day_records)} records")
            else:
                results["skipped"] += len(day_records)
                logger.info(f"  → {day}: already up to date")

        logger.info(
            f"Sync complete: {len(results['notes_updated'])} notes updated, {results['failed']} failed"
        )
        return results
