"""
Settings Manager

Load and persist plugin settings: periodic notes root, template overrides and
Memos API access.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

PERIOD_TYPES = ["daily", "weekly", "monthly", "quarterly", "yearly"]

TEMPLATE_SETTING_PREFIX = "periodicNotesTemplateFilePath"

DEFAULT_SETTINGS: dict[str, Any] = {
    "vaultPath": "",
    "periodicNotesPath": "",
    "usePeriodicAdvanced": False,
    "dailyRecordAPI": "",
    "dailyRecordToken": "",
    "dailyRecordHeader": "Daily Record",
    "memosAPIVersion": "v1",
    "language": "en",
    **{f"{TEMPLATE_SETTING_PREFIX}{period}": "" for period in PERIOD_TYPES},
}


class PluginSettings(dict):
    """Flat settings mapping with defaults for every known key"""

    def __init__(self, values: dict[str, Any] | None = None):
        super().__init__(DEFAULT_SETTINGS)
        if values:
            self.update(values)

    @property
    def periodic_notes_path(self) -> str:
        return (self.get("periodicNotesPath") or "").rstrip("/")

    @property
    def use_periodic_advanced(self) -> bool:
        return bool(self.get("usePeriodicAdvanced"))

    @property
    def language(self) -> str:
        return self.get("language") or "en"

    def template_override(self, period_type: str) -> str:
        """Advanced-mode template path for a period kind ('' when unset)"""
        return self.get(f"{TEMPLATE_SETTING_PREFIX}{period_type}") or ""


class SettingsManager:
    """Manage settings for the vault and the Memos integration"""

    def __init__(self, config_path: str | None = None):
        """
        Initialize settings manager

        Args:
            config_path: Path to settings.json (default: ~/.config/memos-periodic/settings.json)
        """
        if config_path:
            self.config_path = Path(config_path).expanduser()
        else:
            self.config_path = Path.home() / ".config" / "memos-periodic" / "settings.json"

        self.settings = self._load_settings()

    def _load_settings(self) -> PluginSettings:
        """
        Load settings from config file, falling back to defaults

        Returns:
            PluginSettings instance
        """
        values: dict[str, Any] = {}

        if not self.config_path.exists():
            logger.warning(f"Settings file not found at: {self.config_path}")
        else:
            try:
                with open(self.config_path, encoding="utf-8") as f:
                    values = json.load(f)
                logger.info(f"Successfully loaded settings from {self.config_path}")
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Error loading settings: {e}")
                values = {}

            if not isinstance(values, dict):
                logger.error("Settings file does not contain a JSON object, using defaults")
                values = {}

        settings = PluginSettings(values)

        # Environment wins for API access so tokens can stay out of the file
        if os.environ.get("MEMOS_API_URL"):
            settings["dailyRecordAPI"] = os.environ["MEMOS_API_URL"]
        if os.environ.get("MEMOS_API_TOKEN"):
            settings["dailyRecordToken"] = os.environ["MEMOS_API_TOKEN"]

        return settings

    def get_vault_path(self) -> Path | None:
        """
        Get Obsidian vault path

        Returns:
            Path to vault directory, or None if not configured
        """
        vault_path = self.settings.get("vaultPath")
        if not vault_path:
            logger.warning("Vault path not configured")
            return None

        return Path(vault_path).expanduser()

    def get_memos_config(self) -> dict[str, str] | None:
        """
        Get Memos API configuration

        Returns:
            Dictionary with base_url, token and version, or None if not configured
        """
        base_url = self.settings.get("dailyRecordAPI")
        if not base_url:
            logger.error("Memos API URL not configured")
            return None

        return {
            "base_url": base_url.rstrip("/"),
            "token": self.settings.get("dailyRecordToken") or "",
            "version": self.settings.get("memosAPIVersion") or "v1",
        }

    def save_settings(self):
        """
        Save current settings to config file
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(dict(self.settings), f, indent=2, ensure_ascii=False)
            logger.info(f"Settings saved to {self.config_path}")
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
