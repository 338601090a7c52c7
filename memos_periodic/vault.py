"""
Obsidian Vault

File, folder and frontmatter operations on an Obsidian vault directory, plus
creation of notes from templates.

Paths handed to the vault are vault-relative with "/" separators, the same
form Obsidian uses (e.g. "Periodic/2024/daily/08/2024-08-15.md").
"""

import logging
import re
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from memos_periodic.utils import sleep

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r"\A---\n(.*?)^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)

NO_TEMPLATE_EXIST = {
    "en": "Template file does not exist: ",
    "zh-cn": "模板文件不存在：",
}


class CreateResult(Enum):
    """Outcome of creating a note from a template"""

    NOT_READY = "not_ready"
    TEMPLATE_MISSING = "template_missing"
    OPENED_EXISTING = "opened_existing"
    CREATED = "created"


class Vault:
    """Obsidian vault rooted at a directory"""

    # Obsidian indexes new files asynchronously; frontmatter reads right after
    # a write can miss. Best-effort wait, not a guarantee.
    INDEX_DELAY_MS = 30

    def __init__(
        self,
        vault_path: Path,
        opener: Callable[[Path], Any] | None = None,
        index_delay_ms: int | None = None,
    ):
        """
        Initialize vault

        Args:
            vault_path: Vault root directory
            opener: Called with the absolute path of every opened note
            index_delay_ms: Wait after creating a note (default INDEX_DELAY_MS)
        """
        self.vault_path = Path(vault_path).expanduser()
        self.opener = opener
        self.index_delay_ms = self.INDEX_DELAY_MS if index_delay_ms is None else index_delay_ms
        self.notices: list[str] = []

        logger.info(f"Vault initialized (vault: {self.vault_path})")

    def _resolve(self, path: str) -> Path:
        return self.vault_path / path.strip("/")

    def get_file(self, path: str) -> Path | None:
        """Absolute path of a note if it exists as a file"""
        resolved = self._resolve(path)
        return resolved if resolved.is_file() else None

    def folder_exists(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def read(self, path: str) -> str:
        with open(self._resolve(path), encoding="utf-8") as f:
            return f.read()

    def write(self, path: str, content: str):
        with open(self._resolve(path), "w", encoding="utf-8") as f:
            f.write(content)

    def create(self, path: str, content: str) -> Path:
        """
        Create a new note

        Raises:
            FileExistsError: If the note already exists
        """
        filepath = self._resolve(path)
        with open(filepath, "x", encoding="utf-8") as f:
            f.write(content)

        logger.info(f"Created note: {path}")
        return filepath

    def create_binary(self, path: str, data: bytes) -> Path:
        filepath = self._resolve(path)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_bytes(data)
        logger.info(f"Saved attachment: {path}")
        return filepath

    def create_folder(self, path: str):
        self._resolve(path).mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created folder: {path}")

    def open_file(self, path: str):
        filepath = self._resolve(path)
        logger.info(f"Opening note: {path}")
        if self.opener:
            self.opener(filepath)

    def notice(self, message: str):
        """Surface a message to the user"""
        self.notices.append(message)
        logger.warning(message)

    def read_frontmatter(self, path: str) -> dict[str, Any]:
        match = FRONTMATTER_PATTERN.match(self.read(path))
        if not match:
            return {}

        return yaml.safe_load(match.group(1)) or {}

    def process_frontmatter(self, path: str, fn: Callable[[dict[str, Any]], None]):
        """
        Edit a note's frontmatter in place

        Args:
            path: Vault-relative note path
            fn: Receives the frontmatter dict and mutates it
        """
        content = self.read(path)
        match = FRONTMATTER_PATTERN.match(content)

        if match:
            frontmatter = yaml.safe_load(match.group(1)) or {}
            body = content[match.end() :]
        else:
            frontmatter = {}
            body = content

        original = yaml.dump(frontmatter, sort_keys=False)
        fn(frontmatter)

        if yaml.dump(frontmatter, sort_keys=False) == original:
            return

        yaml_str = yaml.dump(frontmatter, default_flow_style=False, allow_unicode=True, sort_keys=False)
        self.write(path, f"---\n{yaml_str}---\n{body}")
        logger.debug(f"Updated frontmatter: {path}")

    def wait_for_index(self):
        sleep(self.index_delay_ms)

    def create_file(
        self,
        template_file: str,
        folder: str,
        file: str,
        tag: str | None = None,
        locale: str = "en",
    ) -> CreateResult:
        """
        Open a note, creating it from a template first when it doesn't exist

        Existing notes are never overwritten.

        Args:
            template_file: Vault-relative template path
            folder: Folder of the note
            file: Note path (".md" is appended when missing)
            tag: Tag to add to the new note's frontmatter
            locale: Locale of the user-facing messages

        Returns:
            CreateResult
        """
        final_file = file if file.endswith(".md") else f"{file}.md"

        if not self.get_file(template_file):
            message = NO_TEMPLATE_EXIST.get(locale, NO_TEMPLATE_EXIST["en"]) + template_file
            self.notice(message)
            return CreateResult.TEMPLATE_MISSING

        template_content = self.read(template_file)

        if not folder or not file:
            return CreateResult.NOT_READY

        if self.get_file(final_file):
            self.open_file(final_file)
            return CreateResult.OPENED_EXISTING

        if not self.folder_exists(folder):
            self.create_folder(folder)

        self.create(final_file, template_content)

        if tag:

            def add_tag(frontmatter: dict[str, Any]):
                tags = frontmatter.get("tags") or []
                frontmatter["tags"] = [tags] if isinstance(tags, str) else list(tags)
                frontmatter["tags"].append(re.sub(r"^#", "", tag))

            self.process_frontmatter(final_file, add_tag)

        self.wait_for_index()
        self.open_file(final_file)

        return CreateResult.CREATED
