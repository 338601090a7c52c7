import json
from unittest.mock import MagicMock, patch

import pytest

from memos_periodic.utils import (
    LogLevel,
    MemosPeriodicError,
    generate_header_regexp,
    is_dark_theme,
    log_message,
    sleep,
)


@patch("memos_periodic.utils.time.sleep")
def test_sleep_converts_milliseconds(mock_sleep):
    sleep(30)
    mock_sleep.assert_called_once_with(0.03)


# --- is_dark_theme ---


@pytest.mark.parametrize(
    "appearance, expected",
    [
        ({"theme": "obsidian"}, True),
        ({"theme": "moonstone"}, False),
        ({"theme": "system"}, False),
        ({}, False),
    ],
)
def test_is_dark_theme(tmp_path, appearance, expected):
    config_dir = tmp_path / ".obsidian"
    config_dir.mkdir()
    (config_dir / "appearance.json").write_text(json.dumps(appearance))
    vault = MagicMock(vault_path=tmp_path)

    assert is_dark_theme(vault) is expected


def test_is_dark_theme_without_config(tmp_path):
    assert is_dark_theme(MagicMock(vault_path=tmp_path)) is False


def test_is_dark_theme_invalid_json(tmp_path):
    (tmp_path / ".obsidian").mkdir()
    (tmp_path / ".obsidian" / "appearance.json").write_text("{not json")
    assert is_dark_theme(MagicMock(vault_path=tmp_path)) is False


# --- log_message ---


def test_log_message_info_shows_notice(caplog):
    vault = MagicMock()
    with caplog.at_level("INFO"):
        log_message("Imported 3 memos", vault=vault)

    vault.notice.assert_called_once_with("Imported 3 memos")
    assert "Imported 3 memos" in caplog.text


def test_log_message_warn(caplog):
    log_message("Careful", LogLevel.WARN)
    assert any(r.levelname == "WARNING" and r.message == "Careful" for r in caplog.records)


def test_log_message_error_raises(caplog):
    vault = MagicMock()
    with pytest.raises(MemosPeriodicError, match="Broken"):
        log_message("Broken", LogLevel.ERROR, vault=vault)

    vault.notice.assert_called_once_with("Broken")
    assert any(r.levelname == "ERROR" for r in caplog.records)


# --- generate_header_regexp ---

NOTE = "# Journal\nintro\n\n# Daily Record\n- 09:00 one\n- 10:00 two\n\n## Notes\nother\n"


def test_header_regexp_adds_heading_marker():
    match = generate_header_regexp("Daily Record").search(NOTE)

    assert match.group(1) == "# Daily Record"
    assert match.group(2) == "\n- 09:00 one\n- 10:00 two\n"


def test_header_regexp_keeps_explicit_level():
    match = generate_header_regexp("  ## Notes ").search(NOTE)

    assert match.group(1) == "## Notes"
    assert match.group(2) == "\nother"


def test_header_regexp_escapes_special_characters():
    note = "# Log (v2)\ncontent"
    match = generate_header_regexp("Log (v2)").search(note)
    assert match.group(2) == "\ncontent"


def test_header_regexp_no_match():
    assert generate_header_regexp("Missing").search(NOTE) is None
