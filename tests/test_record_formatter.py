from datetime import datetime

import pytest

from memos_periodic.record_formatter import (
    format_daily_record,
    generate_file_link,
    generate_file_name,
    is_bullet_list,
    record_timestamp,
)

TS = 1700000000


def local_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%H:%M")


@pytest.fixture
def image_resource():
    return {
        "id": 7,
        "filename": "photo.png",
        "name": "Holiday photo",
        "type": "image/png",
        "externalLink": "https://cdn.example.com/photo.png",
    }


# --- is_bullet_list ---


@pytest.mark.parametrize(
    "line, expected",
    [
        ("- item", True),
        ("* item", True),
        ("• item", True),
        ("1. item", True),
        ("12. item", True),
        ("plain text", False),
        ("-no space", False),
        ("1.no space", False),
    ],
)
def test_is_bullet_list(line, expected):
    assert is_bullet_list(line) is expected


# --- record_timestamp ---


def test_record_timestamp_prefers_created_at():
    record = {"createdTs": 1, "createdAt": "2023-11-14T22:13:20Z"}
    assert record_timestamp(record) == TS


def test_record_timestamp_falls_back_to_created_ts():
    assert record_timestamp({"createdTs": TS}) == TS
    assert record_timestamp({"createdTs": str(TS), "createdAt": None}) == TS


# --- format_daily_record ---


def test_format_task_record():
    """Checkbox memos stay unchecked tasks with time, tag and anchor on the first line."""
    record = {"createdTs": TS, "content": "- [ ] buy milk\nmore text", "resourceList": []}

    day, timestamp, markdown = format_daily_record(record)
    first_line, *rest = markdown.split("\n")

    assert day == datetime.fromtimestamp(TS).strftime("%Y-%m-%d")
    assert timestamp == str(TS)
    assert first_line == f"- [ ] {local_time(TS)} buy milk #daily-record ^{TS}"
    assert rest == ["\t- more text"]


def test_format_checked_task_becomes_unchecked():
    record = {"createdTs": TS, "content": "- [x] done already"}
    _, _, markdown = format_daily_record(record)

    assert markdown.startswith(f"- [ ] {local_time(TS)} done already")
    assert markdown.count("#daily-record") == 1
    assert markdown.count(f"^{TS}") == 1


def test_format_code_record_moves_fence_below_anchor():
    record = {"createdTs": TS, "content": "```python\nprint('hi')\n```"}
    _, _, markdown = format_daily_record(record)
    lines = markdown.split("\n")

    assert lines[0] == f"- {local_time(TS)} #daily-record ^{TS}"
    assert "```" not in lines[0]
    assert lines[1] == "\t- ```python"
    assert lines[2] == "\t- print('hi')"


def test_format_plain_record_strips_leading_bullet():
    record = {"createdTs": TS, "content": "- a thought"}
    _, _, markdown = format_daily_record(record)

    assert markdown == f"- {local_time(TS)} a thought #daily-record ^{TS}"


def test_format_continuation_lines():
    """Blank lines are dropped and existing list markers are kept."""
    record = {
        "createdTs": TS,
        "content": "Title\n\n   \n* starred\n1. numbered\nplain\n",
    }
    _, _, markdown = format_daily_record(record)

    assert markdown.split("\n")[1:] == ["\t* starred", "\t1. numbered", "\t- plain"]


def test_format_only_blank_continuation_lines():
    record = {"createdTs": TS, "content": "Title\n \nend"}
    _, _, markdown = format_daily_record(record)
    assert markdown.split("\n")[1:] == ["\t- end"]

    record = {"createdTs": TS, "content": "Title"}
    _, _, markdown = format_daily_record(record)
    assert "\n" not in markdown


def test_format_with_resources(image_resource):
    uploaded = {"id": 8, "filename": "notes.pdf", "type": "application/pdf"}
    record = {"createdTs": TS, "content": "With files", "resourceList": [image_resource, uploaded]}

    _, _, markdown = format_daily_record(record)

    assert markdown.split("\n")[1:] == [
        "\t- ![Holiday photo](https://cdn.example.com/photo.png)",
        "\t- ![[8-notes.pdf]]",
    ]


def test_format_uses_created_at_for_anchor():
    record = {"createdTs": 1, "createdAt": "2023-11-14T22:13:20Z", "content": "iso"}
    _, timestamp, markdown = format_daily_record(record)

    assert timestamp == str(TS)
    assert markdown.endswith(f"^{TS}")


# --- generate_file_link / generate_file_name ---


def test_generate_file_link_external_image(image_resource):
    link = generate_file_link(image_resource)
    assert link.startswith("!")
    assert link == "![Holiday photo](https://cdn.example.com/photo.png)"


def test_generate_file_link_external_non_image():
    resource = {
        "id": 3,
        "filename": "report.pdf",
        "type": "application/pdf",
        "externalLink": "https://example.com/report.pdf",
    }
    assert generate_file_link(resource) == "[report.pdf](https://example.com/report.pdf)"


def test_generate_file_link_without_external_link(image_resource):
    resource = dict(image_resource, externalLink="")
    assert generate_file_link(resource) == "![[7-photo.png]]"


@pytest.mark.parametrize(
    "resource, expected",
    [
        ({"id": 1, "filename": 'a/b\\c?d%e*f:g|h"i<j>k.png'}, "1-a-b-c-d-e-f-g-h-i-j-k.png"),
        ({"name": "resources/42", "filename": "pic.jpg"}, "42-pic.jpg"),
        ({"id": 5, "name": "resources/42", "filename": "pic.jpg"}, "5-pic.jpg"),
    ],
)
def test_generate_file_name(resource, expected):
    assert generate_file_name(resource) == expected
