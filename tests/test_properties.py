"""Tests for the Notion property builder."""

from __future__ import annotations

import pytest

from notion_capture_mcp.models.schema import FieldKind, FieldSchema
from notion_capture_mcp.notion.properties import build_properties, build_property


def _field(kind: FieldKind, name: str = "F", options: tuple[str, ...] = ()) -> FieldSchema:
    return FieldSchema(name=name, kind=kind, options=options)


class TestBuildProperties:
    def test_full_content(self, sample_schema, page_content):
        content = {
            "Title": "Weekly sync",
            "Notes": "Long notes",
            "Link": "https://example.com",
            "Email": "a@b.c",
            "Phone": "+1 555",
            "Created Date": "2025-03-14",
            "Due": "",
            "Score": "4.5",
            "Done": True,
            "Status": "Doing",
            "Tags": ["work", "home"],
            "Project": ["abc"],
            "pageContent": page_content,
        }
        out = build_properties(content, sample_schema)
        assert out["Title"] == {"title": [{"type": "text", "text": {"content": "Weekly sync"}}]}
        assert out["Notes"] == {"rich_text": [{"type": "text", "text": {"content": "Long notes"}}]}
        assert out["Link"] == {"url": "https://example.com"}
        assert out["Email"] == {"email": "a@b.c"}
        assert out["Phone"] == {"phone_number": "+1 555"}
        assert out["Created Date"] == {"date": {"start": "2025-03-14"}}
        assert out["Due"] == {"date": None}
        assert out["Score"] == {"number": 4.5}
        assert out["Done"] == {"checkbox": True}
        assert out["Status"] == {"select": {"name": "Doing"}}
        assert out["Tags"] == {"multi_select": [{"name": "work"}, {"name": "home"}]}
        assert "Project" not in out
        assert "pageContent" not in out

    def test_absent_and_none_fields_skipped(self, sample_schema):
        out = build_properties({"Title": "x", "Link": None}, sample_schema)
        assert list(out) == ["Title"]

    def test_pure_and_repeatable(self, sample_schema):
        content = {"Title": "x", "Tags": ["work"], "Due": "2025-01-01", "Score": 3}
        assert build_properties(content, sample_schema) == build_properties(content, sample_schema)
        assert content == {"Title": "x", "Tags": ["work"], "Due": "2025-01-01", "Score": 3}

    def test_long_text_split_into_rich_text_items(self, sample_schema):
        out = build_properties({"Notes": "n" * 2500}, sample_schema)
        items = out["Notes"]["rich_text"]
        assert [len(i["text"]["content"]) for i in items] == [2000, 500]


class TestBuildProperty:
    @pytest.mark.parametrize("kind", [FieldKind.SHORT_TEXT, FieldKind.LONG_TEXT, FieldKind.EMAIL, FieldKind.PHONE])
    def test_empty_text_skipped(self, kind):
        assert build_property(_field(kind), "") is None

    def test_empty_url_is_null(self):
        assert build_property(_field(FieldKind.URL), "") == {"url": None}

    @pytest.mark.parametrize(
        "value,expected",
        [(3, 3), (2.0, 2), ("7", 7), (" 1.25 ", 1.25), (True, 1)],
    )
    def test_number_coercion(self, value, expected):
        assert build_property(_field(FieldKind.NUMBER), value) == {"number": expected}

    @pytest.mark.parametrize("value", ["abc", "", float("nan"), [1]])
    def test_invalid_number_skipped(self, value):
        assert build_property(_field(FieldKind.NUMBER), value) is None

    @pytest.mark.parametrize(
        "value,expected",
        [(True, True), (False, False), ("true", True), ("false", False), ("", False), (1, True), (0, False)],
    )
    def test_checkbox_coercion(self, value, expected):
        assert build_property(_field(FieldKind.BOOLEAN), value) == {"checkbox": expected}

    def test_empty_select_skipped(self):
        assert build_property(_field(FieldKind.SINGLE_CHOICE), "") is None

    @pytest.mark.parametrize("value", [[], "work", None])
    def test_multi_select_needs_non_empty_list(self, value):
        assert build_property(_field(FieldKind.MULTI_CHOICE), value) is None

    @pytest.mark.parametrize("value", ["", 20250101, ["2025-01-01"]])
    def test_date_non_string_or_empty_is_null(self, value):
        assert build_property(_field(FieldKind.DATE), value) == {"date": None}

    def test_relation_always_skipped(self):
        assert build_property(_field(FieldKind.RELATION), ["id-1"]) is None
