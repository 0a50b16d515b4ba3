"""Tests for the field schema → generation schema adapter."""

from __future__ import annotations

import pytest

from notion_capture_mcp.models.schema import FieldKind, FieldSchema
from notion_capture_mcp.schema_adapter import (
    DATE_FIELD_RULES,
    PAGE_CONTENT_SCHEMA,
    build_generation_schema,
    field_constraint,
    match_date_rule,
)


class TestBuildGenerationSchema:
    def test_relation_fields_are_never_emitted(self, sample_schema):
        out = build_generation_schema(sample_schema)
        assert "Project" not in out["properties"]
        assert "Project" not in out["required"]

    def test_page_content_always_required(self, sample_schema):
        out = build_generation_schema(sample_schema)
        assert out["required"][-1] == "pageContent"
        assert out["properties"]["pageContent"]["required"] == ["summaryTitle", "summaryBody", "takeaways"]

    def test_empty_schema_still_has_page_content(self):
        out = build_generation_schema({})
        assert out == {
            "type": "object",
            "properties": {"pageContent": PAGE_CONTENT_SCHEMA},
            "required": ["pageContent"],
        }

    def test_relation_only_schema(self):
        schema = {"Link": FieldSchema(name="Link", kind=FieldKind.RELATION)}
        out = build_generation_schema(schema)
        assert list(out["properties"]) == ["pageContent"]

    def test_required_lists_every_emitted_field_in_order(self, sample_schema):
        out = build_generation_schema(sample_schema)
        expected = [n for n, f in sample_schema.items() if f.kind is not FieldKind.RELATION]
        assert out["required"] == expected + ["pageContent"]

    def test_returns_fresh_copy_each_call(self, sample_schema):
        first = build_generation_schema(sample_schema)
        first["properties"]["pageContent"]["required"].append("junk")
        second = build_generation_schema(sample_schema)
        assert "junk" not in second["properties"]["pageContent"]["required"]
        assert "junk" not in PAGE_CONTENT_SCHEMA["required"]


class TestFieldConstraint:
    @pytest.mark.parametrize(
        "kind",
        [FieldKind.SHORT_TEXT, FieldKind.LONG_TEXT, FieldKind.URL, FieldKind.EMAIL, FieldKind.PHONE],
    )
    def test_text_kinds_are_strings_with_field_name(self, kind):
        out = field_constraint(FieldSchema(name="Customer", kind=kind))
        assert out["type"] == "string"
        assert '"Customer"' in out["description"]

    def test_number(self):
        assert field_constraint(FieldSchema(name="Score", kind=FieldKind.NUMBER))["type"] == "number"

    def test_boolean_guidance_mentions_true_false(self):
        out = field_constraint(FieldSchema(name="Done", kind=FieldKind.BOOLEAN))
        assert out["type"] == "boolean"
        assert "true or false" in out["description"]

    def test_single_choice_enum_keeps_option_order(self):
        field = FieldSchema(name="Status", kind=FieldKind.SINGLE_CHOICE, options=("B", "A", "C"))
        out = field_constraint(field)
        assert out["type"] == "string"
        assert out["enum"] == ["B", "A", "C"]

    def test_multi_choice_items_restricted(self):
        field = FieldSchema(name="Tags", kind=FieldKind.MULTI_CHOICE, options=("x", "y"))
        out = field_constraint(field)
        assert out["type"] == "array"
        assert out["items"] == {"type": "string", "enum": ["x", "y"]}

    def test_relation_excluded(self):
        assert field_constraint(FieldSchema(name="P", kind=FieldKind.RELATION)) is None


class TestDateRules:
    @pytest.mark.parametrize("name", ["Created Date", "creation time", "Create Date", "建立日期", "創建時間"])
    def test_creation_fields_ask_for_now(self, name):
        out = field_constraint(FieldSchema(name=name, kind=FieldKind.DATE))
        assert '"NOW"' in out["description"]

    @pytest.mark.parametrize("name", ["Due", "Deadline", "到期日", "截止日期"])
    def test_deadline_fields_ask_for_iso_date(self, name):
        out = field_constraint(FieldSchema(name=name, kind=FieldKind.DATE))
        assert "YYYY-MM-DD" in out["description"]
        assert "NOW" not in out["description"]

    def test_other_dates_get_generic_guidance(self):
        out = field_constraint(FieldSchema(name="Event Date", kind=FieldKind.DATE))
        assert "YYYY-MM-DD" in out["description"]
        assert "leave it empty" in out["description"]
        assert match_date_rule("Event Date") is None

    def test_first_matching_rule_wins(self):
        # Matches both keyword sets; creation is listed first.
        rule = match_date_rule("Created before deadline")
        assert rule is DATE_FIELD_RULES[0]
        assert rule.interpretation == "creation"
