"""Tests for notion_cms.extract module."""

import pytest

from notion_cms.extract import (
    extract_block_content,
    extract_block_metadata,
    extract_properties,
    extract_property_value,
    extract_rich_text,
    extract_slug,
    extract_title,
    slugify,
)
from .conftest import make_block, make_page, rich_text


class TestExtractRichText:
    """Tests for extract_rich_text function."""

    def test_concatenates_runs_in_order(self):
        runs = rich_text("Hello, ") + rich_text("world") + rich_text("!")
        assert extract_rich_text(runs) == "Hello, world!"

    def test_empty_list(self):
        assert extract_rich_text([]) == ""

    @pytest.mark.parametrize("value", [None, "text", 42, {"plain_text": "x"}])
    def test_non_list_input(self, value):
        """Anything but a list yields an empty string."""
        assert extract_rich_text(value) == ""

    def test_local_format(self):
        """Runs without plain_text fall back to text.content."""
        runs = [{"type": "text", "text": {"content": "local"}}]
        assert extract_rich_text(runs) == "local"


class TestExtractPropertyValue:
    """Tests for extract_property_value dispatch."""

    def test_title_and_rich_text(self):
        assert extract_property_value({"type": "title", "title": rich_text("T")}) == "T"
        assert extract_property_value({"type": "rich_text", "rich_text": rich_text("R")}) == "R"

    def test_number(self):
        assert extract_property_value({"type": "number", "number": 4.5}) == 4.5

    def test_select(self):
        assert extract_property_value({"type": "select", "select": {"name": "Blog"}}) == "Blog"
        assert extract_property_value({"type": "select", "select": None}) is None

    def test_multi_select(self):
        prop = {"type": "multi_select", "multi_select": [{"name": "a"}, {"name": "b"}]}
        assert extract_property_value(prop) == ["a", "b"]

    def test_date(self):
        date = {"start": "2024-01-01", "end": None, "time_zone": None}
        assert extract_property_value({"type": "date", "date": date}) == date

    def test_checkbox(self):
        assert extract_property_value({"type": "checkbox", "checkbox": False}) is False

    @pytest.mark.parametrize("prop_type,value", [
        ("url", "https://example.com"),
        ("email", "a@example.com"),
        ("phone_number", "+1 555"),
        ("created_time", "2024-01-01T00:00:00.000Z"),
        ("last_edited_time", "2024-01-02T00:00:00.000Z"),
    ])
    def test_plain_values(self, prop_type, value):
        assert extract_property_value({"type": prop_type, prop_type: value}) == value

    def test_files_prefers_hosted_url(self):
        prop = {
            "type": "files",
            "files": [
                {"type": "file", "file": {"url": "https://s3/hosted.png"}},
                {"type": "external", "external": {"url": "https://cdn/ext.png"}},
            ],
        }
        assert extract_property_value(prop) == ["https://s3/hosted.png", "https://cdn/ext.png"]

    def test_relation(self):
        prop = {"type": "relation", "relation": [{"id": "p1"}, {"id": "p2"}]}
        assert extract_property_value(prop) == ["p1", "p2"]

    def test_formula_active_variant(self):
        prop = {"type": "formula", "formula": {"type": "number", "number": 3}}
        assert extract_property_value(prop) == 3

    def test_rollup_active_variant(self):
        prop = {"type": "rollup", "rollup": {"type": "array", "array": [{"type": "number"}]}}
        assert extract_property_value(prop) == [{"type": "number"}]

    def test_users(self):
        user = {"object": "user", "id": "u1"}
        assert extract_property_value({"type": "created_by", "created_by": user}) == user
        assert extract_property_value({"type": "last_edited_by", "last_edited_by": user}) == user

    def test_status(self):
        assert extract_property_value({"type": "status", "status": {"name": "Done"}}) == "Done"
        assert extract_property_value({"type": "status", "status": None}) is None

    def test_unknown_type_is_none(self):
        """Unrecognized property types degrade to None."""
        assert extract_property_value({"type": "verification", "verification": {"state": "x"}}) is None


class TestPageExtraction:
    """Tests for extract_properties, extract_title and extract_slug."""

    def test_title_found_by_type(self):
        """Title property can have any name."""
        page = make_page("p1", "My Page", title_property="Headline")
        assert extract_title(page) == "My Page"

    def test_title_missing(self):
        assert extract_title({"properties": {"Tags": {"type": "multi_select", "multi_select": []}}}) == ""
        assert extract_title({}) == ""

    def test_properties(self):
        page = make_page("p1", "T", Tags={"type": "multi_select", "multi_select": [{"name": "x"}]})
        assert extract_properties(page) == {"Name": "T", "Tags": ["x"]}

    def test_slug_from_title(self):
        page = make_page("p1", "Hello, World!  Foo")
        assert extract_slug(page) == "hello-world-foo"

    def test_explicit_slug_property(self):
        page = make_page("p1", "Hello", Slug={"type": "rich_text", "rich_text": rich_text("custom-slug")})
        assert extract_slug(page) == "custom-slug"

    def test_empty_slug_property_falls_back(self):
        page = make_page("p1", "Hello There", Slug={"type": "rich_text", "rich_text": []})
        assert extract_slug(page) == "hello-there"

    @pytest.mark.parametrize("text,expected", [
        ("--Leading and trailing--", "leading-and-trailing"),
        ("Already-slugged", "already-slugged"),
        ("Ünïcödé stays out", "n-c-d-stays-out"),
        ("", ""),
    ])
    def test_slugify(self, text, expected):
        assert slugify(text) == expected


class TestBlockExtraction:
    """Tests for extract_block_content and extract_block_metadata."""

    def test_content_from_rich_text(self):
        assert extract_block_content(make_block("b1", "paragraph", "Hi")) == "Hi"

    def test_content_from_legacy_text(self):
        block = {"id": "b1", "type": "paragraph", "paragraph": {"text": rich_text("old")}}
        assert extract_block_content(block) == "old"

    def test_content_missing_payload(self):
        assert extract_block_content({"id": "b1", "type": "divider"}) == ""

    def test_code_language(self):
        block = make_block("b1", "code", "print(1)", language="python")
        assert extract_block_metadata(block) == {"language": "python"}

    def test_to_do_checked(self):
        assert extract_block_metadata(make_block("b1", "to_do", "x", checked=False)) == {"checked": False}

    def test_callout_emoji_icon(self):
        block = make_block("b1", "callout", "x", icon={"type": "emoji", "emoji": "⚠️"})
        assert extract_block_metadata(block)["icon"] == "⚠️"

    def test_callout_external_icon(self):
        block = make_block("b1", "callout", "x", icon={"type": "external", "external": {"url": "https://i/icon.png"}})
        assert extract_block_metadata(block)["icon"] == "https://i/icon.png"

    @pytest.mark.parametrize("payload,expected", [
        ({"url": "https://direct"}, "https://direct"),
        ({"type": "file", "file": {"url": "https://hosted"}}, "https://hosted"),
        ({"type": "external", "external": {"url": "https://external"}}, "https://external"),
    ])
    def test_media_url(self, payload, expected):
        assert extract_block_metadata(make_block("b1", "image", **payload))["url"] == expected

    def test_image_caption(self):
        block = make_block("b1", "image", type="external", external={"url": "u"}, caption=rich_text("Cap"))
        assert extract_block_metadata(block) == {"url": "u", "caption": "Cap"}

    def test_table_row_cells(self):
        block = make_block("r1", "table_row", cells=[rich_text("a"), rich_text("b") + rich_text("c"), []])
        assert extract_block_metadata(block) == {"cells": ["a", "bc", ""]}

    def test_plain_block_has_no_metadata(self):
        assert extract_block_metadata(make_block("b1", "paragraph", "text")) == {}
