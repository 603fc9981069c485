"""
Tests for template rendering.
"""

import json

import pytest

from rest_query_engine.core.templating import (
    MustacheRenderer,
    extract_variables,
    lookup,
    to_text,
)


@pytest.fixture
def renderer():
    return MustacheRenderer()


class TestExtractVariables:
    """Test extract_variables function."""

    def test_extracts_names_in_order(self):
        """Test that names are returned in template order."""
        assert extract_variables("Hello {{name}}, your id is {{ id }}") == ["name", "id"]

    def test_empty_template(self):
        """Test empty and None templates."""
        assert extract_variables("") == []
        assert extract_variables(None) == []

    def test_dotted_names(self):
        """Test dotted variable names."""
        assert extract_variables("{{user.name}}/{{items.0}}") == ["user.name", "items.0"]


class TestLookup:
    """Test parameter lookup."""

    def test_flat_name(self):
        assert lookup({"id": 5}, "id") == 5

    def test_flat_name_with_dot_wins(self):
        """Test that an exact key containing a dot is preferred."""
        assert lookup({"a.b": 1, "a": {"b": 2}}, "a.b") == 1

    def test_nested_mapping(self):
        assert lookup({"user": {"name": "Ann"}}, "user.name") == "Ann"

    def test_list_index(self):
        assert lookup({"items": ["a", "b"]}, "items.1") == "b"

    def test_missing_returns_none(self):
        assert lookup({"user": {}}, "user.name") is None
        assert lookup({"items": ["a"]}, "items.5") is None


class TestToText:
    """Test string conversion of parameter values."""

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        ("x", "x"),
        (True, "true"),
        (False, "false"),
        (5, "5"),
        (1.5, "1.5"),
        ({"a": 1}, '{"a":1}'),
        ([1, 2], "[1,2]"),
    ])
    def test_conversion(self, value, expected):
        assert to_text(value) == expected


class TestRender:
    """Test plain rendering."""

    def test_substitutes_value(self, renderer):
        """Test basic substitution."""
        assert renderer.render("/users/{{id}}", {"id": 5}) == "/users/5"

    def test_whitespace_inside_braces(self, renderer):
        assert renderer.render("{{ id }}", {"id": "7"}) == "7"

    def test_missing_parameter_renders_empty(self, renderer):
        """Test that missing parameters render as empty string."""
        assert renderer.render("/users/{{id}}", {}) == "/users/"

    def test_template_without_placeholders(self, renderer):
        assert renderer.render("/users", {"id": 5}) == "/users"

    def test_empty_and_none(self, renderer):
        assert renderer.render("", {"a": 1}) == ""
        assert renderer.render(None, {"a": 1}) == ""

    def test_nested_value(self, renderer):
        assert renderer.render("Hi {{user.name}}", {"user": {"name": "Ann"}}) == "Hi Ann"


class TestRenderJson:
    """Test JSON-aware rendering."""

    def test_value_inside_string_is_escaped(self, renderer):
        """Test that a quote inside the value keeps the document valid."""
        rendered = renderer.render_json('{"name":"{{name}}"}', {"name": 'B"ob'})
        assert json.loads(rendered) == {"name": 'B"ob'}

    def test_value_outside_string_is_json_literal(self, renderer):
        """Test that numbers, lists and objects are inserted as JSON."""
        rendered = renderer.render_json(
            '{"age":{{age}},"tags":{{tags}},"meta":{{meta}}}',
            {"age": 3, "tags": ["a", "b"], "meta": {"k": True}},
        )
        assert json.loads(rendered) == {"age": 3, "tags": ["a", "b"], "meta": {"k": True}}

    def test_string_value_outside_string_is_quoted(self, renderer):
        rendered = renderer.render_json('{"name":{{name}}}', {"name": "Bob"})
        assert rendered == '{"name":"Bob"}'

    def test_missing_outside_string_is_null(self, renderer):
        assert renderer.render_json('{"a":{{missing}}}', {}) == '{"a":null}'

    def test_missing_inside_string_is_empty(self, renderer):
        assert renderer.render_json('{"a":"{{missing}}"}', {}) == '{"a":""}'

    def test_escaped_quote_in_template(self, renderer):
        """Test that an escaped quote does not end the string literal."""
        rendered = renderer.render_json('{"a":"x\\" {{v}}"}', {"v": "y"})
        assert json.loads(rendered) == {"a": 'x" y'}

    def test_newline_in_value(self, renderer):
        rendered = renderer.render_json('{"text":"{{t}}"}', {"t": "line1\nline2"})
        assert json.loads(rendered) == {"text": "line1\nline2"}
