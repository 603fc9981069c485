"""
Tests for RequestContextBuilder.
"""

import pytest

from rest_query_engine.core.context_builder import (
    RequestContextBuilder,
    first_non_blank,
    merge_body_params,
    merge_headers,
    merge_url_params,
)
from rest_query_engine.core.exceptions import ArgumentError, ErrorKind
from rest_query_engine.core.models import (
    BasicAuthConfig,
    DatasourceConfig,
    Property,
    QueryConfig,
    SessionContext,
)


@pytest.fixture
def builder():
    return RequestContextBuilder()


class TestBuildUrl:
    """Test URL assembly."""

    def test_concatenates_and_renders(self, builder):
        """Test that base URL and path are joined and rendered."""
        ctx = builder.build(
            DatasourceConfig(url="https://api.example.com"),
            QueryConfig(path="/users/{{id}}"),
            {"id": 5},
        )
        assert ctx.url == "https://api.example.com/users/5"

    def test_base_url_is_rendered(self, builder):
        ctx = builder.build(
            DatasourceConfig(url="https://{{host}}"),
            QueryConfig(path="/v1"),
            {"host": "api.example.com"},
        )
        assert ctx.url == "https://api.example.com/v1"

    def test_trims_parts(self, builder):
        ctx = builder.build(DatasourceConfig(url="  api.example.com "), QueryConfig(path=" /x "))
        assert ctx.url == "api.example.com/x"

    def test_empty_url(self, builder):
        """Test that an empty URL fails before any network call."""
        with pytest.raises(ArgumentError) as exc_info:
            builder.build(DatasourceConfig(url=""), QueryConfig(path="  "))
        assert exc_info.value.code == "REQUEST_URL_EMPTY"
        assert exc_info.value.kind == ErrorKind.QUERY_ARGUMENT_ERROR

    def test_invalid_url(self, builder):
        with pytest.raises(ArgumentError) as exc_info:
            builder.build(DatasourceConfig(url="http://[::1"), QueryConfig())
        assert exc_info.value.code == "INVALID_REQUEST_URL"


class TestHeadersAndContentType:
    """Test header merge and content type validation."""

    def test_query_headers_override_datasource(self, builder):
        ctx = builder.build(
            DatasourceConfig(
                url="api.example.com",
                headers=[Property("Accept", "text/plain"), Property("X-Env", "prod")],
            ),
            QueryConfig(headers=[Property("accept", "application/json")]),
        )
        assert dict(ctx.headers) == {"accept": "application/json", "x-env": "prod"}

    def test_header_templates(self, builder):
        ctx = builder.build(
            DatasourceConfig(url="api.example.com"),
            QueryConfig(headers=[Property("X-{{name}}", "{{value}}")]),
            {"name": "Trace", "value": "abc"},
        )
        assert dict(ctx.headers) == {"x-trace": "abc"}

    def test_content_type_lower_cased(self, builder):
        ctx = builder.build(
            DatasourceConfig(url="api.example.com"),
            QueryConfig(headers=[Property("Content-Type", "Application/JSON")]),
        )
        assert ctx.content_type == "application/json"

    def test_no_content_type(self, builder):
        ctx = builder.build(DatasourceConfig(url="api.example.com"), QueryConfig())
        assert ctx.content_type == ""

    def test_invalid_content_type(self, builder):
        """Test that a malformed content type is rejected."""
        with pytest.raises(ArgumentError) as exc_info:
            builder.build(
                DatasourceConfig(url="api.example.com"),
                QueryConfig(headers=[Property("Content-Type", "not a media type")]),
            )
        assert exc_info.value.code == "INVALID_CONTENT_TYPE"


class TestBody:
    """Test body rendering."""

    def test_json_body_rendered_as_json(self, builder):
        ctx = builder.build(
            DatasourceConfig(url="api.example.com"),
            QueryConfig(
                http_method="POST",
                body='{"name":"{{name}}","age":{{age}}}',
                headers=[Property("Content-Type", "application/json")],
            ),
            {"name": 'B"ob', "age": 30},
        )
        assert ctx.query_body == '{"name":"B\\"ob","age":30}'

    def test_text_body_rendered_plain(self, builder):
        ctx = builder.build(
            DatasourceConfig(url="api.example.com"),
            QueryConfig(http_method="POST", body="Hello {{name}}", headers=[Property("Content-Type", "text/plain")]),
            {"name": "Bob"},
        )
        assert ctx.query_body == "Hello Bob"

    def test_falls_back_to_datasource_body(self, builder):
        """Test that a blank query body uses the datasource body verbatim."""
        ctx = builder.build(
            DatasourceConfig(url="api.example.com", body="{{not_rendered}}"),
            QueryConfig(http_method="POST", body="   "),
            {"not_rendered": "x"},
        )
        assert ctx.query_body == "{{not_rendered}}"


class TestParamsAndSession:
    """Test URL params, form fields, cookies and auth."""

    def test_url_params(self, builder):
        ctx = builder.build(
            DatasourceConfig(url="api.example.com", params=[Property("v", "1"), Property("lang", "en")]),
            QueryConfig(params=[Property("v", "{{version}}"), Property("q", None)]),
            {"version": "2"},
        )
        assert dict(ctx.url_params) == {"v": "2", "lang": "en", "q": ""}
        assert list(ctx.url_params) == ["v", "lang", "q"]

    def test_datasource_params_are_not_rendered(self, builder):
        ctx = builder.build(
            DatasourceConfig(url="api.example.com", params=[Property("x", "{{id}}")]),
            QueryConfig(),
            {"id": "1"},
        )
        assert ctx.url_params["x"] == "{{id}}"

    def test_body_form_first_occurrence_wins(self, builder):
        ctx = builder.build(
            DatasourceConfig(url="api.example.com", body_form_data=[Property("a", "ds"), Property("b", "ds")]),
            QueryConfig(body_form_data=[Property("a", "query")]),
        )
        assert [(p.key, p.value) for p in ctx.body_params] == [("a", "ds"), ("b", "ds")]

    def test_encode_params_flag(self, builder):
        ctx = builder.build(DatasourceConfig(url="api.example.com"), QueryConfig(disable_encoding_params=True))
        assert ctx.encode_params is False

    def test_session_and_auth_carried(self, builder):
        async def provider():
            return []

        ctx = builder.build(
            DatasourceConfig(
                url="api.example.com",
                auth_config=BasicAuthConfig("u", "p"),
                forward_cookies={"sid"},
            ),
            QueryConfig(),
            session_context=SessionContext(cookies={"sid": ["1"]}, auth_token_provider=provider),
        )
        assert ctx.auth_config == BasicAuthConfig("u", "p")
        assert ctx.forward_cookies == frozenset({"sid"})
        assert ctx.request_cookies["sid"] == ("1",)
        assert ctx.auth_token_provider is provider


class TestMergeHelpers:
    """Test merge helpers."""

    def test_merge_headers_skips_blank(self):
        headers = merge_headers([
            Property("", "x"),
            Property("  ", "x"),
            Property("a", ""),
            Property("b", "   "),
            Property(None, "x"),
            Property(" C ", "v"),
        ])
        assert headers == {"c": "v"}

    def test_merge_headers_last_wins(self):
        assert merge_headers([Property("A", "1")], [Property("a", "2")]) == {"a": "2"}

    def test_merge_url_params(self):
        assert merge_url_params([Property("a", "1"), Property(None, "x")], [Property("a", "2")]) == {"a": "2"}

    def test_merge_body_params(self):
        merged = merge_body_params([Property("a", "1")], [Property("a", "2"), Property(None, "x")])
        assert merged == [Property("a", "1")]

    def test_first_non_blank(self):
        assert first_non_blank("", "  ", "x", "y") == "x"
        assert first_non_blank(None, "") == ""
