"""
Tests for the data model.
"""

import pytest

from rest_query_engine.core.exceptions import (
    ArgumentError,
    ConfigurationError,
    ErrorKind,
    RedirectLimitError,
)
from rest_query_engine.core.models import (
    BasicAuthConfig,
    DatasourceConfig,
    DigestAuthConfig,
    ExecutionResult,
    NoAuthConfig,
    OAuth2InheritFromLoginConfig,
    Property,
    QueryConfig,
    ResponseDataType,
    SessionContext,
    auth_config_from_dict,
    to_properties,
)


class TestProperty:
    """Test Property and to_properties."""

    def test_from_dict_stringifies(self):
        prop = Property.from_dict({"key": "page", "value": 2, "type": "param"})
        assert prop == Property("page", "2", "param")

    def test_from_dict_keeps_none(self):
        assert Property.from_dict({"key": None, "value": None}) == Property(None, None)

    def test_to_properties_mixed(self):
        props = to_properties([Property("a", "1"), {"key": "b", "value": "2"}])
        assert props == (Property("a", "1"), Property("b", "2"))

    def test_to_properties_empty(self):
        assert to_properties(None) == ()

    def test_to_properties_invalid_item(self):
        with pytest.raises(ArgumentError) as exc_info:
            to_properties(["nope"])
        assert exc_info.value.code == "INVALID_PROPERTY"


class TestAuthConfig:
    """Test auth config parsing."""

    def test_missing_is_none(self):
        assert auth_config_from_dict(None) == NoAuthConfig()
        assert auth_config_from_dict({}) == NoAuthConfig()

    def test_basic(self):
        config = auth_config_from_dict({"type": "BASIC_AUTH", "username": "u", "password": "p"})
        assert isinstance(config, BasicAuthConfig)
        assert (config.username, config.password) == ("u", "p")

    def test_digest(self):
        config = auth_config_from_dict({"type": "digest_auth", "username": "u", "password": "p"})
        assert isinstance(config, DigestAuthConfig)
        assert not isinstance(config, BasicAuthConfig)

    def test_oauth2(self):
        config = auth_config_from_dict({"type": "OAUTH2_INHERIT_FROM_LOGIN"})
        assert isinstance(config, OAuth2InheritFromLoginConfig)

    def test_unknown_type(self):
        """Test that an unknown auth type is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            auth_config_from_dict({"type": "KERBEROS"})
        assert exc_info.value.code == "INVALID_AUTH_TYPE"
        assert exc_info.value.kind == ErrorKind.QUERY_ARGUMENT_ERROR

    def test_password_not_in_repr(self):
        assert "secret" not in repr(BasicAuthConfig("u", "secret"))
        assert "secret" not in repr(DigestAuthConfig("u", "secret"))


class TestDatasourceConfig:
    """Test DatasourceConfig."""

    def test_from_dict(self):
        config = DatasourceConfig.from_dict({
            "url": "https://api.example.com",
            "body": "{}",
            "headers": [{"key": "Accept", "value": "application/json"}],
            "params": [{"key": "v", "value": "1"}],
            "bodyFormData": [{"key": "f", "value": "x"}],
            "authConfig": {"type": "BASIC_AUTH", "username": "u", "password": "p"},
            "forwardCookies": ["sid"],
            "forwardAllCookies": True,
        })
        assert config.url == "https://api.example.com"
        assert config.headers == (Property("Accept", "application/json"),)
        assert config.params == (Property("v", "1"),)
        assert config.body_form_data == (Property("f", "x"),)
        assert config.auth_config == BasicAuthConfig("u", "p")
        assert config.forward_cookies == frozenset({"sid"})
        assert config.forward_all_cookies is True

    def test_defaults(self):
        config = DatasourceConfig.from_dict({})
        assert config.url == ""
        assert config.auth_config == NoAuthConfig()
        assert config.forward_cookies == frozenset()

    def test_immutable(self):
        config = DatasourceConfig(url="x")
        with pytest.raises(Exception):
            config.url = "y"


class TestQueryConfig:
    """Test QueryConfig."""

    def test_method_upper_cased(self):
        assert QueryConfig(http_method="post").http_method == "POST"

    def test_invalid_method(self):
        with pytest.raises(ArgumentError) as exc_info:
            QueryConfig(http_method="FETCH")
        assert exc_info.value.code == "INVALID_HTTP_METHOD"

    def test_from_dict(self):
        config = QueryConfig.from_dict({
            "httpMethod": "PUT",
            "path": "/users/{{id}}",
            "body": "{}",
            "params": [{"key": "a", "value": "1"}],
            "disableEncodingParams": True,
        })
        assert config.http_method == "PUT"
        assert config.path == "/users/{{id}}"
        assert config.params == (Property("a", "1"),)
        assert config.encode_params is False

    def test_default_method_get(self):
        assert QueryConfig.from_dict({}).http_method == "GET"


class TestSessionContext:
    """Test SessionContext."""

    def test_string_cookie_value(self):
        """Test that a bare string is one value, not a list of characters."""
        session = SessionContext(cookies={"sid": "abc"})
        assert session.cookies["sid"] == ("abc",)

    def test_cookies_read_only(self):
        session = SessionContext(cookies={"sid": ["1"]})
        with pytest.raises(TypeError):
            session.cookies["x"] = ("2",)


class TestExecutionResult:
    """Test ExecutionResult."""

    def test_success(self):
        result = ExecutionResult(status=200, body={"a": 1}, data_type=ResponseDataType.JSON)
        assert result.success
        assert result.to_dict() == {"status": 200, "headers": {}, "body": {"a": 1}}

    def test_from_error(self):
        result = ExecutionResult.from_error(RedirectLimitError(5, "http://x"))
        assert not result.success
        assert result.status == 0
        assert result.error.code == "REACH_REDIRECT_LIMIT"
        assert result.error.kind == ErrorKind.QUERY_EXECUTION_ERROR

        data = result.to_dict()
        assert data["error"]["kind"] == "QUERY_EXECUTION_ERROR"
        assert data["error"]["code"] == "REACH_REDIRECT_LIMIT"
        assert data["error"]["cause"] is None
