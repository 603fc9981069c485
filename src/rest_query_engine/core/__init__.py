"""Основные компоненты: конфигурация, модели, ошибки, media types, шаблоны."""

from .config import EngineConfig, PoolConfig, SecurityConfig, TimeoutConfig
from .exceptions import (
    ArgumentError,
    ConfigurationError,
    ErrorKind,
    ExecutionError,
    JsonParseError,
    QueryEngineException,
    RedirectLimitError,
    ResponseTooLargeError,
    RestApiExecutionError,
    TimeoutError,
)
from .media_type import MediaType, parse_media_type
from .models import (
    BasicAuthConfig,
    DatasourceConfig,
    DatasourceTestResult,
    DigestAuthConfig,
    ErrorDescriptor,
    ExecutionResult,
    NoAuthConfig,
    OAuth2InheritFromLoginConfig,
    Property,
    QueryConfig,
    RequestExecutionContext,
    ResponseDataType,
    SessionContext,
)
from .templating import MustacheRenderer, TemplateRenderer

__all__ = [
    "EngineConfig",
    "PoolConfig",
    "SecurityConfig",
    "TimeoutConfig",
    "ArgumentError",
    "ConfigurationError",
    "ErrorKind",
    "ExecutionError",
    "JsonParseError",
    "QueryEngineException",
    "RedirectLimitError",
    "ResponseTooLargeError",
    "RestApiExecutionError",
    "TimeoutError",
    "MediaType",
    "parse_media_type",
    "BasicAuthConfig",
    "DatasourceConfig",
    "DatasourceTestResult",
    "DigestAuthConfig",
    "ErrorDescriptor",
    "ExecutionResult",
    "NoAuthConfig",
    "OAuth2InheritFromLoginConfig",
    "Property",
    "QueryConfig",
    "RequestExecutionContext",
    "ResponseDataType",
    "SessionContext",
    "MustacheRenderer",
    "TemplateRenderer",
]
