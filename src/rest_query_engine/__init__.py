"""REST Query Engine - templated REST queries over a shared async HTTP pool."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .engine import RestApiEngine
from .core.config import EngineConfig, PoolConfig, SecurityConfig, TimeoutConfig
from .core.context_builder import RequestContextBuilder
from .core.executor import HttpExecutor, PreparedRequest
from .core.worker_pool import QueryWorkerPool
from .core.exceptions import (
    ErrorKind,
    QueryEngineException,
    ArgumentError,
    ConfigurationError,
    ExecutionError,
    RestApiExecutionError,
    RedirectLimitError,
    ResponseTooLargeError,
    TimeoutError,
    JsonParseError,
)
from .core.models import (
    Property,
    NoAuthConfig,
    BasicAuthConfig,
    DigestAuthConfig,
    OAuth2InheritFromLoginConfig,
    DatasourceConfig,
    QueryConfig,
    SessionContext,
    RequestExecutionContext,
    ResponseDataType,
    ErrorDescriptor,
    ExecutionResult,
    DatasourceTestResult,
)
from .core.templating import MustacheRenderer, TemplateRenderer
from .plugins.plugin import QueryPlugin, PluginPriority

# Set up logging - add NullHandler to prevent "No handler found" warnings
# Users can configure logging themselves using logging.getLogger('rest_query_engine')
logging.getLogger('rest_query_engine').addHandler(logging.NullHandler())

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    __version__ = version("rest-query-engine")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__license__ = "MIT"

__all__ = [
    # Engine
    "RestApiEngine",
    "RequestContextBuilder",
    "HttpExecutor",
    "PreparedRequest",
    "QueryWorkerPool",

    # Config
    "EngineConfig",
    "TimeoutConfig",
    "PoolConfig",
    "SecurityConfig",

    # Exceptions
    "ErrorKind",
    "QueryEngineException",
    "ArgumentError",
    "ConfigurationError",
    "ExecutionError",
    "RestApiExecutionError",
    "RedirectLimitError",
    "ResponseTooLargeError",
    "TimeoutError",
    "JsonParseError",

    # Models
    "Property",
    "NoAuthConfig",
    "BasicAuthConfig",
    "DigestAuthConfig",
    "OAuth2InheritFromLoginConfig",
    "DatasourceConfig",
    "QueryConfig",
    "SessionContext",
    "RequestExecutionContext",
    "ResponseDataType",
    "ErrorDescriptor",
    "ExecutionResult",
    "DatasourceTestResult",

    # Templating
    "MustacheRenderer",
    "TemplateRenderer",

    # Plugins
    "QueryPlugin",
    "PluginPriority",
]
