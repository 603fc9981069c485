"""
Модель данных REST query engine.

Все записи неизменяемые. Конфигурации datasource и query - входные данные
только для чтения; контекст выполнения строится заново на каждый вызов;
результат отдаётся хосту как есть.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from .exceptions import ArgumentError, ConfigurationError, ErrorKind, QueryEngineException


HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE"})


class PropertyType:
    """Известные типы property. Остальные значения передаются как есть."""
    PARAM = "param"
    HEADER = "header"
    BODY_FORM = "bodyForm"


@dataclass(frozen=True)
class Property:
    """
    Тройка key/value/type: заголовки, URL параметры, поля body-form
    и credentials от провайдера login-сессии.
    """

    key: Optional[str]
    value: Optional[str]
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Property':
        """Из mapping ``{"key", "value", "type"}``."""
        key = data.get("key")
        value = data.get("value")
        return cls(
            key=None if key is None else str(key),
            value=None if value is None else str(value),
            type=data.get("type"),
        )


PropertyList = Tuple[Property, ...]


def to_properties(items: Optional[Iterable[Any]]) -> PropertyList:
    """Список Property или mapping -> tuple из Property."""
    if not items:
        return ()
    result = []
    for item in items:
        if isinstance(item, Property):
            result.append(item)
        elif isinstance(item, Mapping):
            result.append(Property.from_dict(item))
        else:
            raise ArgumentError("INVALID_PROPERTY", repr(item))
    return tuple(result)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# AUTH CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RestApiAuthType(str, Enum):
    """Типы auth, как они хранятся в записи datasource."""
    NONE = "NONE"
    BASIC_AUTH = "BASIC_AUTH"
    DIGEST_AUTH = "DIGEST_AUTH"
    OAUTH2_INHERIT_FROM_LOGIN = "OAUTH2_INHERIT_FROM_LOGIN"


@dataclass(frozen=True)
class NoAuthConfig:
    """Без аутентификации."""

    type = RestApiAuthType.NONE


@dataclass(frozen=True)
class _UsernamePassword:
    username: str = ""
    password: str = ""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(username={self.username!r}, password='***')"


@dataclass(frozen=True, repr=False)
class BasicAuthConfig(_UsernamePassword):
    """Basic auth, заголовок добавляется до первой отправки."""

    type = RestApiAuthType.BASIC_AUTH


@dataclass(frozen=True, repr=False)
class DigestAuthConfig(_UsernamePassword):
    """Digest auth. Состояние challenge живёт в пределах одного вызова."""

    type = RestApiAuthType.DIGEST_AUTH


@dataclass(frozen=True)
class OAuth2InheritFromLoginConfig:
    """Credentials из login-сессии вызывающего."""

    type = RestApiAuthType.OAUTH2_INHERIT_FROM_LOGIN


AuthConfig = Union[NoAuthConfig, BasicAuthConfig, DigestAuthConfig, OAuth2InheritFromLoginConfig]


def auth_config_from_dict(data: Optional[Mapping[str, Any]]) -> AuthConfig:
    """Разобрать сохранённый mapping ``authConfig``."""
    if not data:
        return NoAuthConfig()

    raw_type = str(data.get("type") or RestApiAuthType.NONE.value).upper()
    try:
        auth_type = RestApiAuthType(raw_type)
    except ValueError:
        raise ConfigurationError("INVALID_AUTH_TYPE", raw_type) from None

    if auth_type is RestApiAuthType.NONE:
        return NoAuthConfig()
    if auth_type is RestApiAuthType.BASIC_AUTH:
        return BasicAuthConfig(str(data.get("username") or ""), str(data.get("password") or ""))
    if auth_type is RestApiAuthType.DIGEST_AUTH:
        return DigestAuthConfig(str(data.get("username") or ""), str(data.get("password") or ""))
    return OAuth2InheritFromLoginConfig()

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# DATASOURCE / QUERY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class DatasourceConfig:
    """
    Значения по умолчанию уровня соединения.

    Attributes:
        url: Базовый URL (может содержать шаблоны)
        body: Тело по умолчанию, используется как есть при пустом теле query
        headers: Заголовки по умолчанию
        params: URL параметры по умолчанию
        body_form_data: Поля body-form по умолчанию
        auth_config: Вариант аутентификации
        forward_cookies: Имена cookies вызывающего для проброса
        forward_all_cookies: Пробрасывать все cookies вызывающего
    """

    url: str = ""
    body: str = ""
    headers: PropertyList = ()
    params: PropertyList = ()
    body_form_data: PropertyList = ()
    auth_config: AuthConfig = field(default_factory=NoAuthConfig)
    forward_cookies: FrozenSet[str] = frozenset()
    forward_all_cookies: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'headers', to_properties(self.headers))
        object.__setattr__(self, 'params', to_properties(self.params))
        object.__setattr__(self, 'body_form_data', to_properties(self.body_form_data))
        object.__setattr__(self, 'forward_cookies', frozenset(self.forward_cookies or ()))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DatasourceConfig':
        """Из сохранённой записи datasource."""
        return cls(
            url=str(data.get("url") or ""),
            body=str(data.get("body") or ""),
            headers=to_properties(data.get("headers")),
            params=to_properties(data.get("params")),
            body_form_data=to_properties(data.get("bodyFormData")),
            auth_config=auth_config_from_dict(data.get("authConfig")),
            forward_cookies=frozenset(data.get("forwardCookies") or ()),
            forward_all_cookies=bool(data.get("forwardAllCookies", False)),
        )


@dataclass(frozen=True)
class QueryConfig:
    """Настройки запроса поверх значений datasource."""

    http_method: str = "GET"
    path: str = ""
    body: str = ""
    params: PropertyList = ()
    headers: PropertyList = ()
    body_form_data: PropertyList = ()
    disable_encoding_params: bool = False

    def __post_init__(self):
        method = (self.http_method or "GET").upper()
        if method not in HTTP_METHODS:
            raise ArgumentError("INVALID_HTTP_METHOD", self.http_method)
        object.__setattr__(self, 'http_method', method)
        object.__setattr__(self, 'params', to_properties(self.params))
        object.__setattr__(self, 'headers', to_properties(self.headers))
        object.__setattr__(self, 'body_form_data', to_properties(self.body_form_data))

    @property
    def encode_params(self) -> bool:
        return not self.disable_encoding_params

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'QueryConfig':
        """Из сохранённого mapping конфигурации query."""
        return cls(
            http_method=str(data.get("httpMethod") or "GET"),
            path=str(data.get("path") or ""),
            body=str(data.get("body") or ""),
            params=to_properties(data.get("params")),
            headers=to_properties(data.get("headers")),
            body_form_data=to_properties(data.get("bodyFormData")),
            disable_encoding_params=bool(data.get("disableEncodingParams", False)),
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SESSION / EXECUTION CONTEXT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

AuthTokenProvider = Callable[[], Awaitable[Optional[Sequence[Property]]]]


@dataclass(frozen=True)
class SessionContext:
    """
    Что хост знает о вызывающем.

    Attributes:
        cookies: Текущие cookies вызывающего, name -> values
        auth_token_provider: Async провайдер credentials login-сессии
    """

    cookies: Mapping[str, Sequence[str]] = field(default_factory=lambda: MappingProxyType({}))
    auth_token_provider: Optional[AuthTokenProvider] = None

    def __post_init__(self):
        frozen = {
            name: (values,) if isinstance(values, str) else tuple(values)
            for name, values in dict(self.cookies or {}).items()
        }
        object.__setattr__(self, 'cookies', MappingProxyType(frozen))


@dataclass(frozen=True)
class RequestExecutionContext:
    """Смерженное и отрендеренное представление одного вызова query."""

    http_method: str
    url: str
    headers: Mapping[str, str]
    content_type: str
    url_params: Mapping[str, str]
    body_params: PropertyList
    encode_params: bool
    query_body: str
    forward_cookies: FrozenSet[str] = frozenset()
    forward_all_cookies: bool = False
    request_cookies: Mapping[str, Sequence[str]] = field(default_factory=lambda: MappingProxyType({}))
    auth_config: AuthConfig = field(default_factory=NoAuthConfig)
    auth_token_provider: Optional[AuthTokenProvider] = None

    def __post_init__(self):
        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))
        if isinstance(self.url_params, dict):
            object.__setattr__(self, 'url_params', MappingProxyType(dict(self.url_params)))
        object.__setattr__(self, 'body_params', tuple(self.body_params))

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESULTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ResponseDataType(str, Enum):
    """Как было декодировано тело ответа."""
    JSON = "JSON"
    IMAGE = "IMAGE"
    BINARY = "BINARY"
    TEXT = "TEXT"


@dataclass(frozen=True)
class ErrorDescriptor:
    """Ошибка в составе ExecutionResult."""

    kind: ErrorKind
    code: str
    message: str
    cause: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: QueryEngineException) -> 'ErrorDescriptor':
        return cls(
            kind=exc.kind,
            code=exc.code,
            message=exc.message,
            cause=str(exc.cause) if exc.cause is not None else None,
        )


@dataclass(frozen=True)
class ExecutionResult:
    """
    Результат для хоста.

    Attributes:
        status: HTTP статус (0, если ответа не было)
        headers: Заголовки ответа, name -> values, плюс маркер data-type
        body: JSON дерево, текст, base64 текст или None
        data_type: Определённый тип данных, None без тела
        error: Описание ошибки, если вызов упал
    """

    status: int = 0
    headers: Dict[str, List[str]] = field(default_factory=dict)
    body: Any = None
    data_type: Optional[ResponseDataType] = None
    error: Optional[ErrorDescriptor] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def from_error(cls, exc: QueryEngineException) -> 'ExecutionResult':
        return cls(error=ErrorDescriptor.from_exception(exc))

    def to_dict(self) -> Dict[str, Any]:
        """Простая форма результата: ``{status, headers, body}`` (+ ``error``)."""
        result: Dict[str, Any] = {
            "status": self.status,
            "headers": self.headers,
            "body": self.body,
        }
        if self.error is not None:
            result["error"] = {
                "kind": self.error.kind.value,
                "code": self.error.code,
                "message": self.error.message,
                "cause": self.error.cause,
            }
        return result


@dataclass(frozen=True)
class DatasourceTestResult:
    """Результат test_connection."""

    success: bool = True
    messages: Tuple[str, ...] = ()
