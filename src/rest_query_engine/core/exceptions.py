"""
Иерархия исключений REST query engine.

Классификация:
- ArgumentError (kind=QUERY_ARGUMENT_ERROR) - невалидная конфигурация, НЕ ретраить
- ExecutionError (kind=QUERY_EXECUTION_ERROR / REST_API_EXECUTION_ERROR) - сбой при выполнении
- TimeoutError (kind=QUERY_EXECUTION_TIMEOUT) - таймаут транспорта
- JsonParseError (kind=JSON_PARSE_ERROR) - заголовки ответа не сериализуются
"""

from enum import Enum
from typing import Any, Optional

import httpx


class ErrorKind(str, Enum):
    """Вид ошибки, который видит хост плагина."""
    QUERY_ARGUMENT_ERROR = "QUERY_ARGUMENT_ERROR"
    QUERY_EXECUTION_ERROR = "QUERY_EXECUTION_ERROR"
    QUERY_EXECUTION_TIMEOUT = "QUERY_EXECUTION_TIMEOUT"
    REST_API_EXECUTION_ERROR = "REST_API_EXECUTION_ERROR"
    JSON_PARSE_ERROR = "JSON_PARSE_ERROR"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class QueryEngineException(Exception):
    """
    Базовое исключение query engine.

    Args:
        code: Машинный код ошибки (например, "INVALID_CONTENT_TYPE")
        *args: Детали, которые добавляются к сообщению
        cause: Исходное исключение (опционально)
    """

    kind: ErrorKind = ErrorKind.QUERY_EXECUTION_ERROR
    retryable: bool = False

    def __init__(self, code: str, *args: Any, cause: Optional[BaseException] = None):
        self.code = code
        self.args_detail = args
        self.cause = cause

        msg = code
        if args:
            msg += ": " + ", ".join(str(a) for a in args)
        self.message = msg
        super().__init__(msg)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# КОНФИГУРАЦИЯ ЗАПРОСА (никогда не ретраить)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ArgumentError(QueryEngineException):
    """
    Невалидная конфигурация, переданная вызывающей стороной.

    Примеры: пустой URL, невалидный content type, битый JSON в теле запроса.
    """
    kind = ErrorKind.QUERY_ARGUMENT_ERROR


class ConfigurationError(ArgumentError):
    """Неизвестный тип auth или метода в сохранённой конфигурации."""
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ВЫПОЛНЕНИЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ExecutionError(QueryEngineException):
    """
    Ошибка во время сетевого взаимодействия.

    Примеры:
    - Connection refused / reset
    - Исчерпан лимит редиректов
    - Невалидный digest challenge
    - Битый JSON в ответе
    """

    def __init__(
        self,
        code: str,
        *args: Any,
        kind: ErrorKind = ErrorKind.QUERY_EXECUTION_ERROR,
        cause: Optional[BaseException] = None
    ):
        super().__init__(code, *args, cause=cause)
        self.kind = kind


class RestApiExecutionError(ExecutionError):
    """Ошибка уровня REST плагина (auth токены, разбор тела ответа)."""

    def __init__(self, code: str, *args: Any, cause: Optional[BaseException] = None):
        super().__init__(code, *args, kind=ErrorKind.REST_API_EXECUTION_ERROR, cause=cause)


class RedirectLimitError(ExecutionError):
    """
    Превышен лимит редиректов / повторов.

    Args:
        limit: Максимальное количество попыток
        url: Последний URL
    """

    def __init__(self, limit: int, url: Optional[str] = None):
        self.limit = limit
        self.url = url
        super().__init__("REACH_REDIRECT_LIMIT", limit)


class ResponseTooLargeError(ExecutionError):
    """
    Ответ превышает лимит буферизации.

    Args:
        size: Сколько байт уже прочитано
        max_size: Максимально допустимый размер
        url: URL
    """

    def __init__(self, size: int, max_size: int, url: str):
        self.size = size
        self.max_size = max_size
        self.url = url
        super().__init__(
            "RESPONSE_TOO_LARGE",
            f"{size} bytes exceeds {max_size} for {url}",
            kind=ErrorKind.REST_API_EXECUTION_ERROR,
        )


class TimeoutError(QueryEngineException):
    """
    Таймаут транспорта.

    Отдельный вид ошибки, чтобы хост мог показать "увеличьте таймаут",
    а не общее сообщение об ошибке.
    """
    kind = ErrorKind.QUERY_EXECUTION_TIMEOUT
    retryable = True

    def __init__(self, message: str, url: Optional[str] = None, cause: Optional[BaseException] = None):
        self.url = url
        detail = message or "request timed out"
        if url:
            detail += f" (url: {url})"
        super().__init__("QUERY_TIMEOUT_ERROR", detail, cause=cause)


class JsonParseError(QueryEngineException):
    """Заголовки ответа не удалось преобразовать в структурированное дерево."""
    kind = ErrorKind.JSON_PARSE_ERROR

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def classify_httpx_exception(exc: Exception, url: str) -> QueryEngineException:
    """
    Конвертировать исключения httpx в наши исключения.

    Args:
        exc: Исключение из httpx
        url: URL запроса

    Returns:
        Наше исключение с правильной классификацией

    Examples:
        >>> exc = httpx.ReadTimeout("timed out")
        >>> our_exc = classify_httpx_exception(exc, "https://example.com")
        >>> assert isinstance(our_exc, TimeoutError)
    """
    if isinstance(exc, QueryEngineException):
        return exc

    if isinstance(exc, httpx.TimeoutException):
        return TimeoutError(str(exc), url, cause=exc)

    if isinstance(exc, httpx.HTTPError):
        # Connection errors, протокольные ошибки, битые ответы
        return ExecutionError("QUERY_EXECUTION_ERROR", str(exc) or exc.__class__.__name__, cause=exc)

    if isinstance(exc, httpx.InvalidURL):
        return ExecutionError("QUERY_EXECUTION_ERROR", str(exc), cause=exc)

    # Неизвестная ошибка - оборачиваем
    return RestApiExecutionError("REST_API_EXECUTION_ERROR", str(exc), cause=exc)
