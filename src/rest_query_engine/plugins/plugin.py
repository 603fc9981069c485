"""
Базовый класс для плагинов query engine.

Плагины вызываются executor'ом вокруг КАЖДОЙ попытки отправки
(включая редиректы и digest повтор). Ошибки плагинов выводятся через
warnings.warn и никогда не ломают запрос.
"""

from typing import Any

import httpx


class PluginPriority:
    """
    Константы приоритетов (меньше = раньше).

    Example:
        >>> class HeaderPlugin(QueryPlugin):
        ...     priority = PluginPriority.FIRST
    """
    FIRST = 0       # Tracing, propagation заголовков
    HIGH = 25
    NORMAL = 50     # По умолчанию
    LOW = 75
    LAST = 100      # Метрики, аудит


class QueryPlugin:
    """
    Async хуки вокруг отправки запроса.

    Attributes:
        priority: Приоритет выполнения (меньше = раньше)

    Example:
        >>> class TenantHeaderPlugin(QueryPlugin):
        ...     async def before_send(self, request):
        ...         request.headers["x-tenant"] = "acme"
        ...         return request
    """

    priority: int = PluginPriority.NORMAL

    async def before_send(self, request: httpx.Request) -> httpx.Request:
        """
        Вызывается перед каждой попыткой отправки.

        Args:
            request: Запрос текущей попытки (заголовки можно менять)

        Returns:
            Запрос (оригинальный или модифицированный)
        """
        return request

    async def after_response(self, response: httpx.Response) -> httpx.Response:
        """
        Вызывается после каждого полученного ответа (в том числе 3xx и 401).

        ``response.request`` - запрос этой попытки.
        """
        return response

    async def on_error(self, error: Exception, **kwargs: Any) -> None:
        """
        Вызывается при ошибке попытки.

        Args:
            error: Исключение (уже классифицированное QueryEngineException)
            **kwargs: request, attempt
        """
        pass
