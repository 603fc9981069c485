"""
HTTP executor: цикл попыток с редиректами и digest повтором.

Каждая попытка строит НОВЫЙ запрос из исходных данных и упорядоченного
списка мутаций заголовков; общий словарь заголовков не изменяется.
"""

import asyncio
import warnings
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

import httpx

from ..auth.negotiator import digest_retry_header
from ..plugins.plugin import QueryPlugin
from .body_encoder import EMPTY_BODY, EncodedBody
from .config import MAX_REDIRECTS
from .exceptions import ExecutionError, RedirectLimitError, classify_httpx_exception
from .models import AuthConfig, NoAuthConfig
from .utils import sanitize_headers, sanitize_url
from .worker_pool import QueryWorkerPool

if TYPE_CHECKING:
    from .logging import EngineLogger

# (имя заголовка, значение); применяются по порядку, последняя побеждает
HeaderMutation = Tuple[str, str]


@dataclass(frozen=True)
class PreparedRequest:
    """
    Всё, что нужно для отправки: не меняется между попытками.

    Attributes:
        method: HTTP метод
        uri: Начальный URI
        headers: Заголовки (ключи в lower-case)
        body: Закодированное тело
        auth_config: Вариант auth (нужен для digest повтора)
    """
    method: str
    uri: httpx.URL
    headers: Mapping[str, str] = field(default_factory=dict)
    body: EncodedBody = EMPTY_BODY
    auth_config: AuthConfig = field(default_factory=NoAuthConfig)


def apply_mutations(headers: Mapping[str, str], mutations: Sequence[HeaderMutation]) -> List[Tuple[str, str]]:
    """
    Применить мутации к копии заголовков.

    Example:
        >>> apply_mutations({"accept": "*/*"}, [("authorization", "Digest ...")])
        [('accept', '*/*'), ('authorization', 'Digest ...')]
    """
    merged = dict(headers)
    for name, value in mutations:
        merged[name.lower()] = value
    return list(merged.items())


def is_redirect(response: httpx.Response) -> bool:
    """3xx с заголовком Location (304 и 3xx без Location - финальный ответ)."""
    return 300 <= response.status_code < 400 and "location" in response.headers


def redirect_target(response: httpx.Response) -> httpx.URL:
    """
    URI из первого значения Location.

    Относительный Location НЕ разрешается относительно исходного URL:
    такой URI приводит к ошибке транспорта на следующей попытке.

    Raises:
        ExecutionError: Location не парсится как URI
    """
    location = response.headers.get_list("location")[0]
    try:
        return httpx.URL(location)
    except httpx.InvalidURL as e:
        raise ExecutionError("QUERY_EXECUTION_ERROR", str(e), cause=e) from e


class HttpExecutor:
    """
    Отправляет запрос через QueryWorkerPool.

    Алгоритм (попытки 0..max_redirects-1):
    1. Построить запрос с применёнными мутациями заголовков
    2. Отправить (ошибки транспорта -> QueryEngineException)
    3. 3xx -> повтор на Location
    4. Digest challenge (один раз) -> повтор с Authorization: Digest
    5. Иначе ответ финальный
    Попытки исчерпаны -> RedirectLimitError (REACH_REDIRECT_LIMIT).

    Args:
        pool: Общий пул исходящих запросов
        max_redirects: Лимит попыток
        plugins: Плагины (сортируются по priority)
        logger: EngineLogger (опционально)
    """

    def __init__(
        self,
        pool: QueryWorkerPool,
        max_redirects: int = MAX_REDIRECTS,
        plugins: Optional[Sequence[QueryPlugin]] = None,
        logger: Optional['EngineLogger'] = None,
    ):
        self._pool = pool
        self._max_redirects = max_redirects
        self._plugins: List[QueryPlugin] = sorted(plugins or [], key=lambda p: getattr(p, 'priority', 50))
        self._logger = logger

    @property
    def plugins(self) -> List[QueryPlugin]:
        return list(self._plugins)

    async def execute(self, prepared: PreparedRequest) -> httpx.Response:
        """
        Выполнить запрос.

        Returns:
            Финальный буферизованный ответ

        Raises:
            RedirectLimitError: Исчерпан лимит попыток
            ExecutionError / TimeoutError: Ошибки транспорта, битый Location или challenge
        """
        uri = prepared.uri
        mutations: Tuple[HeaderMutation, ...] = ()
        digest_retried = False

        for attempt in range(self._max_redirects):
            request = self._build_request(prepared, uri, mutations)
            response = await self._send(request, attempt)

            if is_redirect(response):
                uri = redirect_target(response)
                self._log_debug(
                    "Following redirect",
                    status=response.status_code,
                    url=sanitize_url(str(uri)),
                    attempt=attempt,
                )
                continue

            if not digest_retried:
                header = digest_retry_header(prepared.auth_config, response, prepared.method, uri)
                if header is not None:
                    mutations = mutations + (("authorization", header),)
                    digest_retried = True
                    self._log_debug("Retrying with digest credentials", url=sanitize_url(str(uri)), attempt=attempt)
                    continue

            return response

        raise RedirectLimitError(self._max_redirects, str(uri))

    def _build_request(
        self,
        prepared: PreparedRequest,
        uri: httpx.URL,
        mutations: Sequence[HeaderMutation],
    ) -> httpx.Request:
        return self._pool.build_request(
            prepared.method,
            uri,
            headers=apply_mutations(prepared.headers, mutations),
            content=prepared.body.content or None,
        )

    async def _send(self, request: httpx.Request, attempt: int) -> httpx.Response:
        for plugin in self._plugins:
            try:
                request = await plugin.before_send(request)
            except Exception as e:
                warnings.warn(f"Plugin {plugin.__class__.__name__} error in before_send: {e}")

        if self._logger and self._logger.log_attempts:
            self._logger.debug(
                "Sending request",
                method=request.method,
                url=sanitize_url(str(request.url)),
                attempt=attempt,
                headers=sanitize_headers(request.headers),
            )

        try:
            response = await self._pool.send(request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = classify_httpx_exception(e, sanitize_url(str(request.url)))
            for plugin in self._plugins:
                try:
                    await plugin.on_error(error, request=request, attempt=attempt)
                except Exception as hook_error:
                    warnings.warn(f"Plugin {plugin.__class__.__name__} error in on_error: {hook_error}")
            if error is e:
                raise
            raise error from e

        for plugin in self._plugins:
            try:
                response = await plugin.after_response(response)
            except Exception as e:
                warnings.warn(f"Plugin {plugin.__class__.__name__} error in after_response: {e}")

        return response

    def _log_debug(self, message: str, **kwargs) -> None:
        if self._logger and self._logger.log_attempts:
            self._logger.debug(message, **kwargs)
