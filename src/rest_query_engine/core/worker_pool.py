"""
Общий пул для исходящих запросов.

Ограничивает количество одновременных отправок (семафор) и владеет
одним httpx.AsyncClient с лимитами соединений. Пул передаётся в
executor явно, глобального синглтона нет.
"""

import asyncio
import logging
from typing import Optional

import httpx

from .config import EngineConfig
from .exceptions import ResponseTooLargeError

logger = logging.getLogger(__name__)


class QueryWorkerPool:
    """
    Bounded execution context для исходящего HTTP трафика.

    Args:
        config: EngineConfig (таймауты, лимиты пула, лимит размера ответа)
        client: Готовый httpx.AsyncClient (если передан, пул его не закрывает)

    Example:
        >>> async with QueryWorkerPool(EngineConfig()) as pool:
        ...     response = await pool.send(httpx.Request("GET", "https://example.com"))
        ...     print(response.status_code, len(response.content))
    """

    def __init__(self, config: Optional[EngineConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self._config = config or EngineConfig()
        # семафор создаётся в send(): на 3.9 он привязывается к текущему event loop
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._client = client
        self._owns_client = client is None
        self._closed = False

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def max_response_size(self) -> int:
        return self._config.security.max_response_size

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._closed:
            raise RuntimeError("QueryWorkerPool is closed")
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout.as_httpx(),
                limits=self._config.pool.as_httpx_limits(),
                verify=self._config.security.verify_ssl,
                # Редиректы обрабатывает executor
                follow_redirects=False,
            )
        return self._client

    def build_request(self, method: str, url: httpx.URL, **kwargs) -> httpx.Request:
        return self._get_client().build_request(method, url, **kwargs)

    async def send(self, request: httpx.Request) -> httpx.Response:
        """
        Отправить запрос и буферизовать ответ целиком.

        Raises:
            ResponseTooLargeError: Тело ответа больше max_response_size
            httpx.HTTPError: Ошибки транспорта (классифицирует executor)
        """
        client = self._get_client()
        max_size = self.max_response_size
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._config.pool.max_concurrency)

        async with self._semaphore:
            response = await client.send(request, stream=True)
            try:
                content_length = response.headers.get("content-length")
                if content_length and content_length.isdigit() and int(content_length) > max_size:
                    raise ResponseTooLargeError(int(content_length), max_size, str(request.url))

                chunks = []
                received = 0
                async for chunk in response.aiter_raw():
                    received += len(chunk)
                    if received > max_size:
                        raise ResponseTooLargeError(received, max_size, str(request.url))
                    chunks.append(chunk)
            finally:
                await response.aclose()

        # Буферизованная копия, не зависящая от соединения
        buffered = httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            stream=httpx.ByteStream(b"".join(chunks)),
            request=request,
            extensions={
                key: value
                for key, value in response.extensions.items()
                if key in ("http_version", "reason_phrase")
            },
        )
        await buffered.aread()
        if len(buffered.content) > max_size:
            raise ResponseTooLargeError(len(buffered.content), max_size, str(request.url))
        return buffered

    async def __aenter__(self) -> "QueryWorkerPool":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть клиент (только если пул его создал)."""
        if self._closed:
            return
        self._closed = True
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
        logger.debug("QueryWorkerPool closed")
