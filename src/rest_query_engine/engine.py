"""
RestApiEngine - точка входа query engine.

Поток выполнения:
    RequestContextBuilder -> (OAuth2 credentials) -> URI / тело / куки / auth
    -> HttpExecutor (редиректы + digest) -> классификация ответа

Ошибки построения контекста выбрасываются вызывающему как типизированные
исключения. Ошибки внутри async конвейера возвращаются как ExecutionResult
с error дескриптором.
"""

import asyncio
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Union, TYPE_CHECKING

from .auth.negotiator import inherit_login_credentials, preemptive_headers
from .core.body_encoder import encode_body
from .core.config import EngineConfig
from .core.context_builder import RequestContextBuilder
from .core.cookies import build_cookie_header, select_cookies
from .core.exceptions import QueryEngineException, RestApiExecutionError
from .core.executor import HttpExecutor, PreparedRequest
from .core.logging.filters import correlation_scope
from .core.models import (
    DatasourceConfig,
    DatasourceTestResult,
    ExecutionResult,
    QueryConfig,
    RequestExecutionContext,
    SessionContext,
)
from .core.response_classifier import classify_response
from .core.templating import TemplateRenderer
from .core.uri_builder import build_uri
from .core.utils import sanitize_url
from .core.worker_pool import QueryWorkerPool
from .plugins.plugin import QueryPlugin

if TYPE_CHECKING:
    from .core.logging import EngineLogger


class RestApiEngine:
    """
    REST-over-HTTP query engine.

    Args:
        config: EngineConfig (по умолчанию EngineConfig())
        pool: Общий QueryWorkerPool (если передан, engine его не закрывает)
        renderer: Рендерер шаблонов (по умолчанию MustacheRenderer)
        plugins: Плагины вокруг каждой попытки отправки

    Example:
        >>> async with RestApiEngine() as engine:
        ...     result = await engine.execute_query(
        ...         None,
        ...         DatasourceConfig(url="api.example.com"),
        ...         QueryConfig(path="/users", params=[Property("id", "5")]),
        ...     )
        ...     print(result.status, result.body)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        pool: Optional[QueryWorkerPool] = None,
        renderer: Optional[TemplateRenderer] = None,
        plugins: Optional[Sequence[QueryPlugin]] = None,
    ):
        self._config = config or EngineConfig()
        self._owns_pool = pool is None
        self._pool = pool or QueryWorkerPool(self._config)
        self._context_builder = RequestContextBuilder(renderer)

        self._logger: Optional['EngineLogger'] = None
        if self._config.logging and self._config.logging.has_output:
            from .core.logging import EngineLogger
            self._logger = EngineLogger(self._config.logging, name="rest_query_engine.engine")

        self._plugins: List[QueryPlugin] = list(plugins or [])
        self._executor = self._make_executor()

    def _make_executor(self) -> HttpExecutor:
        return HttpExecutor(
            self._pool,
            max_redirects=self._config.max_redirects,
            plugins=self._plugins,
            logger=self._logger,
        )

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def pool(self) -> QueryWorkerPool:
        return self._pool

    # ==================== Плагины ====================

    def add_plugin(self, plugin: QueryPlugin) -> None:
        """Добавить плагин (порядок выполнения - по priority)."""
        self._plugins.append(plugin)
        self._executor = self._make_executor()

    def remove_plugin(self, plugin: QueryPlugin) -> None:
        if plugin in self._plugins:
            self._plugins.remove(plugin)
            self._executor = self._make_executor()

    def get_plugins_order(self) -> List[tuple]:
        """[(имя плагина, приоритет)] в порядке выполнения."""
        return [(p.__class__.__name__, getattr(p, 'priority', 50)) for p in self._executor.plugins]

    # ==================== Жизненный цикл соединения ====================

    async def create_connection(self, datasource_config: DatasourceConfig) -> object:
        """Соединение - непрозрачная заглушка, пул общий."""
        return object()

    async def destroy_connection(self, connection: Any) -> None:
        return None

    async def test_connection(self, datasource_config: DatasourceConfig) -> DatasourceTestResult:
        """Всегда успешно: проверка выполняется запросами."""
        return DatasourceTestResult(success=True)

    def validate_config(self, datasource_config: DatasourceConfig) -> Set[str]:
        """Сообщения об ошибках конфигурации (всегда пусто)."""
        return set()

    def resolve_config(self, config_map: Mapping[str, Any]) -> DatasourceConfig:
        """
        Разобрать сохранённую запись datasource.

        Raises:
            ArgumentError: Неизвестный тип auth или невалидное свойство
        """
        return DatasourceConfig.from_dict(config_map)

    # ==================== Выполнение ====================

    def build_query_execution_context(
        self,
        datasource_config: DatasourceConfig,
        query_config: Union[QueryConfig, Mapping[str, Any]],
        runtime_params: Optional[Mapping[str, Any]] = None,
        session_context: Optional[SessionContext] = None,
    ) -> RequestExecutionContext:
        """
        Построить контекст выполнения.

        Raises:
            ArgumentError: REQUEST_URL_EMPTY, INVALID_REQUEST_URL,
                INVALID_CONTENT_TYPE, INVALID_HTTP_METHOD
        """
        if not isinstance(query_config, QueryConfig):
            query_config = QueryConfig.from_dict(query_config)

        context = self._context_builder.build(
            datasource_config, query_config, runtime_params, session_context
        )
        if self._logger:
            self._logger.debug(
                "Query context built",
                method=context.http_method,
                url=sanitize_url(context.url),
                content_type=context.content_type or None,
            )
        return context

    def prepare_request(self, context: RequestExecutionContext) -> PreparedRequest:
        """
        URI, тело, куки и preemptive auth из контекста.

        Raises:
            ArgumentError: Невалидный URI или JSON тело
        """
        uri = build_uri(context.url, context.url_params, context.encode_params)
        body = encode_body(
            context.http_method,
            context.content_type,
            context.query_body,
            context.body_params,
            context.encode_params,
        )

        headers: Dict[str, str] = dict(context.headers)
        headers.update(preemptive_headers(context.auth_config, uri))

        cookie = build_cookie_header(
            select_cookies(context.request_cookies, context.forward_cookies, context.forward_all_cookies),
            existing=headers.get("cookie"),
        )
        if cookie:
            headers["cookie"] = cookie

        # multipart: content type с boundary
        if body.content_type and body.content_type != context.content_type:
            headers["content-type"] = body.content_type

        return PreparedRequest(
            method=context.http_method,
            uri=uri,
            headers=headers,
            body=body,
            auth_config=context.auth_config,
        )

    async def execute_context(self, connection: Any, context: RequestExecutionContext) -> ExecutionResult:
        """
        Выполнить готовый контекст.

        Никогда не выбрасывает QueryEngineException: ошибка возвращается
        в ExecutionResult.error. CancelledError пробрасывается.
        """
        start = time.monotonic()
        try:
            context = await inherit_login_credentials(context)
            prepared = self.prepare_request(context)
            response = await self._executor.execute(prepared)
            result = classify_response(response, self._config.response_data_type_header)
        except asyncio.CancelledError:
            raise
        except QueryEngineException as e:
            return self._failed(e, context, start)
        except Exception as e:
            return self._failed(
                RestApiExecutionError("REST_API_EXECUTION_ERROR", str(e) or type(e).__name__, cause=e),
                context,
                start,
            )

        if self._logger:
            self._logger.info(
                "Query finished",
                method=context.http_method,
                url=sanitize_url(context.url),
                status=result.status,
                data_type=result.data_type.value if result.data_type else None,
                duration_ms=round((time.monotonic() - start) * 1000, 2),
            )
        return result

    async def execute_query(
        self,
        connection: Any,
        datasource_config: DatasourceConfig,
        query_config: Union[QueryConfig, Mapping[str, Any]],
        runtime_params: Optional[Mapping[str, Any]] = None,
        session_context: Optional[SessionContext] = None,
    ) -> ExecutionResult:
        """
        Построить контекст и выполнить запрос.

        Raises:
            ArgumentError: Ошибки построения контекста (до любого сетевого вызова)

        Returns:
            ExecutionResult (с error при ошибке выполнения)
        """
        with correlation_scope():
            context = self.build_query_execution_context(
                datasource_config, query_config, runtime_params, session_context
            )
            return await self.execute_context(connection, context)

    def _failed(self, error: QueryEngineException, context: RequestExecutionContext, start: float) -> ExecutionResult:
        if self._logger:
            self._logger.error(
                "Query failed",
                method=context.http_method,
                url=sanitize_url(context.url),
                error_kind=error.kind.value,
                error_code=error.code,
                error=error.message,
                duration_ms=round((time.monotonic() - start) * 1000, 2),
            )
        return ExecutionResult.from_error(error)

    # ==================== Ресурсы ====================

    async def close(self) -> None:
        """Закрыть пул (только собственный) и логгер."""
        if self._owns_pool:
            await self._pool.close()
        if self._logger:
            self._logger.close()

    async def __aenter__(self) -> "RestApiEngine":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
