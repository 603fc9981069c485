"""
Построение RequestExecutionContext.

Объединяет datasource и query конфигурацию, рендерит шаблоны,
нормализует URL и проверяет content type. Контекст строится один раз
на вызов и дальше не изменяется.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .body_encoder import is_json_content_type
from .exceptions import ArgumentError
from .media_type import is_valid_media_type
from .models import (
    DatasourceConfig,
    Property,
    QueryConfig,
    RequestExecutionContext,
    SessionContext,
)
from .templating import TemplateRenderer, default_renderer
from .uri_builder import normalize_url


class RequestContextBuilder:
    """
    Строит RequestExecutionContext из конфигураций и runtime параметров.

    Args:
        renderer: Рендерер шаблонов (по умолчанию MustacheRenderer)

    Example:
        >>> builder = RequestContextBuilder()
        >>> ctx = builder.build(
        ...     DatasourceConfig(url="api.example.com"),
        ...     QueryConfig(path="/users/{{id}}"),
        ...     {"id": 5},
        ... )
        >>> ctx.url
        'api.example.com/users/5'
    """

    def __init__(self, renderer: Optional[TemplateRenderer] = None):
        self.renderer = renderer or default_renderer

    def build(
        self,
        datasource_config: DatasourceConfig,
        query_config: QueryConfig,
        runtime_params: Optional[Mapping[str, Any]] = None,
        session_context: Optional[SessionContext] = None,
    ) -> RequestExecutionContext:
        """
        Собрать контекст выполнения.

        Raises:
            ArgumentError: REQUEST_URL_EMPTY, INVALID_REQUEST_URL, INVALID_CONTENT_TYPE
        """
        params = runtime_params or {}
        session = session_context or SessionContext()

        query_body = (query_config.body or "").strip()
        query_path = (query_config.path or "").strip()

        rendered_path = self.renderer.render(query_path, params)
        rendered_params = self.render_properties(query_config.params, params)
        rendered_headers = self.render_properties(query_config.headers, params)
        rendered_body_form = self.render_properties(query_config.body_form_data, params)

        url = self.build_url(datasource_config.url, rendered_path, params)

        headers = merge_headers(datasource_config.headers, rendered_headers)
        content_type = headers.get("content-type", "").lower()
        if not is_valid_media_type(content_type):
            raise ArgumentError("INVALID_CONTENT_TYPE", content_type)

        if is_json_content_type(content_type):
            rendered_body = self.renderer.render_json(query_body, params)
        else:
            rendered_body = self.renderer.render(query_body, params)

        return RequestExecutionContext(
            http_method=query_config.http_method,
            url=url,
            headers=headers,
            content_type=content_type,
            url_params=merge_url_params(datasource_config.params, rendered_params),
            body_params=merge_body_params(datasource_config.body_form_data, rendered_body_form),
            encode_params=query_config.encode_params,
            query_body=first_non_blank(rendered_body, datasource_config.body),
            forward_cookies=datasource_config.forward_cookies,
            forward_all_cookies=datasource_config.forward_all_cookies,
            request_cookies=session.cookies,
            auth_config=datasource_config.auth_config,
            auth_token_provider=session.auth_token_provider,
        )

    def build_url(self, url_domain: str, rendered_path: str, params: Mapping[str, Any]) -> str:
        """Склеить базовый URL и путь, отрендерить и нормализовать."""
        url = (url_domain or "").strip() + (rendered_path or "").strip()
        if not url:
            raise ArgumentError("REQUEST_URL_EMPTY")

        url = self.renderer.render(url, params)
        return normalize_url(url)

    def render_properties(self, properties: Iterable[Property], params: Mapping[str, Any]) -> List[Property]:
        """Рендерить key и value каждого Property независимо, type сохраняется."""
        return [
            Property(
                key=None if p.key is None else self.renderer.render(p.key, params),
                value=None if p.value is None else self.renderer.render(p.value, params),
                type=p.type,
            )
            for p in properties
        ]

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MERGE HELPERS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def merge_headers(*groups: Iterable[Property]) -> Dict[str, str]:
    """
    Слить заголовки: ключ trim + lower-case, последнее значение побеждает.

    Пустые ключи и значения пропускаются.
    """
    headers: Dict[str, str] = {}
    for group in groups:
        for p in group:
            if not p.key or not p.key.strip() or not p.value or not p.value.strip():
                continue
            headers[p.key.strip().lower()] = p.value
    return headers


def merge_url_params(*groups: Iterable[Property]) -> Dict[str, str]:
    """Слить URL параметры: последнее значение по ключу побеждает."""
    params: Dict[str, str] = {}
    for group in groups:
        for p in group:
            if p.key is None:
                continue
            params[p.key] = p.value if p.value is not None else ""
    return params


def merge_body_params(*groups: Iterable[Property]) -> List[Property]:
    """Слить поля формы: первое вхождение по ключу побеждает."""
    seen = set()
    result = []
    for group in groups:
        for p in group:
            if p.key is None or p.key in seen:
                continue
            seen.add(p.key)
            result.append(p)
    return result


def first_non_blank(*values: Optional[str]) -> str:
    for value in values:
        if value and value.strip():
            return value
    return ""
