"""
Согласование аутентификации.

- Basic: заголовок Authorization добавляется один раз, до первой отправки
- OAuth2InheritFromLogin: credentials из login-сессии мержатся в
  URL параметры и заголовки до построения URI
- Digest: реактивно, по 401 challenge, ровно один повтор

Заголовки Basic и Digest вычисляет httpx (``httpx.BasicAuth`` /
``httpx.DigestAuth``); здесь только выбор варианта и шаги auth flow.
Цикл попыток и лимит повторов остаются в HttpExecutor.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Dict, Optional, Union

import httpx

from ..core.exceptions import ConfigurationError, ExecutionError, RestApiExecutionError
from ..core.models import (
    AuthConfig,
    BasicAuthConfig,
    DigestAuthConfig,
    NoAuthConfig,
    OAuth2InheritFromLoginConfig,
    PropertyType,
    RequestExecutionContext,
    to_properties,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_MISSING = "$ACCESS_TOKEN parameter missing."


def httpx_auth(auth_config: AuthConfig) -> Optional[httpx.Auth]:
    """
    httpx.Auth для варианта auth.

    Новый объект на каждый вызов: состояние digest challenge
    не переживает одно выполнение запроса.

    Raises:
        ConfigurationError: Неизвестный вариант auth
    """
    if isinstance(auth_config, BasicAuthConfig):
        return httpx.BasicAuth(auth_config.username, auth_config.password)
    if isinstance(auth_config, DigestAuthConfig):
        return httpx.DigestAuth(auth_config.username, auth_config.password)
    if isinstance(auth_config, (NoAuthConfig, OAuth2InheritFromLoginConfig)):
        return None
    raise ConfigurationError("INVALID_AUTH_TYPE", type(auth_config).__name__)


def preemptive_headers(auth_config: AuthConfig, uri: Union[str, httpx.URL]) -> Dict[str, str]:
    """
    Заголовки, которые добавляются до первой отправки.

    Только Basic: первый шаг ``httpx.BasicAuth.auth_flow`` уже несёт
    Authorization. Digest на первом шаге ничего не добавляет.

    Example:
        >>> preemptive_headers(BasicAuthConfig("user", "pass"), "https://api.example.com/")
        {'authorization': 'Basic dXNlcjpwYXNz'}

    Raises:
        ConfigurationError: Неизвестный вариант auth
    """
    auth = httpx_auth(auth_config)
    if not isinstance(auth, httpx.BasicAuth):
        return {}
    request = next(auth.auth_flow(httpx.Request("GET", uri)))
    return {"authorization": request.headers["authorization"]}


async def inherit_login_credentials(context: RequestExecutionContext) -> RequestExecutionContext:
    """
    Подтянуть credentials вызывающего и вернуть новый контекст.

    Провайдер может вернуть Property или mapping ``{type, key, value}``.
    Credentials типа ``param`` мержатся в URL параметры, ``header`` в
    заголовки (ключ в lower-case); совпадающие ключи перезаписываются.

    Raises:
        RestApiExecutionError: Пустой список credentials или ошибка провайдера
        ArgumentError: Элемент списка не Property и не mapping
    """
    if not isinstance(context.auth_config, OAuth2InheritFromLoginConfig):
        return context

    if context.auth_token_provider is None:
        raise RestApiExecutionError("REST_API_EXECUTION_ERROR", ACCESS_TOKEN_MISSING)

    try:
        credentials = await context.auth_token_provider()
    except asyncio.CancelledError:
        raise
    except Exception as e:
        raise RestApiExecutionError(
            "REST_API_EXECUTION_ERROR", f"get access token error: {e}", cause=e
        ) from e

    credentials = to_properties(credentials)
    if not credentials:
        raise RestApiExecutionError("REST_API_EXECUTION_ERROR", ACCESS_TOKEN_MISSING)

    url_params = dict(context.url_params)
    headers = dict(context.headers)
    for credential in credentials:
        if credential.key is None:
            continue
        value = credential.value if credential.value is not None else ""
        if credential.type == PropertyType.PARAM:
            url_params[credential.key] = value
        elif credential.type == PropertyType.HEADER:
            headers[credential.key.strip().lower()] = value

    logger.debug("Merged %d login credential(s) into request", len(credentials))
    return replace(context, url_params=url_params, headers=headers)


def digest_retry_header(
    auth_config: AuthConfig,
    response: httpx.Response,
    method: str,
    url: httpx.URL,
) -> Optional[str]:
    """
    Authorization для повтора после digest challenge.

    Прогоняет ``httpx.DigestAuth.auth_flow``: первый шаг отдаёт запрос
    без заголовка, второй получает 401 и отдаёт запрос с вычисленным
    ``Authorization: Digest ...`` (uri = путь + query). Если второго
    шага нет, ответ не challenge.

    Args:
        auth_config: Вариант auth
        response: Ответ последней попытки (с установленным request)
        method: Метод запроса
        url: URI, на который пришёл ответ

    Returns:
        Значение заголовка или None, если auth не Digest или ответ не challenge

    Raises:
        ExecutionError: DIGEST_CHALLENGE_PARSE_ERROR, challenge не удалось разобрать
    """
    if not isinstance(auth_config, DigestAuthConfig):
        return None
    if response.status_code != 401:
        return None

    flow = httpx_auth(auth_config).auth_flow(httpx.Request(method, url))
    next(flow)
    try:
        retry = flow.send(response)
    except StopIteration:
        return None
    except (httpx.ProtocolError, NotImplementedError, KeyError, ValueError) as e:
        raise ExecutionError("DIGEST_CHALLENGE_PARSE_ERROR", str(e), cause=e) from e
    return retry.headers["authorization"]
