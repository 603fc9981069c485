"""
Классификация ответа по content type.

Правила (первое совпадение):
1. Пустое тело          -> статус + заголовки, без маркера типа
2. includes application/json -> JSON дерево
3. image/gif|jpeg|png   -> base64 (IMAGE)
4. бинарный allowlist   -> base64 (BINARY)
5. иначе                -> UTF-8 текст, trim (TEXT)
"""

import base64
import json
from typing import Dict, List, Optional

import httpx

from .config import RESPONSE_DATA_TYPE_HEADER
from .exceptions import JsonParseError, RestApiExecutionError
from .media_type import APPLICATION_JSON, TEXT_PLAIN, MediaType, parse_media_type, try_parse_media_type
from .models import ExecutionResult, ResponseDataType

IMAGE_TYPES = frozenset({
    parse_media_type("image/gif"),
    parse_media_type("image/jpeg"),
    parse_media_type("image/png"),
})

BINARY_DATA_TYPES = frozenset({
    "application/zip",
    "application/octet-stream",
    "application/pdf",
    "application/pkcs8",
    "application/x-binary",
})


def serialize_headers(headers: httpx.Headers) -> Dict[str, List[str]]:
    """
    Заголовки ответа -> {имя: [значения]}.

    Имена группируются без учёта регистра, сохраняется первое написание.

    Raises:
        JsonParseError: Заголовки не декодируются
    """
    result: Dict[str, List[str]] = {}
    canonical: Dict[str, str] = {}
    try:
        for raw_key, raw_value in headers.raw:
            key = raw_key.decode(headers.encoding)
            value = raw_value.decode(headers.encoding)
            name = canonical.setdefault(key.lower(), key)
            result.setdefault(name, []).append(value)
    except (UnicodeDecodeError, LookupError) as e:
        raise JsonParseError("JSON_PARSE_ERROR", str(e), cause=e) from e
    return result


def response_media_type(headers: httpx.Headers) -> MediaType:
    """Content type ответа; отсутствующий или невалидный считается text/plain."""
    return try_parse_media_type(headers.get("content-type")) or TEXT_PLAIN


def classify_body(body: bytes, media_type: MediaType):
    """
    Декодировать тело по media type.

    Returns:
        (data_type, body)

    Raises:
        RestApiExecutionError: INVALID_JSON_FROM_RESPONSE
    """
    if media_type.includes(APPLICATION_JSON):
        try:
            return ResponseDataType.JSON, json.loads(body)
        except ValueError as e:
            raise RestApiExecutionError("INVALID_JSON_FROM_RESPONSE", cause=e) from e

    if media_type in IMAGE_TYPES:
        return ResponseDataType.IMAGE, base64.b64encode(body).decode("ascii")

    if str(media_type) in BINARY_DATA_TYPES:
        return ResponseDataType.BINARY, base64.b64encode(body).decode("ascii")

    return ResponseDataType.TEXT, body.decode("utf-8", errors="replace").strip()


def classify(
    status: int,
    headers: httpx.Headers,
    body: Optional[bytes],
    data_type_header: str = RESPONSE_DATA_TYPE_HEADER,
) -> ExecutionResult:
    """
    Собрать ExecutionResult из ответа.

    Example:
        >>> result = classify(200, httpx.Headers({"content-type": "application/json"}), b'{"ok":true}')
        >>> result.body, result.headers["X-OPENBLOCKS-RESPONSE-DATA-TYPE"]
        ({'ok': True}, ['JSON'])
    """
    result_headers = serialize_headers(headers)

    if not body:
        return ExecutionResult(status=status, headers=result_headers)

    data_type, decoded = classify_body(body, response_media_type(headers))
    result_headers[data_type_header] = [data_type.value]

    return ExecutionResult(
        status=status,
        headers=result_headers,
        body=decoded,
        data_type=data_type,
    )


def classify_response(response: httpx.Response, data_type_header: str = RESPONSE_DATA_TYPE_HEADER) -> ExecutionResult:
    return classify(response.status_code, response.headers, response.content, data_type_header)
