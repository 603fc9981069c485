"""
Кодирование тела запроса по итоговому content type.

Политика (первое совпадение):
    GET                                   -> пустое тело
    пустой content type                   -> пустое тело
    JSON семейство                        -> тело парсится и сериализуется заново
    x-www-form-urlencoded / multipart     -> поля body-form
    остальное                             -> тело как UTF-8 текст
"""

import json
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import quote_plus

import httpx

from .exceptions import ArgumentError
from .models import Property

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM_DATA = "multipart/form-data"
MULTIPART_PART_TYPE = "text/plain;charset=UTF-8"

JSON_CONTENT_TYPES = frozenset({
    "application/json",
    "application/json;charset=utf-8",
    "application/problem+json",
    "application/problem+json;charset=utf-8",
})


@dataclass(frozen=True)
class EncodedBody:
    """
    Байты тела и content type, под который они закодированы.

    ``content_type`` отличается от content type запроса только для
    multipart: там добавляется boundary.
    """

    content: bytes = b""
    content_type: Optional[str] = None

    def __len__(self) -> int:
        return len(self.content)


EMPTY_BODY = EncodedBody()


def is_json_content_type(content_type: Optional[str]) -> bool:
    """Точное совпадение с JSON семейством (content type уже в lower-case)."""
    if not content_type:
        return False
    return content_type.replace(" ", "") in JSON_CONTENT_TYPES


def encode_body(
    method: str,
    content_type: Optional[str],
    body: Optional[str],
    body_form_fields: Iterable[Property] = (),
    encode_params: bool = True,
) -> EncodedBody:
    """
    Логическое тело -> байты для отправки.

    Args:
        method: HTTP метод
        content_type: Итоговый content type (lower-case)
        body: Тело запроса после рендеринга
        body_form_fields: Поля для form/multipart
        encode_params: Кодировать ли значения полей

    Raises:
        ArgumentError: INVALID_JSON_BODY, JSON тело не парсится
    """
    if method.upper() == "GET":
        return EMPTY_BODY

    if not content_type or not content_type.strip():
        return EMPTY_BODY

    if is_json_content_type(content_type):
        return EncodedBody(encode_json(body), content_type)

    if content_type == FORM_URLENCODED:
        return EncodedBody(encode_form_urlencoded(body_form_fields, encode_params), content_type)

    if content_type == MULTIPART_FORM_DATA:
        return encode_multipart(body_form_fields, encode_params)

    return EncodedBody((body or "").encode("utf-8"), content_type)


def encode_json(body: Optional[str]) -> bytes:
    """Распарсить и компактно сериализовать JSON; пустое тело остаётся пустым."""
    if body is None or not body.strip():
        return b""
    try:
        value = json.loads(body)
    except ValueError as e:
        raise ArgumentError("INVALID_JSON_BODY", str(e), cause=e) from e
    return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _form_value(value: Optional[str], encode_params: bool) -> str:
    value = value or ""
    return quote_plus(value) if encode_params else value


def encode_form_urlencoded(fields: Iterable[Property], encode_params: bool = True) -> bytes:
    """
    ``k=v&k2=v2``, ключи и значения form-encoded при ``encode_params``.

    Example:
        >>> encode_form_urlencoded([Property("a b", "1&2")])
        b'a+b=1%262'
    """
    pairs = []
    for field in fields:
        if field.key is None:
            continue
        key = quote_plus(field.key) if encode_params else field.key
        pairs.append(f"{key}={_form_value(field.value, encode_params)}")
    return "&".join(pairs).encode("utf-8")


def encode_multipart(
    fields: Iterable[Property],
    encode_params: bool = True,
    boundary: Optional[str] = None,
) -> EncodedBody:
    """
    multipart/form-data, одна текстовая часть на поле.

    Тело собирает httpx (``files=``); boundary генерирует httpx, если не
    передан. При ``encode_params`` значения form-encoded, как в
    x-www-form-urlencoded. Имена полей httpx экранирует всегда
    (``"`` -> ``%22``).

    Без полей тело пустое, content type остаётся ``multipart/form-data``.

    Returns:
        EncodedBody с content type ``multipart/form-data; boundary=...``
    """
    files = [
        (field.key, (None, _form_value(field.value, encode_params).encode("utf-8"), MULTIPART_PART_TYPE))
        for field in fields
        if field.key is not None
    ]
    headers = {"content-type": f"{MULTIPART_FORM_DATA}; boundary={boundary}"} if boundary else None

    request = httpx.Request("POST", "/", headers=headers, files=files)
    content = request.read()
    return EncodedBody(content, request.headers.get("content-type", MULTIPART_FORM_DATA))
