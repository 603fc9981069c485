"""
Нормализация URL и сборка query параметров.

Percent-encoding применяется ровно один раз, при добавлении параметра;
базовая строка URL не кодируется.
"""

import re
from typing import Mapping
from urllib.parse import quote_plus, urlsplit, urlunsplit

import httpx

from .exceptions import ArgumentError

# 2+ слэша подряд, кроме как сразу после схемы
_REDUNDANT_SLASHES = re.compile(r'(?<!http:)(?<!https:)/{2,}')


def add_scheme_if_missing(url: str) -> str:
    """
    Добавить ``http://``, если у URL нет схемы.

    Examples:
        >>> add_scheme_if_missing("api.example.com/users")
        'http://api.example.com/users'
        >>> add_scheme_if_missing("ftp://files.example.com")
        'ftp://files.example.com'
    """
    if not url or url.lower().startswith("http") or "://" in url:
        return url
    return "http://" + url


def collapse_slashes(url: str) -> str:
    """
    Схлопнуть лишние слэши.

    Example:
        >>> collapse_slashes("http://api.example.com//v1///users")
        'http://api.example.com/v1/users'
    """
    return _REDUNDANT_SLASHES.sub("/", url)


def remove_dot_segments(path: str) -> str:
    """Убрать сегменты ``.`` и ``..`` из пути (RFC 3986, 5.2.4)."""
    if "." not in path:
        return path

    output = []
    segments = path.split("/")
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        if segment == ".":
            if last:
                output.append("")
            continue
        if segment == "..":
            if len(output) > 1 or (output and output[0] != ""):
                output.pop()
            if last:
                output.append("")
            continue
        output.append(segment)
    return "/".join(output)


def normalize_url(url: str) -> str:
    """
    Нормализовать URL и проверить синтаксис.

    Raises:
        ArgumentError: INVALID_REQUEST_URL, синтаксис невалиден
    """
    try:
        parts = urlsplit(url)
        normalized = urlunsplit(parts._replace(path=remove_dot_segments(parts.path)))
        httpx.URL(normalized)
    except (ValueError, httpx.InvalidURL) as e:
        raise ArgumentError("INVALID_REQUEST_URL", url, cause=e) from e
    return normalized


def build_uri(url: str, params: Mapping[str, str], encode_params: bool = True) -> httpx.URL:
    """
    Собрать итоговый URI запроса.

    Args:
        url: Нормализованный URL запроса
        params: URL параметры, добавляются в порядке mapping
        encode_params: Form-encode ключей и значений (UTF-8) перед добавлением

    Raises:
        ArgumentError: Итоговый URI синтаксически невалиден

    Example:
        >>> str(build_uri("api.example.com/users", {"id": "5"}))
        'http://api.example.com/users?id=5'
    """
    http_url = collapse_slashes(add_scheme_if_missing(url or ""))

    if params:
        pairs = []
        for key, value in params.items():
            value = "" if value is None else value
            if encode_params:
                pairs.append(f"{quote_plus(key)}={quote_plus(value)}")
            else:
                pairs.append(f"{key}={value}")
        base, sep, fragment = http_url.partition("#")
        joiner = "&" if "?" in base else "?"
        if base.endswith("?") or base.endswith("&"):
            joiner = ""
        http_url = base + joiner + "&".join(pairs) + sep + fragment

    try:
        return httpx.URL(http_url)
    except httpx.InvalidURL as e:
        raise ArgumentError("INVALID_REQUEST_URL", http_url, cause=e) from e
