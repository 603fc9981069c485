"""
Разбор и сравнение media type.

Нестрогий парсер строк ``type/subtype; key=value``: проверяет content type
запроса и используется при классификации ответов.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# символы token по RFC 7230
_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


class InvalidMediaTypeError(ValueError):
    """Строку media type не удалось разобрать."""


@dataclass(frozen=True)
class MediaType:
    """
    Разобранный media type.

    Type, subtype и имена параметров в lower-case; значения параметров
    сохраняют регистр, кроме ``charset``.
    """

    type: str
    subtype: str
    parameters: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def params(self) -> Dict[str, str]:
        return dict(self.parameters)

    @property
    def essence(self) -> str:
        """``type/subtype`` без параметров."""
        return f"{self.type}/{self.subtype}"

    @property
    def is_wildcard_type(self) -> bool:
        return self.type == "*"

    @property
    def is_wildcard_subtype(self) -> bool:
        return self.subtype == "*" or self.subtype.startswith("*+")

    @property
    def suffix(self) -> Optional[str]:
        """Суффикс структурного синтаксиса, например ``json`` для ``application/problem+json``."""
        if "+" not in self.subtype:
            return None
        return self.subtype.rsplit("+", 1)[1]

    def includes(self, other: Optional['MediaType']) -> bool:
        """
        Включает ли этот media type ``other``.

        ``*/*`` включает всё; ``application/*`` включает любой subtype
        ``application``; ``application/*+json`` включает subtype
        ``application`` с суффиксом ``+json``. Параметры не учитываются.
        """
        if other is None:
            return False
        if self.is_wildcard_type:
            return True
        if self.type != other.type:
            return False
        if self.subtype == other.subtype:
            return True
        if self.is_wildcard_subtype:
            if self.subtype == "*":
                return True
            return other.suffix is not None and other.suffix == self.suffix
        return False

    def __str__(self) -> str:
        text = self.essence
        for key, value in self.parameters:
            text += f";{key}={value}"
        return text


def parse_media_type(value: str) -> MediaType:
    """
    Разобрать строку media type.

    Raises:
        InvalidMediaTypeError: Строка не является валидным media type

    Examples:
        >>> parse_media_type("application/json; charset=UTF-8").essence
        'application/json'
        >>> parse_media_type("*").essence
        '*/*'
    """
    if value is None or not value.strip():
        raise InvalidMediaTypeError("media type must not be empty")

    parts = _split_parameters(value)
    full_type = parts[0].strip()

    # "*" как сокращение для */*
    if full_type == "*":
        full_type = "*/*"

    if "/" not in full_type:
        raise InvalidMediaTypeError(f"does not contain '/': {value!r}")

    type_, _, subtype = full_type.partition("/")
    if not subtype:
        raise InvalidMediaTypeError(f"does not contain subtype after '/': {value!r}")
    if not _TOKEN.match(type_) or not _TOKEN.match(subtype):
        raise InvalidMediaTypeError(f"invalid token in {value!r}")
    if type_ == "*" and subtype != "*":
        raise InvalidMediaTypeError(f"wildcard type is legal only in '*/*': {value!r}")

    parameters = []
    for raw in parts[1:]:
        raw = raw.strip()
        if not raw:
            continue
        key, eq, param_value = raw.partition("=")
        key = key.strip().lower()
        param_value = param_value.strip()
        if not eq or not _TOKEN.match(key):
            raise InvalidMediaTypeError(f"invalid parameter {raw!r} in {value!r}")
        if not _is_quoted(param_value) and not _TOKEN.match(param_value):
            raise InvalidMediaTypeError(f"invalid parameter value {param_value!r} in {value!r}")
        if key == "charset":
            param_value = param_value.strip('"').lower()
        parameters.append((key, param_value))

    return MediaType(type_.lower(), subtype.lower(), tuple(parameters))


def try_parse_media_type(value: Optional[str]) -> Optional[MediaType]:
    """Как parse_media_type, но None для пустой или невалидной строки."""
    if not value:
        return None
    try:
        return parse_media_type(value)
    except InvalidMediaTypeError:
        return None


def is_valid_media_type(value: Optional[str]) -> bool:
    """Пустая строка валидна: content type не задан явно."""
    if not value:
        return True
    return try_parse_media_type(value) is not None


def _split_parameters(value: str):
    """Разбить по ';' вне кавычек."""
    parts = []
    current = []
    quoted = False
    escaped = False
    for ch in value:
        if escaped:
            current.append(ch)
            escaped = False
            continue
        if ch == "\\" and quoted:
            current.append(ch)
            escaped = True
            continue
        if ch == '"':
            quoted = not quoted
        if ch == ";" and not quoted:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    if quoted:
        raise InvalidMediaTypeError(f"unterminated quoted string in {value!r}")
    parts.append("".join(current))
    return parts


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value.startswith('"') and value.endswith('"')


APPLICATION_JSON = parse_media_type("application/json")
TEXT_PLAIN = parse_media_type("text/plain")
