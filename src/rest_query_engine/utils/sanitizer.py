"""
Маскирование чувствительных данных в логах.

Используется EngineLogger: все keyword поля лог-записи проходят через
mask_sensitive_data, поэтому пароли basic/digest auth, токены из login
сессии и куки не попадают в логи.
"""

import re
from typing import Any, Dict, Mapping


# Чувствительные ключи (case-insensitive, частичное совпадение)
# Набор можно расширить через add_sensitive_keys()
SENSITIVE_KEYS = {
    # Пароли
    'password', 'passwd', 'pwd',
    # Токены
    'token', 'access_token', 'refresh_token', 'id_token', 'jwt',
    # Секреты и ключи
    'secret', 'client_secret', 'api_key', 'apikey', 'private_key',
    # Аутентификация
    'authorization', 'credentials',
    # Сессии и куки
    'cookie', 'session', 'csrf', 'xsrf',
}

# Паттерны для строк (заголовки, URL, сообщения об ошибках)
SENSITIVE_PATTERNS = [
    # Bearer tokens
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # Basic auth
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # Digest auth: все параметры после схемы
    (re.compile(r'(Digest\s+)(\S.*)$', re.IGNORECASE), r'\1***REDACTED***'),
    # key=value / key: value
    (re.compile(r'(api[_-]?key[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(token[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(password[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    # user:password@host
    (re.compile(r'(://[^:/@\s]+:)([^@/\s]+)(@)'), r'\1***REDACTED***\3'),
]


def mask_sensitive_data(data: Any, mask: str = "***REDACTED***") -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Args:
        data: Данные для маскирования
        mask: Строка-заменитель

    Returns:
        Копия данных с замаскированными значениями

    Examples:
        >>> mask_sensitive_data({"authorization": "Basic dXNlcjpwYXNz", "status": 200})
        {'authorization': '***REDACTED***', 'status': 200}

        >>> mask_sensitive_data("https://api.example.com/x?api_key=secret123")
        'https://api.example.com/x?api_key=***REDACTED***'
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return _mask_string(data, mask)

    if isinstance(data, Mapping):
        return _mask_dict(data, mask)

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    # Другие объекты (enum, URL, исключения) - как есть
    return data


def _mask_dict(data: Mapping[str, Any], mask: str) -> Dict[str, Any]:
    result = {}
    for key, value in data.items():
        key_lower = key.lower() if isinstance(key, str) else str(key).lower()
        if _is_sensitive_key(key_lower):
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)
    return result


def _mask_string(text: str, mask: str) -> str:
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = pattern.sub(replacement.replace('***REDACTED***', mask), result)
    return result


def _is_sensitive_key(key: str) -> bool:
    if key in SENSITIVE_KEYS:
        return True
    return any(sensitive in key for sensitive in SENSITIVE_KEYS)


def mask_headers(headers: Mapping[str, str], mask: str = "***REDACTED***") -> Dict[str, str]:
    """
    Маскирует чувствительные HTTP заголовки.

    Example:
        >>> mask_headers({"Authorization": "Bearer t", "Accept": "*/*"})
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}
    """
    return _mask_dict(headers, mask)


def add_sensitive_keys(*keys: str) -> None:
    """
    Добавить ключи в SENSITIVE_KEYS.

    Example:
        >>> add_sensitive_keys('x-tenant-secret')
    """
    for key in keys:
        SENSITIVE_KEYS.add(key.lower())


def remove_sensitive_keys(*keys: str) -> None:
    """Удалить ключи из SENSITIVE_KEYS."""
    for key in keys:
        SENSITIVE_KEYS.discard(key.lower())


def get_sensitive_keys() -> set:
    """Копия текущего набора чувствительных ключей."""
    return SENSITIVE_KEYS.copy()
