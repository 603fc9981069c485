"""
Вспомогательные функции query engine.

Содержит:
- Маскирование URL для безопасного логирования
- Маскирование заголовков для безопасного логирования
"""

from typing import Mapping, Optional, Set
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


# Default sensitive parameter names that should be masked in logs
DEFAULT_SENSITIVE_PARAMS = {
    'api_key',
    'apikey',
    'api-key',
    'token',
    'access_token',
    'accesstoken',
    'refresh_token',
    'key',
    'secret',
    'password',
    'passwd',
    'pwd',
    'auth',
    'authorization',
    'credentials',
    'client_secret',
    'private_key',
    'session',
    'session_id',
    'sessionid',
}

SENSITIVE_HEADER_NAMES = {
    'authorization',
    'api-key',
    'x-api-key',
    'x-auth-token',
    'cookie',
    'set-cookie',
    'proxy-authorization',
    'x-csrf-token',
    'x-session-token',
}


def sanitize_url(
    url: str,
    extra_params: Optional[Set[str]] = None,
    mask: str = 'REDACTED'
) -> str:
    """
    Замаскировать чувствительные query параметры и userinfo в URL для логов.

    Args:
        url: The URL to sanitize
        extra_params: Additional parameter names to mask (case-insensitive)
        mask: The string to use for masking (default: 'REDACTED')

    Returns:
        Sanitized URL with sensitive parameters masked

    Examples:
        >>> sanitize_url('https://api.example.com/data?api_key=secret123')
        'https://api.example.com/data?api_key=REDACTED'

        >>> sanitize_url('https://bob:pw@api.example.com/data')
        'https://REDACTED@api.example.com/data'
    """
    if not url:
        return url

    try:
        sensitive_params = DEFAULT_SENSITIVE_PARAMS | (
            {p.lower() for p in extra_params} if extra_params else set()
        )

        parsed = urlsplit(url)
        netloc = parsed.netloc
        if '@' in netloc:
            netloc = mask + '@' + netloc.rsplit('@', 1)[1]

        if not parsed.query:
            return urlunsplit(parsed._replace(netloc=netloc))

        params = parse_qsl(parsed.query, keep_blank_values=True)
        sanitized = [
            (name, mask if name.lower() in sensitive_params else value)
            for name, value in params
        ]

        return urlunsplit(parsed._replace(netloc=netloc, query=urlencode(sanitized)))

    except ValueError:
        # Don't risk exposing the original URL
        return '<URL sanitization failed>'


def sanitize_headers(headers: Optional[Mapping[str, str]], mask: str = 'REDACTED') -> dict:
    """
    Замаскировать чувствительные заголовки для логов.

    Args:
        headers: Mapping of headers
        mask: The string to use for masking

    Returns:
        Sanitized headers dictionary

    Examples:
        >>> sanitize_headers({'Authorization': 'Digest username="bob"'})
        {'Authorization': 'REDACTED'}
    """
    if not headers:
        return {}

    return {
        key: mask if key.lower() in SENSITIVE_HEADER_NAMES else value
        for key, value in headers.items()
    }
