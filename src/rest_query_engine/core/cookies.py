"""
Проброс cookies вызывающего.

Какие cookies уходят на удалённый сервер: все при forward-all, иначе
только имена из конфигурации datasource.
"""

from typing import AbstractSet, List, Mapping, Optional, Sequence, Tuple


def select_cookies(
    request_cookies: Optional[Mapping[str, Sequence[str]]],
    forward_cookies: AbstractSet[str] = frozenset(),
    forward_all_cookies: bool = False,
) -> List[Tuple[str, str]]:
    """
    Пары ``(name, value)`` для проброса, в порядке вызывающего.

    Example:
        >>> select_cookies({"sid": ["1"], "theme": ["dark"]}, {"sid"})
        [('sid', '1')]
    """
    if not request_cookies:
        return []

    selected = []
    for name, values in request_cookies.items():
        if not forward_all_cookies and name not in forward_cookies:
            continue
        for value in values:
            selected.append((name, value))
    return selected


def build_cookie_header(cookies: Sequence[Tuple[str, str]], existing: Optional[str] = None) -> Optional[str]:
    """
    Значение заголовка ``Cookie``, дописанное к существующему.

    Example:
        >>> build_cookie_header([("a", "1"), ("b", "2")], existing="c=3")
        'c=3; a=1; b=2'
    """
    parts = [f"{name}={value}" for name, value in cookies]
    if existing and existing.strip():
        parts.insert(0, existing.strip())
    if not parts:
        return None
    return "; ".join(parts)
