"""
Рендеринг шаблонов с плейсхолдерами ``{{name}}``.

Engine зависит только от протокола TemplateRenderer; MustacheRenderer
- реализация по умолчанию.
"""

import json
import re
from typing import Any, List, Mapping, Optional, Protocol


# {{ name }}, {{user.name}}, {{ items.0 }}
VARIABLE_PATTERN = re.compile(r'\{\{\s*([\w$][\w$.\-]*)\s*\}\}')


class TemplateRenderer(Protocol):
    """Подставляет именованные runtime параметры в строки."""

    def render(self, template: str, params: Mapping[str, Any]) -> str:
        """Рендеринг обычной строки."""
        ...

    def render_json(self, template: str, params: Mapping[str, Any]) -> str:
        """Рендеринг, после которого шаблон остаётся валидным JSON."""
        ...


def extract_variables(template: str) -> List[str]:
    """
    Имена всех переменных шаблона.

    Example:
        >>> extract_variables("Hello {{name}}, your id is {{ id }}")
        ['name', 'id']
    """
    if not template:
        return []
    return VARIABLE_PATTERN.findall(template)


def lookup(params: Mapping[str, Any], name: str) -> Any:
    """Значение по имени (возможно с точками); отсутствующее -> None."""
    if name in params:
        return params[name]

    current: Any = params
    for part in name.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
    return current


def to_text(value: Any) -> str:
    """Строковое представление значения для обычного рендеринга."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


class MustacheRenderer:
    """
    Renderer по умолчанию.

    Отсутствующие параметры рендерятся пустой строкой. В JSON режиме
    плейсхолдер внутри строкового литерала получает JSON-экранированный
    текст значения, вне литерала получает значение как JSON литерал.

    Example:
        >>> renderer = MustacheRenderer()
        >>> renderer.render("/users/{{id}}", {"id": 5})
        '/users/5'
        >>> renderer.render_json('{"name":"{{name}}","age":{{age}}}', {"name": 'B"ob', "age": 3})
        '{"name":"B\\\\"ob","age":3}'
    """

    def render(self, template: Optional[str], params: Mapping[str, Any]) -> str:
        if not template:
            return template or ""
        return VARIABLE_PATTERN.sub(lambda m: to_text(lookup(params, m.group(1))), template)

    def render_json(self, template: Optional[str], params: Mapping[str, Any]) -> str:
        if not template:
            return template or ""

        out = []
        pos = 0
        in_string = False
        escaped = False
        i = 0
        while i < len(template):
            if not escaped:
                match = VARIABLE_PATTERN.match(template, i)
                if match:
                    out.append(template[pos:i])
                    value = lookup(params, match.group(1))
                    if in_string:
                        out.append(json.dumps(to_text(value), ensure_ascii=False)[1:-1])
                    else:
                        out.append(json.dumps(value, ensure_ascii=False, separators=(",", ":")))
                    i = pos = match.end()
                    continue

            ch = template[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            i += 1

        out.append(template[pos:])
        return "".join(out)


default_renderer = MustacheRenderer()
