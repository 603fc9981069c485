"""Плагины query engine."""

from .plugin import PluginPriority, QueryPlugin

__all__ = [
    "PluginPriority",
    "QueryPlugin",
]
