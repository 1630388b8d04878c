# src/themesmith/cli/registry.py

from __future__ import annotations

from collections.abc import Iterator

from ..graph import Node, Task, as_node, describe


class TaskRegistry:
    """Name -> graph node table built once at startup and handed to the CLI."""

    def __init__(self, default: str | None = None) -> None:
        self._nodes: dict[str, Node] = {}
        self._help: dict[str, str] = {}
        self.default = default

    def register(self, name: str, node: Task | Node, help_text: str = "") -> None:
        key = name.lower()
        if key in self._nodes:
            raise ValueError(f"Task {name!r} is already registered")
        self._nodes[key] = as_node(node)
        if not help_text and isinstance(node, Task):
            help_text = node.description
        self._help[key] = help_text

    def get(self, name: str | None = None) -> Node:
        key = (name or self.default or "").lower()
        try:
            return self._nodes[key]
        except KeyError:
            raise KeyError(f"Unknown task: {key!r}. Known tasks: {', '.join(self.names())}") from None

    def names(self) -> list[str]:
        return list(self._nodes)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def build_help(self) -> str:
        lines = ["Available tasks:"]
        for name, node in self._nodes.items():
            marker = " (default)" if name == self.default else ""
            text = self._help[name] or describe(node)
            lines.append(f"  {name}{marker} - {text}")
        return "\n".join(lines)
