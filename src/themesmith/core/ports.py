# src/themesmith/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by tasks and the watcher.

The watcher and the CLI depend on these Protocols, not on the concrete
live-reload server; tests pass a fake notifier.
"""

from typing import Awaitable, Protocol


class ReloadNotifier(Protocol):
    """Fire-and-forget "reload now" to every currently connected client."""

    def broadcast_reload(self) -> int: ...


class DevServer(ReloadNotifier, Protocol):
    """What the CLI needs from the live-reload server."""

    @property
    def is_running(self) -> bool: ...

    def start(self) -> Awaitable[None]: ...
    def stop(self) -> Awaitable[None]: ...
    def wait_closed(self) -> Awaitable[None]: ...
