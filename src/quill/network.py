"""Connectivity signal for gating AI calls and triggering queue drains.

Provides a polling monitor that notifies on offline-to-online transitions,
and a fixed signal for tests and forced-offline runs.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Protocol

from quill.config import ConnectivityConfig

logger = logging.getLogger(__name__)


class NetworkStatus(Enum):
    """Network connectivity status."""

    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


class ConnectivitySignal(Protocol):
    """Protocol for a boolean 'is online' signal."""

    @property
    def is_online(self) -> bool: ...


class StaticConnectivity:
    """Connectivity fixed at construction; flip it with ``set_online``."""

    def __init__(self, online: bool = True) -> None:
        self._online = online

    @property
    def is_online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> None:
        self._online = online


def _parse_host(entry: str) -> tuple[str, int]:
    host, _, port = entry.rpartition(":")
    return host, int(port)


class ConnectivityMonitor:
    """Monitors network connectivity on the running event loop.

    Performs periodic TCP reachability checks and awaits ``on_restored``
    whenever the status moves from offline (or unknown) to online.
    """

    def __init__(
        self,
        config: ConnectivityConfig | None = None,
        on_restored: Callable[[], Awaitable[object]] | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            config: Hosts, interval and timeout for checks.
            on_restored: Coroutine function awaited on offline->online.
        """
        self._config = config or ConnectivityConfig()
        self._hosts = [_parse_host(entry) for entry in self._config.check_hosts]
        self._on_restored = on_restored
        self._status = NetworkStatus.UNKNOWN
        self._task: asyncio.Task[None] | None = None

    @property
    def status(self) -> NetworkStatus:
        return self._status

    @property
    def is_online(self) -> bool:
        return self._status == NetworkStatus.ONLINE

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def set_on_restored(self, callback: Callable[[], Awaitable[object]] | None) -> None:
        self._on_restored = callback

    async def check_connectivity(self) -> NetworkStatus:
        """Try each host in turn; any successful connection means online."""
        for host, port in self._hosts:
            try:
                _, writer = await asyncio.wait_for(
                    asyncio.open_connection(host, port),
                    timeout=self._config.timeout_seconds,
                )
            except (OSError, TimeoutError):
                continue
            writer.close()
            await writer.wait_closed()
            return NetworkStatus.ONLINE

        return NetworkStatus.OFFLINE

    async def refresh(self) -> NetworkStatus:
        """Run one check, update status and fire the restore callback."""
        new_status = await self.check_connectivity()
        old_status = self._status
        self._status = new_status

        if new_status != old_status:
            logger.info("Network status changed: %s -> %s", old_status.value, new_status.value)
            if new_status == NetworkStatus.ONLINE and self._on_restored is not None:
                try:
                    await self._on_restored()
                except Exception:
                    logger.exception("Connectivity restore callback failed")
        return new_status

    def start(self) -> None:
        """Start background monitoring on the running loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._monitor_loop())

    async def stop(self) -> None:
        """Stop background monitoring."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _monitor_loop(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self._config.check_interval_seconds)


__all__ = [
    "ConnectivityMonitor",
    "ConnectivitySignal",
    "NetworkStatus",
    "StaticConnectivity",
]
