"""Stable public API for building tooling on top of bluectl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Sequence

from bluectl.core.aggregator import aggregate
from bluectl.core.errors import (
    BluectlError,
    CommandError,
    CommandSpawnError,
    CommandTimeoutError,
    ConfigLoadError,
    ConfigValidationError,
    DeviceSelectionError,
    MalformedOutputError,
)
from bluectl.core.model import (
    ActionResult,
    AdapterStatus,
    BatteryInfo,
    DeviceRecord,
    Resolution,
    ScoredCandidate,
    Settings,
    SourceKind,
)
from bluectl.core.resolver import fuzzy_score, resolve
from bluectl.core.service import BluetoothService
from bluectl.tools.base import CommandRunner

__all__ = [
    "BluectlError",
    "CommandError",
    "CommandSpawnError",
    "CommandTimeoutError",
    "ConfigLoadError",
    "ConfigValidationError",
    "DeviceSelectionError",
    "MalformedOutputError",
    "ActionResult",
    "AdapterStatus",
    "BatteryInfo",
    "DeviceRecord",
    "Resolution",
    "ScoredCandidate",
    "Settings",
    "SourceKind",
    "CommandRunner",
    "aggregate",
    "fuzzy_score",
    "resolve",
    "Client",
]


class Client:
    """Public client for interacting with bluectl core capabilities.

    A `Client` instance wraps tool invocation, status aggregation, and fuzzy
    device resolution behind a stable API intended for third-party tools
    (menu bar apps, scripts, status lines).
    """

    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._service = BluetoothService(runner=runner, settings=settings)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    @property
    def settings(self) -> Settings:
        return self._service.settings

    def list_devices(self) -> list[DeviceRecord]:
        return self._service.list_devices()

    def status(self) -> AdapterStatus:
        return self._service.status()

    def resolve(self, query: str) -> Resolution:
        return self._service.resolve(query)

    def connect(self, query: str) -> ActionResult:
        return self._service.connect(query)

    def disconnect(self, query: str) -> ActionResult:
        return self._service.disconnect(query)

    @staticmethod
    def resolve_offline(query: str, devices: Sequence[DeviceRecord]) -> Resolution:
        """Resolve against an already collected device list without running tools."""
        return resolve(query, devices)
