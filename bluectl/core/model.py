"""Core data models used across aggregator, resolver, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SourceKind(str, Enum):
    PAIRED = "paired"
    PROFILER_TEXT = "profiler-text"
    PROFILER_JSON = "profiler-json"


@dataclass(frozen=True)
class BatteryInfo:
    left: int | None = None
    right: int | None = None
    single: int | None = None

    @property
    def is_pair(self) -> bool:
        return self.left is not None or self.right is not None

    @property
    def is_empty(self) -> bool:
        return self.left is None and self.right is None and self.single is None


@dataclass(frozen=True)
class DeviceRecord:
    address: str
    name: str
    connected: bool
    battery: BatteryInfo | None = None


@dataclass(frozen=True)
class ScoredCandidate:
    device: DeviceRecord
    score: int


@dataclass(frozen=True)
class Resolution:
    query: str
    selected: DeviceRecord | None
    candidates: tuple[ScoredCandidate, ...] = ()

    @property
    def matched(self) -> bool:
        return self.selected is not None

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


@dataclass(frozen=True)
class AdapterStatus:
    powered: bool | None
    discoverable: bool | None
    output_device: str | None
    devices: tuple[DeviceRecord, ...]


@dataclass(frozen=True)
class ActionResult:
    action: str
    resolution: Resolution


@dataclass(frozen=True)
class BatteryThresholds:
    healthy: int = 50
    critical: int = 20


@dataclass(frozen=True)
class Settings:
    sources: tuple[SourceKind, ...] = (SourceKind.PROFILER_JSON,)
    merge_duplicates: bool = False
    registry_battery: bool | None = None
    command_timeout_s: float = 10.0
    battery_thresholds: BatteryThresholds = field(default_factory=BatteryThresholds)
    log_level: str = "WARNING"

    @property
    def use_registry_battery(self) -> bool:
        if self.registry_battery is not None:
            return self.registry_battery
        return SourceKind.PROFILER_JSON not in self.sources
