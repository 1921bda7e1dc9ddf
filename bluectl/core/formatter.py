"""Terminal rendering of connection state and battery levels."""

from __future__ import annotations

from enum import Enum

import typer

from bluectl.core.model import BatteryInfo, BatteryThresholds, DeviceRecord


class Severity(str, Enum):
    HEALTHY = "healthy"
    LOW = "low"
    CRITICAL = "critical"


_SEVERITY_COLORS = {
    Severity.HEALTHY: typer.colors.GREEN,
    Severity.LOW: typer.colors.YELLOW,
    Severity.CRITICAL: typer.colors.RED,
}


def battery_severity(percent: int, thresholds: BatteryThresholds | None = None) -> Severity:
    thresholds = thresholds or BatteryThresholds()
    if percent > thresholds.healthy:
        return Severity.HEALTHY
    if percent > thresholds.critical:
        return Severity.LOW
    return Severity.CRITICAL


def format_percent(percent: int, thresholds: BatteryThresholds | None = None) -> str:
    severity = battery_severity(percent, thresholds)
    return typer.style(f"{percent}%", fg=_SEVERITY_COLORS[severity])


def battery_levels(battery: BatteryInfo) -> list[tuple[str, int]]:
    """Labelled levels to display; a left/right pair never falls back to ``single``."""
    if battery.is_pair:
        levels = [("L", battery.left), ("R", battery.right)]
        return [(label, value) for label, value in levels if value is not None]
    if battery.single is not None:
        return [("Battery", battery.single)]
    return []


def format_battery(battery: BatteryInfo | None, thresholds: BatteryThresholds | None = None) -> str:
    if battery is None:
        return ""
    return " ".join(
        f"{label}: {format_percent(value, thresholds)}" for label, value in battery_levels(battery)
    )


def format_connection(connected: bool) -> str:
    if connected:
        return typer.style("Connected", fg=typer.colors.GREEN)
    return typer.style("Disconnected", fg=typer.colors.RED)


def format_flag(value: bool | None, on: str = "On", off: str = "Off") -> str:
    if value is None:
        return typer.style("Unknown", fg=typer.colors.YELLOW)
    if value:
        return typer.style(on, fg=typer.colors.GREEN)
    return typer.style(off, fg=typer.colors.RED)


def format_device(device: DeviceRecord, thresholds: BatteryThresholds | None = None) -> str:
    address = device.address or "<no-address>"
    line = f"{address} {format_connection(device.connected)} \"{device.name}\""
    battery = format_battery(device.battery, thresholds)
    if battery:
        line = f"{line} {battery}"
    return line
