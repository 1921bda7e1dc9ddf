"""Parsing and aggregation of Bluetooth status output from external tools.

Every function here is a pure function of the text it is given. Spawning the
tools lives in ``bluectl.tools``; the service feeds their captured output in.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from enum import Enum
from typing import Any

from bluectl.core.errors import MalformedOutputError
from bluectl.core.model import BatteryInfo, DeviceRecord, SourceKind

LOGGER = logging.getLogger(__name__)

_PAIRED_ADDRESS_RE = re.compile(r"^address:\s*([^,]*)")
_PAIRED_NAME_RE = re.compile(r'name:\s*"([^"]*)"')
_PERCENT_RE = re.compile(r"^\s*(-?\d+)\s*%?\s*$")
_REGISTRY_BATTERY_RE = re.compile(r'"BatteryPercent"\s*=\s*(-?\d+)')

_CONNECTED_HEADER = "connected"
_NOT_CONNECTED_HEADER = "not connected"
_CONTROLLER_HEADER = "bluetooth controller"

_TEXT_BATTERY_FIELDS = {
    "left battery level": "left",
    "right battery level": "right",
    "battery level": "single",
}
_KNOWN_TEXT_FIELDS = frozenset({"address", *_TEXT_BATTERY_FIELDS})
_JSON_BATTERY_FIELDS = {
    "device_batteryLevelLeft": "left",
    "device_batteryLevelRight": "right",
    "device_batteryLevel": "single",
}


def parse_battery_percent(value: Any) -> int | None:
    """Parse ``"85%"``/``"85"``/``85`` into an int; anything else is absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    match = _PERCENT_RE.match(value)
    if not match:
        return None
    return int(match.group(1))


def parse_flag(text: str) -> bool | None:
    value = text.strip()
    if value == "1":
        return True
    if value == "0":
        return False
    return None


def _battery_from(levels: dict[str, int | None]) -> BatteryInfo | None:
    battery = BatteryInfo(**levels)
    return None if battery.is_empty else battery


def _paired_line_connected(line: str) -> bool:
    head = line.split("name:", 1)[0]
    for part in head.split(","):
        token = part.strip()
        if token == "connected" or token.startswith("connected ("):
            return True
    return False


def parse_paired_listing(text: str) -> list[DeviceRecord]:
    """Parse ``blueutil --paired`` output, one device per ``address:`` line."""
    devices: list[DeviceRecord] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if "address:" not in line:
            continue
        address_match = _PAIRED_ADDRESS_RE.match(line)
        name_match = _PAIRED_NAME_RE.search(line)
        devices.append(
            DeviceRecord(
                address=address_match.group(1).strip() if address_match else "",
                name=name_match.group(1) if name_match else "",
                connected=_paired_line_connected(line),
            )
        )
    return devices


class _TextState(Enum):
    OUTSIDE = "outside"
    IN_GROUP = "in_group"
    IN_DEVICE = "in_device"


class _ProfilerTextParser:
    """Line state machine over ``system_profiler SPBluetoothDataType`` text.

    OUTSIDE: before any ``Connected:``/``Not Connected:`` header, lines are ignored.
    IN_GROUP: a group header was seen; the next value-less header opens a device.
    IN_DEVICE: ``Key: value`` lines are collected until another header flushes.
    """

    def __init__(self) -> None:
        self.state = _TextState.OUTSIDE
        self.group_connected = False
        self.devices: list[DeviceRecord] = []
        self._name = ""
        self._address = ""
        self._levels: dict[str, int | None] = {}

    def feed(self, raw_line: str) -> None:
        line = raw_line.strip()
        if not line:
            return
        if line.endswith(":"):
            header = line[:-1].strip()
            # "Address:" with no value is an empty field, not a new device
            if self.state is _TextState.IN_DEVICE and header.lower() in _KNOWN_TEXT_FIELDS:
                self._on_field(header, "")
            else:
                self._on_header(header)
            return
        if self.state is not _TextState.IN_DEVICE:
            return
        key, sep, value = line.partition(":")
        if not sep:
            LOGGER.debug("Ignoring profiler line without separator: %r", line)
            return
        self._on_field(key.strip(), value.strip())

    def finish(self) -> list[DeviceRecord]:
        self._flush()
        self.state = _TextState.OUTSIDE
        return self.devices

    def _on_header(self, header: str) -> None:
        lowered = header.lower()
        if lowered in (_CONNECTED_HEADER, _NOT_CONNECTED_HEADER):
            self._flush()
            self.group_connected = lowered == _CONNECTED_HEADER
            self.state = _TextState.IN_GROUP
        elif lowered == _CONTROLLER_HEADER:
            self._flush()
            self.state = _TextState.OUTSIDE
        elif self.state is not _TextState.OUTSIDE:
            self._flush()
            self._name = header
            self.state = _TextState.IN_DEVICE

    def _on_field(self, key: str, value: str) -> None:
        lowered = key.lower()
        if lowered == "address":
            self._address = value
        elif lowered in _TEXT_BATTERY_FIELDS:
            self._levels[_TEXT_BATTERY_FIELDS[lowered]] = parse_battery_percent(value)

    def _flush(self) -> None:
        if self.state is _TextState.IN_DEVICE:
            self.devices.append(
                DeviceRecord(
                    address=self._address,
                    name=self._name,
                    connected=self.group_connected,
                    battery=_battery_from(self._levels),
                )
            )
            self.state = _TextState.IN_GROUP
        self._name = ""
        self._address = ""
        self._levels = {}


def parse_profiler_text(text: str) -> list[DeviceRecord]:
    parser = _ProfilerTextParser()
    for line in text.splitlines():
        parser.feed(line)
    return parser.finish()


def _profiler_root(document: Any) -> dict[str, Any]:
    entries = document
    if isinstance(document, dict):
        entries = document.get("SPBluetoothDataType")
    if not isinstance(entries, list) or not entries:
        raise MalformedOutputError("Profiler JSON has no SPBluetoothDataType array")
    root = entries[0]
    if not isinstance(root, dict):
        raise MalformedOutputError("Profiler JSON first element is not an object")
    return root


def _json_group(root: dict[str, Any], key: str, connected: bool) -> Iterator[DeviceRecord]:
    group = root.get(key) or []
    if not isinstance(group, list):
        LOGGER.debug("Profiler JSON group %s is not an array", key)
        return
    for entry in group:
        if not isinstance(entry, dict):
            LOGGER.debug("Skipping non-object entry in %s: %r", key, entry)
            continue
        for name, fields in entry.items():
            if not isinstance(fields, dict):
                fields = {}
            levels = {
                attr: parse_battery_percent(fields.get(json_key))
                for json_key, attr in _JSON_BATTERY_FIELDS.items()
            }
            address = fields.get("device_address")
            yield DeviceRecord(
                address=address if isinstance(address, str) else "",
                name=str(name),
                connected=connected,
                battery=_battery_from(levels),
            )


def parse_profiler_json(text: str) -> list[DeviceRecord]:
    """Parse ``system_profiler SPBluetoothDataType -json`` output.

    Raises MalformedOutputError when the document is not JSON or lacks the
    expected top-level array.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedOutputError(f"Invalid profiler JSON: {exc}") from exc

    root = _profiler_root(document)
    devices = list(_json_group(root, "device_connected", True))
    devices.extend(_json_group(root, "device_not_connected", False))
    return devices


def _iter_registry_blocks(text: str) -> Iterator[str]:
    block: list[str] = []
    for line in text.splitlines():
        if "+-o" in line and block:
            yield "\n".join(block)
            block = []
        block.append(line)
    if block:
        yield "\n".join(block)


def parse_registry_battery(text: str, name: str) -> int | None:
    """Return the ``BatteryPercent`` of the first ioreg block mentioning ``name``."""
    needle = name.lower()
    if not needle:
        return None
    for block in _iter_registry_blocks(text):
        if needle not in block.lower():
            continue
        match = _REGISTRY_BATTERY_RE.search(block)
        if match:
            return int(match.group(1))
    return None


_PARSERS = {
    SourceKind.PAIRED: parse_paired_listing,
    SourceKind.PROFILER_TEXT: parse_profiler_text,
    SourceKind.PROFILER_JSON: parse_profiler_json,
}


def parse_source(kind: SourceKind, text: str) -> list[DeviceRecord]:
    """Parse one source, degrading malformed output to an empty result."""
    if not text.strip():
        return []
    try:
        devices = _PARSERS[kind](text)
    except MalformedOutputError as exc:
        LOGGER.debug("Discarding malformed %s output: %s", kind.value, exc)
        return []

    kept = [device for device in devices if device.name]
    if len(kept) != len(devices):
        LOGGER.debug("Dropped %d unnamed record(s) from %s", len(devices) - len(kept), kind.value)
    return kept


def _normalize_address(address: str) -> str:
    return address.upper().replace("-", ":")


def _same_device(first: DeviceRecord, other: DeviceRecord) -> bool:
    """Match on address when both sides have one, otherwise on name."""
    if first.address and other.address:
        return _normalize_address(first.address) == _normalize_address(other.address)
    return first.name.lower() == other.name.lower()


def _merge_duplicates(devices: Sequence[DeviceRecord]) -> list[DeviceRecord]:
    merged: list[DeviceRecord] = []
    for device in devices:
        for index, first in enumerate(merged):
            if _same_device(first, device):
                merged[index] = DeviceRecord(
                    address=first.address or device.address,
                    name=first.name,
                    connected=first.connected or device.connected,
                    battery=first.battery or device.battery,
                )
                break
        else:
            merged.append(device)
    return merged


def aggregate(
    outputs: Iterable[tuple[SourceKind, str]],
    *,
    merge_duplicates: bool = False,
) -> list[DeviceRecord]:
    """Build the device list from raw tool output, preserving source order.

    Duplicates across sources are kept unless ``merge_duplicates`` is set.
    """
    devices: list[DeviceRecord] = []
    for kind, text in outputs:
        devices.extend(parse_source(kind, text))
    if merge_duplicates:
        return _merge_duplicates(devices)
    return devices


def enrich_battery(devices: Sequence[DeviceRecord], registry_text: str) -> list[DeviceRecord]:
    """Fill missing battery telemetry from an ioreg registry dump."""
    enriched: list[DeviceRecord] = []
    for device in devices:
        if device.battery is None:
            percent = parse_registry_battery(registry_text, device.name)
            if percent is not None:
                device = DeviceRecord(
                    address=device.address,
                    name=device.name,
                    connected=device.connected,
                    battery=BatteryInfo(single=percent),
                )
        enriched.append(device)
    return enriched
