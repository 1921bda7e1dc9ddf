"""Service layer used by CLI and future UI frontends."""

from __future__ import annotations

import logging

from bluectl.core.aggregator import aggregate, enrich_battery
from bluectl.core.config import load_settings
from bluectl.core.errors import DeviceSelectionError
from bluectl.core.model import ActionResult, AdapterStatus, DeviceRecord, Resolution, Settings, SourceKind
from bluectl.core.resolver import resolve
from bluectl.tools.audio import AudioOutput
from bluectl.tools.base import CommandRunner
from bluectl.tools.blueutil import Blueutil
from bluectl.tools.ioreg import Ioreg
from bluectl.tools.subprocess_runner import SubprocessRunner
from bluectl.tools.system_profiler import SystemProfiler

LOGGER = logging.getLogger(__name__)


class BluetoothService:
    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        settings: Settings | None = None,
    ) -> None:
        if settings is None:
            loaded = load_settings()
            settings = loaded.settings
            self.load_warnings = loaded.warnings
        else:
            self.load_warnings = ()
        self.settings = settings
        self.runner = runner or SubprocessRunner()

        timeout_s = settings.command_timeout_s
        self.blueutil = Blueutil(self.runner, timeout_s=timeout_s)
        self.profiler = SystemProfiler(self.runner, timeout_s=timeout_s)
        self.ioreg = Ioreg(self.runner, timeout_s=timeout_s)
        self.audio = AudioOutput(self.runner, timeout_s=timeout_s)

    def _source_output(self, kind: SourceKind) -> str:
        if kind is SourceKind.PAIRED:
            return self.blueutil.paired()
        if kind is SourceKind.PROFILER_TEXT:
            return self.profiler.text()
        return self.profiler.json()

    def list_devices(self) -> list[DeviceRecord]:
        outputs = [(kind, self._source_output(kind)) for kind in self.settings.sources]
        devices = aggregate(outputs, merge_duplicates=self.settings.merge_duplicates)
        if self.settings.use_registry_battery and any(d.battery is None for d in devices):
            devices = enrich_battery(devices, self.ioreg.battery_dump())
        LOGGER.debug("Aggregated %d device(s) from %s", len(devices), [k.value for k in self.settings.sources])
        return devices

    def status(self) -> AdapterStatus:
        return AdapterStatus(
            powered=self.blueutil.power(),
            discoverable=self.blueutil.discoverable(),
            output_device=self.audio.current(),
            devices=tuple(self.list_devices()),
        )

    def resolve(self, query: str) -> Resolution:
        query = query.strip()
        if not query:
            raise DeviceSelectionError("Device name must not be empty")
        resolution = resolve(query, self.list_devices())
        if resolution.ambiguous:
            LOGGER.debug(
                "Query %r matched %d devices; using %r",
                query,
                len(resolution.candidates),
                resolution.selected.name if resolution.selected else None,
            )
        return resolution

    def _require_address(self, device: DeviceRecord) -> str:
        if not device.address:
            raise DeviceSelectionError(
                f"Device '{device.name}' has no known address. Add 'paired' to sources to look it up."
            )
        return device.address

    def connect_device(self, device: DeviceRecord) -> None:
        self.blueutil.connect(self._require_address(device))

    def disconnect_device(self, device: DeviceRecord) -> None:
        self.blueutil.disconnect(self._require_address(device))

    def connect(self, query: str) -> ActionResult:
        resolution = self.resolve(query)
        if resolution.selected is not None:
            self.connect_device(resolution.selected)
        return ActionResult(action="connect", resolution=resolution)

    def disconnect(self, query: str) -> ActionResult:
        resolution = self.resolve(query)
        if resolution.selected is not None:
            self.disconnect_device(resolution.selected)
        return ActionResult(action="disconnect", resolution=resolution)
