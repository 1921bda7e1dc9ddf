from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from bluectl.api import Client, DeviceRecord, Settings

FIXTURE = Path(__file__).parent / "fixtures" / "profiler.json"


class FakeRunner:
    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def run(self, cmd: Sequence[str], *, timeout_s: float = 10.0) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(cmd))
        stdout = FIXTURE.read_text(encoding="utf-8") if cmd[0] == "system_profiler" else ""
        return subprocess.CompletedProcess(list(cmd), 0, stdout=stdout, stderr="")


def test_public_client_list_devices() -> None:
    client = Client(runner=FakeRunner(), settings=Settings())
    devices = client.list_devices()
    assert [d.connected for d in devices] == [True, False, False]
    assert client.load_warnings == ()


def test_public_client_connect() -> None:
    runner = FakeRunner()
    client = Client(runner=runner, settings=Settings())
    result = client.connect("AIRPODS")
    assert result.resolution.selected is not None
    assert result.resolution.selected.name == "John's AirPods Pro"
    assert runner.calls[-1] == ["blueutil", "--connect", "7C:04:D0:12:34:56"]


def test_public_client_resolve_offline() -> None:
    devices = [
        DeviceRecord(address="", name="John's AirPods Pro", connected=False),
        DeviceRecord(address="", name="Sony Headphones", connected=True),
    ]
    assert Client.resolve_offline("airpods", devices).selected == devices[0]
    assert Client.resolve_offline("xyz123", devices).selected is None
