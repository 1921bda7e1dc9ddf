from __future__ import annotations

from typer.testing import CliRunner

from bluectl import __version__, cli
from bluectl.core.model import AdapterStatus, BatteryInfo, DeviceRecord, Settings
from bluectl.core.resolver import resolve

AIRPODS = DeviceRecord(
    address="7C:04:D0:12:34:56",
    name="John's AirPods Pro",
    connected=False,
    battery=BatteryInfo(left=40, right=45),
)
SONY = DeviceRecord(address="00:11:22:33:44:55", name="Sony Headphones", connected=True)


class FakeService:
    def __init__(self) -> None:
        self.settings = Settings()
        self.load_warnings = ()
        self.devices = [AIRPODS, SONY]
        self.actions: list[tuple[str, str]] = []

    def list_devices(self):
        return list(self.devices)

    def status(self):
        return AdapterStatus(
            powered=True,
            discoverable=False,
            output_device="Sony Headphones",
            devices=tuple(self.devices),
        )

    def resolve(self, query):
        return resolve(query, self.devices)

    def connect_device(self, device):
        self.actions.append(("connect", device.address))

    def disconnect_device(self, device):
        self.actions.append(("disconnect", device.address))


runner = CliRunner()


def test_list_command(monkeypatch):
    monkeypatch.setattr(cli, "BluetoothService", FakeService)
    result = runner.invoke(cli.app, ["list"])
    assert result.exit_code == 0
    assert "Paired devices:" in result.stdout
    assert "7C:04:D0:12:34:56" in result.stdout
    assert '"Sony Headphones"' in result.stdout
    assert "40%" in result.stdout


def test_status_command(monkeypatch):
    monkeypatch.setattr(cli, "BluetoothService", FakeService)
    result = runner.invoke(cli.app, ["status"])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0].startswith("Bluetooth:")
    assert "Output device: Sony Headphones" in result.stdout
    assert lines[-1].startswith("Discoverable:")


def test_connect_single_match(monkeypatch):
    services: list[FakeService] = []

    def build():
        service = FakeService()
        services.append(service)
        return service

    monkeypatch.setattr(cli, "BluetoothService", build)
    result = runner.invoke(cli.app, ["connect", "airpods"])
    assert result.exit_code == 0
    assert "Connecting to John's AirPods Pro..." in result.stdout
    assert "Multiple devices" not in result.stdout
    assert services[0].actions == [("connect", "7C:04:D0:12:34:56")]


def test_disconnect_no_match_exits_cleanly(monkeypatch):
    monkeypatch.setattr(cli, "BluetoothService", FakeService)
    result = runner.invoke(cli.app, ["disconnect", "xyz123"])
    assert result.exit_code == 0
    assert "No devices found matching 'xyz123'" in result.stdout


def test_multiple_matches_list_then_pick_best(monkeypatch):
    services: list[FakeService] = []

    def build():
        service = FakeService()
        service.devices = [
            DeviceRecord(address="01", name="Desk Speaker", connected=False),
            DeviceRecord(address="02", name="Speaker Max", connected=False),
        ]
        services.append(service)
        return service

    monkeypatch.setattr(cli, "BluetoothService", build)
    result = runner.invoke(cli.app, ["disconnect", "speaker"])
    assert result.exit_code == 0
    assert "Multiple devices found. Please choose one:" in result.stdout
    assert "1. Desk Speaker" in result.stdout
    assert "2. Speaker Max" in result.stdout
    assert "Disconnecting from best match: Desk Speaker..." in result.stdout
    assert services[0].actions == [("disconnect", "01")]


def test_error_is_clean(monkeypatch):
    class FailingService(FakeService):
        def list_devices(self):
            from bluectl.core.errors import CommandSpawnError

            raise CommandSpawnError("Command not found: system_profiler. Is it installed and on PATH?")

    monkeypatch.setattr(cli, "BluetoothService", FailingService)
    result = runner.invoke(cli.app, ["list"])
    assert result.exit_code == 1
    assert "Error: Command not found: system_profiler" in result.stderr
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_load_warning_is_printed(monkeypatch):
    class WarnService(FakeService):
        def __init__(self) -> None:
            super().__init__()
            self.load_warnings = ("Config lists a source more than once",)

    monkeypatch.setattr(cli, "BluetoothService", WarnService)
    result = runner.invoke(cli.app, ["list"])
    assert result.exit_code == 0
    assert "Warning: Config lists a source more than once" in result.stderr


def test_version_option():
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout
