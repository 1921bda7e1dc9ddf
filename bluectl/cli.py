"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from bluectl import __version__
from bluectl.core.errors import BluectlError
from bluectl.core.formatter import format_device, format_flag
from bluectl.core.model import DeviceRecord
from bluectl.core.service import BluetoothService

app = typer.Typer(help="Manage paired Bluetooth devices by approximate name")

_ACTION_VERBS = {
    "connect": ("Connecting to", "Connect"),
    "disconnect": ("Disconnecting from", "Disconnect"),
}


def _build_service() -> BluetoothService:
    service = BluetoothService()
    logging.basicConfig(
        level=service.settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"bluectl {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Manage paired Bluetooth devices by approximate name."""


def _echo_devices(devices: list[DeviceRecord] | tuple[DeviceRecord, ...], service: BluetoothService) -> None:
    if not devices:
        typer.echo("  No paired devices found")
        return
    for device in devices:
        typer.echo(f"  {format_device(device, service.settings.battery_thresholds)}")


@app.command("status")
def status() -> None:
    """Show power, audio output, paired devices, and discoverability."""
    try:
        service = _build_service()
        adapter = service.status()
        typer.echo(f"Bluetooth: {format_flag(adapter.powered)}")
        typer.echo(f"Output device: {adapter.output_device or 'Unknown'}")
        typer.echo("Devices:")
        _echo_devices(adapter.devices, service)
        typer.echo(f"Discoverable: {format_flag(adapter.discoverable)}")
    except BluectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("list")
def list_devices() -> None:
    """List all paired Bluetooth devices."""
    try:
        service = _build_service()
        devices = service.list_devices()
        typer.echo("Paired devices:")
        _echo_devices(devices, service)
    except BluectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _run_action(action: str, name: str) -> None:
    progressive, label = _ACTION_VERBS[action]
    try:
        service = _build_service()
        resolution = service.resolve(name)
        device = resolution.selected
        if device is None:
            typer.echo(f"No devices found matching '{name}'")
            return

        if resolution.ambiguous:
            typer.echo("Multiple devices found. Please choose one:")
            for index, candidate in enumerate(resolution.candidates, start=1):
                typer.echo(f"{index}. {candidate.device.name}")
            typer.echo(f"{progressive} best match: {device.name}...")
        else:
            typer.echo(f"{progressive} {device.name}...")

        if action == "connect":
            service.connect_device(device)
        else:
            service.disconnect_device(device)
        typer.echo(f"{label} request sent to {device.name} ({device.address})")
    except BluectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("connect")
def connect(name: str = typer.Argument(..., help="Name of the device to connect to")) -> None:
    """Connect to a Bluetooth device by name."""
    _run_action("connect", name)


@app.command("disconnect")
def disconnect(name: str = typer.Argument(..., help="Name of the device to disconnect from")) -> None:
    """Disconnect a Bluetooth device by name."""
    _run_action("disconnect", name)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
