"""``ioreg`` wrapper for registry battery telemetry."""

from __future__ import annotations

from bluectl.tools.base import CommandRunner

IOREG = "ioreg"


class Ioreg:
    def __init__(self, runner: CommandRunner, *, timeout_s: float = 10.0) -> None:
        self.runner = runner
        self.timeout_s = timeout_s

    def battery_dump(self) -> str:
        result = self.runner.run(
            [IOREG, "-r", "-l", "-k", "BatteryPercent"],
            timeout_s=self.timeout_s,
        )
        if result.returncode != 0:
            return ""
        return result.stdout or ""
