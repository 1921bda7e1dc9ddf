"""``system_profiler SPBluetoothDataType`` wrapper."""

from __future__ import annotations

from bluectl.tools.base import CommandRunner

SYSTEM_PROFILER = "system_profiler"
DATA_TYPE = "SPBluetoothDataType"


class SystemProfiler:
    def __init__(self, runner: CommandRunner, *, timeout_s: float = 10.0) -> None:
        self.runner = runner
        self.timeout_s = timeout_s

    def _stdout(self, *args: str) -> str:
        result = self.runner.run([SYSTEM_PROFILER, DATA_TYPE, *args], timeout_s=self.timeout_s)
        if result.returncode != 0:
            return ""
        return result.stdout or ""

    def text(self) -> str:
        return self._stdout()

    def json(self) -> str:
        return self._stdout("-json")
