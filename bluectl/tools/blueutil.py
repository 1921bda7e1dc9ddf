"""``blueutil`` wrapper: paired listing, power and discoverability, connect/disconnect."""

from __future__ import annotations

from bluectl.core.aggregator import parse_flag
from bluectl.tools.base import CommandRunner

BLUEUTIL = "blueutil"


class Blueutil:
    def __init__(self, runner: CommandRunner, *, timeout_s: float = 10.0) -> None:
        self.runner = runner
        self.timeout_s = timeout_s

    def _stdout(self, *args: str) -> str:
        result = self.runner.run([BLUEUTIL, *args], timeout_s=self.timeout_s)
        if result.returncode != 0:
            return ""
        return result.stdout or ""

    def paired(self) -> str:
        return self._stdout("--paired")

    def power(self) -> bool | None:
        return parse_flag(self._stdout("--power"))

    def discoverable(self) -> bool | None:
        return parse_flag(self._stdout("--discoverable"))

    def connect(self, address: str) -> None:
        self.runner.run([BLUEUTIL, "--connect", address], timeout_s=self.timeout_s)

    def disconnect(self, address: str) -> None:
        self.runner.run([BLUEUTIL, "--disconnect", address], timeout_s=self.timeout_s)
