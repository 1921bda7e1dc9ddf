"""Command runner interface."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from typing import Protocol


class CommandRunner(Protocol):
    def run(
        self,
        cmd: Sequence[str],
        *,
        timeout_s: float = 10.0,
    ) -> subprocess.CompletedProcess[str]:
        """Run an external command once and return its captured output."""
