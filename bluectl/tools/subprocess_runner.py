"""Command runner backed by ``subprocess.run``."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from bluectl.core.errors import CommandSpawnError, CommandTimeoutError

LOGGER = logging.getLogger(__name__)


class SubprocessRunner:
    def run(
        self,
        cmd: Sequence[str],
        *,
        timeout_s: float = 10.0,
    ) -> subprocess.CompletedProcess[str]:
        LOGGER.debug("Running %s (timeout %.1fs)", " ".join(cmd), timeout_s)
        try:
            result = subprocess.run(
                list(cmd),
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout_s,
            )
        except FileNotFoundError as exc:
            raise CommandSpawnError(f"Command not found: {cmd[0]}. Is it installed and on PATH?") from exc
        except PermissionError as exc:
            raise CommandSpawnError(f"Permission denied running {cmd[0]}: {exc}") from exc
        except OSError as exc:
            raise CommandSpawnError(f"Could not start {cmd[0]}: {exc}") from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(
                f"{' '.join(cmd)} did not finish within {timeout_s:g}s"
            ) from exc

        if result.returncode != 0:
            LOGGER.debug(
                "%s exited with %d: %s",
                cmd[0],
                result.returncode,
                (result.stderr or "").strip(),
            )
        return result
