"""Current audio output device via ``SwitchAudioSource``.

This tool is optional: when it is not installed the output device is reported
as unknown instead of failing the whole status query.
"""

from __future__ import annotations

import logging

from bluectl.core.errors import CommandSpawnError
from bluectl.tools.base import CommandRunner

LOGGER = logging.getLogger(__name__)

SWITCH_AUDIO_SOURCE = "SwitchAudioSource"


class AudioOutput:
    def __init__(self, runner: CommandRunner, *, timeout_s: float = 10.0) -> None:
        self.runner = runner
        self.timeout_s = timeout_s

    def current(self) -> str | None:
        try:
            result = self.runner.run(
                [SWITCH_AUDIO_SOURCE, "-c", "-t", "output"],
                timeout_s=self.timeout_s,
            )
        except CommandSpawnError as exc:
            LOGGER.warning("Audio output device unavailable: %s", exc)
            return None
        if result.returncode != 0:
            return None
        name = (result.stdout or "").strip()
        return name or None
