"""Named log output with variants that emit once or at most once per period."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

_LOGGER = logging.getLogger("psenscan")


def log(name: str, level: int, message: str, *args: object) -> str:
    """Format ``message`` with ``args``, prefix it with ``name`` and log it.

    The message uses ``str.format`` placeholders. Returns the emitted text.
    """
    text = f"{name}: {message.format(*args)}"
    _LOGGER.log(level, text)
    return text


class LogOnce:
    """Emits its first message and drops every later one."""

    def __init__(self) -> None:
        self._already_logged = False

    def log(self, name: str, level: int, message: str, *args: object) -> Optional[str]:
        """Log the message if nothing was logged yet; return the text or None."""
        if self._already_logged:
            return None
        self._already_logged = True
        return log(name, level, message, *args)


class LogThrottle:
    """Emits a message only if more than ``period`` seconds passed since the last one."""

    def __init__(self, period: float, clock: Callable[[], float] = time.time) -> None:
        self.period = float(period)
        self._clock = clock
        self._last_hit = 0.0

    def log(self, name: str, level: int, message: str, *args: object) -> Optional[str]:
        """Log the message unless throttled; return the text or None."""
        now = self._clock()
        if self._last_hit + self.period < now:
            self._last_hit = now
            return log(name, level, message, *args)
        return None