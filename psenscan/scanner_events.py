"""Events that drive the scanner protocol state machine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StartRequest:
    """User requests the scanner to start."""


@dataclass(frozen=True)
class StopRequest:
    """User requests the scanner to stop."""


@dataclass(frozen=True)
class StartTimeout:
    """Timeout while waiting for the scanner device to start."""


@dataclass(frozen=True)
class RawReplyReceived:
    """A start or stop reply message arrived from the scanner device."""

    data: bytes
    num_bytes: int
    timestamp: int


@dataclass(frozen=True)
class ReplyReceiveError:
    """Receiving a reply message failed."""


@dataclass(frozen=True)
class RawMonitoringFrameReceived:
    """A monitoring frame arrived from the scanner device."""

    data: bytes
    num_bytes: int
    timestamp: int


@dataclass(frozen=True)
class MonitoringFrameTimeout:
    """Timeout while waiting for a monitoring frame."""


@dataclass(frozen=True)
class MonitoringFrameReceivedError:
    """Receiving a monitoring frame failed."""