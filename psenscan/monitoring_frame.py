"""The data carried by a single monitoring frame of the scanner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from psenscan.diagnostics import DiagnosticMessage, ScannerId


class ScanCounterMissing(RuntimeError):
    """Raised when the scan counter of a frame is requested but was never set."""

    def __init__(
        self, message: str = "Scan counter not set! (Contact PILZ support if the error persists.)"
    ) -> None:
        super().__init__(message)


def _format_sequence(values: Iterable[object]) -> str:
    return "{" + ", ".join(str(v) for v in values) + "}"


class MonitoringFrame:
    """One monitoring frame: angles in tenths of a degree, measurements in metres."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        from_theta: int = 0,
        resolution: int = 0,
        scan_counter: Optional[int] = None,
        active_zoneset: int = 0,
        measurements: Iterable[float] = (),
        intensities: Iterable[float] = (),
        diagnostic_messages: Optional[Iterable[DiagnosticMessage]] = None,
        scanner_id: ScannerId = ScannerId.MASTER,
        diagnostic_data_enabled: Optional[bool] = None,
    ) -> None:
        self.from_theta = from_theta
        self.resolution = resolution
        self._scan_counter = scan_counter
        self.active_zoneset = active_zoneset
        self.measurements: List[float] = list(measurements)
        self.intensities: List[float] = list(intensities)
        self.diagnostic_messages: List[DiagnosticMessage] = list(diagnostic_messages or ())
        self.scanner_id = scanner_id
        if diagnostic_data_enabled is None:
            diagnostic_data_enabled = diagnostic_messages is not None
        self.diagnostic_data_enabled = diagnostic_data_enabled

    @property
    def scan_counter(self) -> int:
        """The scan counter; raises ScanCounterMissing if the frame carried none."""
        if self._scan_counter is None:
            raise ScanCounterMissing()
        return self._scan_counter

    @scan_counter.setter
    def scan_counter(self, value: Optional[int]) -> None:
        self._scan_counter = value

    @property
    def has_scan_counter(self) -> bool:
        return self._scan_counter is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MonitoringFrame):
            return NotImplemented
        return (
            self.from_theta == other.from_theta
            and self.resolution == other.resolution
            and self.scan_counter == other.scan_counter
            and self.active_zoneset == other.active_zoneset
            and self.measurements == other.measurements
            and self.intensities == other.intensities
            and self.diagnostic_messages == other.diagnostic_messages
        )

    def __str__(self) -> str:
        return (
            f"MonitoringFrame(from_theta = {self.from_theta / 10:g} deg, "
            f"resolution = {self.resolution / 10:g} deg, "
            f"scan_counter = {self.scan_counter}, "
            f"active_zoneset = {self.active_zoneset}, "
            f"measurements = {_format_sequence(self.measurements)}, "
            f"intensities = {_format_sequence(self.intensities)}, "
            f"diagnostics = {_format_sequence(self.diagnostic_messages)})"
        )

    def __repr__(self) -> str:
        return (
            f"MonitoringFrame(from_theta={self.from_theta!r}, resolution={self.resolution!r}, "
            f"scan_counter={self._scan_counter!r}, active_zoneset={self.active_zoneset!r}, "
            f"measurements={self.measurements!r}, intensities={self.intensities!r}, "
            f"diagnostic_messages={self.diagnostic_messages!r})"
        )


@dataclass
class StampedMonitoringFrame:
    """A monitoring frame together with its reception timestamp."""

    frame: MonitoringFrame
    stamp: int