"""Configuration of the scanner connection and of the requested scan."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from typing import Optional, Union

from psenscan.logging import log
from psenscan.scan_range import ScanRange

DATA_PORT_OF_HOST_DEVICE = 55115
CONTROL_PORT_OF_HOST_DEVICE = 55116
DATA_PORT_OF_SCANNER_DEVICE = 2000
CONTROL_PORT_OF_SCANNER_DEVICE = 3000

DEFAULT_SCAN_RESOLUTION = 1  # tenths of a degree
DIAGNOSTICS = False
INTENSITIES = False
FRAGMENTED_SCANS = False

MIN_RESOLUTION_WITH_INTENSITIES = 2  # tenths of a degree

IpAddress = Union[int, str, ipaddress.IPv4Address]

_IP_FIELDS = frozenset({"scanner_ip", "host_ip"})


def _to_ip(value: Optional[IpAddress]) -> Optional[int]:
    """Return an IPv4 address as its 32 bit integer value (host order)."""
    if value is None:
        return None
    if isinstance(value, (str, ipaddress.IPv4Address)):
        return int(ipaddress.IPv4Address(value))
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Unsupported IP address type: {type(value).__name__}")
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"IP address out of range: {value}")
    return value


@dataclass
class ScannerConfiguration:
    """Connection details and scan settings of one scanner.

    IP addresses may be given as dotted strings or integers and are stored as
    integers. If no host IP is set the driver uses the IP of the local machine.
    Angles and resolutions are in tenths of a degree.
    """

    scanner_ip: Optional[int] = None
    scan_range: Optional[ScanRange] = None
    host_ip: Optional[int] = None
    host_data_port: int = DATA_PORT_OF_HOST_DEVICE
    host_control_port: int = CONTROL_PORT_OF_HOST_DEVICE
    scanner_data_port: int = DATA_PORT_OF_SCANNER_DEVICE
    scanner_control_port: int = CONTROL_PORT_OF_SCANNER_DEVICE
    scan_resolution: int = DEFAULT_SCAN_RESOLUTION
    diagnostics_enabled: bool = DIAGNOSTICS
    intensities_enabled: bool = INTENSITIES
    fragmented_scans_enabled: bool = FRAGMENTED_SCANS

    def __setattr__(self, name: str, value: object) -> None:
        if name in _IP_FIELDS:
            value = _to_ip(value)  # type: ignore[arg-type]
        super().__setattr__(name, value)

    def is_complete(self) -> bool:
        """Return whether the scanner IP and the scan range are set."""
        return self.scanner_ip is not None and self.scan_range is not None

    def is_valid(self) -> bool:
        """Return whether the settings are consistent, logging the reason if not."""
        if self.intensities_enabled and self.scan_resolution < MIN_RESOLUTION_WITH_INTENSITIES:
            log(
                "ScannerConfiguration",
                logging.ERROR,
                "Requires a resolution of min: 0.2 degree when intensities are enabled",
            )
            return False
        return True