"""The start request sent to the scanner and its binary encoding."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass, field
from typing import Tuple

from psenscan.scan_range import ScanRange
from psenscan.scanner_configuration import ScannerConfiguration

OPCODE_START = 0x35
DEFAULT_SEQ_NUMBER = 0
NUM_SLAVES = 3
_MASTER_FLAG = 0b00001000

_HEADER = struct.Struct("<IQI")
_HOST_IP = struct.Struct(">I")
_HOST_PORT = struct.Struct("<H")
_SCAN_SETTINGS = struct.Struct("<HHH")
_CRC = struct.Struct("<I")


@dataclass(frozen=True)
class LaserScanSettings:
    """Scan range and resolution (tenths of a degree) of one device."""

    scan_range: ScanRange = field(default_factory=ScanRange.invalid)
    resolution: int = 0


@dataclass(frozen=True)
class DeviceSettings:
    """Which optional data a device is asked to send."""

    diagnostics_enabled: bool
    intensities_enabled: bool


def _default_slaves() -> Tuple[LaserScanSettings, ...]:
    return tuple(LaserScanSettings() for _ in range(NUM_SLAVES))


@dataclass(frozen=True)
class StartRequest:
    """A request asking the scanner to start sending monitoring frames.

    ``host_ip`` is the integer value of the IPv4 address; it goes on the wire in
    network byte order, everything else in little endian.
    """

    host_ip: int
    host_udp_port_data: int
    master_device_settings: DeviceSettings
    master: LaserScanSettings
    slaves: Tuple[LaserScanSettings, ...] = field(default_factory=_default_slaves)

    @classmethod
    def from_configuration(cls, configuration: ScannerConfiguration) -> "StartRequest":
        """Build the request from a configuration that has host IP and scan range set."""
        if configuration.host_ip is None:
            raise ValueError("Host IP must be set to create a start request")
        if configuration.scan_range is None:
            raise ValueError("Scan range must be set to create a start request")
        return cls(
            host_ip=configuration.host_ip,
            host_udp_port_data=configuration.host_data_port,
            master_device_settings=DeviceSettings(
                configuration.diagnostics_enabled, configuration.intensities_enabled
            ),
            master=LaserScanSettings(configuration.scan_range, configuration.scan_resolution),
        )

    def serialize(self, sequence_number: int = DEFAULT_SEQ_NUMBER) -> bytes:
        """Encode the request, preceded by the CRC-32 of everything after it."""
        settings = self.master_device_settings
        flags = bytes(
            (
                _MASTER_FLAG,  # device enabled
                _MASTER_FLAG if settings.intensities_enabled else 0,
                0,  # point in safety
                _MASTER_FLAG,  # active zone set
                0,  # io pins
                _MASTER_FLAG,  # scan counter
                0,  # speed encoder
                _MASTER_FLAG if settings.diagnostics_enabled else 0,
            )
        )

        start = self.master.scan_range.start
        end = self.master.scan_range.end
        resolution = self.master.resolution
        # The scanner omits a data point lying exactly on the end angle.
        if resolution and (end - start) % resolution == 0:
            end += 1

        body = bytearray()
        body += _HEADER.pack(sequence_number, 0, OPCODE_START)
        body += _HOST_IP.pack(self.host_ip)
        body += _HOST_PORT.pack(self.host_udp_port_data)
        body += flags
        body += _SCAN_SETTINGS.pack(start, end, resolution)
        for slave in self.slaves:
            body += _SCAN_SETTINGS.pack(slave.scan_range.start, slave.scan_range.end, slave.resolution)

        return _CRC.pack(zlib.crc32(body) & 0xFFFFFFFF) + bytes(body)