"""Binary encoding and decoding of monitoring frames sent by the scanner."""

from __future__ import annotations

import enum
import io
import logging
import math
import struct
from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional, Union

from psenscan.diagnostics import (
    RAW_CHUNK_LENGTH_IN_BYTES,
    ScannerId,
    deserialize_diagnostics,
    serialize_diagnostics,
)
from psenscan.logging import LogThrottle
from psenscan.monitoring_frame import MonitoringFrame

OP_CODE_MONITORING_FRAME = 0xCA
ONLINE_WORKING_MODE = 0x00
GUI_MONITORING_TRANSACTION = 0x05
DEFAULT_DEVICE_STATUS = 0
MAX_SCANNER_ID = len(ScannerId) - 1

NUMBER_OF_BYTES_SCAN_COUNTER = 4
NUMBER_OF_BYTES_ZONE_SET = 1
NUMBER_OF_BYTES_SINGLE_MEASUREMENT = 2
NUMBER_OF_BYTES_SINGLE_INTENSITY = 2

NO_SIGNAL_ARRIVED = 59950
SIGNAL_TOO_LATE = 59996

_INTENSITY_MASK = 0b0011111111111111
_FIXED_FIELDS = struct.Struct("<IIIIBhh")
_FIELD_HEADER = struct.Struct("<BH")

_THROTTLES: Dict[str, LogThrottle] = {
    key: LogThrottle(0.1) for key in ("op_code", "working_mode", "transaction", "scanner_id")
}


class DecodingFailure(RuntimeError):
    """Raised when raw data cannot be decoded into a monitoring frame."""


class ScanCounterUnexpectedSize(DecodingFailure):
    """Raised when the scan counter field has an unexpected length."""


class ZoneSetUnexpectedSize(DecodingFailure):
    """Raised when the active zone set field has an unexpected length."""


class FieldId(enum.IntEnum):
    """Identifiers of the additional fields following the fixed fields."""

    SCAN_COUNTER = 0x02
    ZONE_SET = 0x03
    DIAGNOSTICS = 0x04
    MEASUREMENTS = 0x05
    INTENSITIES = 0x06
    END_OF_FRAME = 0x09


@dataclass(frozen=True)
class AdditionalFieldHeader:
    """Id and payload length of an additional field."""

    id: int
    length: int

    def to_bytes(self) -> bytes:
        """Encode the header; the length on the wire counts one extra byte."""
        return _FIELD_HEADER.pack(self.id, self.length + 1)


@dataclass(frozen=True)
class FixedFields:
    """The fields every monitoring frame starts with."""

    device_status: int
    op_code: int
    working_mode: int
    transaction_type: int
    scanner_id: int
    from_theta: int
    resolution: int


def _read_exactly(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) < size:
        raise DecodingFailure(f"Unexpected end of data: needed {size} bytes, got {len(data)}")
    return data


def _read(stream: BinaryIO, fmt: str) -> int:
    layout = struct.Struct("<" + fmt)
    return layout.unpack(_read_exactly(stream, layout.size))[0]


def _read_array(stream: BinaryIO, count: int) -> tuple:
    raw = _read_exactly(stream, count * 2)
    return struct.unpack(f"<{count}H", raw)


def _to_meter(value: int) -> float:
    if value in (NO_SIGNAL_ARRIVED, SIGNAL_TOO_LATE):
        return math.inf
    return value / 1000.0


def _round_half_away(value: float) -> int:
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def read_fixed_fields(stream: BinaryIO) -> FixedFields:
    """Read the fixed fields from a binary stream, logging unexpected values."""
    fields = FixedFields(*_FIXED_FIELDS.unpack(_read_exactly(stream, _FIXED_FIELDS.size)))

    name = "monitoring_frame::Message"
    if fields.op_code != OP_CODE_MONITORING_FRAME:
        _THROTTLES["op_code"].log(
            name, logging.ERROR, "Unexpected opcode during deserialization of MonitoringFrame."
        )
    if fields.working_mode != ONLINE_WORKING_MODE:
        _THROTTLES["working_mode"].log(name, logging.ERROR, "Invalid working mode (not online)")
    if fields.transaction_type != GUI_MONITORING_TRANSACTION:
        _THROTTLES["transaction"].log(name, logging.ERROR, "Invalid transaction type.")
    if fields.scanner_id > MAX_SCANNER_ID:
        _THROTTLES["scanner_id"].log(name, logging.ERROR, "Invalid Scanner id.")
    return fields


def read_additional_field(stream: BinaryIO, max_num_bytes: int) -> AdditionalFieldHeader:
    """Read an additional field header; the returned length is the payload size."""
    field_id, length = _FIELD_HEADER.unpack(_read_exactly(stream, _FIELD_HEADER.size))
    if length >= max_num_bytes:
        raise DecodingFailure(
            f"Length given in header of additional field is too large: {length}, id: {field_id:#04x}"
        )
    if length > 0:
        length -= 1
    return AdditionalFieldHeader(field_id, length)


def deserialize(data: Union[bytes, bytearray, memoryview], num_bytes: Optional[int] = None) -> MonitoringFrame:
    """Decode the first ``num_bytes`` bytes of ``data`` into a monitoring frame."""
    if num_bytes is None:
        num_bytes = len(data)
    stream = io.BytesIO(bytes(data[:num_bytes]))

    fixed = read_fixed_fields(stream)
    try:
        scanner_id: Union[ScannerId, int] = ScannerId(fixed.scanner_id)
    except ValueError:
        scanner_id = fixed.scanner_id

    frame = MonitoringFrame(
        from_theta=fixed.from_theta,
        resolution=fixed.resolution,
        scanner_id=scanner_id,
        diagnostic_data_enabled=False,
    )

    while True:
        header = read_additional_field(stream, num_bytes)
        try:
            field_id = FieldId(header.id)
        except ValueError:
            raise DecodingFailure(
                f"Header Id {header.id:#04x} unknown. Cannot read additional field of monitoring frame."
            ) from None

        if field_id is FieldId.END_OF_FRAME:
            break
        if field_id is FieldId.SCAN_COUNTER:
            if header.length != NUMBER_OF_BYTES_SCAN_COUNTER:
                raise ScanCounterUnexpectedSize(
                    f"Length of scan counter field is {header.length}, "
                    f"but should be {NUMBER_OF_BYTES_SCAN_COUNTER}."
                )
            frame.scan_counter = _read(stream, "I")
        elif field_id is FieldId.MEASUREMENTS:
            count = header.length // NUMBER_OF_BYTES_SINGLE_MEASUREMENT
            frame.measurements = [_to_meter(v) for v in _read_array(stream, count)]
        elif field_id is FieldId.ZONE_SET:
            if header.length != NUMBER_OF_BYTES_ZONE_SET:
                raise ZoneSetUnexpectedSize(
                    f"Length of zone set field is {header.length}, "
                    f"but should be {NUMBER_OF_BYTES_ZONE_SET}."
                )
            frame.active_zoneset = _read(stream, "B")
        elif field_id is FieldId.DIAGNOSTICS:
            try:
                frame.diagnostic_messages = deserialize_diagnostics(stream)
            except ValueError as exc:
                raise DecodingFailure(str(exc)) from exc
            frame.diagnostic_data_enabled = True
        elif field_id is FieldId.INTENSITIES:
            count = header.length // NUMBER_OF_BYTES_SINGLE_MEASUREMENT
            frame.intensities = [float(v & _INTENSITY_MASK) for v in _read_array(stream, count)]
    return frame


def _encode_measurement(value: float) -> int:
    if value == math.inf:
        return NO_SIGNAL_ARRIVED
    return _round_half_away(value * 1000.0) & 0xFFFF


def serialize(frame: MonitoringFrame) -> bytes:
    """Encode a monitoring frame as the scanner sends it."""
    out = bytearray()
    out += _FIXED_FIELDS.pack(
        DEFAULT_DEVICE_STATUS,
        OP_CODE_MONITORING_FRAME,
        ONLINE_WORKING_MODE,
        GUI_MONITORING_TRANSACTION,
        int(frame.scanner_id),
        frame.from_theta,
        frame.resolution,
    )

    scan_counter = frame.scan_counter
    out += AdditionalFieldHeader(FieldId.SCAN_COUNTER, NUMBER_OF_BYTES_SCAN_COUNTER).to_bytes()
    out += struct.pack("<I", scan_counter)

    if frame.diagnostic_data_enabled:
        out += AdditionalFieldHeader(FieldId.DIAGNOSTICS, RAW_CHUNK_LENGTH_IN_BYTES).to_bytes()
        out += serialize_diagnostics(frame.diagnostic_messages)

    measurements = frame.measurements
    out += AdditionalFieldHeader(
        FieldId.MEASUREMENTS, len(measurements) * NUMBER_OF_BYTES_SINGLE_MEASUREMENT
    ).to_bytes()
    out += struct.pack(f"<{len(measurements)}H", *(_encode_measurement(m) for m in measurements))

    intensities = frame.intensities
    if intensities:
        out += AdditionalFieldHeader(
            FieldId.INTENSITIES, len(intensities) * NUMBER_OF_BYTES_SINGLE_INTENSITY
        ).to_bytes()
        out += struct.pack(
            f"<{len(intensities)}H", *(_round_half_away(i) & 0xFFFF for i in intensities)
        )

    out += AdditionalFieldHeader(FieldId.ZONE_SET, NUMBER_OF_BYTES_ZONE_SET).to_bytes()
    out += struct.pack("<B", frame.active_zoneset)

    out += struct.pack("<B", FieldId.END_OF_FRAME)
    out += bytes(3)
    return bytes(out)