"""Diagnostic error bits reported by the scanner inside a monitoring frame."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import BinaryIO, Iterable, List, Union


class ScannerId(enum.IntEnum):
    """Identifies the master device and its slaves."""

    MASTER = 0
    SLAVE0 = 1
    SLAVE1 = 2
    SLAVE2 = 3


RAW_CHUNK_LENGTH_FOR_ONE_DEVICE_IN_BYTES = 9
RAW_CHUNK_UNUSED_OFFSET_IN_BYTES = 4
RAW_CHUNK_LENGTH_IN_BYTES = (
    RAW_CHUNK_UNUSED_OFFSET_IN_BYTES + RAW_CHUNK_LENGTH_FOR_ONE_DEVICE_IN_BYTES * len(ScannerId)
)


class ErrorType(enum.Enum):
    """Kinds of errors a diagnostic bit can signal."""

    OSSD1_OC = enum.auto()
    OSSD_SHRT_C = enum.auto()
    OSSD_INTEGR = enum.auto()
    INTERN = enum.auto()
    WIN_CLN_AL = enum.auto()
    POWER_SUPPLY = enum.auto()
    NETW_PRB = enum.auto()
    DUST_CRC_FL = enum.auto()
    OSSD2_OVERCUR = enum.auto()
    MEAS_PROB = enum.auto()
    INCOHERENCE = enum.auto()
    ZONE_INVAL_TRANS = enum.auto()
    ZONE_INVALID_CONF = enum.auto()
    WIN_CLN_WARN = enum.auto()
    INT_COM_PRB = enum.auto()
    GENERIC_ERR = enum.auto()
    DISP_COM_PRB = enum.auto()
    TEMP_MEAS_PROB = enum.auto()
    ENCOD_OOR = enum.auto()
    EDM2_ERR = enum.auto()
    EDM1_ERR = enum.auto()
    CONF_ERR = enum.auto()
    OUT_OF_RANGE_ERR = enum.auto()
    TEMP_RANGE_ERR = enum.auto()
    ENCODER_GENERIC_ERR = enum.auto()
    UNUSED = enum.auto()


ERROR_DESCRIPTIONS = {
    ErrorType.OSSD1_OC: "OSSD1 Overcurrent / Short circuit.",
    ErrorType.OSSD_SHRT_C: "Short circuit between at least two OSSDs.",
    ErrorType.OSSD_INTEGR: "OSSDF1: An error has occurred when testing the OSSDs.",
    ErrorType.INTERN: "Internal error.",
    ErrorType.WIN_CLN_AL: "Alarm: The front panel of the safety laser scanner must be cleaned.",
    ErrorType.POWER_SUPPLY: "Power supply problem.",
    ErrorType.NETW_PRB: "Network problem.",
    ErrorType.DUST_CRC_FL: "Dust circuit failure",
    ErrorType.OSSD2_OVERCUR: "OSSD2 Overcurrent / Short circuit.",
    ErrorType.MEAS_PROB: "Measurement Problem.",
    ErrorType.INCOHERENCE: "Incoherence Error",
    ErrorType.ZONE_INVAL_TRANS: (
        "INPUTCF2: Configuration error. - "
        "In the configuration, check the configured state transitions and switching operations."
    ),
    ErrorType.ZONE_INVALID_CONF: (
        "INPUTCF1: Error in the configuration or the wiring. - "
        "Check whether the wiring and the configuration will match."
    ),
    ErrorType.WIN_CLN_WARN: "Warning: The front panel of the safety laser scanner must be cleaned.",
    ErrorType.GENERIC_ERR: "Generic Error.",
    ErrorType.DISP_COM_PRB: "Display communication problem.",
    ErrorType.TEMP_MEAS_PROB: "Temperature measurement problem.",
    ErrorType.ENCOD_OOR: "Encoder: Out of range.",
    ErrorType.EDM2_ERR: "EDM2: Error in the External Device Monitoring.",
    ErrorType.EDM1_ERR: "EDM1: Error in the External Device Monitoring.",
    ErrorType.CONF_ERR: (
        "WAITING_CONF: The safety laser scanner waits for a configuration "
        "(e.g. after restoring a configuration). - Configure the safety laser scanner."
    ),
    ErrorType.OUT_OF_RANGE_ERR: "Out of range error.",
    ErrorType.TEMP_RANGE_ERR: "Temperature out of range.",
    ErrorType.ENCODER_GENERIC_ERR: "Encoder: Generic error.",
    ErrorType.UNUSED: "Unexpected error",
}


def _bit7_to_bit0(*row: ErrorType) -> tuple:
    return tuple(reversed(row))


_E = ErrorType
_U = ErrorType.UNUSED
_I = ErrorType.INTERN

# ERROR_BITS[byte][bit]; each row below is written from bit 7 down to bit 0.
ERROR_BITS = (
    _bit7_to_bit0(_E.OSSD1_OC, _E.OSSD_SHRT_C, _E.OSSD_INTEGR, _I, _I, _I, _I, _I),
    _bit7_to_bit0(_E.WIN_CLN_AL, _E.POWER_SUPPLY, _E.NETW_PRB, _E.DUST_CRC_FL, _I, _I, _U, _E.OSSD2_OVERCUR),
    _bit7_to_bit0(
        _E.MEAS_PROB, _I, _I, _I, _E.INCOHERENCE, _E.ZONE_INVAL_TRANS, _E.ZONE_INVALID_CONF, _E.WIN_CLN_WARN
    ),
    _bit7_to_bit0(_I, _I, _I, _E.GENERIC_ERR, _E.DISP_COM_PRB, _I, _I, _E.TEMP_MEAS_PROB),
    _bit7_to_bit0(_I, _I, _E.EDM2_ERR, _E.EDM1_ERR, _E.CONF_ERR, _E.OUT_OF_RANGE_ERR, _E.TEMP_RANGE_ERR, _I),
    _bit7_to_bit0(_U, _U, _U, _U, _I, _I, _E.ENCODER_GENERIC_ERR, _E.ENCOD_OOR),
    (_U,) * 8,
    (_U,) * 8,
    (_U,) * 8,
)

AMBIGUOUS_DIAGNOSTIC_CODES = frozenset({ErrorType.UNUSED, ErrorType.INTERN})


@dataclass(frozen=True)
class ErrorLocation:
    """Byte and bit position of an error in the per-device diagnostic chunk."""

    byte: int
    bit: int


@dataclass(frozen=True)
class DiagnosticMessage:
    """A single diagnostic incident of one device."""

    scanner_id: ScannerId
    location: ErrorLocation

    def diagnostic_code(self) -> ErrorType:
        """Return the error type stored at this message's location."""
        return ERROR_BITS[self.location.byte][self.location.bit]

    def description(self) -> str:
        """Return the human readable text of this message's error."""
        return ERROR_DESCRIPTIONS[self.diagnostic_code()]

    def __str__(self) -> str:
        text = f"Device: {ScannerId(self.scanner_id).name} - {self.description()}"
        if is_ambiguous(self.diagnostic_code()):
            text += f" (Byte:{self.location.byte} Bit:{self.location.bit})"
        return text


def is_ambiguous(code: ErrorType) -> bool:
    """Return whether the error type does not name a specific problem."""
    return code in AMBIGUOUS_DIAGNOSTIC_CODES


def serialize_diagnostics(messages: Iterable[DiagnosticMessage]) -> bytes:
    """Encode the messages as a raw diagnostic chunk of RAW_CHUNK_LENGTH_IN_BYTES bytes."""
    chunk = bytearray(RAW_CHUNK_LENGTH_IN_BYTES)
    for message in messages:
        index = (
            RAW_CHUNK_UNUSED_OFFSET_IN_BYTES
            + int(message.scanner_id) * RAW_CHUNK_LENGTH_FOR_ONE_DEVICE_IN_BYTES
            + message.location.byte
        )
        chunk[index] = (chunk[index] + (1 << message.location.bit)) & 0xFF
    return bytes(chunk)


def deserialize_diagnostics(data: Union[bytes, bytearray, memoryview, BinaryIO]) -> List[DiagnosticMessage]:
    """Decode a raw diagnostic chunk from bytes or a binary stream.

    Bits whose error type is unused are ignored. Raises ValueError if fewer
    than RAW_CHUNK_LENGTH_IN_BYTES bytes are available.
    """
    if hasattr(data, "read"):
        chunk = bytes(data.read(RAW_CHUNK_LENGTH_IN_BYTES))
    else:
        chunk = bytes(data[:RAW_CHUNK_LENGTH_IN_BYTES])
    if len(chunk) < RAW_CHUNK_LENGTH_IN_BYTES:
        raise ValueError(
            f"Diagnostic chunk needs {RAW_CHUNK_LENGTH_IN_BYTES} bytes, got {len(chunk)}"
        )

    messages: List[DiagnosticMessage] = []
    device_bytes = chunk[RAW_CHUNK_UNUSED_OFFSET_IN_BYTES:]
    for scanner_id in ScannerId:
        start = int(scanner_id) * RAW_CHUNK_LENGTH_FOR_ONE_DEVICE_IN_BYTES
        block = device_bytes[start : start + RAW_CHUNK_LENGTH_FOR_ONE_DEVICE_IN_BYTES]
        for byte_n, raw_byte in enumerate(block):
            for bit_n, error_type in enumerate(ERROR_BITS[byte_n]):
                if raw_byte & (1 << bit_n) and error_type is not ErrorType.UNUSED:
                    messages.append(DiagnosticMessage(scanner_id, ErrorLocation(byte_n, bit_n)))
    return messages