"""Replies the scanner sends to start and stop requests."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import ClassVar, Union

_LAYOUT = struct.Struct("<IIII")
_CHECKED = struct.Struct("<III")
_RESERVED = 0


class CRCMismatch(RuntimeError):
    """Raised when the checksum of a reply does not match its contents."""

    def __init__(self, message: str = "CRC did not match!") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class ScannerReply:
    """A reply carrying the operation code and its result code."""

    op_code: int
    result_code: int

    SIZE: ClassVar[int] = _LAYOUT.size

    def to_bytes(self) -> bytes:
        """Encode this reply as the scanner sends it."""
        return serialize(self.op_code, self.result_code)


def _checksum(reserved: int, op_code: int, result_code: int) -> int:
    return zlib.crc32(_CHECKED.pack(reserved, op_code, result_code)) & 0xFFFFFFFF


def serialize(op_code: int, result_code: int) -> bytes:
    """Encode a reply: CRC-32, reserved word, op code and result code."""
    crc = _checksum(_RESERVED, op_code, result_code)
    return _LAYOUT.pack(crc, _RESERVED, op_code, result_code)


def deserialize(data: Union[bytes, bytearray, memoryview]) -> ScannerReply:
    """Decode the first ScannerReply.SIZE bytes of ``data``.

    Raises ValueError if the data is too short and CRCMismatch if the
    checksum is wrong.
    """
    raw = bytes(data[: ScannerReply.SIZE])
    if len(raw) < ScannerReply.SIZE:
        raise ValueError(f"Reply needs {ScannerReply.SIZE} bytes, got {len(raw)}")
    crc, reserved, op_code, result_code = _LAYOUT.unpack(raw)
    if crc != _checksum(reserved, op_code, result_code):
        raise CRCMismatch()
    return ScannerReply(op_code, result_code)