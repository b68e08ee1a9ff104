import io
import math

import pytest

from psenscan.diagnostics import DiagnosticMessage, ErrorLocation, ScannerId
from psenscan.frame_codec import (
    AdditionalFieldHeader,
    DecodingFailure,
    FieldId,
    ScanCounterUnexpectedSize,
    ZoneSetUnexpectedSize,
    deserialize,
    read_additional_field,
    read_fixed_fields,
    serialize,
)
from psenscan.monitoring_frame import MonitoringFrame, ScanCounterMissing

_FULL_LINES = [
    "00 00 00 00 ca 00",
    "00 00 00 00 00 00 05 00 00 00 00 e8 03 02 00 02",
    "05 00 94 88 00 00 04 29 00 00 00 00 00 00 00 01",
    "00 08 00 00 00 00 00 00 00 00 00 00 00 00 00 00",
    "00 00 00 00 00 00 00 00 00 00 00 00 00 00 00 00",
    "00 05 f5 01 f8 02 fd 02 ff 02 01 03 03 03 02 03",
    "03 03 07 03 0a 03 0e 03 0c 03 0b 03 0a 03 15 03",
    "1d 03 12 03 12 03 19 03 22 03 1e 03 23 03 25 03",
    "22 03 26 03 28 03 30 03 0e 03 bc 02 85 02 90 02",
    "9a 02 90 02 7b 02 84 02 7a 02 70 02 70 02 7b 02",
    "70 02 70 02 64 02 70 02 7b 02 64 02 7b 02 70 02",
    "7b 02 7b 02 7b 02 92 02 7c 02 7c 02 87 02 87 02",
    "92 02 7c 02 7c 02 9d 02 92 02 88 02 88 02 88 02",
    "92 02 93 02 93 02 9e 02 9e 02 7f 02 7c 02 7c 02",
    "7d 02 7d 02 88 02 88 02 7d 02 88 02 88 02 7d 02",
    "88 02 72 02 88 02 88 02 94 02 89 02 89 02 94 02",
    "94 02 94 02 9f 02 9f 02 9f 02 89 02 95 02 a0 02",
    "a0 02 95 02 95 02 ab 02 95 02 95 02 a0 02 96 02",
    "a0 02 a1 02 a1 02 a1 02 a1 02 96 02 a1 02 ac 02",
    "a1 02 97 02 97 02 97 02 97 02 97 02 93 02 93 02",
    "97 02 93 02 9f 02 aa 02 aa 02 c5 02 c5 02 ae 02",
    "c5 02 d0 02 c5 02 d0 02 d0 02 d0 02 d0 02 d0 02",
    "db 02 db 02 d1 02 dc 02 e7 02 dc 02 dc 02 c6 02",
    "e7 02 e7 02 dc 02 e7 02 c6 02 d1 02 c7 02 d2 02",
    "d2 02 c7 02 dd 02 dd 02 dd 02 dd 02 dd 02 fe 02",
    "f3 02 f3 02 fe 02 09 03 fd 02 9f 03 1e 04 98 04",
    "98 04 86 04 ec 04 e2 04 e7 04 eb 04 ed 04 f6 04",
    "54 05 c6 06 db 06 f6 06 ff 06 0f 07 1f 07 36 07",
    "43 07 52 07 66 07 78 07 93 07 a4 07 ab 07 c1 07",
    "de 07 ec 07 00 08 17 08 30 08 3f 08 5d 08 73 08",
    "8f 08 9f 08 c8 08 de 08 f0 08 0f 09 23 09 3f 09",
    "5a 09 76 09 9c 09 be 09 e2 09 04 0a 2d 0a 4c 0a",
    "72 0a 9d 0a c7 0a ed 0a 1b 0b 44 0b 70 0b a4 0b",
    "d9 0b 05 0c 51 0c 83 0c bf 0c bd 0c ba 0c ba 0c",
    "ba 0c b1 0c bf 0c a6 0c a6 0c 9c 0c a0 0c 9b 0c",
    "9d 0c 97 0c 9a 0c 99 0c a2 0c 99 0c 94 0c 90 0c",
    "93 0c 93 0c 92 0c 91 0c 06 f5 01 80 8a 80 8a 70",
    "8a 7c 8a 7b 8a 70 8a 66 8a 7c 8a 86 8a 6a 8a 5e",
    "8a 67 8a 77 8a 76 8a 72 8a 7e 8a 62 8a 5d 8a 66",
    "8a 60 8a 67 8a 60 8a 64 8a 74 8a 2f 8a 64 89 e4",
    "49 3f 49 ed 45 18 45 f3 44 d8 44 76 45 8e 47 99",
    "48 d6 48 e3 48 e2 48 e8 48 e7 48 e9 48 d7 48 d3",
    "48 e4 48 ca 48 db 48 cb 48 ce 48 c2 48 bc 48 c4",
    "48 b4 48 bb 48 b5 48 9c 48 a8 48 ad 48 93 48 99",
    "48 97 48 91 48 87 48 85 48 86 48 72 48 6a 48 69",
    "48 68 48 68 48 50 48 52 48 5b 48 4f 48 44 48 3c",
    "48 40 48 33 48 2e 48 2c 48 24 48 1e 48 12 48 1e",
    "48 13 48 19 48 0e 48 09 48 08 48 fc 47 fd 47 f1",
    "47 00 48 06 48 f0 47 fd 47 fd 47 fd 47 f8 47 fa",
    "47 02 48 f9 47 06 48 0d 48 0c 48 12 48 0e 48 23",
    "48 22 48 1f 48 1b 48 27 48 3a 48 4b 48 41 48 5a",
    "48 51 48 6c 48 73 48 63 48 7a 48 77 48 77 48 71",
    "48 7b 48 8b 48 74 48 88 48 89 48 96 48 7b 48 8f",
    "48 8d 48 8d 48 89 48 95 48 97 48 99 48 8e 48 7b",
    "48 82 48 8c 48 76 48 84 48 82 48 90 48 79 48 71",
    "48 72 48 62 48 61 48 56 48 72 48 62 48 3d 48 47",
    "48 45 48 41 48 2c 48 1f 48 24 48 fd 47 b7 47 3c",
    "46 0e 43 f9 41 2c 41 9a 43 c1 48 c2 87 76 88 78",
    "88 53 88 41 88 3f 88 c1 87 bd 87 14 88 fd 87 00",
    "88 d2 87 cd 87 cb 87 ae 87 a2 87 69 87 89 87 5a",
    "87 48 87 4c 87 05 87 24 87 1d 87 b8 86 d9 86 a3",
    "86 9f 86 98 86 74 86 66 86 3b 86 60 86 32 86 fd",
    "85 f2 85 a3 85 a9 85 9e 85 8f 85 ae 85 8b 85 6f",
    "85 47 85 1c 85 fd 84 b8 84 ac 84 a1 84 8c 84 49",
    "84 48 84 63 84 1a 84 10 84 18 84 11 14 2d 13 76",
    "16 e7 87 bd 87 9c 87 97 87 58 87 5f 87 fb 86 f5",
    "86 92 86 bf 86 ca 86 e5 86 da 86 e8 86 e7 86 fd",
    "86 05 87 ff 86 11 87 1e 87 28 87 30 87 35 87 03",
    "02 00 02 09 00 00 00",
]
WITH_INTENSITIES_AND_DIAGNOSTICS = bytes.fromhex(" ".join(_FULL_LINES))

FIXED_FIELDS_HEX = "00 00 00 00 ca 00 00 00 00 00 00 00 05 00 00 00 00 dc 05 0a 00"

WITHOUT_MEASUREMENTS_AND_INTENSITIES = bytes.fromhex(
    FIXED_FIELDS_HEX + " 02 05 00 fc 61 06 00" + " 05 01 00" + " 03 02 00 02" + " 09 00 00 00"
)
WITH_UNKNOWN_FIELD_ID = bytes.fromhex(
    FIXED_FIELDS_HEX + " 02 05 00 fc 61 06 00" + " 0a 01 00" + " 09 00 00 00"
)
WITH_TOO_LARGE_FIELD_LENGTH = bytes.fromhex(
    FIXED_FIELDS_HEX + " 02 05 00 fc 61 06 00" + " 05 cf ff" + " 09 00 00 00"
)
WITH_TOO_LARGE_SCAN_COUNTER_LENGTH = bytes.fromhex(
    FIXED_FIELDS_HEX + " 02 06 00 fc 61 06 00" + " 05 00 00" + " 09 00 00 00"
)
WITH_TOO_LARGE_ACTIVE_ZONE_SET_LENGTH = bytes.fromhex(
    FIXED_FIELDS_HEX + " 02 05 00 fc 61 06 00" + " 03 03 00 00" + " 05 00 00" + " 09 00 00 00"
)
WITH_TOO_LARGE_INTENSITY_LENGTH = bytes.fromhex(
    FIXED_FIELDS_HEX + " 02 05 00 fc 61 06 00" + " 06 00 04" + " 05 00 00" + " 09 00 00 00"
)
WITH_NO_END = bytes.fromhex(FIXED_FIELDS_HEX + " 02 06 00 fc 61 06 00" + " 05 00 00")
WITH_NO_END_VALID_COUNTER = bytes.fromhex(FIXED_FIELDS_HEX + " 02 05 00 fc 61 06 00" + " 05 00 00")


def test_full_dump_header_values():
    assert len(WITH_INTENSITIES_AND_DIAGNOSTICS) == 1085
    frame = deserialize(WITH_INTENSITIES_AND_DIAGNOSTICS, len(WITH_INTENSITIES_AND_DIAGNOSTICS))
    assert frame.from_theta == 0x3E8
    assert frame.resolution == 0x02
    assert frame.scan_counter == 0x00008894
    assert frame.active_zoneset == 0x02
    assert frame.scanner_id == ScannerId.MASTER


def test_full_dump_measurements_and_intensities():
    frame = deserialize(WITH_INTENSITIES_AND_DIAGNOSTICS)
    assert len(frame.measurements) == 250
    assert frame.measurements[0] == pytest.approx(0.760)
    assert frame.measurements[-1] == pytest.approx(3.217)
    assert len(frame.intensities) == 250
    assert frame.intensities[0] == 2688.0
    assert frame.intensities[-1] == 1845.0
    assert all(0 <= value <= 0x3FFF for value in frame.intensities)


def test_full_dump_diagnostics():
    frame = deserialize(WITH_INTENSITIES_AND_DIAGNOSTICS)
    assert frame.diagnostic_data_enabled is True
    assert frame.diagnostic_messages == [
        DiagnosticMessage(ScannerId.MASTER, ErrorLocation(2, 0)),
        DiagnosticMessage(ScannerId.MASTER, ErrorLocation(4, 3)),
    ]


def test_serialize_full_dump_reproduces_bytes_with_cleared_intensity_channel_bits():
    expected = bytearray(WITH_INTENSITIES_AND_DIAGNOSTICS)
    for index in range(578, 1077, 2):
        expected[index] &= 0b00111111
    frame = deserialize(WITH_INTENSITIES_AND_DIAGNOSTICS)
    assert serialize(frame) == bytes(expected)


def test_deserialize_without_measurements_and_intensities():
    frame = deserialize(WITHOUT_MEASUREMENTS_AND_INTENSITIES)
    assert frame == MonitoringFrame(0x5DC, 0x0A, 0x0661FC, 0x02, [])
    assert frame.measurements == []
    assert frame.intensities == []
    assert frame.diagnostic_data_enabled is False


def test_serialize_without_measurements_matches_dump():
    frame = MonitoringFrame(0x5DC, 0x0A, 0x0661FC, 0x02, [])
    assert serialize(frame) == WITHOUT_MEASUREMENTS_AND_INTENSITIES


def test_unknown_field_id_raises():
    with pytest.raises(DecodingFailure, match="0x0a"):
        deserialize(WITH_UNKNOWN_FIELD_ID)


def test_too_large_field_length_raises():
    with pytest.raises(DecodingFailure, match="too large"):
        deserialize(WITH_TOO_LARGE_FIELD_LENGTH)


def test_too_large_scan_counter_length_raises():
    with pytest.raises(ScanCounterUnexpectedSize):
        deserialize(WITH_TOO_LARGE_SCAN_COUNTER_LENGTH)


def test_too_large_active_zone_set_length_raises():
    with pytest.raises(ZoneSetUnexpectedSize):
        deserialize(WITH_TOO_LARGE_ACTIVE_ZONE_SET_LENGTH)


def test_too_large_intensity_length_raises():
    with pytest.raises(DecodingFailure, match="too large"):
        deserialize(WITH_TOO_LARGE_INTENSITY_LENGTH)


@pytest.mark.parametrize("data", [WITH_NO_END, WITH_NO_END_VALID_COUNTER])
def test_frame_without_end_raises(data):
    with pytest.raises(DecodingFailure):
        deserialize(data)


@pytest.mark.parametrize(
    "data, error_type",
    [
        (WITH_TOO_LARGE_SCAN_COUNTER_LENGTH, ScanCounterUnexpectedSize),
        (WITH_TOO_LARGE_ACTIVE_ZONE_SET_LENGTH, ZoneSetUnexpectedSize),
    ],
)
def test_size_errors_are_decoding_failures(data, error_type):
    with pytest.raises(DecodingFailure) as excinfo:
        deserialize(data)
    assert excinfo.type is error_type


def test_num_bytes_limits_the_decoded_data():
    data = WITHOUT_MEASUREMENTS_AND_INTENSITIES + b"\xff" * 10
    frame = deserialize(data, len(WITHOUT_MEASUREMENTS_AND_INTENSITIES))
    assert frame.scan_counter == 0x0661FC


def test_read_fixed_fields():
    fields = read_fixed_fields(io.BytesIO(bytes.fromhex(FIXED_FIELDS_HEX)))
    assert fields.device_status == 0
    assert fields.op_code == 0xCA
    assert fields.working_mode == 0
    assert fields.transaction_type == 5
    assert fields.scanner_id == 0
    assert fields.from_theta == 1500
    assert fields.resolution == 10


def test_read_fixed_fields_too_short_raises():
    with pytest.raises(DecodingFailure):
        read_fixed_fields(io.BytesIO(b"\x00" * 10))


def test_read_additional_field_decrements_length():
    header = read_additional_field(io.BytesIO(bytes.fromhex("02 05 00")), 10)
    assert header == AdditionalFieldHeader(FieldId.SCAN_COUNTER, 4)


def test_read_additional_field_keeps_zero_length():
    header = read_additional_field(io.BytesIO(bytes.fromhex("09 00 00")), 10)
    assert header == AdditionalFieldHeader(0x09, 0)


def test_read_additional_field_length_equal_to_max_raises():
    with pytest.raises(DecodingFailure):
        read_additional_field(io.BytesIO(bytes.fromhex("05 0a 00")), 10)


def test_additional_field_header_to_bytes_adds_one():
    assert AdditionalFieldHeader(FieldId.ZONE_SET, 1).to_bytes() == bytes.fromhex("03 02 00")


def test_round_trip_with_diagnostics_and_slave_ids():
    messages = [
        DiagnosticMessage(ScannerId.SLAVE1, ErrorLocation(0, 7)),
        DiagnosticMessage(ScannerId.SLAVE2, ErrorLocation(5, 0)),
    ]
    frame = MonitoringFrame(10, 2, 42, 3, [1.0, 2.5, 0.001], [4.0, 5.0, 6.0], messages)
    decoded = deserialize(serialize(frame))
    assert decoded == frame
    assert decoded.diagnostic_data_enabled is True


def test_infinite_measurement_round_trips():
    frame = MonitoringFrame(0, 1, 7, 0, [math.inf, 1.0])
    decoded = deserialize(serialize(frame))
    assert decoded.measurements == [math.inf, 1.0]


def test_signal_too_late_decodes_to_infinity():
    frame = MonitoringFrame(0, 1, 7, 0, [59.996])
    decoded = deserialize(serialize(frame))
    assert decoded.measurements == [math.inf]


def test_intensity_channel_bits_are_ignored():
    frame = MonitoringFrame(0, 1, 7, 0, [1.0], [float(0x4000 + 5)], [])
    decoded = deserialize(serialize(frame))
    assert decoded.intensities == [5.0]


def test_serialize_without_scan_counter_raises():
    with pytest.raises(ScanCounterMissing):
        serialize(MonitoringFrame(0, 1))


def test_serialize_ends_with_end_of_frame_marker():
    data = serialize(MonitoringFrame(0, 1, 1, 0, [0.5]))
    assert data[-4:] == bytes.fromhex("09 00 00 00")
    assert data[4] == 0xCA
    assert data[12] == 0x05