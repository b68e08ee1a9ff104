# psenscan

Pure-Python data types and binary formats for PSENscan safety laser scanners
(firmware version 2). The package has no runtime dependencies.

## Modules

- `psenscan.scan_range.ScanRange` — a frozen start/end angle pair in tenths of a
  degree. Both angles must lie in `[1, 2749]` and `start` must be smaller than
  `end`, otherwise `ValueError` is raised. `ScanRange.invalid()` gives a
  placeholder range of `0, 0`.
- `psenscan.scanner_configuration.ScannerConfiguration` — scanner and host IP
  addresses (dotted strings, `ipaddress.IPv4Address` or integers; stored as
  integers), host and scanner data/control ports, scan range, scan resolution
  and the diagnostics, intensities and fragmented-scans switches.
  `is_complete()` tells whether scanner IP and scan range are set;
  `is_valid()` returns `False` (and logs an error) when intensities are enabled
  with a resolution below 0.2 degree.
- `psenscan.start_request` — `StartRequest.from_configuration(config)` builds a
  start request (host IP and scan range must be set, else `ValueError`);
  `serialize(sequence_number=0)` encodes it with its leading CRC-32. When the
  scan range is an exact multiple of the resolution, the encoded end angle is
  increased by one. `LaserScanSettings` and `DeviceSettings` hold the
  per-device parts.
- `psenscan.scanner_reply` — `serialize(op_code, result_code)` and
  `deserialize(data)` for the 16-byte start/stop replies. `deserialize` returns
  a `ScannerReply` and raises `CRCMismatch` on a wrong checksum, `ValueError`
  on too little data.
- `psenscan.monitoring_frame` — `MonitoringFrame` holds one frame: `from_theta`
  and `resolution` in tenths of a degree, measurements in metres, intensities,
  active zone set and diagnostic messages. The `scan_counter` property raises
  `ScanCounterMissing` if the frame carried none. `StampedMonitoringFrame`
  pairs a frame with a timestamp.
- `psenscan.frame_codec` — `deserialize(data, num_bytes=None)` decodes a raw
  monitoring frame and `serialize(frame)` encodes one. Malformed input raises
  `DecodingFailure`, or its subclasses `ScanCounterUnexpectedSize` and
  `ZoneSetUnexpectedSize`. Lower-level readers: `read_fixed_fields` and
  `read_additional_field`.
- `psenscan.diagnostics` — `deserialize_diagnostics` and
  `serialize_diagnostics` for the raw diagnostic chunk; `DiagnosticMessage`
  gives `diagnostic_code()` and a readable `description()`; `is_ambiguous`
  flags the internal and unused error types.
- `psenscan.scanner_events` — plain event types (`StartRequest`,
  `RawReplyReceived`, `RawMonitoringFrameReceived`, timeouts and errors) for a
  scanner protocol state machine.
- `psenscan.logging` — `log(name, level, message, *args)` writes
  `"name: message"` to the `psenscan` logger; `LogOnce` logs only its first
  message, `LogThrottle(period)` at most once per period.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from psenscan import frame_codec, scanner_reply
from psenscan.scan_range import ScanRange
from psenscan.scanner_configuration import ScannerConfiguration
from psenscan.start_request import StartRequest

config = ScannerConfiguration(
    scanner_ip="192.168.0.10",
    host_ip="192.168.0.50",
    scan_range=ScanRange(1, 2749),
    scan_resolution=2,
)
request_bytes = StartRequest.from_configuration(config).serialize()

reply = scanner_reply.deserialize(scanner_reply.serialize(0x35, 0))
print(reply.op_code, reply.result_code)

frame = frame_codec.deserialize(datagram)
print(frame.from_theta, frame.resolution, frame.scan_counter)
print(frame.measurements[:10])
for message in frame.diagnostic_messages:
    print(message.description())
```

Angles are integers in tenths of a degree. A measurement of `inf` means that no
signal came back, or that it came back too late.

## What this package does not do

It only builds and parses messages. It opens no sockets and sends or receives
nothing over UDP, has no state machine that acts on the events in
`psenscan.scanner_events`, does not assemble monitoring frames into complete
laser scans, and provides no command-line program.