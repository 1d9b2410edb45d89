# eiokit

Building blocks for the Engine.IO wire protocol (version 3), plus a registry
of socket rooms. It has no third-party dependencies.

## Modules

- `eiokit.frame`: `FrameType` (`STRING`, `BINARY`) and `byte_to_frame_type`.
- `eiokit.packet`: `PacketType` (`OPEN`, `CLOSE`, `PING`, `PONG`, `MESSAGE`,
  `UPGRADE`, `NOOP`). `str()` of a packet type gives its lower-case name.
  `string_byte()` gives the marker byte used in text frames (`'0'`..`'6'`).
  `binary_byte()` gives the marker used in binary frames (`0`..`6`).
  `byte_to_packet_type(b, frame_type)` turns a marker byte back into a
  packet type. `Frame` and `Packet` are frozen records.
  `PacketEncoder(writer).next_writer(frame_type, packet_type)` opens a frame
  on any object with `next_writer(frame_type)` and writes the marker byte
  into it. `PacketDecoder(reader).next_reader()` reads the marker byte from a
  frame of any object with `next_reader()`. It returns
  `(frame_type, packet_type, stream)`. It raises `EOFError` for a frame that
  holds no marker.
- `eiokit.fake_frames`: in-memory frame sources and sinks.
  `FakeConnReader(frames)` yields the given frames and then raises
  `EOFError`. `FakeConstReader` is an endless source of message frames that
  alternate between text and binary. `FakeConnWriter` collects closed frames
  in `.frames`. `FakeDiscardWriter` throws frames away.
- `eiokit.lengths`: length prefixes for polling payloads.
  `write_text_len` / `read_text_len` use the text form `b"23461:"`.
  `write_binary_len` / `read_binary_len` use the binary form
  `02 03 04 06 01 ff`. Malformed input raises `ValueError("invalid payload")`.
  Input that ends too early raises `EOFError`.
- `eiokit.payload_errors`: `PayloadError` is the base class. `OpError(op, err)`
  renders as `"op: err"`. `RetryError` is a retryable error. Each has a
  `temporary()` method that tells whether the operation may be retried.
- `eiokit.pauser`: `Pauser` tracks running workers with `working()` and
  `done()`. `pause()` waits until every worker is done and returns `True`
  only for the call that actually paused. `resume()` undoes the pause.
  `pausing_trigger()` and `paused_trigger()` return `threading.Event`s.
- `eiokit.payload_decoder` / `eiokit.payload_encoder`: `PayloadDecoder` and
  `PayloadEncoder` split and join the packets inside one polling request or
  response body. Both text and binary payloads are supported. In text mode,
  binary frames are base64-encoded. Each works through a feeder object:
  the decoder calls `get_reader()` / `put_reader(err)` and the encoder calls
  `get_writer()` / `put_writer(err)`. `PayloadEncoder.noop()` returns an
  encoded NOOP packet.
- `eiokit.payload`: `Payload(support_binary)` links HTTP long-polling calls,
  made on one thread, to a packet reader and writer on another thread:
  - `feed_in(reader, support_binary)` hands a request body to `next_reader()`.
  - `flush_out(writer)` lets the packets written through `next_writer(...)`
    go into a response.
  - Deadlines are set with `set_read_deadline` / `set_write_deadline`. They
    take `time.monotonic()` values, or `None` for no deadline. An expired
    deadline raises an `OpError` such as `"read: timeout"`.
  - After `pause()`, calls raise a temporary `OpError`, and `flush_out`
    writes a NOOP packet instead.
  - After `close()`, calls raise `EOFError`, or the first error that was
    stored.
- `eiokit.broadcast`: `Broadcast` is a thread-safe registry of rooms for
  connections. A connection is any object with an `id` and an
  `emit(event, *args)` method. The methods are `join`, `leave`, `leave_all`,
  `clear`, `send`, `send_all`, `for_each`, `count`, `rooms` and `all_rooms`.
  A room disappears when its last connection leaves.
- `eiokit.adapter_options`: `RedisAdapterOptions` (`host`, `port`, `addr`,
  `prefix`, `network`) with `resolved_addr()`. `default_options()` gives
  `127.0.0.1:6379`, prefix `socket.io`, network `tcp`. `get_options(opts)`
  overrides the defaults with every non-empty field of `opts`.

## Example

```python
from eiokit.fake_frames import FakeConnWriter
from eiokit.frame import FrameType
from eiokit.packet import PacketEncoder, PacketType

writer = FakeConnWriter()
encoder = PacketEncoder(writer)
w = encoder.next_writer(FrameType.STRING, PacketType.MESSAGE)
w.write(b"hello")
w.close()
print(writer.frames)  # one string frame holding b"4hello"
```

## What it does not do

eiokit does not include:

- an HTTP or WebSocket server, or a client dialer;
- polling or WebSocket transports;
- session management, or a Socket.IO namespace and event layer.

`RedisAdapterOptions` only holds configuration. eiokit does not connect to
Redis. The codecs, `Payload` and `Broadcast` are pieces for building such
parts.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```