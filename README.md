# sockjet

Building blocks for Engine.IO / Socket.IO style servers: frame and packet
types, the packet-per-frame codec, the long-polling payload format, a
thread-safe payload exchange between HTTP requests and a connection, and an
in-memory room registry. Pure Python, no dependencies.

## Modules

- `sockjet.frame` – `FrameType` (`STRING`, `BINARY`) and `byte_to_frame_type()`.
- `sockjet.packet` – `PacketType` (`OPEN`, `CLOSE`, `PING`, `PONG`, `MESSAGE`,
  `UPGRADE`, `NOOP`) with `string_byte()` / `binary_byte()`,
  `byte_to_packet_type()`, the `Frame` and `Packet` dataclasses, and
  `PacketEncoder` / `PacketDecoder`, which write and read the packet-type byte
  at the start of each frame.
- `sockjet.fakes` – in-memory frame sources and sinks: `FakeConnReader`,
  `FakeConstReader`, `FakeConnWriter`, `FakeDiscardWriter`, `FakeFrame`.
- `sockjet.payload.errors` – `PayloadError`, `OpError` and `RetryError`, each
  with `temporary()`.
- `sockjet.payload.util` – payload length headers: `write_text_len`,
  `read_text_len`, `write_binary_len`, `read_binary_len`.
- `sockjet.payload.pauser` – `Pauser`, which lets workers register with
  `working()` / `done()` and lets `pause()` wait for them.
- `sockjet.payload.encoder` / `sockjet.payload.decoder` – `PayloadEncoder` and
  `PayloadDecoder`, which frame packets in text (`"6:4hello"`, with base64 for
  binary frames) or binary payload form.
- `sockjet.payload.payload` – `Payload`, which hands request bodies and
  response streams between threads.
- `sockjet.broadcast` – `Broadcast`, a room registry for sending events to
  groups of connections.
- `sockjet.adapter_options` – `RedisAdapterOptions` with `default_options()`
  and `get_options()`.

## Install

```
pip install sockjet
```

## Packets in frames

```python
from sockjet.frame import FrameType
from sockjet.packet import PacketDecoder, PacketEncoder, PacketType
from sockjet.fakes import FakeConnReader, FakeConnWriter

sink = FakeConnWriter()
writer = PacketEncoder(sink).next_writer(FrameType.STRING, PacketType.MESSAGE)
writer.write(b"hello")
writer.close()
# sink.frames == [Frame(FrameType.STRING, b"4hello")]

decoder = PacketDecoder(FakeConnReader(sink.frames))
frame_type, packet_type, body = decoder.next_reader()
# PacketType.MESSAGE, body.read() == b"hello"
# a further next_reader() raises EOFError
```

## Payload framing

`PayloadEncoder` and `PayloadDecoder` take a feeder object. An encoder's feeder
has `get_writer()` and `put_writer(err)`; a decoder's has `get_reader()`
(returning a stream and whether it is in binary form) and `put_reader(err)`.

```python
import io
from sockjet.frame import FrameType
from sockjet.packet import PacketType
from sockjet.payload.encoder import PayloadEncoder

class Sink:
    def __init__(self):
        self.buf = io.BytesIO()
    def get_writer(self):
        return self.buf
    def put_writer(self, err):
        pass

sink = Sink()
encoder = PayloadEncoder(False, sink)
writer = encoder.next_writer(FrameType.STRING, PacketType.MESSAGE)
writer.write(b"hello")
writer.close()
# sink.buf.getvalue() == b"6:4hello"
# encoder.noop() == b"1:6"
```

Malformed lengths raise `PayloadError("invalid payload")`; a stream that ends
inside a header raises `EOFError`.

## Payload exchange over HTTP polling

For each HTTP request a server thread calls `Payload.feed_in(body, support_binary)`
or `Payload.flush_out(response_stream)`; the connection side calls
`Payload.next_reader()` and `Payload.next_writer(frame_type, packet_type)`.

- `set_read_deadline()` / `set_write_deadline()` take an absolute time
  (`time.time()` or a `datetime`), or `None` for no deadline. Past it, waiting
  calls raise an `OpError` whose message is `"read: timeout"` or
  `"write: timeout"`.
- `pause()` waits for readers and writers in progress. While paused or
  pausing, `flush_out` writes a NOOP payload instead; `feed_in`,
  `next_reader` and `next_writer` raise an `OpError` whose `temporary()` is
  true. `resume()` ends the pause.
- `close()` ends every waiting call, and every later one, with `EOFError`, or
  with the first error the payload recorded.
- Two overlapping `feed_in` (or `flush_out`) calls raise an `OpError` with
  "overlap".

## Rooms

```python
from sockjet.broadcast import Broadcast

rooms = Broadcast()
rooms.join("lobby", conn)          # conn has .id and .emit(event, *args)
rooms.send("lobby", "reply", "hi")
rooms.count("lobby")               # 1
rooms.rooms(conn)                  # ["lobby"]
rooms.leave_all(conn)              # empty rooms are removed
```

## What this package does not do

It has no HTTP or WebSocket server, no transports, no session handling and no
Socket.IO namespaces or event dispatch: it provides the codecs and
coordination pieces such a server is built from. `RedisAdapterOptions` only
holds and merges settings; there is no Redis-backed adapter, and `Broadcast`
works within one process.

## Tests

```
pip install -e ".[test]"
pytest
```