import io
from concurrent.futures import ThreadPoolExecutor

import pytest

from sockjet.frame import FrameType
from sockjet.packet import Packet, PacketType
from sockjet.payload.decoder import PayloadDecoder
from sockjet.payload.encoder import PayloadEncoder
from sockjet.payload.errors import ERR_PAUSED, OpError, PayloadError

HELLO = "hello 你好".encode()
NOOP_BINARY = bytes([0x00, 0x01, 0xFF, ord("6")])
NOOP_TEXT = b"1:6"

CASES = [
    (True, bytes([0x00, 0x01, 0xFF]) + b"0", [
        Packet(FrameType.STRING, PacketType.OPEN, b""),
    ]),
    (True, bytes([0x00, 0x01, 0x03, 0xFF]) + b"4" + HELLO, [
        Packet(FrameType.STRING, PacketType.MESSAGE, HELLO),
    ]),
    (True, bytes([0x01, 0x01, 0x03, 0xFF, 0x04]) + HELLO, [
        Packet(FrameType.BINARY, PacketType.MESSAGE, HELLO),
    ]),
    (True,
     bytes([0x01, 0x07, 0xFF, 0x04]) + b"hello\n"
     + bytes([0x00, 0x08, 0xFF]) + "4你好\n".encode()
     + bytes([0x00, 0x06, 0xFF]) + b"2probe",
     [
         Packet(FrameType.BINARY, PacketType.MESSAGE, b"hello\n"),
         Packet(FrameType.STRING, PacketType.MESSAGE, "你好\n".encode()),
         Packet(FrameType.STRING, PacketType.PING, b"probe"),
     ]),
    (False, b"1:0", [
        Packet(FrameType.STRING, PacketType.OPEN, b""),
    ]),
    (False, "13:4hello 你好".encode(), [
        Packet(FrameType.STRING, PacketType.MESSAGE, HELLO),
    ]),
    (False, b"18:b4aGVsbG8g5L2g5aW9", [
        Packet(FrameType.BINARY, PacketType.MESSAGE, HELLO),
    ]),
    (False, "10:b4aGVsbG8K8:4你好\n6:2probe".encode(), [
        Packet(FrameType.BINARY, PacketType.MESSAGE, b"hello\n"),
        Packet(FrameType.STRING, PacketType.MESSAGE, "你好\n".encode()),
        Packet(FrameType.STRING, PacketType.PING, b"probe"),
    ]),
]


class FakeWriterFeeder:
    def __init__(self, writer):
        self.writer = writer
        self.return_error = None
        self.passing_err = "unset"

    def get_writer(self):
        err = self.return_error
        if isinstance(err, PayloadError) and err.temporary():
            self.return_error = None
            raise err
        if err is not None:
            raise err
        return self.writer

    def put_writer(self, err):
        self.passing_err = err
        if self.return_error is not None:
            raise self.return_error


class ErrorWriter:
    def __init__(self, err):
        self.err = err

    def write(self, data):
        raise self.err


class OneShotFeeder:
    def __init__(self, data, support_binary):
        self.data = data
        self.support_binary = support_binary

    def get_reader(self):
        return io.BytesIO(self.data), self.support_binary

    def put_reader(self, err):
        pass


@pytest.mark.parametrize("support_binary,expected,packets", CASES)
def test_encoder(support_binary, expected, packets):
    buf = io.BytesIO()
    feeder = FakeWriterFeeder(buf)
    encoder = PayloadEncoder(support_binary, feeder)
    for packet in packets:
        writer = encoder.next_writer(packet.frame_type, packet.packet_type)
        assert writer.write(packet.data) == len(packet.data)
        writer.close()
    assert buf.getvalue() == expected
    assert feeder.passing_err is None


def test_begin_error():
    feeder = FakeWriterFeeder(io.BytesIO())
    encoder = PayloadEncoder(True, feeder)
    target = OpError("payload", ERR_PAUSED)
    feeder.return_error = target
    with pytest.raises(OpError) as excinfo:
        encoder.next_writer(FrameType.BINARY, PacketType.OPEN)
    assert excinfo.value is target


def test_end_error():
    write_error = OSError("write error")
    feeder = FakeWriterFeeder(ErrorWriter(write_error))
    encoder = PayloadEncoder(True, feeder)
    writer = encoder.next_writer(FrameType.BINARY, PacketType.OPEN)

    target = RuntimeError("error")
    feeder.return_error = target
    with pytest.raises(RuntimeError) as excinfo:
        writer.close()
    assert excinfo.value is target
    assert feeder.passing_err is write_error


@pytest.mark.parametrize("support_binary,expected", [
    (True, NOOP_BINARY),
    (False, NOOP_TEXT),
])
def test_noop(support_binary, expected):
    assert PayloadEncoder(support_binary).noop() == expected


@pytest.mark.parametrize("support_binary", [True, False])
def test_round_trip_through_decoder(support_binary):
    packets = [
        Packet(FrameType.STRING, PacketType.OPEN, b""),
        Packet(FrameType.BINARY, PacketType.MESSAGE, bytes(range(256))),
        Packet(FrameType.STRING, PacketType.MESSAGE, "你好\n".encode()),
    ]
    buf = io.BytesIO()
    encoder = PayloadEncoder(support_binary, FakeWriterFeeder(buf))
    for packet in packets:
        writer = encoder.next_writer(packet.frame_type, packet.packet_type)
        writer.write(packet.data)
        writer.close()

    decoder = PayloadDecoder(OneShotFeeder(buf.getvalue(), support_binary))
    decoded = []
    for _ in packets:
        ft, pt, reader = decoder.next_reader()
        decoded.append(Packet(ft, pt, reader.read()))
        reader.close()
    assert decoded == packets