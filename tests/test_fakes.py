import pytest

from sockjet.fakes import (
    FakeConnReader,
    FakeConnWriter,
    FakeConstReader,
    FakeDiscardWriter,
    FakeFrame,
)
from sockjet.frame import FrameType
from sockjet.packet import Frame, PacketDecoder, PacketType


def test_conn_reader_serves_frames_in_order_then_eof():
    frames = [Frame(FrameType.STRING, b"4abc"), Frame(FrameType.BINARY, b"\x04xyz")]
    reader = FakeConnReader(frames)
    for frame in frames:
        ft, stream = reader.next_reader()
        assert ft == frame.frame_type
        assert stream.read() == frame.data
    with pytest.raises(EOFError):
        reader.next_reader()


def test_conn_writer_records_closed_frames():
    writer = FakeConnWriter()
    data = b"hello"
    stream = writer.next_writer(FrameType.BINARY)
    assert stream.write(data) == len(data)
    assert writer.frames == []
    stream.close()
    assert writer.frames == [Frame(FrameType.BINARY, data)]


def test_frame_without_owner_reads_back_written_data():
    frame = FakeFrame(None, FrameType.STRING)
    data = b"payload"
    frame.write(data)
    frame.close()
    assert frame.read() == data


def test_frame_read_consumes_data():
    writer = FakeConnWriter()
    frame = FakeFrame(writer, FrameType.STRING)
    data = b"hello"
    frame.write(data)
    assert frame.read(2) == data[:2]
    frame.close()
    assert writer.frames == [Frame(FrameType.STRING, data[2:])]


def test_discard_writer_accepts_everything():
    stream = FakeDiscardWriter().next_writer(FrameType.STRING)
    data = b"anything at all"
    assert stream.write(data) == len(data)
    stream.close()
    assert stream.write(b"") == 0


def test_const_reader_alternates_frame_types():
    reader = FakeConstReader()
    types = [reader.next_reader()[0] for _ in range(4)]
    assert types == [FrameType.STRING, FrameType.BINARY, FrameType.STRING, FrameType.BINARY]


def test_const_reader_decodes_to_messages():
    decoder = PacketDecoder(FakeConstReader())
    for expected in (FrameType.STRING, FrameType.BINARY, FrameType.STRING):
        ft, pt, stream = decoder.next_reader()
        stream.close()
        assert ft == expected
        assert pt == PacketType.MESSAGE