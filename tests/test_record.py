import io
from unittest import mock

import pytest

from binfiles.exceptions import (
    ArgumentException,
    RecordFormatException,
    TransportException,
)
from binfiles.hex import Record, RecordReader, RecordWriter


SAMPLE = Record(0, 0x1234, bytes(range(1, 9)))
SAMPLE_ENCODED = b':0812340001020304050607088E'


class CountingStream(io.BytesIO):
    """BytesIO keeping track of how many times it has been read."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.n_reads = 0

    def read(self, *args):
        self.n_reads += 1
        return super().read(*args)


class NonBlockingStream(object):
    """Stream with no data available yet."""

    def read(self, n=-1):
        return None


class HexPath(object):
    """Minimal path-like object."""

    def __init__(self, path):
        self.path = path

    def __fspath__(self):
        return str(self.path)


class FailingStream(object):
    def __init__(self):
        self.n_reads = 0
        self.closed = 0

    def read(self, n=-1):
        self.n_reads += 1
        raise OSError('device not ready')

    def close(self):
        self.closed += 1


def test_record():
    data = bytearray(b'\x01\x02')
    record = Record(0, 0xbeef, data)
    data[0] = 0

    assert record.type == 0
    assert record.address == 0xbeef
    assert record.data == b'\x01\x02'
    assert record.checksum == (-(0x02 + 0xbe + 0xef + 0x01 + 0x02)) & 0xff
    assert record.raw == b'\x02\xbe\xef\x00\x01\x02' + bytes([record.checksum])
    assert record == Record(0, 0xbeef, b'\x01\x02')


def test_record_encode():
    assert SAMPLE.encode() == SAMPLE_ENCODED
    assert Record(1, 0).encode() == b':00000001FF'


@pytest.mark.parametrize('args', [
    (0x100, 0, b''),
    (-1, 0, b''),
    (0, 0x10000, b''),
    (0, -1, b''),
    (0, 0, b'\x00' * 0x100),
])
def test_record_invalid(args):
    with pytest.raises(ArgumentException):
        Record(*args)


def test_record_unpack():
    assert Record.unpack(SAMPLE.raw) == SAMPLE

    with pytest.raises(RecordFormatException):
        Record.unpack(SAMPLE.raw[:-1] + b'\x00')

    with pytest.raises(RecordFormatException):
        Record.unpack(b'\x00\x00\x00')


def test_writer_without_separator():
    stream = io.BytesIO()
    writer = RecordWriter(stream, b'')
    writer.write(SAMPLE)

    assert stream.getvalue() == SAMPLE_ENCODED


def test_writer_default_separator():
    stream = io.BytesIO()
    writer = RecordWriter(stream)
    writer.write(SAMPLE)

    assert stream.getvalue() == SAMPLE_ENCODED + b'\n'


@pytest.mark.parametrize('separator,expected', [
    ('\n', b'\n'),
    ('', b''),
    (None, b''),
    ('myseparator', b'myseparator'),
    (b'\x28\x29', b'()'),
    (b'\r\n', b'\r\n'),
])
def test_writer_separator(separator, expected):
    stream = io.BytesIO()
    writer = RecordWriter(stream, separator)
    writer.write(SAMPLE)
    writer.write(SAMPLE)

    assert stream.getvalue() == (SAMPLE_ENCODED + expected) * 2


@pytest.mark.parametrize('separator', [':', '\n:', b'\x3a', bytearray(b'ab:')])
def test_writer_separator_with_record_mark(separator):
    with pytest.raises(ArgumentException):
        RecordWriter(io.BytesIO(), separator)


def test_writer_separator_is_copied():
    separator = bytearray(b'\n')
    stream = io.BytesIO()
    writer = RecordWriter(stream, separator)

    separator[0] = ord(':')
    writer.write(SAMPLE)

    assert stream.getvalue() == SAMPLE_ENCODED + b'\n'


def test_writer_close_after_failed_flush():
    stream = mock.Mock()
    stream.flush.side_effect = OSError('disk full')

    writer = RecordWriter(stream)

    with pytest.raises(OSError):
        writer.close()

    stream.close.assert_called_once_with()


def test_writer_flush():
    stream = mock.Mock()

    writer = RecordWriter(stream)
    writer.flush()

    stream.flush.assert_called_once_with()
    stream.close.assert_not_called()


def test_reader():
    stream = io.BytesIO(b'noise' + SAMPLE_ENCODED + b':00000001FF\n')
    reader = RecordReader(stream)

    assert reader.read_next() == SAMPLE
    # the stream is consumed exactly up to the end of the record
    assert stream.tell() == len(b'noise' + SAMPLE_ENCODED)
    assert reader.read_next() == Record(1, 0)
    assert reader.read_next() is None
    assert reader.read_next() is None


def test_reader_lowercase():
    reader = RecordReader(SAMPLE_ENCODED.lower())

    assert list(reader) == [SAMPLE]


def test_reader_empty_stream():
    reader = RecordReader(b'')

    assert reader.read_next() is None
    assert list(reader) == []


def test_reader_written_records():
    stream = io.BytesIO()
    writer = RecordWriter(stream, b'')
    records = [SAMPLE, Record(0, 0xffff, b'\xff' * 0xff), Record(0, 0, b''), Record(1, 0)]
    for record in records:
        writer.write(record)

    assert list(RecordReader(stream.getvalue())) == records


@pytest.mark.parametrize('position', range(1, len(SAMPLE_ENCODED)))
def test_reader_bad_checksum_latches(position):
    """Altering any single digit makes the record invalid; following reads
    fail again without touching the stream."""
    corrupted = bytearray(SAMPLE_ENCODED)
    corrupted[position] = ord('9') if corrupted[position] != ord('9') else ord('A')

    stream = CountingStream(bytes(corrupted) + b'\n:00000001FF\n')
    reader = RecordReader(stream)

    with pytest.raises(RecordFormatException):
        reader.read_next()

    n_reads = stream.n_reads

    with pytest.raises(RecordFormatException):
        reader.read_next()

    assert stream.n_reads == n_reads


@pytest.mark.parametrize('data', [
    b':0812340001020304050607G88E',
    b':0812340001020304050607 88E',
    b':0G',
    b':08123400010203',
    b':',
    b':00000001F',
])
def test_reader_format_errors(data):
    reader = RecordReader(data)

    with pytest.raises(RecordFormatException):
        reader.read_next()

    with pytest.raises(RecordFormatException):
        reader.read_next()


def test_reader_io_error_latches():
    stream = FailingStream()
    reader = RecordReader(stream)

    with pytest.raises(OSError):
        reader.read_next()

    with pytest.raises(TransportException):
        reader.read_next()

    assert stream.n_reads == 1


def test_reader_closed_stream():
    stream = io.BytesIO(SAMPLE_ENCODED)
    reader = RecordReader(stream)
    stream.close()

    with pytest.raises(TransportException):
        reader.read_next()


def test_reader_close():
    stream = FailingStream()

    with RecordReader(stream) as reader:
        pass

    reader.close()
    reader.close()

    assert stream.closed == 1

    with pytest.raises(TransportException):
        reader.read_next()

    assert stream.n_reads == 0


def test_writer_close_twice():
    stream = io.BytesIO()

    with RecordWriter(stream) as writer:
        writer.write(SAMPLE)

    writer.close()

    assert stream.closed


def test_writer_after_close():
    writer = RecordWriter(io.BytesIO())
    writer.close()

    with pytest.raises(TransportException):
        writer.write(SAMPLE)

    with pytest.raises(TransportException):
        writer.flush()


def test_reader_non_blocking_stream():
    reader = RecordReader(NonBlockingStream())

    with pytest.raises(TransportException):
        reader.read_next()

    with pytest.raises(TransportException):
        reader.read_next()


def test_path_like(tmp_path):
    path = HexPath(tmp_path / 'sample.hex')

    with RecordWriter(path) as writer:
        writer.write(SAMPLE)

    with RecordReader(HexPath(tmp_path / 'sample.hex')) as reader:
        assert list(reader) == [SAMPLE]
