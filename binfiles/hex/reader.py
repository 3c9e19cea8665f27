'''
Readers for Intel HEX streams.

There are two layers: RecordReader tokenizes the stream into records and
FileReader assembles the records into images. Both of them are unusable
after the first error: any following call fails in the same way without
touching the layer below.
'''
import logging
from typing import Iterator, List, Optional

from ..core import Fragment, Image
from ..enum import ReaderState, RecordType
from ..exceptions import (
    FileFormatException,
    RecordFormatException,
    TransportException,
)
from ..streams import Stream
from .record import RECORD_MARK, Record, unhexlify


logger = logging.getLogger(__name__)


class RecordReader(object):
    '''Reads records from a binary stream.

    Any byte before the record mark is ignored. After a record is returned
    the stream has been consumed exactly up to its last byte.'''

    def __init__(self, stream):
        self.stream = Stream(stream)
        self.state = ReaderState.VALID

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __iter__(self) -> Iterator[Record]:
        while (record := self.read_next()) is not None:
            yield record

    def close(self):
        if self.state != ReaderState.CLOSED:
            self.state = ReaderState.CLOSED
            self.stream.close()

    def read_next(self) -> Optional[Record]:
        '''Return the next record or None if the stream is ended.

        RecordFormatException is raised for truncated records, non hexadecimal
        characters or bad checksum; the OSError of the underlying stream is
        propagated as it is.'''
        if self.state == ReaderState.CLOSED:
            raise TransportException('reader already closed')
        if self.state == ReaderState.IO_ERROR:
            raise TransportException('reader invalid due to previous I/O error')
        if self.state == ReaderState.FORMAT_ERROR:
            raise RecordFormatException('reader invalid due to previous format error')
        if self.state == ReaderState.COMPLETED:
            return None

        try:
            record = self._read()
        except OSError as e:
            logger.warning(f'I/O error while reading record: {e}')
            self.state = ReaderState.IO_ERROR
            raise
        except RecordFormatException as e:
            logger.warning(f'malformed record: {e}')
            self.state = ReaderState.FORMAT_ERROR
            raise

        if record is None:
            self.state = ReaderState.COMPLETED

        return record

    def _seek_record_mark(self) -> bool:
        skipped = 0
        while True:
            c = self.stream.read(1)
            if len(c) == 0:
                return False
            if c == RECORD_MARK:
                break
            skipped += 1

        if skipped:
            logger.debug('skipped %d byte(s) before record mark' % skipped)

        return True

    def _read_hex(self, n_chars: int) -> bytes:
        text = self.stream.read_exactly(n_chars)
        if len(text) != n_chars:
            raise RecordFormatException('unexpected end of stream')

        return unhexlify(text)

    def _read(self) -> Optional[Record]:
        if not self._seek_record_mark():
            logger.debug('end of stream')
            return None

        length = self._read_hex(2)
        raw = length + self._read_hex(2 * length[0] + 8)

        record = Record.unpack(raw)
        logger.debug('read %r' % record)

        return record


class FileReader(object):
    '''Reads images from a stream of records.

    Each image is made of data records terminated by an end-of-file record;
    its size is the smallest power of two that fits all the data.'''

    def __init__(self, reader):
        self.reader = reader if isinstance(reader, RecordReader) else RecordReader(reader)
        self.state = ReaderState.VALID

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __iter__(self) -> Iterator[Image]:
        while (image := self.read()) is not None:
            yield image

    def close(self):
        if self.state != ReaderState.CLOSED:
            self.state = ReaderState.CLOSED
            self.reader.close()

    def read(self) -> Optional[Image]:
        '''Return the next image or None if there are no more.

        Any format error (also from the record layer) is raised as
        FileFormatException, I/O errors are propagated as they are.'''
        if self.state == ReaderState.COMPLETED:
            return None
        if self.state == ReaderState.CLOSED:
            raise TransportException('reader already closed')
        if self.state == ReaderState.IO_ERROR:
            raise TransportException('reader invalid due to previous I/O error')
        if self.state == ReaderState.FORMAT_ERROR:
            raise FileFormatException('reader invalid due to previous format error')

        try:
            image = self._read()
        except OSError:
            self.state = ReaderState.IO_ERROR
            raise
        except FileFormatException as e:
            logger.warning(f'malformed file: {e}')
            self.state = ReaderState.FORMAT_ERROR
            raise
        except RecordFormatException as e:
            self.state = ReaderState.FORMAT_ERROR
            raise FileFormatException(str(e)) from e

        if image is None:
            self.state = ReaderState.COMPLETED

        return image

    def _collect_fragments(self) -> Optional[List[Fragment]]:
        fragments: List[Fragment] = []

        while True:
            record = self.reader.read_next()
            if record is None and not fragments:
                # nothing started, simply ended
                return None
            elif record is None:
                raise FileFormatException('unexpected end of stream')

            if record.type == RecordType.DATA:
                fragments.append(Fragment(record.address, record.data))
            elif record.type == RecordType.END_OF_FILE:
                return fragments
            else:
                raise FileFormatException(f'unsupported record type: {record.type}')

    def _read(self) -> Optional[Image]:
        fragments = self._collect_fragments()
        if fragments is None:
            return None

        min_size = max((fragment.end for fragment in fragments), default=0)

        size = 1
        while size < min_size:
            size *= 2

        logger.debug('assembling image of size 0x%x from %d fragment(s)' % (size, len(fragments)))

        return Image(size, fragments)
