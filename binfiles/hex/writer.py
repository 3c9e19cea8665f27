'''
Writers for Intel HEX streams.
'''
import logging

from ..core import Image
from ..enum import RecordType
from ..exceptions import ArgumentException
from ..streams import Stream
from .record import RECORD_MARK, Record


logger = logging.getLogger(__name__)


DEFAULT_SEPARATOR = b'\n'
DEFAULT_RECORD_LENGTH = 16

# data records can only address 16 bits
MAX_ADDRESS_SPACE = 0x10000


class RecordWriter(object):
    '''Writes records to a binary stream, each one followed by a separator.

    The separator can be bytes or an ASCII string and it can't contain the
    record mark, otherwise a reader would see a record start inside it.'''

    def __init__(self, stream, separator=DEFAULT_SEPARATOR):
        if separator is None:
            separator = b''
        elif isinstance(separator, str):
            separator = separator.encode('ascii')

        # copy it so that nobody can change it from outside
        separator = bytes(separator)

        if RECORD_MARK in separator:
            raise ArgumentException(
                f'separator may not contain {RECORD_MARK!r}, found at position {separator.index(RECORD_MARK)}')

        self.separator = separator
        self.stream = Stream(stream, flags='w')
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def write(self, record: Record):
        logger.debug('writing %r' % record)
        self.stream.write(record.encode() + self.separator)

    def flush(self):
        self.stream.flush()

    def close(self):
        '''Flushes and closes the underlying stream, only the first time.'''
        if self.closed:
            return

        self.closed = True
        try:
            self.stream.flush()
        finally:
            # try to close the stream no matter what
            self.stream.close()


class FileWriter(object):
    '''Writes images as a sequence of data records terminated by an end-of-file record.

    No effort is made to find the smallest number of records: they come directly
    from the chunks of the image (see Image.chunks()).'''

    def __init__(self, writer):
        self.writer = writer if isinstance(writer, RecordWriter) else RecordWriter(writer)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def write(self, image: Image, record_length: int = DEFAULT_RECORD_LENGTH):
        if not 1 <= record_length <= 0xff:
            raise ArgumentException(f'record length must be between 1 and 255, got {record_length}')

        if image.current_size > MAX_ADDRESS_SPACE:
            raise ArgumentException(f'image data reaches 0x{image.current_size:x}, past the 16-bit address space')

        n_records = 0
        for fragment in image.chunks(record_length):
            self.writer.write(Record(RecordType.DATA, fragment.position, fragment.data))
            n_records += 1

        self.writer.write(Record(RecordType.END_OF_FILE, 0))

        logger.debug('written %r with %d data record(s)' % (image, n_records))

    def flush(self):
        self.writer.flush()

    def close(self):
        self.writer.close()
