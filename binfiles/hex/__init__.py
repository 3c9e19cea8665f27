'''
# Intel HEX

Reference to <https://archive.org/details/IntelHEXStandard>.

Only the data (type 0) and end-of-file (type 1) records are supported, so
the addressable space is limited to 16 bits; any other record type makes
the file invalid.

    with FileReader('firmware.hex') as reader:
        image = reader.read()

    with FileWriter('copy.hex') as writer:
        writer.write(image, record_length=32)
'''
from .record import Record, RECORD_MARK
from .reader import RecordReader, FileReader
from .writer import RecordWriter, FileWriter, DEFAULT_SEPARATOR, DEFAULT_RECORD_LENGTH
