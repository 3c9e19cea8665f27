'''
Single record of an Intel HEX stream.

On the wire a record looks like

    :LLAAAATTDD...DDCC

where all the fields are hexadecimal digits: LL is the number of data bytes,
AAAA the big endian address, TT the record type, DD the data and CC the checksum,
i.e. the two's complement of the sum of all the preceding bytes.
'''
from bitstring import Bits, pack

from ..exceptions import ArgumentException, RecordFormatException


RECORD_MARK = b':'

HEX_DIGITS = frozenset(b'0123456789abcdefABCDEF')

# length, address and type
HEADER_FORMAT = 'uint:8, uint:16, uint:8'


def calculate_checksum(raw: bytes) -> int:
    return -sum(raw) & 0xff


def unhexlify(text: bytes) -> bytes:
    '''Convert hexadecimal digits (in any case) to bytes, nothing else is tolerated.'''
    for idx, c in enumerate(text):
        if c not in HEX_DIGITS:
            raise RecordFormatException(f'invalid character {bytes([c])!r} at position {idx}')

    return Bits('0x' + text.decode('ascii')).bytes


class Record(object):
    '''Immutable representation of a record.

    The checksum is not stored but derived from the other fields.'''

    __slots__ = ('_type', '_address', '_data')

    def __init__(self, type: int, address: int, data: bytes = b''):
        if not 0 <= type <= 0xff:
            raise ArgumentException(f'record type must fit in a byte, got {type}')
        if not 0 <= address <= 0xffff:
            raise ArgumentException(f'address must fit in 16 bits, got {address}')
        if len(data) > 0xff:
            raise ArgumentException(f'data can be at most 255 bytes long, got {len(data)}')

        self._type = int(type)
        self._address = address
        self._data = bytes(data)

    @property
    def type(self) -> int:
        return self._type

    @property
    def address(self) -> int:
        return self._address

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def header(self) -> bytes:
        return pack(HEADER_FORMAT, len(self._data), self._address, self._type).bytes

    @property
    def checksum(self) -> int:
        return calculate_checksum(self.header + self._data)

    @property
    def raw(self) -> bytes:
        '''Binary form of the record: header, data and checksum'''
        return self.header + self._data + bytes([self.checksum])

    def encode(self) -> bytes:
        '''ASCII form of the record with uppercase digits, without any separator'''
        return RECORD_MARK + Bits(self.raw).hex.upper().encode('ascii')

    @classmethod
    def unpack(cls, raw: bytes) -> 'Record':
        '''Build a record from its binary form, checking length and checksum.'''
        if len(raw) < 5 or raw[0] + 5 != len(raw):
            raise RecordFormatException(f'record of {len(raw)} bytes doesn\'t match its length field')

        if sum(raw) & 0xff != 0:
            raise RecordFormatException('bad checksum in record')

        address, type = Bits(raw[1:4]).unpack('uint:16, uint:8')

        return cls(type, address, raw[4:-1])

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented

        return (self._type, self._address, self._data) == (other._type, other._address, other._data)

    def __hash__(self):
        return hash((self._type, self._address, self._data))

    def __repr__(self):
        return '<%s(type=%d, address=0x%04x, data=%s)>' % (
            self.__class__.__name__, self._type, self._address, self._data.hex())
