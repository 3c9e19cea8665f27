from enum import Enum, IntEnum, auto


class ReaderState(Enum):
    '''Enum to state the actual state of a reader.

    Once a reader leaves VALID it never comes back.'''
    VALID        = 0
    COMPLETED    = auto()
    CLOSED       = auto()
    IO_ERROR     = auto()
    FORMAT_ERROR = auto()


class RecordType(IntEnum):
    '''Record types we know how to handle'''
    DATA        = 0x00
    END_OF_FILE = 0x01
