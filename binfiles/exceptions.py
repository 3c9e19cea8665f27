class BinfilesException(Exception):
    '''Base class to extend in order to throw exception in binfiles.'''
    pass


class TransportException(BinfilesException, OSError):
    '''The underlying stream failed or it's not usable anymore.'''
    pass


class RecordFormatException(BinfilesException):
    '''A single record is malformed: truncated, not hexadecimal or with bad checksum.'''
    pass


class FileFormatException(BinfilesException):
    '''The sequence of records doesn't describe a valid file.'''
    pass


class ArgumentException(BinfilesException, ValueError):
    '''A value passed by the caller is out of the allowed range.'''
    pass


class RangeException(BinfilesException, IndexError):
    '''An address outside of the image has been accessed.'''
    pass
