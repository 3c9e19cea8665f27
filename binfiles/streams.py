import io
import os
import logging

from .exceptions import TransportException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around path/bytes/file object to
    uniform its properties: readers and writers only need a binary
    file object with read(), write(), flush() and close().'''
    def __init__(self, obj, flags='r'):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self.obj = obj
        self.flags = flags

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        # any path-like object is opened as a file
        if isinstance(self.obj, os.PathLike):
            init_method_name = 'init_str'

        # look into the class so not to delegate to the wrapped object
        init_method = getattr(self.__class__, init_method_name, Stream.init_file)

        init_method(self)

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.obj)

    def init_str(self):
        '''We think this is a path'''
        path = os.fspath(self.obj)
        mode = 'wb' if 'w' in self.flags else 'rb'
        logger.debug('opening path \'%s\' with mode \'%s\'' % (path, mode))
        self.obj = open(path, mode)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    init_bytearray = init_bytes

    def init_file(self):
        '''Anything else is used as it is, it must behave like a binary file'''
        pass

    def read(self, n=-1):
        try:
            data = self.obj.read(n)
        except ValueError as e:
            # reading from a closed file object
            raise TransportException(str(e)) from e

        if data is None:
            raise TransportException('non-blocking stream has no data available')

        return data

    def read_exactly(self, n):
        '''Read n bytes; fewer are returned only when the stream ends before.'''
        data = []
        missing = n
        while missing > 0:
            b = self.read(missing)
            if len(b) == 0:
                break
            data.append(b)
            missing -= len(b)

        return b''.join(data)

    def write(self, data):
        try:
            return self.obj.write(data)
        except ValueError as e:
            raise TransportException(str(e)) from e

    def flush(self):
        try:
            self.obj.flush()
        except ValueError as e:
            raise TransportException(str(e)) from e
