"""
Core module for the in-memory representation of a binary image

"""
import logging
from bisect import bisect_right
from typing import Iterable, Iterator, List, Optional

from .exceptions import ArgumentException, RangeException


# the whole 16-bit address space
DEFAULT_SIZE_LIMIT = 0x10000


class Fragment(object):
    """
    A contiguous run of explicitly set bytes starting at a given position.

    The data is copied at construction so that later changes of the
    original buffer don't affect the fragment.
    """

    __slots__ = ('_position', '_data')

    def __init__(self, position: int, data: bytes):
        if position < 0:
            raise ArgumentException(f'position must be non negative, got {position}')

        self._position = position
        self._data = bytes(data)

    @property
    def position(self) -> int:
        return self._position

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def end(self) -> int:
        '''First address after the fragment'''
        return self._position + len(self._data)

    def __len__(self):
        return len(self._data)

    def __eq__(self, other):
        if not isinstance(other, Fragment):
            return NotImplemented

        return self._position == other._position and self._data == other._data

    def __hash__(self):
        return hash((self._position, self._data))

    def __repr__(self):
        return '<%s(0x%04x, %s)>' % (self.__class__.__name__, self._position, self._data.hex())


class Image(object):
    """
    Sparse buffer of bytes with addresses in the range [0, size_limit).

    Internally the set bytes are kept as a sorted list of runs that never
    overlap nor touch each other: two adjacent runs are always merged into one.
    """

    def __init__(self, size_limit: int = DEFAULT_SIZE_LIMIT, fragments: Optional[Iterable[Fragment]] = None):
        if size_limit < 1:
            raise ArgumentException(f'size limit must be positive, got {size_limit}')

        self.logger = logging.getLogger(__name__)
        self._size_limit = size_limit
        self._starts: List[int] = []
        self._runs: List[bytearray] = []

        for fragment in fragments or []:
            self.add_fragment(fragment)

    @property
    def size_limit(self) -> int:
        return self._size_limit

    @property
    def current_size(self) -> int:
        '''One past the highest address set, zero if nothing is set'''
        if not self._runs:
            return 0

        return self._starts[-1] + len(self._runs[-1])

    @property
    def fragments(self) -> List[Fragment]:
        '''The maximal runs of set bytes, ordered by address.'''
        return [Fragment(start, run) for start, run in zip(self._starts, self._runs)]

    def add_fragment(self, fragment: Fragment) -> None:
        '''Set the bytes of the fragment, overwriting the ones already set.'''
        if fragment.end > self._size_limit:
            raise RangeException(
                f'fragment [0x{fragment.position:x}, 0x{fragment.end:x}) exceeds size limit 0x{self._size_limit:x}')

        if len(fragment) == 0:
            return

        start, end = fragment.position, fragment.end

        # the runs overlapping or touching the fragment are in [lo, hi)
        lo = bisect_right(self._starts, start) - 1
        if lo < 0 or self._starts[lo] + len(self._runs[lo]) < start:
            lo += 1
        hi = bisect_right(self._starts, end)

        if lo < hi:
            new_start = min(start, self._starts[lo])
            new_end = max(end, self._starts[hi - 1] + len(self._runs[hi - 1]))
        else:
            new_start, new_end = start, end

        merged = bytearray(new_end - new_start)
        for run_start, run in zip(self._starts[lo:hi], self._runs[lo:hi]):
            offset = run_start - new_start
            merged[offset:offset + len(run)] = run

        offset = start - new_start
        merged[offset:offset + len(fragment)] = fragment.data

        self.logger.debug('merging %r with %d run(s) into [0x%04x, 0x%04x)' % (fragment, hi - lo, new_start, new_end))

        self._starts[lo:hi] = [new_start]
        self._runs[lo:hi] = [merged]

    def get_byte(self, address: int) -> Optional[int]:
        '''Returns the value of the byte at the given address or None if it's not set'''
        if not 0 <= address < self._size_limit:
            raise RangeException(f'address 0x{address:x} out of range [0, 0x{self._size_limit:x})')

        idx = bisect_right(self._starts, address) - 1
        if idx < 0:
            return None

        offset = address - self._starts[idx]
        run = self._runs[idx]

        return run[offset] if offset < len(run) else None

    __getitem__ = get_byte

    def chunks(self, step: int) -> Iterator[Fragment]:
        '''Split the set bytes on a grid of cells [k*step, (k+1)*step).

        Each cell yields one fragment for each contiguous run of set bytes
        inside it, empty cells yield nothing.'''
        if step < 1:
            raise ArgumentException(f'step must be positive, got {step}')

        for start, run in zip(self._starts, self._runs):
            end = start + len(run)
            position = start
            while position < end:
                cell_end = (position // step + 1) * step
                stop = min(end, cell_end)
                yield Fragment(position, run[position - start:stop - start])
                position = stop

    def __eq__(self, other):
        if not isinstance(other, Image):
            return NotImplemented

        return (self._size_limit == other._size_limit
                and self._starts == other._starts
                and self._runs == other._runs)

    def __repr__(self):
        return '<%s(size_limit=0x%x, runs=%d)>' % (self.__class__.__name__, self._size_limit, len(self._runs))
