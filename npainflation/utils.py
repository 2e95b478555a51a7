"""
This file contains auxiliary functions of general purpose

@authors: Emanuel-Cristian Boghiu, Elie Wolfe and Alejandro Pozas-Kerstjens
"""
import threading

from contextlib import contextmanager
from itertools import combinations, product
from typing import Iterator, List, Sequence, Tuple


class AlphabeticNamer:
    """Spreadsheet-style names for non-negative integers:
    ``0 -> A``, ``25 -> Z``, ``26 -> AA``, ``701 -> ZZ``, ``702 -> AAA``.

    Parameters
    ----------
    is_upper : bool, optional
        Whether to produce upper-case letters. By default ``True``.
    """
    def __init__(self, is_upper: bool = True):
        self.is_upper = is_upper
        self.first_char = "A" if is_upper else "a"

    def __call__(self, index: int) -> str:
        return self.index_to_name(index)

    @staticmethod
    def level_offset(length: int) -> int:
        """Index of the first name with ``length`` characters."""
        offset = 0
        power = 1
        for _ in range(1, length):
            power *= 26
            offset += power
        return offset

    @staticmethod
    def strlen(index: int) -> int:
        """Number of characters in the name of ``index``."""
        length = 1
        next_offset = 26
        power = 26
        while index >= next_offset:
            power *= 26
            next_offset += power
            length += 1
        return length

    def index_to_name(self, index: int) -> str:
        """Converts an index into its alphabetic name.

        Parameters
        ----------
        index : int
            The non-negative index to name.

        Returns
        -------
        str
            The name associated to the index.

        Examples
        --------
        >>> AlphabeticNamer().index_to_name(27)
        'AB'
        """
        assert index >= 0, "Only non-negative indices can be named."
        length = self.strlen(index)
        remainder = index - self.level_offset(length)
        chars = []
        for _ in range(length):
            remainder, digit = divmod(remainder, 26)
            chars.append(chr(ord(self.first_char) + digit))
        return "".join(reversed(chars))


class ReadWriteLock:
    """Lock allowing many simultaneous readers, or a single writer.

    Readers take precedence: a writer waits until every reader has released
    the lock. The lock is not re-entrant, so code holding the write lock must
    not ask for the read lock.
    """
    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    def acquire_read(self) -> None:
        with self._condition:
            while self._writing:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._condition:
            self._readers -= 1
            if not self._readers:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            while self._writing or self._readers:
                self._condition.wait()
            self._writing = True

    def release_write(self) -> None:
        with self._condition:
            self._writing = False
            self._condition.notify_all()

    @contextmanager
    def read_lock(self):
        self.acquire_read()
        try:
            yield self
        finally:
            self.release_read()

    @contextmanager
    def write_lock(self):
        self.acquire_write()
        try:
            yield self
        finally:
            self.release_write()


def partition_iterator(n: int, k: int) -> Iterator[List[bool]]:
    """Yields every way of choosing ``k`` out of ``n`` elements, as a list of
    booleans flagging the chosen elements."""
    for chosen in combinations(range(n), k):
        bits = [False] * n
        for i in chosen:
            bits[i] = True
        yield bits


def multi_dimensional_index(sizes: Sequence[int]) -> Iterator[Tuple[int, ...]]:
    """Iterates over all indices of an array with shape ``sizes``, in row-major
    order (last index fastest)."""
    return product(*[range(size) for size in sizes])


def mixed_radix(digits: Sequence[int], bases: Sequence[int]) -> int:
    """Flattens ``digits`` into one integer, the last digit varying fastest."""
    index = 0
    stride = 1
    for digit, base in zip(reversed(digits), reversed(bases)):
        index += digit * stride
        stride *= base
    return index
