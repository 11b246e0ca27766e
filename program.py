"""
The program store: numbered lines in ascending order.

Each line holds a flat list of statements. A single-line IF is flattened
into a conditional Branch, the THEN statements, a Jump over the ELSE part
and the ELSE statements, so every statement on the line (including those
inside IF bodies) has a stable (line, index) position that GOSUB, FOR and
RESUME NEXT can return to.
"""

import bisect
import logging
from collections import namedtuple

from errors import UndefinedLineError
from statements import Data, If

log = logging.getLogger(__name__)

# Jump to index `target` within the line unless condition holds; `end` is
# the index just past the whole IF
Branch = namedtuple('Branch', 'condition target end')
Jump = namedtuple('Jump', 'target')


def flatten(statements, out=None):
    """Lowers nested IF statements into Branch/Jump with in-line targets."""
    if out is None:
        out = []
    for stmt in statements:
        if not isinstance(stmt, If):
            out.append(stmt)
            continue
        branch_at = len(out)
        out.append(None)
        flatten(stmt.then_body, out)
        if stmt.else_body:
            jump_at = len(out)
            out.append(None)
            else_at = len(out)
            flatten(stmt.else_body, out)
            out[jump_at] = Jump(len(out))
        else:
            else_at = len(out)
        out[branch_at] = Branch(stmt.condition, else_at, len(out))
    return out


class Program:
    def __init__(self):
        self.clear()

    def clear(self):
        self.lines = {}
        self.source = {}
        self.numbers = []
        self._data = None

    def insert(self, number, statements, source=''):
        """Adds a line or replaces the one with the same number."""
        if number not in self.lines:
            bisect.insort(self.numbers, number)
        self.lines[number] = flatten(statements)
        self.source[number] = source
        self._data = None
        log.debug("Stored line %d", number)

    def delete(self, number):
        """Removes a line; deleting an absent line is not an error."""
        if number not in self.lines:
            return
        del self.lines[number]
        del self.source[number]
        self.numbers.pop(bisect.bisect_left(self.numbers, number))
        self._data = None
        log.debug("Deleted line %d", number)

    def __contains__(self, number):
        return number in self.lines

    def __len__(self):
        return len(self.numbers)

    def __iter__(self):
        return self.iterate()

    def iterate(self):
        for number in list(self.numbers):
            yield number, self.lines[number]

    def statements(self, number):
        return self.lines[number]

    def resolve(self, number):
        """Position of the first statement of a jump target line."""
        if number not in self.lines:
            raise UndefinedLineError()
        return number, 0

    def first_line(self):
        return self.numbers[0] if self.numbers else None

    def next_line(self, number):
        i = bisect.bisect_right(self.numbers, number)
        return self.numbers[i] if i < len(self.numbers) else None

    def listing(self, start=None, end=None):
        for number in self.numbers:
            if start is not None and number < start:
                continue
            if end is not None and number > end:
                break
            yield f"{number} {self.source[number]}".rstrip()

    def data_items(self):
        """Every DATA item in program order as (line, raw text) pairs."""
        if self._data is None:
            self._data = [
                (number, item)
                for number, statements in self.iterate()
                for stmt in statements if isinstance(stmt, Data)
                for item in stmt.items
            ]
        return self._data

    def data_offset(self, number):
        """Index of the first DATA item at or after the given line."""
        items = self.data_items()
        for i, (line, _) in enumerate(items):
            if line >= number:
                return i
        return len(items)
