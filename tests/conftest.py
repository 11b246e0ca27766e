"""
Shared fixtures: an interpreter wired to an in-memory device, with files
kept under the test's temporary directory.
"""

import textwrap

import pytest

from config import DEFAULTS
from devices import BufferedIO
from interpreter import GWBasicInterpreter


@pytest.fixture
def settings(tmp_path):
    values = dict(DEFAULTS)
    values['STORAGE'] = str(tmp_path)
    values['DRIVES'] = {}
    return values


@pytest.fixture
def io():
    return BufferedIO()


@pytest.fixture
def interp(io, settings):
    return GWBasicInterpreter(io_handler=io, settings=settings)


@pytest.fixture
def run(interp, io):
    """Loads a program, queues input lines, runs it and returns the output."""
    def _run(source, *lines):
        io.feed(*lines)
        interp.load_program(textwrap.dedent(source))
        interp.run()
        return io.getvalue()
    return _run
