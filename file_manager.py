import logging
import os

from errors import CollaboratorError

log = logging.getLogger(__name__)

MAX_FILES = 255
DEFAULT_RECORD_LENGTH = 128
# LOC on sequential files counts blocks of this size
BLOCK_SIZE = 128

BAD_FILE_NUMBER = 52
BAD_FILE_MODE = 54
FILE_ALREADY_OPEN = 55
INPUT_PAST_END = 62
BAD_RECORD_NUMBER = 63
BAD_FILE_NAME = 64

ENCODING = 'latin-1'


class FileManager:
    """
    Files opened by a BASIC program, keyed by file number.

    Sequential input files are read whole at OPEN and consumed through a
    position; output and append files are written through; random files
    are read and written a record at a time.
    """

    def __init__(self, storage_dir='.', disks=None):
        self.channels = {}  # number -> {mode, path, handle, data, pos, ...}
        self.storage_dir = storage_dir
        self.disks = dict(disks or {})  # 'B' -> directory

    def _get_path(self, filename):
        if not filename.strip():
            raise CollaboratorError(code=BAD_FILE_NAME)
        if len(filename) > 2 and filename[1] == ':' and filename[0].upper() in self.disks:
            return os.path.join(self.disks[filename[0].upper()], filename[2:])
        if os.path.isabs(filename):
            return filename
        return os.path.join(self.storage_dir, filename)

    def _channel(self, number, modes=None):
        chan = self.channels.get(number)
        if chan is None:
            raise CollaboratorError(code=BAD_FILE_NUMBER)
        if modes is not None and chan['mode'] not in modes:
            raise CollaboratorError(code=BAD_FILE_MODE)
        return chan

    def open(self, number, filename, mode, record_length=None):
        if not 1 <= number <= MAX_FILES:
            raise CollaboratorError(code=BAD_FILE_NUMBER)
        if number in self.channels:
            raise CollaboratorError(code=FILE_ALREADY_OPEN)
        mode = mode.upper()[:1]
        if mode not in ('I', 'O', 'A', 'R'):
            raise CollaboratorError(code=BAD_FILE_MODE)
        path = self._get_path(filename)
        chan = {
            'mode': mode,
            'path': path,
            'handle': None,
            'data': '',
            'pos': 0,
            'column': 1,
            'record_length': record_length or DEFAULT_RECORD_LENGTH,
            'record': 0,
        }
        try:
            if mode == 'I':
                with open(path, 'r', encoding=ENCODING, newline='') as f:
                    chan['data'] = f.read()
            elif mode == 'O':
                chan['handle'] = open(path, 'w', encoding=ENCODING, newline='')
            elif mode == 'A':
                chan['handle'] = open(path, 'a', encoding=ENCODING, newline='')
            else:
                chan['handle'] = open(path, 'r+b' if os.path.exists(path) else 'w+b')
        except OSError as e:
            raise CollaboratorError.from_os_error(e) from e
        self.channels[number] = chan
        log.debug("Opened #%d %s mode %s", number, path, mode)

    def close(self, number):
        """Closing a file number that is not open does nothing."""
        chan = self.channels.pop(number, None)
        if chan is None:
            return
        if chan['handle'] is not None:
            chan['handle'].close()
        log.debug("Closed #%d %s", number, chan['path'])

    def close_all(self):
        for number in list(self.channels):
            self.close(number)

    def is_open(self, number):
        return number in self.channels

    # Sequential output

    def write(self, number, text):
        chan = self._channel(number, ('O', 'A'))
        chan['handle'].write(text)
        for ch in text:
            chan['column'] = 1 if ch == '\n' else chan['column'] + 1

    def column(self, number):
        return self._channel(number)['column']

    # Sequential input

    def _at_end(self, chan):
        data, pos = chan['data'], chan['pos']
        # a trailing Ctrl-Z marks end of file as well
        return pos >= len(data) or data[pos] == '\x1a'

    def read_line(self, number):
        chan = self._channel(number, ('I',))
        if self._at_end(chan):
            raise CollaboratorError(code=INPUT_PAST_END)
        data, pos = chan['data'], chan['pos']
        end = data.find('\n', pos)
        if end == -1:
            end = len(data)
        chan['pos'] = end + 1
        return data[pos:end].rstrip('\r')

    def read_item(self, number):
        """One comma or line separated item, as INPUT # reads it."""
        chan = self._channel(number, ('I',))
        data = chan['data']
        pos = chan['pos']
        while pos < len(data) and data[pos] in ' \t\r\n':
            pos += 1
        chan['pos'] = pos
        if self._at_end(chan):
            raise CollaboratorError(code=INPUT_PAST_END)
        if data[pos] == '"':
            end = data.find('"', pos + 1)
            if end == -1:
                end = len(data)
            item = data[pos + 1:end]
            pos = end + 1
            while pos < len(data) and data[pos] in ' \t':
                pos += 1
        else:
            end = pos
            while end < len(data) and data[end] not in ',\r\n':
                end += 1
            item = data[pos:end].strip()
            pos = end
        if pos < len(data) and data[pos] in ',\r\n':
            if data.startswith('\r\n', pos):
                pos += 1
            pos += 1
        chan['pos'] = pos
        return item

    def read_chars(self, number, count):
        chan = self._channel(number, ('I',))
        if chan['pos'] + count > len(chan['data']):
            raise CollaboratorError(code=INPUT_PAST_END)
        text = chan['data'][chan['pos']:chan['pos'] + count]
        chan['pos'] += count
        return text

    # Random access

    def _record_number(self, chan, record):
        if record is None:
            return chan['record'] + 1
        if record < 1:
            raise CollaboratorError(code=BAD_RECORD_NUMBER)
        return record

    def read_record(self, number, record=None):
        chan = self._channel(number, ('R',))
        record = self._record_number(chan, record)
        size = chan['record_length']
        handle = chan['handle']
        handle.seek((record - 1) * size)
        raw = handle.read(size).decode(ENCODING)
        chan['record'] = record
        return raw.ljust(size, '\0')

    def write_record(self, number, text, record=None):
        chan = self._channel(number, ('R',))
        record = self._record_number(chan, record)
        size = chan['record_length']
        handle = chan['handle']
        handle.seek((record - 1) * size)
        handle.write(text[:size].ljust(size).encode(ENCODING))
        handle.flush()
        chan['record'] = record

    def record_length(self, number):
        return self._channel(number, ('R',))['record_length']

    # Status

    def eof(self, number):
        chan = self._channel(number)
        if chan['mode'] == 'I':
            return self._at_end(chan)
        if chan['mode'] == 'R':
            return chan['record'] * chan['record_length'] >= self.length(number)
        raise CollaboratorError(code=BAD_FILE_MODE)

    def position(self, number):
        chan = self._channel(number)
        if chan['mode'] == 'R':
            return chan['record']
        if chan['mode'] == 'I':
            return chan['pos'] // BLOCK_SIZE
        chan['handle'].flush()
        return chan['handle'].tell() // BLOCK_SIZE

    def length(self, number):
        chan = self._channel(number)
        if chan['mode'] == 'I':
            return len(chan['data'])
        chan['handle'].flush()
        return os.path.getsize(chan['path'])
