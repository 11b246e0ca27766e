"""
Collaborators the engine calls for screen, keyboard, graphics and sound,
plus the host hooks it polls between statements.

The engine only ever talks to these interfaces; the console front end in
basic.py and the in-memory BufferedIO used for embedding and tests both
build on TextDevice.
"""

import logging
import threading
from collections import deque

log = logging.getLogger(__name__)

SCREEN_MODES = {
    0: (640, 200),
    1: (320, 200),
    2: (640, 200),
}


class TextDevice:
    """
    Tracks the 1-based cursor position for whatever actually displays the
    text. Subclasses implement _emit, read_line and read_char.
    """

    def __init__(self, width=80, height=25):
        self.width = width
        self.height = height
        self.row = 1
        self.col = 1

    def write(self, text):
        for ch in text:
            if ch == '\n':
                self._line_feed()
            elif ch == '\r':
                self.col = 1
            else:
                self.col += 1
                if self.col > self.width:
                    self._line_feed()
        self._emit(text)

    def _line_feed(self):
        self.col = 1
        self.row = min(self.row + 1, self.height)

    def _emit(self, text):
        raise NotImplementedError

    def read_line(self):
        raise NotImplementedError

    def read_char(self, non_blocking=False):
        raise NotImplementedError

    def set_cursor(self, row, col):
        self.row = row
        self.col = col

    def get_cursor(self):
        return self.row, self.col

    def set_color(self, foreground, background):
        pass

    def clear(self):
        self.row = 1
        self.col = 1


class BufferedIO(TextDevice):
    """Captures output in memory and serves queued input lines and keys."""

    def __init__(self, lines=(), keys='', width=80, height=25, echo=False):
        super().__init__(width, height)
        self.output = []
        self.lines = deque(lines)
        self.keys = deque(keys)
        self.echo = echo

    def _emit(self, text):
        self.output.append(text)

    def getvalue(self):
        return ''.join(self.output)

    def feed(self, *lines):
        self.lines.extend(lines)

    def read_line(self):
        if not self.lines:
            raise EOFError("No more input")
        line = self.lines.popleft()
        if self.echo:
            self.write(line + '\n')
        else:
            self._line_feed()
        return line

    def read_char(self, non_blocking=False):
        if self.keys:
            return self.keys.popleft()
        if non_blocking:
            return ''
        raise EOFError("No more keys")

    def clear(self):
        super().clear()
        self.output.clear()


class Canvas:
    """In-memory graphics screen: a pixel map plus colour state."""

    def __init__(self, mode=1):
        self.foreground = 3
        self.background = 0
        self.set_mode(mode)

    def set_mode(self, mode):
        if mode not in SCREEN_MODES:
            raise ValueError(f"Unsupported screen mode {mode}")
        self.mode = mode
        self.width, self.height = SCREEN_MODES[mode]
        self.pixels = {}

    def set_color(self, foreground=None, background=None):
        if foreground is not None:
            self.foreground = foreground
        if background is not None:
            self.background = background

    def set_pixel(self, x, y, color=None):
        if 0 <= x < self.width and 0 <= y < self.height:
            self.pixels[(x, y)] = self.foreground if color is None else color

    def get_pixel(self, x, y):
        if not (0 <= x < self.width and 0 <= y < self.height):
            return -1
        return self.pixels.get((x, y), self.background)

    def clear(self):
        self.pixels = {}

    def draw_line(self, x1, y1, x2, y2, color=None, box=None):
        if box == 'BF':
            for y in range(min(y1, y2), max(y1, y2) + 1):
                for x in range(min(x1, x2), max(x1, x2) + 1):
                    self.set_pixel(x, y, color)
        elif box == 'B':
            self._bresenham(x1, y1, x2, y1, color)
            self._bresenham(x2, y1, x2, y2, color)
            self._bresenham(x2, y2, x1, y2, color)
            self._bresenham(x1, y2, x1, y1, color)
        else:
            self._bresenham(x1, y1, x2, y2, color)

    def _bresenham(self, x1, y1, x2, y2, color):
        dx = abs(x2 - x1)
        dy = -abs(y2 - y1)
        sx = 1 if x1 < x2 else -1
        sy = 1 if y1 < y2 else -1
        err = dx + dy
        while True:
            self.set_pixel(x1, y1, color)
            if x1 == x2 and y1 == y2:
                break
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x1 += sx
            if e2 <= dx:
                err += dx
                y1 += sy

    def draw_circle(self, cx, cy, radius, color=None):
        # midpoint algorithm, one octant mirrored eight ways
        x = radius
        y = 0
        err = 1 - radius
        while x >= y:
            for px, py in ((x, y), (y, x), (-y, x), (-x, y),
                           (-x, -y), (-y, -x), (y, -x), (x, -y)):
                self.set_pixel(cx + px, cy + py, color)
            y += 1
            if err < 0:
                err += 2 * y + 1
            else:
                x -= 1
                err += 2 * (y - x) + 1


class NullSound:
    """Sound collaborator that produces no audio."""

    def beep(self):
        log.debug("BEEP")

    def tone(self, frequency, duration):
        log.debug("SOUND %s Hz for %s ticks", frequency, duration)


class Host:
    """
    Session hooks: a break flag another thread (or a signal handler) may
    set, polled by the engine between statements, and the final halt report.
    """

    def __init__(self):
        self._halt = threading.Event()
        self.last_report = None

    def halt_requested(self):
        return self._halt.is_set()

    def request_halt(self):
        self._halt.set()

    def clear_halt(self):
        self._halt.clear()

    def report_halt(self, reason, line=None, error=None):
        self.last_report = (reason, line, error)
        log.debug("Halted (%s) at line %s: %s", reason, line, error)
