import argparse
import logging
import signal
import sys

from config import load_config
from devices import Host, TextDevice
from errors import BasicError
from interpreter import GWBasicInterpreter

log = logging.getLogger(__name__)

ANSI_COLORS = [30, 34, 32, 36, 31, 35, 33, 37]


class ConsoleIOHandler(TextDevice):
    """Terminal device using ANSI escape codes."""

    def _emit(self, text):
        print(text, end="", flush=True)

    def read_line(self):
        line = input()
        self._line_feed()
        return line

    def read_char(self, non_blocking=False):
        if non_blocking:
            # no portable non-blocking keyboard read on a plain terminal
            return ''
        return sys.stdin.read(1)

    def set_cursor(self, row, col):
        super().set_cursor(row, col)
        # ANSI is 1-based as well
        print(f"\033[{row};{col}H", end="", flush=True)

    def set_color(self, foreground, background):
        if foreground is not None:
            bright = ';1' if foreground & 8 else ''
            print(f"\033[{ANSI_COLORS[foreground % 8]}{bright}m", end="", flush=True)
        if background is not None:
            print(f"\033[{ANSI_COLORS[background % 8] + 10}m", end="", flush=True)

    def clear(self):
        super().clear()
        print("\033[2J\033[H", end="", flush=True)


class BasicCLI:
    def __init__(self, io_handler, settings=None):
        self.host = Host()
        self.interpreter = GWBasicInterpreter(io_handler=io_handler, host=self.host,
                                              settings=settings)
        self.io_handler = io_handler
        self.running = False

    def print(self, text):
        self.io_handler.write(text + "\n")

    def list_program(self, start=None, end=None):
        for text in self.interpreter.program.listing(start, end):
            self.print(text)

    def save_program(self, filename):
        try:
            with open(filename, 'w') as f:
                for text in self.interpreter.program.listing():
                    f.write(text + "\n")
        except OSError as e:
            self.print(f"Error saving: {e}")

    def load_program(self, filename):
        try:
            with open(filename, 'r') as f:
                source = f.read()
        except OSError as e:
            self.print(f"Error loading: {e}")
            return False
        try:
            self.interpreter.load_program(source)
        except BasicError as e:
            self.print(str(e))
            return False
        log.debug("Loaded %s", filename)
        return True

    def report(self):
        """Prints the GW-BASIC message for how the last run stopped."""
        interp = self.interpreter
        if interp.halt_reason in ('stop', 'break'):
            line = interp.host.last_report[1]
            self.print(f"Break in {line}" if line is not None else "Break")

    def _guarded(self, action, *args):
        self.running = True
        try:
            action(*args)
        except BasicError as e:
            self.print(str(e))
        finally:
            self.running = False
        self.report()

    def on_interrupt(self, signum, frame):
        if self.running:
            self.host.request_halt()
        else:
            raise KeyboardInterrupt

    def _range(self, args_str):
        """LIST argument: n, n-m, -m or n-."""
        if not args_str:
            return None, None
        start, sep, end = args_str.partition('-')
        start = int(start) if start.strip() else None
        end = int(end) if end.strip() else None
        if not sep:
            end = start
        return start, end

    def run_repl(self, autorun=False):
        self.print("GW-BASIC compatible interpreter")
        if autorun:
            self._guarded(self.interpreter.run)
        self.print("Ok")
        while self.interpreter.halt_reason != 'system':
            try:
                user_input = input().strip()
            except EOFError:
                break
            except KeyboardInterrupt:
                self.print("")
                continue
            if not user_input:
                continue
            words = user_input.split(None, 1)
            cmd_upper = words[0].upper()
            arg = words[1].strip() if len(words) > 1 else ''
            if cmd_upper == 'EXIT':
                break
            elif cmd_upper == 'LIST':
                try:
                    self.list_program(*self._range(arg))
                except ValueError:
                    self.print("Syntax error")
            elif cmd_upper == 'CONT':
                self._guarded(self.interpreter.cont)
            elif cmd_upper in ('SAVE', 'LOAD') and arg:
                filename = arg.strip('"')
                if cmd_upper == 'SAVE':
                    self.save_program(filename)
                else:
                    self.load_program(filename)
            elif cmd_upper == 'RUN' and arg.startswith('"'):
                if self.load_program(arg.strip('"')):
                    self._guarded(self.interpreter.run)
            else:
                # numbered lines are stored, anything else runs directly
                self._guarded(self.interpreter.execute_direct, user_input)
            if self.interpreter.halt_reason != 'system':
                self.print("Ok")


def main(argv=None):
    parser = argparse.ArgumentParser(description="GW-BASIC compatible interpreter")
    parser.add_argument('program', nargs='?', help="program file to load and run")
    parser.add_argument('--config', default='gwbasic.ini', help="settings file (KEY = VALUE lines)")
    parser.add_argument('--debug', action='store_true', help="log engine internals")
    parser.add_argument('--trace', action='store_true', help="start with TRON in effect")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    settings = load_config(args.config)
    io_handler = ConsoleIOHandler(width=settings['WIDTH'])
    cli = BasicCLI(io_handler, settings)
    cli.interpreter.trace_enabled = args.trace
    signal.signal(signal.SIGINT, cli.on_interrupt)

    autorun = False
    if args.program:
        autorun = cli.load_program(args.program)
    cli.run_repl(autorun=autorun)


if __name__ == "__main__":
    main()
