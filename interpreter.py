import logging
import re

import values
from config import load_config
from devices import SCREEN_MODES, BufferedIO, Canvas, Host, NullSound
from errors import (DIRECT_LINE, BasicError, BasicSyntaxError, CantContinueError,
                    CollaboratorError, ForWithoutNextError, IllegalDirectError,
                    IllegalFunctionCallError, NextWithoutForError, NoResumeError,
                    OutOfDataError, OutOfMemoryError, ResumeWithoutError,
                    ReturnWithoutGosubError, TypeMismatchError, UndefinedLineError,
                    WendWithoutWhileError, WhileWithoutWendError, error_for_code)
from evaluator import Evaluator
from file_manager import FileManager
from lexer import Lexer
from program import Branch, Program, flatten
from statements import For, Gosub, Next, Wend, While, parse_line, split_data
from values import STRING, Value
from variables import Environment

log = logging.getLogger(__name__)


class GWBasicInterpreter:
    """
    The execution engine. All run-time state (variables, stacks, DATA
    cursor, error trap) lives in one context dict that RUN, NEW and CLEAR
    replace or reset; the program text survives RUN and CLEAR.

    The program counter is a (line, statement index) pair, with line None
    for the statements of a direct-mode line, or None once halted.
    """

    def __init__(self, io_handler=None, graphics=None, sound=None, host=None,
                 file_manager=None, settings=None):
        self.settings = settings or load_config()
        self.io_handler = io_handler or BufferedIO(width=self.settings['WIDTH'])
        self.graphics = graphics or Canvas()
        self.sound = sound or NullSound()
        self.host = host or Host()
        self.file_manager = file_manager or FileManager(
            self.settings['STORAGE'], self.settings.get('DRIVES'))
        self.lexer = Lexer()
        self.program = Program()
        self.direct = []
        self.trace_enabled = False
        self.halt_reason = None
        self.next_pc = None
        self.context = None
        self.reset_state()

    def reset_state(self):
        """Clears variables, stacks, DATA cursor and trap state; closes files."""
        self.file_manager.close_all()
        env = Environment()
        self.context = {
            'env': env,
            'evaluator': Evaluator(env, self),
            'pc': None,
            'gosub_stack': [],
            'for_stack': [],
            'while_stack': [],
            'data_pos': 0,
            'trap': {
                'line': None,
                'handling': False,
                'resume_pc': None,
                'error_code': 0,
                'error_line': 0,
            },
            'cont_pc': None,
            'next_skip': 0,
            'fields': {},
            'last_point': (0, 0),
        }

    @property
    def env(self): return self.context['env']
    @property
    def evaluator(self): return self.context['evaluator']
    @property
    def pc(self): return self.context['pc']
    @pc.setter
    def pc(self, value): self.context['pc'] = value
    @property
    def gosub_stack(self): return self.context['gosub_stack']
    @property
    def for_stack(self): return self.context['for_stack']
    @property
    def while_stack(self): return self.context['while_stack']
    @property
    def trap(self): return self.context['trap']

    @property
    def error_code(self):
        return self.trap['error_code']

    @property
    def error_line(self):
        return self.trap['error_line']

    @property
    def max_stack(self):
        return self.settings['MAX_STACK']

    # Program entry

    def store_line(self, number, statements, source):
        if statements or source.strip():
            self.program.insert(number, statements, source)
        else:
            self.program.delete(number)
        # editing the program makes CONT impossible
        self.context['cont_pc'] = None

    def load_program(self, source_code, reset=True):
        """Parses a whole program; the first bad line aborts the load."""
        if reset:
            self.reset_state()
            self.program.clear()
        for line in source_code.splitlines():
            if not line.strip():
                continue
            try:
                number, statements, body = parse_line(line, self.lexer)
            except BasicSyntaxError as e:
                match = re.match(r'\s*(\d+)', line)
                e.line = int(match.group(1)) if match else None
                raise
            if number is None:
                raise BasicSyntaxError("Direct statement in file")
            self.store_line(number, statements, body)

    def execute_direct(self, code):
        """Runs an unnumbered line, or stores/deletes a numbered one."""
        number, statements, body = parse_line(code, self.lexer)
        if number is not None:
            self.store_line(number, statements, body)
            return
        self.direct = flatten(statements)
        self.halt_reason = None
        self.pc = self._normalize((None, 0))
        self.execute()

    def run(self, line=None):
        self.reset_state()
        self.halt_reason = None
        if line is not None:
            self.pc = self._normalize(self.program.resolve(line))
        else:
            first = self.program.first_line()
            self.pc = self._normalize((first, 0)) if first is not None else None
        self.execute()

    def cont(self):
        if self.context['cont_pc'] is None:
            raise CantContinueError()
        self.pc = self._normalize(self.context['cont_pc'])
        self.context['cont_pc'] = None
        self.halt_reason = None
        self.execute()

    def execute(self):
        while self.step():
            pass

    # Stepping

    def _statements(self, line):
        if line is None:
            return self.direct
        return self.program.statements(line)

    def _normalize(self, pos):
        """Moves a position past the end of its line onto the next line."""
        line, idx = pos
        if line is None:
            return pos if idx < len(self.direct) else None
        while line is not None:
            if line in self.program and idx < len(self.program.statements(line)):
                return line, idx
            line = self.program.next_line(line)
            idx = 0
        return None

    def step(self):
        """Executes one statement. Returns False once execution has halted."""
        if self.pc is None:
            return False
        if self.host.halt_requested():
            self.host.clear_halt()
            self.context['cont_pc'] = self.pc
            self._halt('break', self.pc[0])
            self.pc = None
            return False

        line, idx = self.pc
        stmt = self._statements(line)[idx]
        if self.trace_enabled and line is not None and idx == 0:
            self.io_handler.write(f"[{line}]")
        self.next_pc = (line, idx + 1)
        try:
            self._dispatch_statement(stmt)
        except BasicError as e:
            self._trap_error(e, line)
        except (OSError, EOFError) as e:
            self._trap_error(CollaboratorError.from_os_error(e), line)
        self._advance(line)
        return self.pc is not None

    def _advance(self, line):
        if self.next_pc is None:
            self.pc = None
            return
        pos = self._normalize(self.next_pc)
        if pos is not None:
            self.pc = pos
            return
        if self.next_pc[0] is None:
            self._halt('direct', None)
        elif self.trap['handling']:
            self._fatal(NoResumeError(line=line))
        else:
            self.file_manager.close_all()
            self._halt('end', line)
        self.pc = None

    def _halt(self, reason, line):
        self.next_pc = None
        self.halt_reason = reason
        self.host.report_halt(reason, line)

    def _fatal(self, error):
        self.pc = None
        self.next_pc = None
        self.halt_reason = 'error'
        self.host.report_halt('error', error.line, error)
        raise error

    def _trap_error(self, error, line):
        if error.line is None:
            error.line = DIRECT_LINE if line is None else line
        trap = self.trap
        trap['error_code'] = error.code
        trap['error_line'] = error.line
        if line is None or trap['line'] is None or trap['handling']:
            self._fatal(error)
        trap['handling'] = True
        trap['resume_pc'] = self.pc
        try:
            self.next_pc = self.program.resolve(trap['line'])
        except UndefinedLineError as missing:
            missing.line = error.line
            self._fatal(missing)
        log.debug("Error %d in %s trapped, continuing at %d", error.code, error.line, trap['line'])

    def _dispatch_statement(self, stmt):
        handler = getattr(self, '_exec_' + type(stmt).__name__.lower())
        handler(stmt)

    # Helpers

    def _eval(self, expr):
        return self.evaluator.evaluate(expr)

    def _int(self, expr, default=None, low=values.INT_MIN, high=values.INT_MAX):
        if expr is None:
            return default
        n = self.evaluator.evaluate_int(expr)
        if not low <= n <= high:
            raise IllegalFunctionCallError()
        return n

    def _for_key(self, var):
        return var.name, self.env.type_of(var.name, var.sigil)

    def _scan(self, pos):
        """Statements in program order from a position onwards."""
        line, idx = pos
        if line is None:
            for i in range(idx, len(self.direct)):
                yield (None, i), self.direct[i]
            return
        while line is not None:
            stmts = self.program.statements(line) if line in self.program else []
            for i in range(idx, len(stmts)):
                yield (line, i), stmts[i]
            line = self.program.next_line(line)
            idx = 0

    def _push(self, stack, entry):
        if len(stack) >= self.max_stack:
            raise OutOfMemoryError()
        stack.append(entry)

    # Assignment and control flow

    def _exec_let(self, stmt):
        self.evaluator.assign(stmt.target, self._eval(stmt.expr))

    def _exec_rem(self, stmt):
        pass

    def _exec_data(self, stmt):
        pass

    def _exec_branch(self, stmt):
        if not values.truth(self._eval(stmt.condition)):
            self.next_pc = (self.pc[0], stmt.target)

    def _exec_jump(self, stmt):
        self.next_pc = (self.pc[0], stmt.target)

    def _exec_goto(self, stmt):
        self.next_pc = self.program.resolve(stmt.line)

    def _exec_gosub(self, stmt):
        target = self.program.resolve(stmt.line)
        self._push(self.gosub_stack, {
            'pos': self.next_pc,
            'for_depth': len(self.for_stack),
            'while_depth': len(self.while_stack),
        })
        self.next_pc = target

    def _exec_return(self, stmt):
        if not self.gosub_stack:
            raise ReturnWithoutGosubError()
        target = self.program.resolve(stmt.line) if stmt.line is not None else None
        frame = self.gosub_stack.pop()
        # loops left open inside the subroutine end with it
        del self.for_stack[frame['for_depth']:]
        del self.while_stack[frame['while_depth']:]
        self.next_pc = target or frame['pos']

    def _exec_onjump(self, stmt):
        n = self.evaluator.evaluate_int(stmt.selector)
        if not 1 <= n <= len(stmt.lines):
            return
        line = stmt.lines[n - 1]
        if stmt.gosub:
            self._exec_gosub(Gosub(line))
        else:
            self.next_pc = self.program.resolve(line)

    def _exec_end(self, stmt):
        self.file_manager.close_all()
        self._halt('end', self.pc[0])

    def _exec_stop(self, stmt):
        self.context['cont_pc'] = self.next_pc
        self._halt('stop', self.pc[0])

    def _exec_system(self, stmt):
        self.file_manager.close_all()
        self._halt('system', self.pc[0])

    def _exec_for(self, stmt):
        var = stmt.var
        key = self._for_key(var)
        if key[1] == STRING:
            raise TypeMismatchError()
        self.env.set(var.name, self._eval(stmt.start), var.sigil)
        limit = values.convert(self._eval(stmt.limit), key[1])
        step = Value(values.INTEGER, 1) if stmt.step is None else self._eval(stmt.step)
        step = values.convert(step, key[1])
        # re-entering a loop discards its frame and everything nested in it
        for i, frame in enumerate(self.for_stack):
            if frame['var'] == key:
                del self.for_stack[i:]
                break
        if not self._loop_continues(self.env.get(var.name, var.sigil), limit, step):
            self._skip_loop(key)
            return
        self._push(self.for_stack, {
            'var': key,
            'target': var,
            'limit': limit,
            'step': step,
            'pos': self.next_pc,
        })

    @staticmethod
    def _loop_continues(value, limit, step):
        if step.data >= 0:
            return value.data <= limit.data
        return value.data >= limit.data

    def _skip_loop(self, key):
        """Moves past the NEXT that closes a FOR whose body never runs."""
        depth = 0
        for pos, stmt in self._scan(self.next_pc):
            if isinstance(stmt, For):
                depth += 1
            elif isinstance(stmt, Next):
                names = stmt.vars or (None,)
                for k, var in enumerate(names):
                    if depth > 0:
                        depth -= 1
                        continue
                    if var is not None and self._for_key(var) != key:
                        raise ForWithoutNextError()
                    if k == len(names) - 1:
                        self.next_pc = (pos[0], pos[1] + 1)
                    else:
                        # land on the NEXT itself for the variables still to close
                        self.next_pc = pos
                        self.context['next_skip'] = k + 1
                    return
        raise ForWithoutNextError()

    def _exec_next(self, stmt):
        names = stmt.vars or (None,)
        skip = self.context['next_skip']
        self.context['next_skip'] = 0
        for var in names[skip:]:
            if not self.for_stack:
                raise NextWithoutForError()
            if var is not None:
                key = self._for_key(var)
                for i in range(len(self.for_stack) - 1, -1, -1):
                    if self.for_stack[i]['var'] == key:
                        del self.for_stack[i + 1:]
                        break
                else:
                    raise NextWithoutForError()
            frame = self.for_stack[-1]
            target = frame['target']
            value = values.add(self.env.get(target.name, target.sigil), frame['step'])
            self.env.set(target.name, value, target.sigil)
            if self._loop_continues(self.env.get(target.name, target.sigil), frame['limit'], frame['step']):
                self.next_pc = frame['pos']
                return
            self.for_stack.pop()

    def _exec_while(self, stmt):
        if values.truth(self._eval(stmt.condition)):
            self._push(self.while_stack, self.pc)
            return
        depth = 0
        for pos, other in self._scan(self.next_pc):
            if isinstance(other, While):
                depth += 1
            elif isinstance(other, Wend):
                if depth == 0:
                    self.next_pc = (pos[0], pos[1] + 1)
                    return
                depth -= 1
        raise WhileWithoutWendError()

    def _exec_wend(self, stmt):
        if not self.while_stack:
            raise WendWithoutWhileError()
        # back to the WHILE, which evaluates its condition afresh
        self.next_pc = self.while_stack.pop()

    # Error trapping

    def _exec_onerrorgoto(self, stmt):
        trap = self.trap
        if stmt.line == 0:
            trap['line'] = None
            if trap['handling']:
                raise error_for_code(trap['error_code'], line=trap['error_line'])
            return
        trap['line'] = stmt.line

    def _exec_resume(self, stmt):
        trap = self.trap
        if not trap['handling']:
            raise ResumeWithoutError()
        if stmt.target is None:
            target = trap['resume_pc']
        elif stmt.target == 'NEXT':
            line, idx = trap['resume_pc']
            failed = self._statements(line)[idx]
            # an IF whose condition failed resumes after the whole IF
            target = (line, failed.end if isinstance(failed, Branch) else idx + 1)
        else:
            target = self.program.resolve(stmt.target)
        trap['handling'] = False
        log.debug("RESUME to %s", target)
        self.next_pc = target

    def _exec_error(self, stmt):
        code = self._int(stmt.code, low=1, high=255)
        raise error_for_code(code)

    # Declarations and state

    def _exec_dim(self, stmt):
        for name, sigil, dims in stmt.arrays:
            bounds = [self.evaluator.evaluate_int(d) for d in dims]
            self.env.declare_array(name, sigil, bounds)

    def _exec_erase(self, stmt):
        for name, sigil in stmt.names:
            self.env.erase_array(name, sigil)

    def _exec_optionbase(self, stmt):
        self.env.set_option_base(stmt.base)

    def _exec_deftype(self, stmt):
        self.env.set_deftype(stmt.type, stmt.letters)

    def _exec_deffn(self, stmt):
        if self.pc[0] is None:
            raise IllegalDirectError()
        self.env.define_function(stmt)

    def _exec_clear(self, stmt):
        self.file_manager.close_all()
        self.env.clear_all()
        self.gosub_stack.clear()
        self.for_stack.clear()
        self.while_stack.clear()
        self.context['data_pos'] = 0
        self.context['fields'] = {}

    def _exec_run(self, stmt):
        target = self.program.resolve(stmt.line) if stmt.line is not None else None
        self.reset_state()
        if target is None:
            first = self.program.first_line()
            target = (first, 0) if first is not None else None
        if target is None:
            self._halt('end', None)
        self.next_pc = target

    def _exec_new(self, stmt):
        self.program.clear()
        self.reset_state()
        self.trace_enabled = False
        self._halt('end', None)

    def _exec_swap(self, stmt):
        first = self._eval(stmt.first)
        second = self._eval(stmt.second)
        if first.type != second.type:
            raise TypeMismatchError()
        self.evaluator.assign(stmt.first, second)
        self.evaluator.assign(stmt.second, first)

    def _exec_randomize(self, stmt):
        if stmt.seed is None:
            self.io_handler.write("Random number seed (-32768 to 32767)? ")
            seed = values.val(self.io_handler.read_line())
        else:
            seed = self._eval(stmt.seed)
        self.evaluator.rng.seed(values.to_number(seed))

    def _exec_tron(self, stmt):
        self.trace_enabled = True

    def _exec_troff(self, stmt):
        self.trace_enabled = False

    # DATA

    def _exec_read(self, stmt):
        items = self.program.data_items()
        for target in stmt.targets:
            if self.context['data_pos'] >= len(items):
                raise OutOfDataError()
            line, raw = items[self.context['data_pos']]
            self.context['data_pos'] += 1
            if self.evaluator.target_type(target) == STRING:
                value = Value(STRING, _unquote(raw))
            else:
                value = values.parse_input_number(raw)
                if value is None:
                    raise BasicSyntaxError(line=line)
            self.evaluator.assign(target, value)

    def _exec_restore(self, stmt):
        if stmt.line is None:
            self.context['data_pos'] = 0
        else:
            self.program.resolve(stmt.line)
            self.context['data_pos'] = self.program.data_offset(stmt.line)

    # Console and file output

    def _output(self, file_expr):
        """(write, column, width) for the screen or an open file."""
        if file_expr is None:
            io = self.io_handler
            return io.write, lambda: io.get_cursor()[1], self.settings['WIDTH']
        number = self._int(file_expr)
        fm = self.file_manager
        fm.column(number)
        return (lambda text: fm.write(number, text)), (lambda: fm.column(number)), None

    def _exec_print(self, stmt):
        write, column, width = self._output(stmt.file)
        zone = self.settings['ZONE']
        for kind, arg in stmt.items:
            if kind == 'EXPR':
                value = self._eval(arg)
                text = value.data if value.is_string else values.str_number(value) + ' '
                if width and column() > 1 and column() - 1 + len(text) > width:
                    write('\n')
                write(text)
            elif kind == 'SEP' and arg == ',':
                col = column()
                next_zone = ((col - 1) // zone + 1) * zone + 1
                if width and next_zone > width:
                    write('\n')
                else:
                    write(' ' * (next_zone - col))
            elif kind == 'TAB':
                target = max(self._int(arg), 1)
                if width:
                    target = (target - 1) % width + 1
                col = column()
                if target < col:
                    write('\n')
                    col = 1
                write(' ' * (target - col))
            elif kind == 'SPC':
                count = max(self._int(arg), 0)
                if width:
                    count %= width
                write(' ' * count)
        if stmt.newline:
            write('\n')

    def _exec_write(self, stmt):
        write, _, _ = self._output(stmt.file)
        parts = []
        for expr in stmt.exprs:
            value = self._eval(expr)
            parts.append(f'"{value.data}"' if value.is_string else values.number_text(value))
        write(','.join(parts) + '\n')

    def _exec_cls(self, stmt):
        self.io_handler.clear()
        self.graphics.clear()

    def _exec_locate(self, stmt):
        io = self.io_handler
        row, col = io.get_cursor()
        row = self._int(stmt.row, row, 1, io.height)
        col = self._int(stmt.col, col, 1, io.width)
        io.set_cursor(row, col)

    def _exec_color(self, stmt):
        foreground = self._int(stmt.foreground, None, 0, 255)
        background = self._int(stmt.background, None, 0, 255)
        self.io_handler.set_color(foreground, background)
        self.graphics.set_color(foreground, background)

    # Input

    def _exec_input(self, stmt):
        if stmt.file is not None:
            number = self._int(stmt.file)
            for target in stmt.targets:
                raw = self.file_manager.read_item(number)
                self.evaluator.assign(target, self._input_value(target, raw, TypeMismatchError))
            return
        io = self.io_handler
        while True:
            io.write(stmt.prompt + ('? ' if stmt.question else ''))
            fields = split_data(io.read_line())
            parsed = None
            if len(fields) == len(stmt.targets):
                parsed = [self._input_value(t, f, None) for t, f in zip(stmt.targets, fields)]
            if parsed is not None and None not in parsed:
                break
            io.write("?Redo from start\n")
        for target, value in zip(stmt.targets, parsed):
            self.evaluator.assign(target, value)

    def _input_value(self, target, raw, error_cls):
        if self.evaluator.target_type(target) == STRING:
            return Value(STRING, _unquote(raw))
        value = values.parse_input_number(raw)
        if value is None and error_cls is not None:
            raise error_cls()
        return value

    def _exec_lineinput(self, stmt):
        if stmt.file is not None:
            text = self.file_manager.read_line(self._int(stmt.file))
        else:
            self.io_handler.write(stmt.prompt)
            text = self.io_handler.read_line()
        self.evaluator.assign(stmt.target, Value(STRING, text))

    # Graphics and sound

    def _exec_screen(self, stmt):
        mode = self._int(stmt.mode)
        if mode not in SCREEN_MODES:
            raise IllegalFunctionCallError()
        self.graphics.set_mode(mode)

    def _plot(self, stmt, default):
        x, y = self._int(stmt.x), self._int(stmt.y)
        color = self._int(stmt.color, default, 0, 255)
        self.graphics.set_pixel(x, y, color)
        self.context['last_point'] = (x, y)

    def _exec_pset(self, stmt):
        self._plot(stmt, self.graphics.foreground)

    def _exec_preset(self, stmt):
        self._plot(stmt, self.graphics.background)

    def _exec_line(self, stmt):
        if stmt.start is None:
            x1, y1 = self.context['last_point']
        else:
            x1, y1 = (self._int(e) for e in stmt.start)
        x2, y2 = (self._int(e) for e in stmt.end)
        color = self._int(stmt.color, self.graphics.foreground, 0, 255)
        self.graphics.draw_line(x1, y1, x2, y2, color, stmt.box)
        self.context['last_point'] = (x2, y2)

    def _exec_circle(self, stmt):
        x, y = self._int(stmt.x), self._int(stmt.y)
        radius = self._int(stmt.radius, low=0)
        color = self._int(stmt.color, self.graphics.foreground, 0, 255)
        self.graphics.draw_circle(x, y, radius, color)
        self.context['last_point'] = (x, y)

    def _exec_beep(self, stmt):
        self.sound.beep()

    def _exec_sound(self, stmt):
        frequency = self._int(stmt.frequency, low=37, high=32767)
        duration = values.to_number(self._eval(stmt.duration))
        if not 0 <= duration <= 65535:
            raise IllegalFunctionCallError()
        self.sound.tone(frequency, duration)

    # Files

    def _exec_open(self, stmt):
        path = self.evaluator.evaluate_str(stmt.path)
        mode = self.evaluator.evaluate_str(stmt.mode)
        number = self._int(stmt.number)
        record_length = self._int(stmt.record_length, None, 1, 32767)
        self.file_manager.open(number, path, mode, record_length)

    def _exec_close(self, stmt):
        if not stmt.numbers:
            self.file_manager.close_all()
            self.context['fields'].clear()
            return
        for expr in stmt.numbers:
            number = self._int(expr)
            self.file_manager.close(number)
            self.context['fields'].pop(number, None)

    def _exec_field(self, stmt):
        number = self._int(stmt.number)
        record_length = self.file_manager.record_length(number)
        layout = []
        total = 0
        for width_expr, target in stmt.fields:
            width = self._int(width_expr, low=0, high=255)
            if self.evaluator.target_type(target) != STRING:
                raise TypeMismatchError()
            total += width
            if total > record_length:
                raise CollaboratorError(code=50)
            layout.append((width, target))
        self.context['fields'][number] = layout

    def _field_width(self, target):
        for layout in self.context['fields'].values():
            for width, field_target in layout:
                if field_target == target:
                    return width
        return None

    def _justify(self, stmt, left):
        text = self.evaluator.evaluate_str(stmt.expr)
        width = self._field_width(stmt.target)
        if width is None:
            width = len(values.to_str(self._eval(stmt.target)))
        text = text[:width]
        text = text.ljust(width) if left else text.rjust(width)
        self.evaluator.assign(stmt.target, Value(STRING, text))

    def _exec_lset(self, stmt):
        self._justify(stmt, left=True)

    def _exec_rset(self, stmt):
        self._justify(stmt, left=False)

    def _record(self, expr):
        if expr is None:
            return None
        return int(values.to_number(self._eval(expr)))

    def _exec_get(self, stmt):
        number = self._int(stmt.number)
        record = self._record(stmt.record)
        text = self.file_manager.read_record(number, record)
        offset = 0
        for width, target in self.context['fields'].get(number, ()):
            self.evaluator.assign(target, Value(STRING, text[offset:offset + width]))
            offset += width

    def _exec_put(self, stmt):
        number = self._int(stmt.number)
        record = self._record(stmt.record)
        parts = []
        for width, target in self.context['fields'].get(number, ()):
            parts.append(values.to_str(self._eval(target))[:width].ljust(width))
        self.file_manager.write_record(number, ''.join(parts), record)


def _unquote(raw):
    if raw.startswith('"'):
        raw = raw[1:]
        if raw.endswith('"'):
            raw = raw[:-1]
    return raw
