"""
Error taxonomy for the GW-BASIC engine.

Every error carries the numeric code GW-BASIC reports through ERR and the
program line it originated on (ERL). Errors raised while evaluating a
statement are offered to the ON ERROR trap before they become fatal.
"""

MESSAGES = {
    1: "NEXT without FOR",
    2: "Syntax error",
    3: "RETURN without GOSUB",
    4: "Out of DATA",
    5: "Illegal function call",
    6: "Overflow",
    7: "Out of memory",
    8: "Undefined line number",
    9: "Subscript out of range",
    10: "Duplicate Definition",
    11: "Division by zero",
    12: "Illegal direct",
    13: "Type mismatch",
    15: "String too long",
    17: "Can't continue",
    18: "Undefined user function",
    19: "No RESUME",
    20: "RESUME without error",
    26: "FOR without NEXT",
    29: "WHILE without WEND",
    30: "WEND without WHILE",
    50: "FIELD overflow",
    52: "Bad file number",
    53: "File not found",
    54: "Bad file mode",
    55: "File already open",
    57: "Device I/O error",
    58: "File already exists",
    62: "Input past end",
    63: "Bad record number",
    64: "Bad file name",
    70: "Permission denied",
    76: "Path not found",
}

# Direct-mode errors report this as ERL
DIRECT_LINE = 65535

_registry = {}


class BasicError(Exception):
    code = 51
    message = "Internal error"

    def __init__(self, message=None, line=None, column=None, code=None):
        if code is not None:
            self.code = code
        if message is None:
            message = MESSAGES.get(self.code, self.message if code is None else "Unprintable error")
        self.message = message
        self.line = line
        self.column = column
        super().__init__(message)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        _registry.setdefault(cls.code, cls)

    def __str__(self):
        if self.line is not None and self.line != DIRECT_LINE:
            return f"{self.message} in {self.line}"
        return self.message


class BasicSyntaxError(BasicError):
    code = 2


class LexicalError(BasicSyntaxError):
    pass


class ArgumentError(BasicSyntaxError):
    pass


class NextWithoutForError(BasicError):
    code = 1


class ReturnWithoutGosubError(BasicError):
    code = 3


class OutOfDataError(BasicError):
    code = 4


class IllegalFunctionCallError(BasicError):
    code = 5


class NumericOverflowError(BasicError):
    code = 6


class OutOfMemoryError(BasicError):
    code = 7


class UndefinedLineError(BasicError):
    code = 8


class SubscriptError(BasicError):
    code = 9


class DuplicateDeclarationError(BasicError):
    code = 10


class DivisionByZeroError(BasicError):
    code = 11


class IllegalDirectError(BasicError):
    code = 12


class TypeMismatchError(BasicError):
    code = 13


class StringTooLongError(BasicError):
    code = 15


class CantContinueError(BasicError):
    code = 17


class UndefinedFunctionError(BasicError):
    code = 18


class NoResumeError(BasicError):
    code = 19


class ResumeWithoutError(BasicError):
    code = 20


class ForWithoutNextError(BasicError):
    code = 26


class WhileWithoutWendError(BasicError):
    code = 29


class WendWithoutWhileError(BasicError):
    code = 30


class CollaboratorError(BasicError):
    """A failure reported by a device, graphics, sound or file collaborator."""
    code = 57

    @classmethod
    def from_os_error(cls, exc):
        if isinstance(exc, EOFError):
            code = 62
        elif isinstance(exc, FileNotFoundError):
            code = 53
        elif isinstance(exc, FileExistsError):
            code = 58
        elif isinstance(exc, PermissionError):
            code = 70
        elif isinstance(exc, NotADirectoryError):
            code = 76
        else:
            code = 57
        return cls(code=code)


def error_for_code(code, line=None):
    """Builds the error an ERROR statement with this code raises."""
    cls = _registry.get(code)
    if cls is None or cls is CollaboratorError:
        return BasicError(line=line, code=code)
    return cls(line=line)
