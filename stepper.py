"""
Single-step Brainfuck engine.

Each call to Stepper.step() evaluates exactly one source character:
    >   Move the data pointer right (wraps)
    <   Move the data pointer left (wraps)
    +   Increment the current cell (mod 256)
    -   Decrement the current cell (mod 256)
    .   Report the current cell as an output byte
    ,   Read one byte from the input source into the current cell
    [   Enter the loop, or skip past the matching ] if the cell is 0
    ]   Jump back into the loop, or leave it if the cell is 0

All other characters are comments. Brackets are matched lazily while
running; there is no parse pass.
"""
import enum
import logging
import sys

log = logging.getLogger(__name__)

TAPE_SIZE = 30000


class Symbol(enum.Enum):
    RIGHT = '>'
    LEFT = '<'
    INC = '+'
    DEC = '-'
    OUTPUT = '.'
    INPUT = ','
    LOOP_OPEN = '['
    LOOP_CLOSE = ']'
    NOOP = None

    @classmethod
    def of(cls, char):
        try:
            return cls(char)
        except ValueError:
            return cls.NOOP


class Outcome:
    """What a single step produced."""

    CONTINUE = 'continue'
    END = 'end'
    OUTPUT = 'output'

    __slots__ = ('kind', 'byte')

    def __init__(self, kind, byte=None):
        self.kind = kind
        self.byte = byte

    @classmethod
    def output(cls, byte):
        return cls(cls.OUTPUT, byte)

    @property
    def is_output(self):
        return self.kind == self.OUTPUT

    def __eq__(self, other):
        if not isinstance(other, Outcome):
            return NotImplemented
        return self.kind == other.kind and self.byte == other.byte

    def __hash__(self):
        return hash((self.kind, self.byte))

    def __repr__(self):
        if self.kind == self.OUTPUT:
            return f"Outcome(output, {self.byte})"
        return f"Outcome({self.kind})"


CONTINUE = Outcome(Outcome.CONTINUE)
END_OF_PROGRAM = Outcome(Outcome.END)


class StepError(Exception):
    """Base class for everything step() can raise."""

    def __init__(self, ip, message):
        super().__init__(message)
        self.ip = ip


class InputError(StepError):
    def __init__(self, ip, reason="end of input"):
        super().__init__(ip, f"input failed at {ip}: {reason}")
        self.reason = reason


class MissingClosingBracket(StepError):
    def __init__(self, ip):
        super().__init__(ip, f"missing closing bracket for '[' at {ip}")


class MissingOpeningBracket(StepError):
    def __init__(self, ip):
        super().__init__(ip, f"missing opening bracket for ']' at {ip}")


class IPOutOfBounds(StepError):
    def __init__(self, ip, length):
        super().__init__(ip, f"instruction pointer {ip} past end of program ({length})")
        self.length = length


class Stepper:
    def __init__(self, code, tape_size=TAPE_SIZE, input_stream=None):
        if tape_size <= 0:
            raise ValueError(f"tape size must be positive, got {tape_size}")
        self._code = code
        self._tape = bytearray(tape_size)
        self._ip = 0
        self._dp = 0
        self._open_brackets = []
        self._input = input_stream

    @property
    def program(self):
        return self._code

    @property
    def ip(self):
        return self._ip

    @property
    def dp(self):
        return self._dp

    @property
    def tape_size(self):
        return len(self._tape)

    @property
    def finished(self):
        return self._ip == len(self._code)

    @property
    def open_brackets(self):
        return tuple(self._open_brackets)

    def current_cell(self):
        return self._tape[self._dp]

    def cell(self, index):
        if not 0 <= index < len(self._tape):
            raise IndexError(f"tape index {index} out of range")
        return self._tape[index]

    def cells(self, start, count):
        """Copy of up to count cells from start, clipped to the tape."""
        start = max(0, start)
        return list(self._tape[start:start + max(0, count)])

    def step(self):
        length = len(self._code)
        if self._ip == length:
            return END_OF_PROGRAM
        if self._ip > length:
            log.debug("step called with ip=%d past program length %d", self._ip, length)
            raise IPOutOfBounds(self._ip, length)

        outcome, target = self._eval(Symbol.of(self._code[self._ip]))
        if target is not None:
            self._ip = target
        self._ip += 1
        return outcome

    def _eval(self, symbol):
        """Apply one symbol. Returns (outcome, jump target or None)."""
        tape = self._tape
        dp = self._dp

        if symbol is Symbol.RIGHT:
            self._dp = (dp + 1) % len(tape)
        elif symbol is Symbol.LEFT:
            self._dp = (dp - 1) % len(tape)
        elif symbol is Symbol.INC:
            tape[dp] = (tape[dp] + 1) % 256
        elif symbol is Symbol.DEC:
            tape[dp] = (tape[dp] - 1) % 256
        elif symbol is Symbol.OUTPUT:
            return Outcome.output(tape[dp]), None
        elif symbol is Symbol.INPUT:
            tape[dp] = self._read_byte()
        elif symbol is Symbol.LOOP_OPEN:
            if tape[dp] != 0:
                self._open_brackets.append(self._ip)
            else:
                return CONTINUE, self._find_closing()
        elif symbol is Symbol.LOOP_CLOSE:
            if not self._open_brackets:
                log.debug("']' at %d with no open loop", self._ip)
                raise MissingOpeningBracket(self._ip)
            if tape[dp] != 0:
                # stay in the loop; the '[' keeps its stack entry
                return CONTINUE, self._open_brackets[-1]
            self._open_brackets.pop()
        return CONTINUE, None

    def _find_closing(self):
        depth = 0
        code = self._code
        for i in range(self._ip + 1, len(code)):
            c = code[i]
            if c == '[':
                depth += 1
            elif c == ']':
                if depth == 0:
                    log.debug("skipping loop %d..%d", self._ip, i)
                    return i
                depth -= 1
        log.debug("'[' at %d has no matching ']'", self._ip)
        raise MissingClosingBracket(self._ip)

    def _read_byte(self):
        stream = self._input
        if stream is None:
            stream = sys.stdin.buffer
        try:
            data = stream.read(1)
        except OSError as e:
            log.debug("input read failed at %d: %s", self._ip, e)
            raise InputError(self._ip, str(e)) from e
        if not data:
            raise InputError(self._ip)
        return data[0]
