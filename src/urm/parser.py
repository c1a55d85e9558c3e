"""Parser for URM program text.

Accepted syntax, one instruction per line:

    Z(n)  S(n)  T(m, n)  J(m, n, q)

Mnemonics are case-insensitive and the long forms ZERO, INC/SUCC,
TRANSFER/COPY and JUMP are also understood. A line may carry its own
line number as a prefix ("3: S(1)" or "3. S(1)"); when it does, the
number has to match the instruction's position. '#' starts a comment
and blank lines are skipped without counting as program lines.

Parsing is all-or-nothing: the first malformed line raises ParseError
with its 1-based line and column in the source text.
"""

import re
from typing import List

from .program import Increase, Instruction, Jump, Program, Translate, Zero


class ParseError(ValueError):
    """Malformed program text.

    Attributes:
        message: Description of the problem
        line: 1-based line in the source text
        column: 1-based column in that line
    """

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"line {line}, column {column}: {message}")
        self.message = message
        self.line = line
        self.column = column


# Mnemonic -> (instruction class, operand count)
MNEMONICS = {
    "Z": (Zero, 1),
    "ZERO": (Zero, 1),
    "S": (Increase, 1),
    "INC": (Increase, 1),
    "SUCC": (Increase, 1),
    "T": (Translate, 2),
    "TRANSFER": (Translate, 2),
    "COPY": (Translate, 2),
    "J": (Jump, 3),
    "JUMP": (Jump, 3),
}

_LINE_PREFIX = re.compile(r'([0-9]+)\s*[:.]\s*')
_MNEMONIC = re.compile(r'[A-Za-z]+')
_NATURAL = re.compile(r'[0-9]+')


def _parse_operands(text: str, start: int, end: int, line_no: int) -> List[int]:
    """Parse the comma separated naturals in text[start:end]."""
    inner = text[start:end]
    if not inner.strip():
        return []

    operands = []
    offset = start
    for raw in inner.split(","):
        stripped = raw.strip()
        column = offset + (len(raw) - len(raw.lstrip())) + 1
        if not _NATURAL.fullmatch(stripped):
            if not stripped:
                raise ParseError("Missing operand", line_no, column)
            raise ParseError(f"Expected a natural number, got {stripped!r}", line_no, column)
        operands.append(int(stripped))
        offset += len(raw) + 1
    return operands


def parse_instruction(text: str, line_no: int = 1, expected_line: int = 1) -> Instruction:
    """Parse a single instruction.

    Args:
        text: Source line with comments already removed
        line_no: Line in the source text, used for error positions
        expected_line: Program line this instruction will occupy

    Returns:
        The parsed Instruction

    Raises:
        ParseError: If the text is not a valid instruction
    """
    pos = len(text) - len(text.lstrip())

    prefix = _LINE_PREFIX.match(text, pos)
    if prefix:
        number = int(prefix.group(1))
        if number != expected_line:
            raise ParseError(
                f"Line number {number} does not match instruction position {expected_line}",
                line_no, pos + 1
            )
        pos = prefix.end()

    mnemonic = _MNEMONIC.match(text, pos)
    if not mnemonic:
        raise ParseError("Expected an instruction mnemonic", line_no, pos + 1)
    name = mnemonic.group().upper()
    if name not in MNEMONICS:
        raise ParseError(f"Unknown instruction {mnemonic.group()!r}", line_no, pos + 1)
    cls, arity = MNEMONICS[name]

    pos = mnemonic.end()
    while pos < len(text) and text[pos].isspace():
        pos += 1
    if pos >= len(text) or text[pos] != "(":
        raise ParseError("Expected '('", line_no, pos + 1)
    open_paren = pos

    close_paren = text.find(")", open_paren)
    if close_paren < 0:
        raise ParseError("Missing ')'", line_no, len(text.rstrip()) + 1)

    rest = text[close_paren + 1:]
    if rest.strip():
        column = close_paren + 2 + (len(rest) - len(rest.lstrip()))
        raise ParseError("Unexpected text after instruction", line_no, column)

    operands = _parse_operands(text, open_paren + 1, close_paren, line_no)
    if len(operands) != arity:
        raise ParseError(
            f"{name} takes {arity} operand{'s' if arity > 1 else ''}, got {len(operands)}",
            line_no, open_paren + 1
        )
    return cls(*operands)


def parse_program(source: str) -> Program:
    """Parse URM source text into a Program.

    Args:
        source: Program text

    Returns:
        Program with one instruction per non-blank, non-comment line

    Raises:
        ParseError: On the first malformed line
    """
    instructions = []

    for line_no, line in enumerate(source.splitlines(), start=1):
        # Remove comments, keeping columns intact
        line = line.split("#", 1)[0]
        if not line.strip():
            continue
        instructions.append(
            parse_instruction(line, line_no=line_no, expected_line=len(instructions) + 1)
        )

    return Program(instructions)
