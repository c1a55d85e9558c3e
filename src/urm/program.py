"""Instruction set and program representation for the URM.

The Unlimited Register Machine has exactly four instructions:

    Z(n)        Zero:      R[n] <- 0
    S(n)        Increase:  R[n] <- R[n] + 1
    T(m, n)     Translate: R[n] <- R[m]
    J(m, n, q)  Jump:      if R[m] == R[n] goto line q

Register indices are natural numbers. Jump targets are absolute 1-based
line numbers; a target outside the program halts the machine, which is
the only way a URM program terminates.

A Program also knows how to renumber its registers into a contiguous
range (compaction), so that a program referencing R0, R100 and R5000
does not need five thousand cells of storage.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple


# Above this ratio of used registers to addressable registers, addressing
# is already near-dense and compaction is skipped.
OCCUPANCY_THRESHOLD = 0.70


def _check_natural(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a natural number, got {value!r}")


class Instruction:
    """Base class for the four URM instructions."""

    def registers(self) -> Tuple[int, ...]:
        """Register indices referenced by this instruction."""
        raise NotImplementedError

    def remap(self, mapping: Dict[int, int]) -> "Instruction":
        """Return a copy with every register field passed through mapping."""
        raise NotImplementedError


@dataclass(frozen=True)
class Zero(Instruction):
    """Z(n) - reset a register to 0."""
    register: int

    def __post_init__(self):
        _check_natural("register", self.register)

    def registers(self) -> Tuple[int, ...]:
        return (self.register,)

    def remap(self, mapping: Dict[int, int]) -> "Zero":
        return Zero(mapping[self.register])

    def __str__(self) -> str:
        return f"Z({self.register})"


@dataclass(frozen=True)
class Increase(Instruction):
    """S(n) - add 1 to a register."""
    register: int

    def __post_init__(self):
        _check_natural("register", self.register)

    def registers(self) -> Tuple[int, ...]:
        return (self.register,)

    def remap(self, mapping: Dict[int, int]) -> "Increase":
        return Increase(mapping[self.register])

    def __str__(self) -> str:
        return f"S({self.register})"


@dataclass(frozen=True)
class Translate(Instruction):
    """T(m, n) - copy register src into register dest."""
    src: int
    dest: int

    def __post_init__(self):
        _check_natural("src", self.src)
        _check_natural("dest", self.dest)

    def registers(self) -> Tuple[int, ...]:
        return (self.src, self.dest)

    def remap(self, mapping: Dict[int, int]) -> "Translate":
        return Translate(mapping[self.src], mapping[self.dest])

    def __str__(self) -> str:
        return f"T({self.src}, {self.dest})"


@dataclass(frozen=True)
class Jump(Instruction):
    """J(m, n, q) - go to line q when registers m and n hold equal values.

    Attributes:
        first: First compared register
        second: Second compared register
        goto: 1-based target line; any value outside the program halts
    """
    first: int
    second: int
    goto: int

    def __post_init__(self):
        _check_natural("first", self.first)
        _check_natural("second", self.second)
        _check_natural("goto", self.goto)

    def registers(self) -> Tuple[int, ...]:
        return (self.first, self.second)

    def remap(self, mapping: Dict[int, int]) -> "Jump":
        # goto is a line number, never a register
        return Jump(mapping[self.first], mapping[self.second], self.goto)

    def __str__(self) -> str:
        return f"J({self.first}, {self.second}, {self.goto})"


class Program:
    """Immutable, 1-based sequence of URM instructions.

    Attributes:
        instructions: Tuple of Instruction objects; line n is instructions[n - 1]
    """

    def __init__(self, instructions=()):
        instructions = tuple(instructions)
        for instruction in instructions:
            if not isinstance(instruction, Instruction):
                raise TypeError(f"Not a URM instruction: {instruction!r}")
        self.instructions: Tuple[Instruction, ...] = instructions

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        return self.instructions == other.instructions

    def __hash__(self) -> int:
        return hash(self.instructions)

    def __repr__(self) -> str:
        return f"Program({list(self.instructions)!r})"

    def __str__(self) -> str:
        return "\n".join(str(instruction) for instruction in self.instructions)

    def fetch(self, line: int) -> Instruction:
        """Get the instruction at a 1-based line number.

        Raises:
            IndexError: If line is outside [1, len(program)]
        """
        if not 1 <= line <= len(self.instructions):
            raise IndexError(f"Line {line} outside program of length {len(self)}")
        return self.instructions[line - 1]

    def iter_registers(self) -> Iterator[int]:
        """Yield every referenced register index in instruction order.

        Duplicates are kept. Each call returns a fresh generator.
        """
        for instruction in self.instructions:
            yield from instruction.registers()

    def registers(self) -> List[int]:
        """Distinct referenced registers in order of first occurrence."""
        return list(dict.fromkeys(self.iter_registers()))

    def max_register(self) -> int:
        """Highest referenced register index, or 0 if none is referenced."""
        return max(self.iter_registers(), default=0)

    def memory_len(self) -> int:
        """Number of cells a dense memory needs; register 0 is always addressable."""
        return self.max_register() + 1

    def occupancy(self) -> float:
        """Ratio of distinct referenced registers to addressable registers."""
        return len(self.registers()) / self.memory_len()

    def compaction_map(self) -> Dict[int, int]:
        """Build the old -> new register renumbering used by compact().

        Register 0 keeps its index. The other registers are numbered
        1, 2, 3, ... in order of first occurrence. If the program is
        already dense enough (occupancy above OCCUPANCY_THRESHOLD), the
        identity mapping is returned instead.

        Returns:
            Dictionary covering every register the program references
        """
        registers = self.registers()
        if self.occupancy() > OCCUPANCY_THRESHOLD:
            return {register: register for register in registers}

        mapping = {}
        next_index = 1
        for register in registers:
            if register == 0:
                mapping[0] = 0
            else:
                mapping[register] = next_index
                next_index += 1
        return mapping

    def remap(self, mapping: Dict[int, int]) -> "Program":
        """Rewrite every instruction's registers through mapping."""
        return Program(instruction.remap(mapping) for instruction in self.instructions)

    def compact(self) -> "CompactedProgram":
        """Renumber registers into a contiguous range.

        The renumbered program alone is not equivalent to this one: its
        inputs now live in different registers. The returned
        CompactedProgram keeps the mapping so a URMMachine can still
        place arguments in the right registers.

        Returns:
            CompactedProgram whose program has a smaller memory_len(), or
            wraps this program unchanged when compaction would not pay off
        """
        mapping = self.compaction_map()
        if all(old == new for old, new in mapping.items()):
            return CompactedProgram(self, self, mapping)
        return CompactedProgram(self, self.remap(mapping), mapping)


@dataclass(frozen=True)
class CompactedProgram:
    """Program renumbered by compact(), with the numbering it used.

    Attributes:
        source: Program in its original register numbering
        program: Program with registers renumbered
        register_map: Source register -> renumbered register
    """
    source: Program
    program: Program
    register_map: Dict[int, int]

    @property
    def compacted(self) -> bool:
        """Whether any register was renumbered."""
        return any(old != new for old, new in self.register_map.items())
