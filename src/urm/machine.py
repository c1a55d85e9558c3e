"""URMMachine: fetch-decode-execute engine for URM programs.

Loading a program:
    Program -> compaction map -> compacted Program -> sized Memory

Running it:
    reset memory -> seed R1..Rk -> pc = 1 -> execute while 1 <= pc <= L -> R0

The machine is a two-state automaton. It is Running(line) while the
program counter points inside the program and Halted(result) as soon as
it points anywhere else; jumping to line 0 or past the last line is how
programs stop. Nothing bounds the number of steps: a program that loops
forever makes run() loop forever. Callers that need a bound drive
iter_steps() themselves.

Registers are addressed two ways. The source numbering is the one the
program was written in; the machine numbering is the one after
compaction. Arguments, traces and register dumps always use source
numbering, so compaction is invisible from the outside.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Sequence, Union

from .memory import AUTO, Memory, create_memory
from .parser import parse_program
from .program import (
    CompactedProgram, Increase, Instruction, Jump, Program, Translate, Zero,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Running:
    """Machine is about to execute the instruction at line."""
    line: int


@dataclass(frozen=True)
class Halted:
    """Program counter left the program; result is the value of R0."""
    result: int


MachineState = Union[Running, Halted]


@dataclass
class TraceEntry:
    """Single executed instruction.

    Attributes:
        step: Step number (1-indexed)
        line: Line that was executed
        instruction: Executed instruction in source register numbering
        next_line: Program counter after the step (may be out of range)
        registers: Register values after the step, keyed by source register
    """
    step: int
    line: int
    instruction: Instruction
    next_line: int
    registers: Dict[int, int]


class URMMachine:
    """Unlimited Register Machine loaded with a single program.

    Attributes:
        source_program: Program as given, in source register numbering
        program: Program actually executed, in machine register numbering
        register_map: Source register -> machine register for every
            referenced register
        memory: Register storage sized for program
        compacted: Whether registers were renumbered
    """

    def __init__(
        self,
        program: Union[Program, CompactedProgram],
        layout: str = AUTO,
        compact: bool = True
    ):
        """Load a program.

        Args:
            program: Parsed URM program, or the result of Program.compact()
            layout: Memory layout, "auto", "dense" or "sparse"
            compact: Renumber registers when the program's occupancy is low.
                Ignored for an already compacted program, whose own
                register_map is used.
        """
        if isinstance(program, CompactedProgram):
            loaded = program
        elif compact:
            loaded = program.compact()
        else:
            identity = {register: register for register in program.registers()}
            loaded = CompactedProgram(program, program, identity)

        self.source_program = loaded.source
        self.register_map = loaded.register_map
        self.compacted = loaded.compacted
        self.program = loaded.program
        self.memory: Memory = create_memory(self.program, layout)

        # Machine register -> source register, for traces and dumps
        self._source_of = {new: old for old, new in self.register_map.items()}
        self._source_of.setdefault(0, 0)

        self._state: Optional[MachineState] = None
        self._steps = 0

        logger.debug(
            "Loaded %d instructions: occupancy %.2f, %s, %s layout with %d registers",
            len(self.source_program), self.source_program.occupancy(),
            "compacted" if self.compacted else "not compacted",
            self.memory.layout, len(self.memory)
        )

    @classmethod
    def from_source(cls, source: str, **options) -> "URMMachine":
        """Parse program text and load it.

        Raises:
            ParseError: If the source is malformed
        """
        return cls(parse_program(source), **options)

    # =========================================================================
    # Execution
    # =========================================================================

    def load(self, arguments: Sequence[int] = ()) -> None:
        """Reset memory, seed R1..Rk with arguments and point pc at line 1.

        Arguments seeding a register the program never references are
        dropped; such a register cannot affect the result.

        Raises:
            ValueError: If an argument is not a natural number
        """
        for value in arguments:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Arguments must be natural numbers, got {value!r}")

        self.memory.reset()
        for register, value in enumerate(arguments, start=1):
            target = self.register_map.get(register)
            if target is not None:
                self.memory.set(target, value)

        self._steps = 0
        self._state = self._state_at(1)

    def step(self) -> TraceEntry:
        """Execute one instruction.

        Returns:
            TraceEntry describing the step

        Raises:
            RuntimeError: If nothing is loaded or the machine has halted
        """
        if self._state is None:
            raise RuntimeError("No arguments loaded")
        if isinstance(self._state, Halted):
            raise RuntimeError("Machine is halted")

        line = self._state.line
        next_line = self._execute(self.program.fetch(line), line)
        self._steps += 1
        self._state = self._state_at(next_line)

        return TraceEntry(
            step=self._steps,
            line=line,
            instruction=self.source_program.fetch(line),
            next_line=next_line,
            registers=self.dump_registers(),
        )

    def iter_steps(self, arguments: Sequence[int] = ()) -> Iterator[TraceEntry]:
        """Load arguments and yield one TraceEntry per executed instruction.

        The generator ends when the machine halts, which may be never.
        """
        self.load(arguments)
        while isinstance(self._state, Running):
            yield self.step()

    def run(self, arguments: Sequence[int] = ()) -> int:
        """Run the program to completion.

        Args:
            arguments: Initial values of R1, R2, ...

        Returns:
            Value of R0 when the program halts
        """
        self.load(arguments)
        memory = self.memory
        program = self.program
        length = len(program)
        line = 1
        steps = 0

        while 1 <= line <= length:
            line = self._execute(program.fetch(line), line)
            steps += 1

        self._steps = steps
        self._state = Halted(memory.get(0))
        return self._state.result

    def _execute(self, instruction: Instruction, line: int) -> int:
        """Apply one instruction to memory and return the next line."""
        memory = self.memory
        if isinstance(instruction, Increase):
            memory.set(instruction.register, memory.get(instruction.register) + 1)
            return line + 1
        if isinstance(instruction, Zero):
            memory.set(instruction.register, 0)
            return line + 1
        if isinstance(instruction, Translate):
            memory.set(instruction.dest, memory.get(instruction.src))
            return line + 1
        if isinstance(instruction, Jump):
            if memory.get(instruction.first) == memory.get(instruction.second):
                return instruction.goto
            return line + 1
        raise TypeError(f"Unknown instruction: {instruction!r}")

    def _state_at(self, line: int) -> MachineState:
        if 1 <= line <= len(self.program):
            return Running(line)
        return Halted(self.memory.get(0))

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def state(self) -> Optional[MachineState]:
        """Running(line), Halted(result), or None before the first load."""
        return self._state

    def is_halted(self) -> bool:
        return isinstance(self._state, Halted)

    def result(self) -> int:
        """Value of R0 at halt.

        Raises:
            RuntimeError: If the machine has not halted
        """
        if not isinstance(self._state, Halted):
            raise RuntimeError("Machine has not halted")
        return self._state.result

    def get_step_count(self) -> int:
        return self._steps

    def dump_registers(self) -> Dict[int, int]:
        """Current value of R0 and every referenced register, in source numbering."""
        return {
            self._source_of[index]: value
            for index, value in sorted(self.memory.snapshot().items())
            if index in self._source_of
        }

    def get_summary(self) -> Dict:
        """Get execution summary.

        Returns:
            Dictionary with load decisions, step count and final state
        """
        return {
            "instructions": len(self.program),
            "layout": self.memory.layout,
            "memory_size": len(self.memory),
            "compacted": self.compacted,
            "steps": self._steps,
            "halted": self.is_halted(),
            "result": self._state.result if self.is_halted() else None,
            "registers": self.dump_registers(),
        }


def run_program(source: str, arguments: Sequence[int] = (), **options) -> int:
    """Parse, load and run program text in one call."""
    return URMMachine.from_source(source, **options).run(arguments)
