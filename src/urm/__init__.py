"""URM: Unlimited Register Machine interpreter.

The URM is the textbook model of computability: countably many registers
R0, R1, R2, ... each holding a natural number, and four instructions.

    Z(n)        R[n] <- 0
    S(n)        R[n] <- R[n] + 1
    T(m, n)     R[n] <- R[m]
    J(m, n, q)  if R[m] == R[n] goto line q

A program's arguments are placed in R1..Rk, every other register starts
at 0, and the result is read from R0 once the program counter leaves
the program.

Architecture:
    SOURCE -> PARSE -> PROGRAM -> COMPACT -> MEMORY -> RUN -> R0
                          |          |          |
                     [1-based]  [renumber]  [dense or sparse]

Modules:
    program: Instruction classes and Program (register enumeration, compaction)
    memory: DenseMemory / SparseMemory register storage
    parser: Program text parser and ParseError
    machine: URMMachine fetch-decode-execute engine
    cli: Command line front end
"""

__version__ = "0.1.0"

from .program import Instruction, Zero, Increase, Translate, Jump, Program, CompactedProgram
from .memory import DenseMemory, SparseMemory, create_memory
from .parser import ParseError, parse_program
from .machine import URMMachine, Running, Halted, TraceEntry, run_program

__all__ = [
    "Instruction", "Zero", "Increase", "Translate", "Jump", "Program", "CompactedProgram",
    "DenseMemory", "SparseMemory", "create_memory",
    "ParseError", "parse_program",
    "URMMachine", "Running", "Halted", "TraceEntry", "run_program",
]
