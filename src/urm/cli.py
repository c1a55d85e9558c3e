"""URM Command Line Interface.

Run URM programs from a file or from inline source.

Usage:
    urm programs/add.urm 3 4
    urm --inline "T(1, 0); S(0)" 41
    urm programs/multiply.urm 6 7 --trace --max-steps 1000
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .machine import TraceEntry, URMMachine
from .memory import LAYOUTS, AUTO
from .parser import ParseError


class StepLimitExceeded(RuntimeError):
    """Program was still running after the allowed number of steps."""

    def __init__(self, max_steps: int):
        super().__init__(f"Max steps ({max_steps}) exceeded")
        self.max_steps = max_steps


def run_bounded(
    machine: URMMachine,
    arguments: Sequence[int],
    max_steps: Optional[int] = None,
    on_step: Optional[Callable[[TraceEntry], None]] = None
) -> int:
    """Run a machine step by step with an optional step cap.

    Args:
        machine: Loaded URMMachine
        arguments: Initial values of R1, R2, ...
        max_steps: Stop with StepLimitExceeded after this many steps (None = unbounded)
        on_step: Called with every TraceEntry

    Returns:
        Value of R0 at halt

    Raises:
        StepLimitExceeded: If the program has not halted within max_steps
    """
    if max_steps is None and on_step is None:
        return machine.run(arguments)

    for entry in machine.iter_steps(arguments):
        if on_step is not None:
            on_step(entry)
        if max_steps is not None and entry.step >= max_steps and not machine.is_halted():
            raise StepLimitExceeded(max_steps)
    return machine.result()


def format_step(entry: TraceEntry, previous: Optional[dict] = None) -> str:
    """One-line description of a trace entry, listing changed registers."""
    changes = []
    for register, value in entry.registers.items():
        if previous is None or previous.get(register) != value:
            changes.append(f"R{register}={value}")
    text = f"[Step {entry.step}] {entry.line:>3}: {str(entry.instruction):<14} -> {entry.next_line}"
    if changes:
        text += f"  {' '.join(changes)}"
    return text


def print_summary(machine: URMMachine) -> None:
    """Print load decisions and the final machine state."""
    summary = machine.get_summary()
    print("=" * 60)
    print("URM EXECUTION SUMMARY")
    print("=" * 60)
    print(f"  Instructions: {summary['instructions']}")
    print(f"  Layout: {summary['layout']} ({summary['memory_size']} registers)")
    print(f"  Compacted: {summary['compacted']}")
    print(f"  Steps: {summary['steps']}")
    print(f"  Halted: {summary['halted']}")
    print(f"  Registers: {summary['registers']}")


def _natural(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a natural number: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"not a natural number: {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="urm",
        description="URM: Unlimited Register Machine interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Add two numbers
    urm programs/add.urm 3 4

    # Run inline source (separate instructions with ;)
    urm --inline "T(2, 0)" 0 7

    # Show every step, giving up after 1000
    urm programs/multiply.urm 6 7 --trace --max-steps 1000
        """
    )

    parser.add_argument(
        "program",
        nargs="?",
        help="Path to URM program file"
    )
    parser.add_argument(
        "values",
        nargs="*",
        type=_natural,
        help="Initial values of R1, R2, ..."
    )
    parser.add_argument(
        "--inline", "-i",
        type=str,
        help="Inline program source (separate instructions with ;)"
    )
    parser.add_argument(
        "--layout", "-l",
        choices=LAYOUTS,
        default=AUTO,
        help="Register memory layout. Default: auto (chosen by occupancy)"
    )
    parser.add_argument(
        "--no-compact",
        action="store_true",
        help="Do not renumber registers at load time"
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Give up after this many steps. Default: unbounded"
    )
    parser.add_argument(
        "--trace", "-t",
        action="store_true",
        help="Print every executed step"
    )
    parser.add_argument(
        "--summary", "-s",
        action="store_true",
        help="Print load decisions and final registers"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    values = args.values
    if args.inline is not None:
        # With --inline every positional is a value
        if args.program is not None:
            values = [_natural_or_exit(parser, args.program)] + values
        source = args.inline.replace(";", "\n")
    elif args.program is None:
        parser.error("Either a program file or --inline is required")
    else:
        program_path = Path(args.program)
        if not program_path.exists():
            print(f"Error: Program file not found: {args.program}", file=sys.stderr)
            return 1
        try:
            source = program_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: Cannot read program file {args.program}: {e}", file=sys.stderr)
            return 1

    if args.max_steps is not None and args.max_steps < 1:
        parser.error("--max-steps must be positive")

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        machine = URMMachine.from_source(
            source,
            layout=args.layout,
            compact=not args.no_compact
        )
    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1

    on_step = None
    if args.trace:
        previous = {}

        def on_step(entry):
            nonlocal previous
            print(format_step(entry, previous))
            previous = entry.registers

    try:
        result = run_bounded(machine, values, max_steps=args.max_steps, on_step=on_step)
    except StepLimitExceeded as e:
        print(f"Execution error: {e}", file=sys.stderr)
        if args.summary:
            print_summary(machine)
        return 2

    if args.summary:
        print_summary(machine)
    print(result)
    return 0


def _natural_or_exit(parser: argparse.ArgumentParser, text: str) -> int:
    try:
        return _natural(text)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))


if __name__ == "__main__":
    sys.exit(main())
