"""Register storage for the URM.

Two layouts implement the same get/set interface:

    DenseMemory:  list of cells indexed 0..memory_len-1
    SparseMemory: dict holding only the registers the program references

The layout is picked once, when a program is loaded, and never changes
while it runs. Values are Python ints, so registers are unbounded and
Increase can never overflow.

Accessing a register outside the storage is an internal error: memory is
always sized from the program it serves, so a miss means the engine has
a bug. It raises instead of growing the storage.
"""

from typing import Dict, Iterable

from .program import OCCUPANCY_THRESHOLD, Program


DENSE = "dense"
SPARSE = "sparse"
AUTO = "auto"
LAYOUTS = (AUTO, DENSE, SPARSE)


class Memory:
    """Interface shared by both register layouts."""

    layout = ""

    def get(self, index: int) -> int:
        raise NotImplementedError

    def set(self, index: int, value: int) -> None:
        raise NotImplementedError

    def reset(self) -> None:
        """Set every register back to 0."""
        raise NotImplementedError

    def snapshot(self) -> Dict[int, int]:
        """Copy of all stored registers as {index: value}."""
        raise NotImplementedError

    def __contains__(self, index) -> bool:
        raise NotImplementedError

    def __len__(self) -> int:
        raise NotImplementedError


class DenseMemory(Memory):
    """Fixed-size list of registers 0..size-1, all starting at 0."""

    layout = DENSE

    def __init__(self, size: int):
        if size < 1:
            raise ValueError(f"Dense memory needs at least one register, got {size}")
        self._cells = [0] * size

    def _check(self, index: int) -> None:
        # A negative index would silently wrap around on a list
        if not 0 <= index < len(self._cells):
            raise IndexError(
                f"Register {index} outside dense memory of size {len(self._cells)}"
            )

    def get(self, index: int) -> int:
        self._check(index)
        return self._cells[index]

    def set(self, index: int, value: int) -> None:
        self._check(index)
        self._cells[index] = value

    def reset(self) -> None:
        self._cells = [0] * len(self._cells)

    def snapshot(self) -> Dict[int, int]:
        return dict(enumerate(self._cells))

    def __contains__(self, index) -> bool:
        return isinstance(index, int) and 0 <= index < len(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"DenseMemory({self._cells!r})"


class SparseMemory(Memory):
    """Mapping pre-populated with a fixed set of registers.

    Register 0 is always present, since it holds the result.
    """

    layout = SPARSE

    def __init__(self, registers: Iterable[int]):
        self._cells: Dict[int, int] = {0: 0}
        for register in registers:
            self._cells[register] = 0

    def get(self, index: int) -> int:
        try:
            return self._cells[index]
        except KeyError:
            raise KeyError(f"Register {index} not allocated in sparse memory") from None

    def set(self, index: int, value: int) -> None:
        if index not in self._cells:
            raise KeyError(f"Register {index} not allocated in sparse memory")
        self._cells[index] = value

    def reset(self) -> None:
        for index in self._cells:
            self._cells[index] = 0

    def snapshot(self) -> Dict[int, int]:
        return dict(self._cells)

    def __contains__(self, index) -> bool:
        return index in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"SparseMemory({self._cells!r})"


def create_memory(program: Program, layout: str = AUTO) -> Memory:
    """Allocate zeroed memory for a program.

    Args:
        program: Program the memory will serve (normally already compacted)
        layout: "dense", "sparse", or "auto" to choose by occupancy ratio

    Returns:
        DenseMemory when the program's registers are packed tightly enough,
        SparseMemory otherwise

    Raises:
        ValueError: If layout is not one of LAYOUTS
    """
    if layout not in LAYOUTS:
        raise ValueError(f"Unknown memory layout: {layout!r} (expected one of {LAYOUTS})")

    if layout == AUTO:
        layout = DENSE if program.occupancy() > OCCUPANCY_THRESHOLD else SPARSE

    if layout == DENSE:
        return DenseMemory(program.memory_len())
    return SparseMemory(program.registers())
