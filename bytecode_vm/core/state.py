from typing import List, Optional

from .errors import StackOverflow, StackUnderflow
from .opcodes import WORD_MASK

DEFAULT_MAX_STACK_DEPTH = 128


class ExecutionState:
    """Operand stack and cursor for a single run of a program."""

    def __init__(self, pc: int = 0, stack: Optional[List[int]] = None,
                 max_depth: int = DEFAULT_MAX_STACK_DEPTH):
        self.pc = pc
        self.stack = stack if stack is not None else []
        self.max_depth = max_depth
        self.steps = 0

    def require(self, count: int) -> None:
        """Raise ``StackUnderflow`` unless at least ``count`` values are present."""
        if len(self.stack) < count:
            raise StackUnderflow(required=count, available=len(self.stack))

    def push(self, value: int) -> None:
        if len(self.stack) >= self.max_depth:
            raise StackOverflow(limit=self.max_depth)
        self.stack.append(value & WORD_MASK)

    def pop(self) -> int:
        self.require(1)
        return self.stack.pop()

    def peek(self, index: int = 0) -> int:
        """Access stack item without popping (0 is top)."""
        self.require(index + 1)
        return self.stack[-(index + 1)]

    def snapshot(self) -> tuple:
        """Stack contents, bottom first."""
        return tuple(self.stack)

    def __len__(self) -> int:
        return len(self.stack)
