from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .opcodes import OPERAND_WORDS, WORD_MASK, Opcode


@dataclass(frozen=True)
class Instruction:
    """A single VM instruction: an opcode tag plus its inline operand, if any.

    Only ``LITERAL`` carries an operand; every other opcode takes its inputs
    from the operand stack.
    """

    opcode: Opcode
    operand: Optional[int] = None

    def __post_init__(self):
        # Accept plain ints for the tag but always store the enum member
        object.__setattr__(self, "opcode", Opcode(self.opcode))
        if self.opcode in OPERAND_WORDS:
            if isinstance(self.operand, bool) or not isinstance(self.operand, int):
                raise ValueError(f"{self.opcode.name} requires an integer operand")
            if not 0 <= self.operand <= WORD_MASK:
                raise ValueError(f"{self.opcode.name} operand {self.operand} does not fit in a word")
        elif self.operand is not None:
            raise ValueError(f"{self.opcode.name} takes no operand")

    @classmethod
    def literal(cls, value: int) -> "Instruction":
        return cls(Opcode.LITERAL, value)

    def words(self) -> List[int]:
        """Flat encoding of this instruction."""
        if self.operand is None:
            return [int(self.opcode)]
        return [int(self.opcode), self.operand]

    def __str__(self) -> str:
        if self.operand is None:
            return self.opcode.name
        return f"{self.opcode.name} {self.operand}"


Program = Tuple[Instruction, ...]


def make_program(instructions: Iterable) -> Program:
    """
    Build an immutable program from instructions or bare opcodes.

    Args:
        instructions: Iterable of ``Instruction`` objects or operand-less
            opcodes (``Opcode`` members or their integer values)

    Returns:
        Tuple of instructions, safe to share between executions
    """
    program = []
    for item in instructions:
        if isinstance(item, Instruction):
            program.append(item)
        else:
            program.append(Instruction(item))
    return tuple(program)
