"""Codec between flat word streams and ``Program`` tuples."""

from typing import Iterable, List, Sequence

import structlog

from .core.errors import DecodeError
from .core.instruction import Instruction, Program
from .core.opcodes import OPCODE_NAMES, WORD_MASK, Opcode, get_operand_count

logger = structlog.get_logger(__name__)


def disassemble(words: Sequence[int]) -> Program:
    """
    Decode a flat word stream into instructions.

    Each opcode word is followed by its inline operand words (only
    ``LITERAL`` has one).

    Args:
        words: Sequence of unsigned integer words

    Returns:
        Tuple of Instructions

    Raises:
        DecodeError: On a non-word value, an unknown opcode or a truncated operand
    """
    program = []
    i = 0

    while i < len(words):
        word = words[i]
        offset = i
        i += 1

        if isinstance(word, bool) or not isinstance(word, int) or not 0 <= word <= WORD_MASK:
            raise DecodeError(f"Invalid word {word!r}", offset)
        if word not in OPCODE_NAMES:
            raise DecodeError(f"Unknown opcode {word}", offset)

        opcode = Opcode(word)
        operand_count = get_operand_count(opcode)
        if i + operand_count > len(words):
            raise DecodeError(f"Missing operand for {opcode.name}", offset)

        if operand_count:
            operand = words[i]
            if isinstance(operand, bool) or not isinstance(operand, int) or not 0 <= operand <= WORD_MASK:
                raise DecodeError(f"Invalid operand {operand!r} for {opcode.name}", i)
            program.append(Instruction(opcode, operand))
        else:
            program.append(Instruction(opcode))
        i += operand_count

    logger.debug("Disassembled word stream", words=len(words), instructions=len(program))
    return tuple(program)


def assemble(program: Iterable[Instruction]) -> List[int]:
    """Encode instructions as a flat word stream."""
    words: List[int] = []
    for instr in program:
        words.extend(instr.words())
    return words
