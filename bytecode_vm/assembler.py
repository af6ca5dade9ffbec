"""
Text assembly for VM programs.

One instruction per line; mnemonics are case-insensitive, ``#`` starts a
comment, and ``LITERAL`` takes one decimal or ``0x`` hex operand::

    LITERAL 3    # value
    LITERAL 0    # wizard
    SET_HEALTH
"""

import re
from typing import List

from .core.errors import AssemblyError
from .core.instruction import Instruction, Program
from .core.opcodes import Opcode, get_operand_count

_INT_RE = re.compile(r"^(0[xX][0-9a-fA-F]+|\d+)$")


def _parse_int(token: str, line_no: int) -> int:
    if not _INT_RE.match(token):
        raise AssemblyError(f"Invalid integer operand {token!r}", line_no)
    return int(token, 0) if token[:2].lower() == "0x" else int(token, 10)


def parse_line(line: str, line_no: int = 1):
    """Parse one source line; returns None for blank and comment-only lines."""
    code = line.split("#", 1)[0].strip()
    if not code:
        return None

    tokens = code.split()
    mnemonic = tokens[0].upper()
    try:
        opcode = Opcode[mnemonic]
    except KeyError:
        raise AssemblyError(f"Unknown mnemonic {tokens[0]!r}", line_no) from None

    operands = tokens[1:]
    expected = get_operand_count(opcode)
    if len(operands) != expected:
        raise AssemblyError(
            f"{opcode.name} expects {expected} operand(s), got {len(operands)}", line_no
        )

    if not expected:
        return Instruction(opcode)
    value = _parse_int(operands[0], line_no)
    try:
        return Instruction(opcode, value)
    except ValueError as e:
        raise AssemblyError(str(e), line_no) from e


def parse_assembly(text: str) -> Program:
    program: List[Instruction] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        instr = parse_line(line, line_no)
        if instr is not None:
            program.append(instr)
    return tuple(program)


def format_program(program: Program, with_offsets: bool = False) -> str:
    """
    Render a program as assembly source.

    Args:
        program: Instructions to render
        with_offsets: Prefix each line with a ``# pc`` comment column

    Returns:
        Source text that ``parse_assembly`` reads back to the same program
    """
    lines = []
    for pc, instr in enumerate(program):
        if with_offsets:
            lines.append(f"{str(instr):<24}# {pc:04d}")
        else:
            lines.append(str(instr))
    return "\n".join(lines) + ("\n" if lines else "")
