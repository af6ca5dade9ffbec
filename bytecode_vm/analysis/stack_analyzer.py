from dataclasses import dataclass
from typing import Optional

from ..config import VMConfig
from ..core.errors import StackOverflow, StackUnderflow
from ..core.instruction import Program
from ..core.opcodes import get_stack_effect


@dataclass(frozen=True)
class StackReport:
    max_depth: int
    final_height: int
    underflow_at: Optional[int] = None  # index of first instruction that underflows
    underflow_required: int = 0
    underflow_available: int = 0

    @property
    def ok(self) -> bool:
        return self.underflow_at is None


def analyze_stack(program: Program) -> StackReport:
    """
    Simulate stack heights through ``program`` starting from an empty stack.

    Every opcode has a fixed stack effect, so heights are exact: a program
    the analysis accepts can never underflow at run time. Simulation stops
    at the first underflow.
    """
    height = 0
    max_depth = 0

    for index, instr in enumerate(program):
        pops, pushes = get_stack_effect(instr.opcode)

        if height < pops:
            return StackReport(
                max_depth=max_depth,
                final_height=height,
                underflow_at=index,
                underflow_required=pops,
                underflow_available=height,
            )

        height = height - pops + pushes
        max_depth = max(max_depth, height)

    return StackReport(max_depth=max_depth, final_height=height)


def check_program(program: Program, config: Optional[VMConfig] = None) -> StackReport:
    """
    Statically reject programs that would underflow or overflow the stack.

    Args:
        program: Instructions to check
        config: Supplies ``max_stack_depth``; defaults to ``VMConfig()``

    Raises:
        StackUnderflow: Carrying the pc and opcode of the offending instruction
        StackOverflow: If the peak height exceeds ``max_stack_depth``
    """
    max_stack_depth = (config or VMConfig()).max_stack_depth
    report = analyze_stack(program)
    if not report.ok:
        instr = program[report.underflow_at]
        raise StackUnderflow(
            required=report.underflow_required,
            available=report.underflow_available,
            pc=report.underflow_at,
            opcode=instr.opcode,
        )
    if report.max_depth > max_stack_depth:
        pc = _first_overflow(program, max_stack_depth)
        raise StackOverflow(limit=max_stack_depth, pc=pc, opcode=program[pc].opcode)
    return report


def _first_overflow(program: Program, limit: int) -> int:
    height = 0
    for index, instr in enumerate(program):
        pops, pushes = get_stack_effect(instr.opcode)
        height = height - pops + pushes
        if height > limit:
            return index
    raise AssertionError("no overflow found")
