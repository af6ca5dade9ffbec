"""
Error taxonomy for the bytecode VM.

Every ``ExecutionError`` is fatal to the run that raised it: the interpreter
does not retry and does not roll back actor mutations made by instructions
that already completed.
"""

from typing import Optional


class BytecodeVMError(Exception):
    """Base class for all errors raised by this package."""


class ExecutionError(BytecodeVMError):
    """An instruction could not be executed."""

    def __init__(self, message: str, pc: Optional[int] = None, opcode=None):
        super().__init__(message)
        self.message = message
        self.pc = pc
        self.opcode = opcode

    def __str__(self) -> str:
        if self.pc is None:
            return self.message
        name = self.opcode.name if self.opcode is not None else "?"
        return f"{self.message} (pc={self.pc}, opcode={name})"


class StackUnderflow(ExecutionError):
    """An instruction required more operands than were on the stack."""

    def __init__(self, required: int, available: int, pc: Optional[int] = None, opcode=None):
        super().__init__(
            f"stack underflow: needs {required} operand(s), {available} available",
            pc=pc,
            opcode=opcode,
        )
        self.required = required
        self.available = available


class StackOverflow(ExecutionError):
    """A push would grow the stack past its configured depth."""

    def __init__(self, limit: int, pc: Optional[int] = None, opcode=None):
        super().__init__(f"stack overflow: depth limit {limit} reached", pc=pc, opcode=opcode)
        self.limit = limit


class UnknownActor(ExecutionError):
    """An instruction addressed an actor id absent from the actor table."""

    def __init__(self, actor_id: int, pc: Optional[int] = None, opcode=None):
        super().__init__(f"unknown actor id {actor_id}", pc=pc, opcode=opcode)
        self.actor_id = actor_id


class StepLimitExceeded(ExecutionError):
    """The run used up its step budget before reaching the end of the program."""

    def __init__(self, limit: int, pc: Optional[int] = None, opcode=None):
        super().__init__(f"step limit of {limit} exceeded", pc=pc, opcode=opcode)
        self.limit = limit


class DecodeError(BytecodeVMError):
    """A flat word stream could not be decoded into instructions."""

    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at word offset {offset}")
        self.offset = offset


class AssemblyError(BytecodeVMError):
    """Assembly source text could not be parsed."""

    def __init__(self, message: str, line: int):
        super().__init__(f"line {line}: {message}")
        self.line = line


class ConfigError(BytecodeVMError):
    """Configuration value is missing or malformed."""
