"""
Game bytecode VM: behaviour encoded as instructions for a tiny stack machine.
"""

# Data model
from .core.opcodes import Opcode, get_stack_effect
from .core.instruction import Instruction, Program, make_program
from .core.state import ExecutionState
from .core.errors import (
    BytecodeVMError,
    ExecutionError,
    StackUnderflow,
    StackOverflow,
    UnknownActor,
    StepLimitExceeded,
    DecodeError,
    AssemblyError,
    ConfigError,
)

# Collaborators
from .actors import Actor, EffectDispatcher, Wizard, RecordingEffects, LoggingEffects

# Interpreter
from .interpreter import Interpreter, ExecutionResult, execute

# Utilities
from .disassembler import assemble, disassemble
from .assembler import parse_assembly, format_program
from .analysis.stack_analyzer import analyze_stack, check_program, StackReport
from .config import VMConfig, load_config

__version__ = "0.1.0"

__all__ = [
    # Data model
    "Opcode",
    "get_stack_effect",
    "Instruction",
    "Program",
    "make_program",
    "ExecutionState",
    "BytecodeVMError",
    "ExecutionError",
    "StackUnderflow",
    "StackOverflow",
    "UnknownActor",
    "StepLimitExceeded",
    "DecodeError",
    "AssemblyError",
    "ConfigError",
    # Collaborators
    "Actor",
    "EffectDispatcher",
    "Wizard",
    "RecordingEffects",
    "LoggingEffects",
    # Interpreter
    "Interpreter",
    "ExecutionResult",
    "execute",
    # Utilities
    "assemble",
    "disassemble",
    "parse_assembly",
    "format_program",
    "analyze_stack",
    "check_program",
    "StackReport",
    "VMConfig",
    "load_config",
]
