"""
Opcode definitions and stack-effect tables for the game bytecode VM.
"""

from enum import IntEnum


class Opcode(IntEnum):
    """VM opcodes, encoded as single words in a flat instruction stream."""

    LITERAL = 100_000_000
    SET_HEALTH = 100_000_001
    SET_WISDOM = 100_000_002
    SET_AGILITY = 100_000_003
    PLAY_SOUND = 100_000_004
    SPAWN_PARTICLES = 100_000_005
    GET_HEALTH = 100_000_006
    GET_WISDOM = 100_000_007
    GET_AGILITY = 100_000_008
    ADD = 100_000_009
    DIVIDE = 100_000_010


# Values are unsigned 64-bit words
WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1

# Map from opcode value to name
OPCODE_NAMES = {int(code): name for name, code in Opcode.__members__.items()}

# Map from opcode to (stack_in, stack_out) counts
STACK_EFFECTS = {
    Opcode.LITERAL: (0, 1),
    # Setters: value underneath, actor id on top
    Opcode.SET_HEALTH: (2, 0),
    Opcode.SET_WISDOM: (2, 0),
    Opcode.SET_AGILITY: (2, 0),
    # Effects
    Opcode.PLAY_SOUND: (1, 0),
    Opcode.SPAWN_PARTICLES: (1, 0),
    # Getters: actor id in, attribute value out
    Opcode.GET_HEALTH: (1, 1),
    Opcode.GET_WISDOM: (1, 1),
    Opcode.GET_AGILITY: (1, 1),
    # Arithmetic
    Opcode.ADD: (2, 1),
    Opcode.DIVIDE: (2, 1),
}

SETTER_OPCODES = frozenset({Opcode.SET_HEALTH, Opcode.SET_WISDOM, Opcode.SET_AGILITY})
GETTER_OPCODES = frozenset({Opcode.GET_HEALTH, Opcode.GET_WISDOM, Opcode.GET_AGILITY})
EFFECT_OPCODES = frozenset({Opcode.PLAY_SOUND, Opcode.SPAWN_PARTICLES})

# Number of operand words that follow the opcode word in the flat encoding
OPERAND_WORDS = {Opcode.LITERAL: 1}


def is_opcode(word: int) -> bool:
    """Return True if ``word`` is one of the defined opcode values."""
    return word in OPCODE_NAMES


def get_stack_effect(opcode):
    """
    Get the stack effect of an opcode (how many items it pops and pushes).

    Args:
        opcode: The opcode value

    Returns:
        Tuple (stack_in, stack_out)

    Raises:
        ValueError: If ``opcode`` is not a defined opcode
    """
    return STACK_EFFECTS[Opcode(opcode)]


def get_operand_count(opcode) -> int:
    """Number of inline operand words carried by ``opcode``."""
    return OPERAND_WORDS.get(Opcode(opcode), 0)
