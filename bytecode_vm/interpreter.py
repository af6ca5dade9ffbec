"""
Bytecode interpreter.

Runs a ``Program`` top to bottom against an actor table and an effect
dispatcher. Stack operand order for the attribute setters is fixed as
"value first, actor id on top"::

    LITERAL 3      # value
    LITERAL 0      # actor id
    SET_HEALTH     # actors[0].set_health(3)

Execution is fail-fast and non-transactional: the first ``ExecutionError``
aborts the run and whatever earlier instructions did to actors stays done.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import structlog

from .actors import ActorTable, EffectDispatcher
from .analysis.stack_analyzer import check_program
from .config import VMConfig
from .core.errors import ExecutionError, StepLimitExceeded, UnknownActor
from .core.instruction import Instruction, Program
from .core.opcodes import Opcode, get_stack_effect
from .core.state import ExecutionState

logger = structlog.get_logger(__name__)

SETTERS: Dict[Opcode, Callable] = {
    Opcode.SET_HEALTH: lambda actor, value: actor.set_health(value),
    Opcode.SET_WISDOM: lambda actor, value: actor.set_wisdom(value),
    Opcode.SET_AGILITY: lambda actor, value: actor.set_agility(value),
}

GETTERS: Dict[Opcode, Callable] = {
    Opcode.GET_HEALTH: lambda actor: actor.get_health(),
    Opcode.GET_WISDOM: lambda actor: actor.get_wisdom(),
    Opcode.GET_AGILITY: lambda actor: actor.get_agility(),
}

EFFECTS: Dict[Opcode, Callable] = {
    Opcode.PLAY_SOUND: lambda effects, effect_id: effects.play_sound(effect_id),
    Opcode.SPAWN_PARTICLES: lambda effects, effect_id: effects.spawn_particles(effect_id),
}


@dataclass(frozen=True)
class ExecutionResult:
    stack: Tuple[int, ...]  # bottom first
    steps: int


class Interpreter:
    """Executes programs; holds configuration only, so one instance can be reused."""

    def __init__(self, config: Optional[VMConfig] = None):
        self.config = config or VMConfig()
        self._handlers = {
            Opcode.LITERAL: self._literal,
            Opcode.ADD: self._add,
            Opcode.DIVIDE: self._divide,
        }
        for opcode in SETTERS:
            self._handlers[opcode] = self._set_attribute
        for opcode in GETTERS:
            self._handlers[opcode] = self._get_attribute
        for opcode in EFFECTS:
            self._handlers[opcode] = self._effect

    def execute(self, program: Program, actors: ActorTable,
                effects: EffectDispatcher) -> ExecutionResult:
        """
        Run ``program`` to completion.

        Args:
            program: Instructions to execute, in order
            actors: Mapping from actor id to actor, looked up but never modified
            effects: Dispatcher receiving PLAY_SOUND / SPAWN_PARTICLES calls

        Returns:
            ExecutionResult with the final stack and the number of steps run

        Raises:
            ExecutionError: On the first instruction that cannot execute
        """
        log = logger.bind(program_length=len(program))
        if self.config.verify:
            try:
                check_program(program, self.config)
            except ExecutionError as e:
                log.warning("Program rejected by stack check", error=str(e))
                raise

        state = ExecutionState(max_depth=self.config.max_stack_depth)
        max_steps = self.config.max_steps
        log.debug("Starting execution", max_steps=max_steps)

        while state.pc < len(program):
            instr = program[state.pc]
            try:
                if max_steps is not None and state.steps >= max_steps:
                    raise StepLimitExceeded(limit=max_steps)
                log.debug("Executing instruction", pc=state.pc, instruction=str(instr),
                          stack=state.snapshot())
                pops, _ = get_stack_effect(instr.opcode)
                state.require(pops)
                self._handlers[instr.opcode](state, instr, actors, effects)
            except ExecutionError as e:
                if e.pc is None:
                    e.pc = state.pc
                    e.opcode = instr.opcode
                log.warning("Execution aborted", pc=state.pc, opcode=instr.opcode.name,
                            error=e.message, steps=state.steps)
                raise
            state.steps += 1
            state.pc += 1

        log.debug("Execution finished", steps=state.steps, stack=state.snapshot())
        return ExecutionResult(stack=state.snapshot(), steps=state.steps)

    def _literal(self, state: ExecutionState, instr: Instruction, actors, effects):
        state.push(instr.operand)

    def _set_attribute(self, state: ExecutionState, instr: Instruction, actors, effects):
        actor = _resolve(actors, state.peek(0))
        state.pop()
        value = state.pop()
        SETTERS[instr.opcode](actor, value)

    def _get_attribute(self, state: ExecutionState, instr: Instruction, actors, effects):
        actor = _resolve(actors, state.peek(0))
        state.pop()
        state.push(GETTERS[instr.opcode](actor))

    def _effect(self, state: ExecutionState, instr: Instruction, actors, effects):
        EFFECTS[instr.opcode](effects, state.pop())

    def _add(self, state: ExecutionState, instr: Instruction, actors, effects):
        b = state.pop()
        a = state.pop()
        state.push(a + b)

    def _divide(self, state: ExecutionState, instr: Instruction, actors, effects):
        # x / 0 = 0
        divisor = state.pop()
        dividend = state.pop()
        state.push(dividend // divisor if divisor else 0)


def _resolve(actors: ActorTable, actor_id: int):
    try:
        return actors[actor_id]
    except KeyError:
        raise UnknownActor(actor_id) from None


def execute(program: Program, actors: ActorTable, effects: EffectDispatcher,
            config: Optional[VMConfig] = None) -> ExecutionResult:
    """Run ``program`` with a throwaway ``Interpreter``."""
    return Interpreter(config).execute(program, actors, effects)
