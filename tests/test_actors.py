import pytest
from structlog.testing import capture_logs

from bytecode_vm.actors import LoggingEffects, RecordingEffects, Wizard, make_wizards
from bytecode_vm.core.errors import StackOverflow, StackUnderflow
from bytecode_vm.core.opcodes import WORD_MASK
from bytecode_vm.core.state import ExecutionState


def test_wizard_accessors(wizard):
    wizard.set_health(1)
    wizard.set_wisdom(2)
    wizard.set_agility(3)
    assert (wizard.get_health(), wizard.get_wisdom(), wizard.get_agility()) == (1, 2, 3)
    assert wizard.to_dict() == {"name": "merlin", "health": 1, "wisdom": 2, "agility": 3}


def test_make_wizards():
    wizards = make_wizards(3)
    assert sorted(wizards) == [0, 1, 2]
    assert wizards[2].name == "wizard_2"
    assert wizards[0] is not wizards[1]
    assert make_wizards(0) == {}


def test_recording_effects():
    effects = RecordingEffects()
    effects.spawn_particles(4)
    effects.play_sound(1)
    assert effects.calls == [("spawn_particles", 4), ("play_sound", 1)]


def test_logging_effects():
    with capture_logs() as logs:
        effects = LoggingEffects()
        effects.play_sound(5)
        effects.spawn_particles(6)

    assert [(e["event"], e["log_level"]) for e in logs] == [
        ("playSound", "info"),
        ("spawnParticles", "info"),
    ]
    assert logs[0]["sound_id"] == 5
    assert logs[1]["particle_id"] == 6


# --- ExecutionState ---

def test_state_push_pop_peek():
    state = ExecutionState()
    state.push(10)
    state.push(20)

    assert len(state) == 2
    assert state.peek() == 20
    assert state.peek(1) == 10
    assert state.pop() == 20
    assert state.snapshot() == (10,)


def test_state_underflow():
    state = ExecutionState()
    with pytest.raises(StackUnderflow) as exc_info:
        state.pop()
    assert exc_info.value.required == 1
    assert exc_info.value.available == 0
    assert exc_info.value.pc is None


def test_state_overflow_and_masking():
    state = ExecutionState(max_depth=1)
    state.push(WORD_MASK + 5)
    assert state.snapshot() == (4,)
    with pytest.raises(StackOverflow):
        state.push(1)
