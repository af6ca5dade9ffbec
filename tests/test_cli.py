import json

import pytest
import yaml

from bytecode_vm.cli import load_actors, load_program, main
from bytecode_vm.core.errors import ConfigError, DecodeError
from bytecode_vm.core.opcodes import WORD_MASK, Opcode

HEAL_SOURCE = """\
LITERAL 0
GET_HEALTH
LITERAL 0
GET_AGILITY
LITERAL 0
GET_WISDOM
ADD
LITERAL 2
DIVIDE
ADD
LITERAL 0
SET_HEALTH
LITERAL 7
PLAY_SOUND
"""

ACTORS_YAML = """\
0:
  name: merlin
  health: 45
  wisdom: 11
  agility: 7
"""


@pytest.fixture
def heal_file(tmp_path):
    path = tmp_path / "heal.vmasm"
    path.write_text(HEAL_SOURCE)
    return str(path)


@pytest.fixture
def actors_file(tmp_path):
    path = tmp_path / "wizards.yaml"
    path.write_text(ACTORS_YAML)
    return str(path)


def run_cli(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, out


def test_run_heal(capsys, heal_file, actors_file):
    code, out = run_cli(capsys, "run", heal_file, "--actors", actors_file)
    data = json.loads(out)

    assert code == 0
    assert data["status"] == "ok"
    assert data["stack"] == []
    assert data["steps"] == 14
    assert data["actors"]["0"]["health"] == 54
    assert data["effects"] == [{"effect": "play_sound", "id": 7}]


def test_run_yaml_output(capsys, tmp_path):
    path = tmp_path / "p.vmasm"
    path.write_text("LITERAL 3\nLITERAL 1\nSET_AGILITY\n")
    code, out = run_cli(capsys, "run", str(path), "--wizards", "2", "--format", "yaml")
    data = yaml.safe_load(out)

    assert code == 0
    assert data["actors"][1]["agility"] == 3
    assert data["actors"][0]["agility"] == 0


def test_run_reports_execution_error(capsys, tmp_path):
    path = tmp_path / "bad.vmasm"
    path.write_text("LITERAL 5\nLITERAL 0\nSET_HEALTH\nLITERAL 5\nLITERAL 9\nSET_HEALTH\n")
    code, out = run_cli(capsys, "run", str(path))
    data = json.loads(out)

    assert code == 1
    assert data["status"] == "error"
    assert data["error"]["type"] == "UnknownActor"
    assert data["error"]["pc"] == 5
    assert data["actors"]["0"]["health"] == 5  # earlier mutation kept


def test_run_max_steps(capsys, heal_file):
    code, out = run_cli(capsys, "run", heal_file, "--max-steps", "3")
    data = json.loads(out)
    assert code == 1
    assert data["error"]["type"] == "StepLimitExceeded"
    assert data["error"]["pc"] == 3


def test_run_verify(capsys, tmp_path):
    path = tmp_path / "under.vmasm"
    path.write_text("LITERAL 1\nLITERAL 0\nSET_HEALTH\nPLAY_SOUND\n")
    code, out = run_cli(capsys, "run", str(path), "--verify")
    data = json.loads(out)
    assert code == 1
    assert data["error"]["type"] == "StackUnderflow"
    assert data["actors"]["0"]["health"] == 0  # rejected before running


def test_assemble_then_disassemble(capsys, tmp_path, heal_file):
    words_path = str(tmp_path / "heal.json")
    code, _ = run_cli(capsys, "assemble", heal_file, "-o", words_path)
    assert code == 0

    with open(words_path) as f:
        words = json.load(f)
    assert words[:3] == [int(Opcode.LITERAL), 0, int(Opcode.GET_HEALTH)]

    code, out = run_cli(capsys, "disassemble", words_path)
    assert code == 0
    assert out == HEAL_SOURCE


def test_assemble_to_stdout(capsys, tmp_path):
    path = tmp_path / "p.vmasm"
    path.write_text("LITERAL 2\nPLAY_SOUND\n")
    code, out = run_cli(capsys, "assemble", str(path))
    assert code == 0
    assert json.loads(out) == [int(Opcode.LITERAL), 2, int(Opcode.PLAY_SOUND)]


def test_run_word_list(capsys, tmp_path):
    path = tmp_path / "p.json"
    path.write_text(json.dumps([int(Opcode.LITERAL), 8, int(Opcode.SPAWN_PARTICLES)]))
    code, out = run_cli(capsys, "run", str(path))
    assert code == 0
    assert json.loads(out)["effects"] == [{"effect": "spawn_particles", "id": 8}]


def test_check(capsys, heal_file, tmp_path):
    code, out = run_cli(capsys, "check", heal_file)
    data = json.loads(out)
    assert code == 0
    assert data["ok"] is True
    assert data["max_depth"] == 3

    path = tmp_path / "under.vmasm"
    path.write_text("LITERAL 1\nADD\n")
    code, out = run_cli(capsys, "check", str(path))
    data = json.loads(out)
    assert code == 1
    assert data["underflow_at"] == 1

    code, out = run_cli(capsys, "check", heal_file, "--max-stack", "2")
    assert code == 1
    assert json.loads(out)["ok"] is False


def test_missing_file(capsys, tmp_path):
    code, out = run_cli(capsys, "run", str(tmp_path / "missing.vmasm"))
    assert code == 1
    assert out == ""


def test_assembly_error_exit_code(capsys, tmp_path):
    path = tmp_path / "bad.vmasm"
    path.write_text("FLY 3\n")
    code, out = run_cli(capsys, "run", str(path))
    assert code == 1
    assert out == ""


def test_bad_config_is_usage_error(tmp_path):
    path = tmp_path / "vm.yaml"
    path.write_text("max_stack_depth: -1\n")
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(path), "run", "x.vmasm"])
    assert exc_info.value.code == 2


def test_load_program_rejects_bad_words(tmp_path):
    path = tmp_path / "p.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(DecodeError):
        load_program(str(path))

    path.write_text('{"not": "a list"}')
    with pytest.raises(ConfigError):
        load_program(str(path))


def test_load_actors_defaults_and_errors(tmp_path):
    path = tmp_path / "actors.yaml"
    path.write_text("3: {health: 10}\n")
    actors = load_actors(str(path))
    assert actors[3].name == "wizard_3"
    assert actors[3].health == 10
    assert actors[3].wisdom == 0

    path.write_text("x: {health: 10}\n")
    with pytest.raises(ConfigError):
        load_actors(str(path))

    path.write_text("0: {health: lots}\n")
    with pytest.raises(ConfigError):
        load_actors(str(path))

    path.write_text("0: {health: [1\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_actors(str(path))


@pytest.mark.parametrize("content", ["0: {health: -5}\n", "0: {wisdom: 18446744073709551616}\n"])
def test_load_actors_rejects_values_outside_word_range(tmp_path, content):
    path = tmp_path / "actors.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError, match="must be in 0.."):
        load_actors(str(path))


def test_load_actors_accepts_word_bounds(tmp_path):
    path = tmp_path / "actors.yaml"
    path.write_text("0: {health: 0, agility: 18446744073709551615}\n")
    actors = load_actors(str(path))
    assert actors[0].agility == WORD_MASK


@pytest.mark.parametrize("content", ["0: {health: [1\n", "0: {health: -5}\n"])
def test_run_with_bad_actors_file_exits_1(capsys, tmp_path, content):
    program = tmp_path / "p.vmasm"
    program.write_text("LITERAL 0\nGET_HEALTH\n")
    actors = tmp_path / "actors.yaml"
    actors.write_text(content)

    code, out = run_cli(capsys, "run", str(program), "--actors", str(actors))
    assert code == 1
    assert out == ""
