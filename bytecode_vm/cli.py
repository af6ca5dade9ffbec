#!/usr/bin/env python3
"""
Command line harness for the game bytecode VM.

    bytecode-vm assemble heal.vmasm -o heal.json
    bytecode-vm disassemble heal.json --offsets
    bytecode-vm check heal.vmasm
    bytecode-vm run heal.vmasm --wizards 2 --format yaml
"""

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

import structlog
import yaml

from .actors import RecordingEffects, Wizard, make_wizards
from .analysis.stack_analyzer import analyze_stack
from .assembler import format_program, parse_assembly
from .config import LOG_FORMATS, LOG_LEVELS, load_config
from .core.errors import BytecodeVMError, ConfigError, ExecutionError
from .core.instruction import Program
from .core.opcodes import WORD_MASK
from .disassembler import assemble, disassemble
from .interpreter import Interpreter
from .logging_config import configure_logging

logger = structlog.get_logger(__name__)

DEFAULT_WIZARDS = 1


def load_program(path: str, words: bool = False) -> Program:
    """
    Load a program from an assembly file or a JSON word list.

    Files ending in ``.json`` are always read as word lists.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        AssemblyError / DecodeError: If the contents are malformed
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Program file not found: {path}")

    with open(path, "r") as f:
        text = f.read()

    if words or path.endswith(".json"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON word list in {path}: {e}") from e
        if not isinstance(data, list):
            raise ConfigError(f"{path} must contain a JSON list of words")
        return disassemble(data)
    return parse_assembly(text)


def load_actors(path: str) -> Dict[int, Wizard]:
    """Read an actor table from YAML (or JSON): ``{id: {name, health, wisdom, agility}}``."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Actors file not found: {path}")
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Actors file {path} must contain a mapping of id to attributes")

    actors = {}
    for key, attrs in data.items():
        try:
            actor_id = int(key)
        except (TypeError, ValueError):
            raise ConfigError(f"Actor id must be an integer, got {key!r}") from None
        attrs = attrs or {}
        try:
            actors[actor_id] = Wizard(
                name=str(attrs.get("name", f"wizard_{actor_id}")),
                health=_attribute(attrs, "health", actor_id),
                wisdom=_attribute(attrs, "wisdom", actor_id),
                agility=_attribute(attrs, "agility", actor_id),
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid attributes for actor {actor_id}: {attrs!r}") from e
    return actors


def _attribute(attrs: Dict[str, Any], key: str, actor_id: int) -> int:
    # Stack values are unsigned words; anything else would wrap on GET_*
    value = int(attrs.get(key, 0))
    if not 0 <= value <= WORD_MASK:
        raise ConfigError(f"{key} for actor {actor_id} must be in 0..{WORD_MASK}, got {value}")
    return value


def render(data: Any, output_format: str) -> str:
    if output_format == "yaml":
        return yaml.dump(data, default_flow_style=False, sort_keys=False)
    return json.dumps(data, indent=2)


def cmd_assemble(args: argparse.Namespace) -> int:
    program = load_program(args.source)
    words = json.dumps(assemble(program))
    if args.output:
        with open(args.output, "w") as f:
            f.write(words + "\n")
        logger.info("Wrote word stream", path=args.output, instructions=len(program))
    else:
        print(words)
    return 0


def cmd_disassemble(args: argparse.Namespace) -> int:
    program = load_program(args.source, words=True)
    sys.stdout.write(format_program(program, with_offsets=args.offsets))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    program = load_program(args.source, words=args.words)
    report = analyze_stack(program)
    data = {
        "instructions": len(program),
        "max_depth": report.max_depth,
        "final_height": report.final_height,
        "underflow_at": report.underflow_at,
        "ok": report.ok and report.max_depth <= args.config.max_stack_depth,
    }
    print(render(data, args.format))
    return 0 if data["ok"] else 1


def cmd_run(args: argparse.Namespace) -> int:
    program = load_program(args.source, words=args.words)
    actors = load_actors(args.actors) if args.actors else make_wizards(args.wizards)
    effects = RecordingEffects()
    interpreter = Interpreter(args.config)

    data: Dict[str, Any] = {"status": "ok"}
    exit_code = 0
    try:
        result = interpreter.execute(program, actors, effects)
        data["stack"] = list(result.stack)
        data["steps"] = result.steps
    except ExecutionError as e:
        data["status"] = "error"
        data["error"] = {"type": type(e).__name__, "message": e.message, "pc": e.pc}
        exit_code = 1

    data["actors"] = {actor_id: actor.to_dict() for actor_id, actor in sorted(actors.items())}
    data["effects"] = [{"effect": kind, "id": effect_id} for kind, effect_id in effects.calls]
    print(render(data, args.format))
    return exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytecode-vm",
        description="Assemble, inspect and run game bytecode programs",
    )
    parser.add_argument("--config", dest="config_file", help="YAML configuration file")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None,
                        help="Logging level (default: INFO)")
    parser.add_argument("--log-format", choices=LOG_FORMATS, default=None,
                        help="Log renderer (default: console)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p_asm = sub.add_parser("assemble", help="Assemble source text into a JSON word list")
    p_asm.add_argument("source", help="Assembly source file")
    p_asm.add_argument("--output", "-o", help="Write words here instead of stdout")
    p_asm.set_defaults(func=cmd_assemble)

    p_dis = sub.add_parser("disassemble", help="List a JSON word list as assembly")
    p_dis.add_argument("source", help="JSON word list file")
    p_dis.add_argument("--offsets", action="store_true", help="Annotate each line with its pc")
    p_dis.set_defaults(func=cmd_disassemble)

    for name, func, help_text in (
        ("check", cmd_check, "Statically check stack usage"),
        ("run", cmd_run, "Execute a program against a table of wizards"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("source", help="Assembly source or JSON word list")
        p.add_argument("--words", action="store_true",
                       help="Treat the source as a JSON word list")
        p.add_argument("--max-stack", type=int, default=None,
                       help="Maximum operand stack depth")
        p.add_argument("--format", choices=["json", "yaml"], default="json",
                       help="Output format (default: json)")
        p.set_defaults(func=func)

    run_parser = sub.choices["run"]
    run_parser.add_argument("--wizards", type=int, default=DEFAULT_WIZARDS,
                            help="Number of default wizards in the actor table")
    run_parser.add_argument("--actors", help="YAML/JSON actor table file")
    run_parser.add_argument("--max-steps", type=int, default=None,
                            help="Abort after this many instructions")
    run_parser.add_argument("--verify", action="store_true", default=None,
                            help="Reject programs that fail the static stack check")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        args.config = load_config(
            args.config_file,
            max_stack_depth=getattr(args, "max_stack", None),
            max_steps=getattr(args, "max_steps", None),
            verify=getattr(args, "verify", None),
            log_level="DEBUG" if args.verbose else args.log_level,
            log_format=args.log_format,
        )
    except ConfigError as e:
        parser.error(str(e))

    configure_logging(args.config.log_level, args.config.log_format)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard exit code for Ctrl+C
    except (FileNotFoundError, BytecodeVMError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
