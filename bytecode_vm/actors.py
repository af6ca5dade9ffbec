"""
Collaborators the interpreter drives: actors addressed by id, and the
effect dispatcher for sounds and particles.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Protocol, Tuple

import structlog

logger = structlog.get_logger(__name__)


class Actor(Protocol):
    """A game entity whose attributes bytecode can read and write."""

    def set_health(self, value: int) -> None: ...

    def set_wisdom(self, value: int) -> None: ...

    def set_agility(self, value: int) -> None: ...

    def get_health(self) -> int: ...

    def get_wisdom(self) -> int: ...

    def get_agility(self) -> int: ...


class EffectDispatcher(Protocol):
    """Fire-and-forget audiovisual effects."""

    def play_sound(self, sound_id: int) -> None: ...

    def spawn_particles(self, particle_id: int) -> None: ...


ActorTable = Mapping[int, Actor]


@dataclass
class Wizard:
    """Reference actor with the three attributes the instruction set knows about."""

    name: str = "wizard"
    health: int = 0
    wisdom: int = 0
    agility: int = 0

    def set_health(self, value: int) -> None:
        logger.debug("Setting health", actor=self.name, value=value)
        self.health = value

    def set_wisdom(self, value: int) -> None:
        logger.debug("Setting wisdom", actor=self.name, value=value)
        self.wisdom = value

    def set_agility(self, value: int) -> None:
        logger.debug("Setting agility", actor=self.name, value=value)
        self.agility = value

    def get_health(self) -> int:
        return self.health

    def get_wisdom(self) -> int:
        return self.wisdom

    def get_agility(self) -> int:
        return self.agility

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "health": self.health,
            "wisdom": self.wisdom,
            "agility": self.agility,
        }


@dataclass
class RecordingEffects:
    """Effect dispatcher that remembers every call as ``(kind, id)``."""

    calls: List[Tuple[str, int]] = field(default_factory=list)

    def play_sound(self, sound_id: int) -> None:
        self.calls.append(("play_sound", sound_id))

    def spawn_particles(self, particle_id: int) -> None:
        self.calls.append(("spawn_particles", particle_id))


class LoggingEffects:
    """Effect dispatcher that only logs; handy when no audio/render backend exists."""

    def __init__(self, log=None):
        self.log = log or logger

    def play_sound(self, sound_id: int) -> None:
        self.log.info("playSound", sound_id=sound_id)

    def spawn_particles(self, particle_id: int) -> None:
        self.log.info("spawnParticles", particle_id=particle_id)


def make_wizards(count: int) -> dict:
    """Actor table of ``count`` fresh wizards keyed 0..count-1."""
    return {i: Wizard(name=f"wizard_{i}") for i in range(count)}
