import pytest
import structlog

from bytecode_vm.actors import RecordingEffects, Wizard

# Route structlog through stdlib logging so log lines never land on stdout,
# where the CLI tests read program output.
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.KeyValueRenderer(),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)


@pytest.fixture
def wizard():
    return Wizard(name="merlin", health=45, wisdom=11, agility=7)


@pytest.fixture
def actors(wizard):
    return {0: wizard}


@pytest.fixture
def effects():
    return RecordingEffects()
