from enum import Enum
from typing import Sequence

from .. import constants
from ..utils.process import Command


class ExecutionMode(str, Enum):
    """How buildx is reached: as its own binary, or as a Docker CLI plugin."""
    STANDALONE = "standalone"
    PLUGIN = "plugin"

    @classmethod
    def resolve(cls, engine_available: bool) -> "ExecutionMode":
        return cls.PLUGIN if engine_available else cls.STANDALONE

    @classmethod
    def from_flag(cls, standalone: bool) -> "ExecutionMode":
        return cls.STANDALONE if standalone else cls.PLUGIN

    @property
    def standalone(self) -> bool:
        return self is ExecutionMode.STANDALONE


def get_command(args: Sequence[str], mode: ExecutionMode) -> Command:
    """
    The invocation for a buildx sub-command.

    Standalone runs `buildx <args>`; plugin mode runs `docker buildx <args>`.
    """
    if mode.standalone:
        return Command(constants.BUILDX_BIN, list(args))
    return Command(constants.DOCKER_BIN, ["buildx", *args])
