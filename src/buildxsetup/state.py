"""
Cross-phase state: the only channel between the setup and cleanup invocations.

Setup writes each key at most once; the runner hands the values back to the
later cleanup process as `STATE_<key>` environment variables. When no runner
does that (local use with `--state-file`), the values are read back from the
state file itself. Nothing here keeps values in process memory for reading.
"""

import logging
import os
import re
import sys
import uuid
from pathlib import Path
from typing import Dict, Mapping, Optional, Set

from . import constants
from .constants import StateKey
from .exceptions import StateError

logger = logging.getLogger(__name__)

_HEREDOC_START = re.compile(r"^(?P<key>[^=<\s]+)<<(?P<delim>\S+)$")


def parse_state_file(text: str) -> Dict[str, str]:
    """Read `key=value` lines and `key<<DELIM ... DELIM` blocks."""
    values: Dict[str, str] = {}
    lines = text.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i]
        heredoc = _HEREDOC_START.match(line)
        if heredoc:
            delim = heredoc.group("delim")
            body = []
            i += 1
            while i < len(lines) and lines[i] != delim:
                body.append(lines[i])
                i += 1
            values[heredoc.group("key")] = "\n".join(body)
        elif "=" in line:
            key, _, value = line.partition("=")
            values[key] = value
        i += 1
    return values


class StateStore:

    def __init__(self, state_file: Optional[str | os.PathLike] = None, env: Optional[Mapping[str, str]] = None):
        self.env = os.environ if env is None else env
        if state_file is None:
            state_file = self.env.get(constants.ENV_STATE_FILE) or None
        self.state_file = Path(state_file) if state_file else None
        self._written: Set[str] = set()

    # ---------- raw access ----------

    def save(self, key: StateKey, value: str) -> None:
        name = key.value
        if name in self._written:
            raise StateError(f"State '{name}' has already been recorded")
        self._written.add(name)
        value = str(value)
        logger.debug(f"Saving state {name}={value}")
        if self.state_file is not None:
            delim = f"ghadelimiter_{uuid.uuid4()}"
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, "a", encoding="utf-8") as f:
                f.write(f"{name}<<{delim}\n{value}\n{delim}\n")
        else:
            sys.stdout.write(f"::save-state name={name}::{value}\n")
            sys.stdout.flush()

    def get(self, key: StateKey) -> str:
        """The recorded value, or '' when the key was never written."""
        name = key.value
        from_env = self.env.get(f"{constants.STATE_ENV_PREFIX}{name}")
        if from_env is not None:
            return from_env
        return self._file_values().get(name, "")

    def _file_values(self) -> Dict[str, str]:
        if self.state_file is None or not self.state_file.is_file():
            return {}
        return parse_state_file(self.state_file.read_text(encoding="utf-8"))

    # ---------- phase marker ----------

    @property
    def is_post(self) -> bool:
        return bool(self.get(StateKey.IS_POST))

    def mark_post(self) -> None:
        """Recorded at the start of setup so the next invocation runs cleanup."""
        self.save(StateKey.IS_POST, "true")

    # ---------- typed fields ----------

    def set_standalone(self, standalone: bool) -> None:
        self.save(StateKey.STANDALONE, "true" if standalone else "false")

    @property
    def standalone(self) -> bool:
        return self.get(StateKey.STANDALONE).strip().lower() == "true"

    def set_builder_name(self, name: str) -> None:
        self.save(StateKey.BUILDER_NAME, name)

    @property
    def builder_name(self) -> str:
        return self.get(StateKey.BUILDER_NAME)

    def set_creds_dir(self, path: str | os.PathLike) -> None:
        self.save(StateKey.CREDS_DIR, str(path))

    @property
    def creds_dir(self) -> str:
        return self.get(StateKey.CREDS_DIR)

    def set_container_name(self, name: str) -> None:
        self.save(StateKey.CONTAINER_NAME, name)

    @property
    def container_name(self) -> str:
        return self.get(StateKey.CONTAINER_NAME)

    def set_debug(self) -> None:
        self.save(StateKey.DEBUG, "true")

    @property
    def debug(self) -> bool:
        return self.get(StateKey.DEBUG).strip().lower() == "true"
