import uuid
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from buildxsetup.buildx.inspect import Builder, parse_inspect
from buildxsetup.exceptions import DiagnosticError, ExternalCommandError
from buildxsetup.lifecycle import BuilderLifecycle
from buildxsetup.outputs import OutputPublisher
from buildxsetup.state import StateStore
from buildxsetup.utils.process import Command, ExecResult


INSPECT_DOCKER_CONTAINER = """\
Name:   {name}
Driver: docker-container

Nodes:
Name:      {name}0
Endpoint:  unix:///var/run/docker.sock
Status:    running
Flags:     --allow-insecure-entitlement security.insecure --allow-insecure-entitlement network.host
Buildkit:  v0.10.4
Platforms: linux/amd64, linux/amd64/v2, linux/386
"""

INSPECT_DOCKER = """\
Name:   default
Driver: docker

Nodes:
Name:      default
Endpoint:  default
Status:    running
Buildkit:  20.10.17
Platforms: linux/amd64, linux/386
"""


class FakeExecutor:
    """Records commands; answers with scripted results keyed by the buildx sub-command."""

    def __init__(self, results: Optional[Dict[str, ExecResult]] = None):
        self.commands: List[Command] = []
        self.results = results or {}

    def exec(self, command: Command, ignore_return_code: bool = False, silent: bool = False) -> ExecResult:
        self.commands.append(command)
        args = command.args[1:] if command.program == "docker" and command.args[:1] == ["buildx"] else command.args
        key = args[0] if args else ""
        result = self.results.get(key, ExecResult(0))
        if not ignore_return_code and result.exit_code != 0:
            raise ExternalCommandError(f"'{command}' failed", exit_code=result.exit_code, stderr=result.stderr)
        return result

    def subcommands(self) -> List[str]:
        out = []
        for cmd in self.commands:
            args = cmd.args[1:] if cmd.program == "docker" else cmd.args
            out.append(args[0] if args else "")
        return out

    def find(self, subcommand: str) -> Optional[Command]:
        for cmd, sub in zip(self.commands, self.subcommands()):
            if sub == subcommand:
                return cmd
        return None


class FakeEngine:
    def __init__(self, available: bool = True):
        self.available = available
        self.installed = False
        self.info_printed = False
        self.versions: Dict[str, str] = {}
        self.logs: Tuple[bool, str] = (True, "buildkitd: started")
        self.log_requests: List[str] = []

    def is_available(self) -> bool:
        return self.available

    def print_info(self) -> None:
        self.info_printed = True

    def install_buildx(self) -> None:
        self.installed = True

    def buildkit_version(self, container: str) -> str:
        if container not in self.versions:
            raise DiagnosticError(f"Cannot inspect {container}")
        return self.versions[container]

    def container_logs(self, container: str) -> Tuple[bool, str]:
        self.log_requests.append(container)
        return self.logs


class FakeTool:
    def __init__(self, version: str = "0.9.1", available: bool = True, inspect_text: Optional[str] = None):
        self.version = version
        self.available = available
        self.inspect_text = inspect_text
        self.installs: List[tuple] = []
        self.builds: List[tuple] = []
        self.inspected: List[str] = []

    def is_available(self, mode) -> bool:
        return self.available

    def get_version(self, mode) -> str:
        return self.version

    def install(self, version, dest, mode):
        self.installs.append((version, Path(dest), mode))

    def build(self, source, dest, mode):
        self.builds.append((source, Path(dest), mode))

    def inspect(self, name, mode) -> Builder:
        self.inspected.append(name)
        text = self.inspect_text or INSPECT_DOCKER_CONTAINER
        return parse_inspect(text.format(name=name))


def unique_name() -> str:
    return f"builder-{uuid.uuid4()}"


@pytest.fixture
def env(tmp_path):
    return {"DOCKER_CONFIG": str(tmp_path / "docker-config")}


@pytest.fixture
def state_file(tmp_path) -> Path:
    return tmp_path / "state.txt"


@pytest.fixture
def output_file(tmp_path) -> Path:
    return tmp_path / "outputs.txt"


@pytest.fixture
def make_lifecycle(tmp_path, env, state_file, output_file):
    """Build a lifecycle wired to fakes; keyword args override the defaults."""
    def _make(
        executor: Optional[FakeExecutor] = None,
        engine: Optional[FakeEngine] = None,
        tool: Optional[FakeTool] = None,
        state: Optional[StateStore] = None,
        job_debug: bool = False,
        name_factory=unique_name,
    ) -> BuilderLifecycle:
        work = tmp_path / "work"
        work.mkdir(exist_ok=True)
        return BuilderLifecycle(
            state=state if state is not None else StateStore(state_file, env={}),
            outputs=OutputPublisher(output_file, env={}),
            executor=executor if executor is not None else FakeExecutor(),
            engine=engine if engine is not None else FakeEngine(),
            tool=tool if tool is not None else FakeTool(),
            job_debug=job_debug,
            env=env,
            tmp_dir=work,
            name_factory=name_factory,
        )
    return _make
