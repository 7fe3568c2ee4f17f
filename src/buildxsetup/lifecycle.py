"""
Lifecycle of the one buildx builder a job gets.

`setup` runs in the main step: it detects the mode, acquires buildx, creates
and boots the builder, inspects it and publishes outputs. `cleanup` runs in
a later, separate process and only knows what setup recorded in the state
store. Anything setup creates is recorded before setup moves on, so cleanup
can undo it even when setup dies halfway.
"""

import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Set

from . import constants
from .auth import set_credentials
from .buildx import BuildxTool, ExecutionMode, get_command, get_config_file, get_config_inline
from .buildx.inspect import Builder
from .buildx.source import is_valid_url
from .constants import Driver
from .context import Inputs, docker_config_home, new_tmp_dir
from .engine import DockerEngine
from .exceptions import DiagnosticError, UnsupportedModeError
from .outputs import OutputPublisher
from .rules import satisfies
from .state import StateStore
from .utils.logger import log_group
from .utils.process import Executor

logger = logging.getLogger(__name__)


def new_builder_name() -> str:
    return f"{constants.BUILDER_NAME_PREFIX}{uuid.uuid4()}"


class BuilderLifecycle:
    """Setup and cleanup of a builder, wired to its collaborators."""

    # names handed out by this process, never handed out twice
    _issued_names: Set[str] = set()

    def __init__(
        self,
        state: StateStore,
        outputs: OutputPublisher,
        executor: Executor,
        engine: DockerEngine,
        tool: BuildxTool,
        job_debug: bool = False,
        env: Optional[Mapping[str, str]] = None,
        tmp_dir: Optional[str | os.PathLike] = None,
        name_factory: Callable[[], str] = new_builder_name,
    ):
        self.state = state
        self.outputs = outputs
        self.executor = executor
        self.engine = engine
        self.tool = tool
        self.job_debug = job_debug
        self.env = os.environ if env is None else env
        self._tmp_dir = Path(tmp_dir) if tmp_dir is not None else None
        self.name_factory = name_factory

    @property
    def tmp_dir(self) -> Path:
        if self._tmp_dir is None:
            self._tmp_dir = new_tmp_dir(self.env)
        return self._tmp_dir

    def run(self, inputs_loader: Callable[[], Inputs]) -> None:
        """Dispatch on the phase marker: cleanup in the post step, setup otherwise."""
        if self.state.is_post:
            self.cleanup()
        else:
            self.setup(inputs_loader())

    # ==================== setup ====================

    def setup(self, inputs: Inputs) -> Builder:
        self.state.mark_post()
        config_home = docker_config_home(self.env)

        mode = self._detect_mode()
        self._check_mode(inputs, mode)
        self._acquire(inputs, mode, config_home)

        version = self.tool.get_version(mode)
        with log_group("Buildx version"):
            logger.info(f"buildx {version} ({mode.value})")

        name = self._assign_identity(inputs)
        self.outputs.set_output(constants.OUTPUT_NAME, name)

        if not inputs.is_default_driver:
            self.state.set_builder_name(name)
            credsdir = config_home / "buildx" / "creds" / name
            credsdir.mkdir(parents=True, exist_ok=True)
            self.state.set_creds_dir(credsdir)
            with log_group("Creating a new builder instance"):
                self.executor.exec(self.create_command(inputs, name, version, mode, credsdir))
            with log_group("Booting builder"):
                self.executor.exec(self.bootstrap_command(name, version, mode))

        if inputs.install:
            with log_group("Setting buildx as default builder"):
                self.engine.install_buildx()

        builder = self._inspect_and_publish(name, mode)
        first_node = builder.first_node

        if not mode.standalone and builder.driver == Driver.DOCKER_CONTAINER.value:
            self.state.set_container_name(f"{constants.BUILDKIT_CONTAINER_PREFIX}{first_node.name}")
            self._log_buildkit_versions(builder)

        if self.job_debug or constants.BUILDKITD_DEBUG_FLAG in (first_node.buildkitd_flags or ""):
            self.state.set_debug()
        return builder

    def _detect_mode(self) -> ExecutionMode:
        mode = ExecutionMode.resolve(self.engine.is_available())
        self.state.set_standalone(mode.standalone)
        with log_group("Docker info"):
            if mode.standalone:
                logger.info("Docker info skipped in standalone mode")
            else:
                self.engine.print_info()
        return mode

    def _check_mode(self, inputs: Inputs, mode: ExecutionMode) -> None:
        """Fail before running anything when the inputs need a Docker CLI that isn't there."""
        if not mode.standalone:
            return
        if is_valid_url(inputs.version):
            raise UnsupportedModeError("Cannot build from source without the Docker CLI")
        if inputs.install:
            raise UnsupportedModeError("Cannot set buildx as default builder without the Docker CLI")

    def _acquire(self, inputs: Inputs, mode: ExecutionMode, config_home: Path) -> None:
        """Build from a source URL, install a release, or keep the buildx already there."""
        if is_valid_url(inputs.version):
            with log_group("Build and install buildx"):
                self.tool.build(inputs.version, config_home, mode)
        elif inputs.version or not self.tool.is_available(mode):
            # an explicit version is always (re)installed, even if one is present
            dest = self.tmp_dir if mode.standalone else config_home
            with log_group("Download and install buildx"):
                self.tool.install(inputs.version or "latest", dest, mode)
        else:
            logger.debug("Using the buildx already installed")

    def _assign_identity(self, inputs: Inputs) -> str:
        if inputs.is_default_driver:
            return constants.DEFAULT_BUILDER_NAME
        name = self.name_factory()
        while name in self._issued_names:
            name = self.name_factory()
        self._issued_names.add(name)
        return name

    def create_command(self, inputs: Inputs, name: str, version: str, mode: ExecutionMode, credsdir: Path):
        driver = inputs.driver.value
        driver_opts: List[str] = list(inputs.driver_opts)
        driver_opts.extend(set_credentials(credsdir, 0, driver, inputs.endpoint, env=self.env))

        args = ["create", "--name", name, "--driver", driver]
        if satisfies(version, constants.CAP_DRIVER_OPTS):
            for opt in driver_opts:
                args.extend(["--driver-opt", opt])
            if inputs.driver is not Driver.REMOTE and inputs.buildkitd_flags:
                args.extend(["--buildkitd-flags", inputs.buildkitd_flags])
        if inputs.use:
            args.append("--use")
        if inputs.endpoint:
            args.append(inputs.endpoint)
        if inputs.driver is not Driver.REMOTE:
            if inputs.config:
                args.extend(["--config", get_config_file(inputs.config)])
            elif inputs.config_inline:
                args.extend(["--config", get_config_inline(inputs.config_inline, self.tmp_dir)])
        return get_command(args, mode)

    def bootstrap_command(self, name: str, version: str, mode: ExecutionMode):
        args = ["inspect", "--bootstrap"]
        if satisfies(version, constants.CAP_BOOTSTRAP_BUILDER):
            args.extend(["--builder", name])
        return get_command(args, mode)

    def _inspect_and_publish(self, name: str, mode: ExecutionMode) -> Builder:
        with log_group("Inspect builder"):
            builder = self.tool.inspect(name, mode)
            first_node = builder.first_node
            logger.info(builder.to_json())
            self.outputs.set_output(constants.OUTPUT_DRIVER, builder.driver)
            self.outputs.set_output(constants.OUTPUT_PLATFORMS, first_node.platforms)
            self.outputs.set_output(constants.OUTPUT_NODES, builder.nodes_json())
            # TODO: drop endpoint/status/flags once workflows have moved to 'nodes'
            self.outputs.set_output(constants.OUTPUT_ENDPOINT, first_node.endpoint)
            self.outputs.set_output(constants.OUTPUT_STATUS, first_node.status)
            self.outputs.set_output(constants.OUTPUT_FLAGS, first_node.buildkitd_flags)
        return builder

    def _log_buildkit_versions(self, builder: Builder) -> None:
        with log_group("BuildKit version"):
            for node in builder.nodes:
                try:
                    version = self.engine.buildkit_version(f"{constants.BUILDKIT_CONTAINER_PREFIX}{node.name}")
                    logger.info(f"{node.name}: {version}")
                except DiagnosticError as e:
                    logger.warning(f"{node.name}: {e}")

    # ==================== cleanup ====================

    def cleanup(self) -> None:
        """Undo what setup recorded. Each step runs even if another one failed."""
        self._best_effort("container logs", self._capture_container_logs)
        self._best_effort("builder removal", self._remove_builder)
        self._best_effort("credentials cleanup", self._remove_credentials)

    def _best_effort(self, what: str, step: Callable[[], None]) -> None:
        try:
            step()
        except Exception as e:
            logger.warning(f"{what} failed: {e}")

    def _capture_container_logs(self) -> None:
        container = self.state.container_name
        if not (self.state.debug and container):
            return
        with log_group("BuildKit container logs"):
            ok, text = self.engine.container_logs(container)
            if ok:
                if text.strip():
                    logger.info(text.rstrip())
            elif text:
                logger.warning(text)

    def _remove_builder(self) -> None:
        name = self.state.builder_name
        if not name:
            return
        with log_group("Removing builder"):
            cmd = get_command(["rm", name], ExecutionMode.from_flag(self.state.standalone))
            res = self.executor.exec(cmd, ignore_return_code=True)
            if res.failure_text():
                logger.warning(res.failure_text())

    def _remove_credentials(self) -> None:
        credsdir = self.state.creds_dir
        if not credsdir or not Path(credsdir).exists():
            return
        logger.info("Cleaning up credentials")
        shutil.rmtree(credsdir)
