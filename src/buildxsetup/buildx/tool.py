"""
Acquiring and querying the buildx binary.

buildx is either a standalone executable (`<dest>/bin/buildx`, put on PATH)
or a Docker CLI plugin (`<docker config>/cli-plugins/docker-buildx`).
Binaries are kept in a tool cache keyed by version so a second setup on the
same runner does not download or build again.
"""

import logging
import os
import platform
import shutil
from pathlib import Path
from typing import Optional

from .. import constants
from ..context import new_tmp_dir
from ..exceptions import ConfigurationError, InspectError, ToolInstallError
from ..rules import parse_version
from ..utils.process import Executor
from .command import ExecutionMode, get_command
from .inspect import Builder, parse_inspect
from .release import ReleaseClient
from .source import resolve_version_spec

logger = logging.getLogger(__name__)


def _binary_name(base: str) -> str:
    return f"{base}.exe" if platform.system().lower() == "windows" else base


class ToolCache:
    """<root>/buildx/<version>/<arch>/docker-buildx"""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)

    def _dir(self, version: str) -> Path:
        return self.root / constants.TOOL_CACHE_NAME / version / platform.machine().lower()

    def find(self, version: str) -> Optional[Path]:
        binary = self._dir(version) / _binary_name(constants.BUILDX_PLUGIN_NAME)
        if binary.is_file():
            logger.debug(f"Found buildx {version} in tool cache: {binary}")
            return binary
        return None

    def path_for(self, version: str) -> Path:
        return self._dir(version) / _binary_name(constants.BUILDX_PLUGIN_NAME)

    def cache_file(self, source: Path, version: str) -> Path:
        if not source.is_file():
            raise ToolInstallError(f"Cannot cache buildx {version}: '{source}' does not exist")
        target = self.path_for(version)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        logger.debug(f"Cached buildx {version} at {target}")
        return target


class BuildxTool:
    """Everything that needs the buildx binary itself."""

    def __init__(
        self,
        executor: Executor,
        tmp_dir: Optional[str | os.PathLike] = None,
        tool_cache: Optional[ToolCache] = None,
        releases: Optional[ReleaseClient] = None,
        path_file: Optional[str] = None,
    ):
        self.executor = executor
        self._tmp_dir = Path(tmp_dir) if tmp_dir is not None else None
        self._tool_cache = tool_cache
        self.releases = releases
        self.path_file = path_file if path_file is not None else os.environ.get(constants.ENV_PATH_FILE)

    @property
    def tmp_dir(self) -> Path:
        if self._tmp_dir is None:
            self._tmp_dir = new_tmp_dir()
        return self._tmp_dir

    @property
    def tool_cache(self) -> ToolCache:
        if self._tool_cache is None:
            self._tool_cache = ToolCache(os.environ.get(constants.ENV_TOOL_CACHE) or self.tmp_dir / "tool-cache")
        return self._tool_cache

    # ---------- queries ----------

    def is_available(self, mode: ExecutionMode) -> bool:
        cmd = get_command([], mode)
        res = self.executor.exec(cmd, ignore_return_code=True, silent=True)
        if res.failure_text():
            return False
        return res.ok

    def get_version(self, mode: ExecutionMode) -> str:
        cmd = get_command(["version"], mode)
        res = self.executor.exec(cmd, ignore_return_code=True, silent=True)
        if res.failure_text():
            raise ToolInstallError(res.failure_text(), exit_code=res.exit_code, stderr=res.stderr)
        return parse_version(res.stdout.strip())

    def inspect(self, name: str, mode: ExecutionMode) -> Builder:
        cmd = get_command(["inspect", name], mode)
        res = self.executor.exec(cmd, ignore_return_code=True, silent=True)
        if res.failure_text():
            raise InspectError(res.failure_text(), exit_code=res.exit_code, stderr=res.stderr)
        builder = parse_inspect(res.stdout)
        if not builder.nodes:
            raise InspectError(f"Builder '{name}' has no nodes")
        return builder

    # ---------- acquisition ----------

    def install(self, version: str, dest: str | os.PathLike, mode: ExecutionMode) -> Path:
        """Download the requested release (or 'latest') and place it for `mode`."""
        if self.releases is None:
            self.releases = ReleaseClient()
        release = self.releases.get_release(version)
        resolved = release.version
        binary = self.tool_cache.find(resolved)
        if binary is None:
            downloaded = self.releases.download(resolved, self.tmp_dir / "download" / _binary_name(constants.BUILDX_PLUGIN_NAME))
            binary = self.tool_cache.cache_file(downloaded, resolved)
        return self._place(binary, Path(dest), mode)

    def build(self, source: str, dest: str | os.PathLike, mode: ExecutionMode) -> Path:
        """Build buildx from `repo#ref` with whichever buildx is already usable."""
        vspec = resolve_version_spec(source)
        logger.debug(f"Tool version spec {vspec}")
        binary = self.tool_cache.find(vspec)
        if binary is None:
            build_mode = self._build_mode(mode)
            out_dir = (self.tmp_dir / "out").as_posix()
            cmd = get_command([
                "build",
                "--target", constants.BUILD_TARGET,
                "--build-arg", "BUILDKIT_CONTEXT_KEEP_GIT_DIR=1",
                "--output", f"type=local,dest={out_dir}",
                source,
            ], build_mode)
            res = self.executor.exec(cmd, ignore_return_code=True)
            if res.failure_text():
                logger.warning(res.failure_text())
            binary = self.tool_cache.cache_file(Path(out_dir) / _binary_name("buildx"), vspec)
        return self._place(binary, Path(dest), mode)

    def _build_mode(self, mode: ExecutionMode) -> ExecutionMode:
        standalone_found = self.is_available(ExecutionMode.STANDALONE)
        plugin_found = self.is_available(ExecutionMode.PLUGIN)
        if mode.standalone and standalone_found:
            return ExecutionMode.STANDALONE
        if not mode.standalone and plugin_found:
            return ExecutionMode.PLUGIN
        if standalone_found:
            return ExecutionMode.STANDALONE
        if plugin_found:
            return ExecutionMode.PLUGIN
        raise ConfigurationError("docker buildx is required to build buildx from source")

    def _place(self, binary: Path, dest: Path, mode: ExecutionMode) -> Path:
        if mode.standalone:
            target_dir = dest / "bin"
            target = target_dir / _binary_name(constants.BUILDX_BIN)
        else:
            target_dir = dest / constants.PLUGINS_SUBDIR
            target = target_dir / _binary_name(constants.BUILDX_PLUGIN_NAME)
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(binary, target)
        target.chmod(0o755)
        if mode.standalone:
            self._add_path(target_dir)
        logger.info(f"buildx installed to {target}")
        return target

    def _add_path(self, directory: Path) -> None:
        os.environ["PATH"] = f"{directory}{os.pathsep}{os.environ.get('PATH', '')}"
        if self.path_file:
            with open(self.path_file, "a", encoding="utf-8") as f:
                f.write(f"{directory}\n")
