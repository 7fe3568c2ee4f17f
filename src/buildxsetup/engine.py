"""
The host Docker engine, reached through python-on-whales.

Only reachability and a few diagnostics live here; buildx itself is always
driven through `buildx.command.get_command` so it works without Docker too.
"""

import logging
from typing import Optional, Tuple

from python_on_whales import DockerClient
from python_on_whales.client_config import ClientNotFoundError
from python_on_whales.exceptions import DockerException

from .exceptions import DiagnosticError, ExternalCommandError

logger = logging.getLogger(__name__)


class DockerEngine:

    def __init__(self, client: Optional[DockerClient] = None):
        self._client = client

    @property
    def client(self) -> DockerClient:
        if self._client is None:
            self._client = DockerClient()
        return self._client

    def is_available(self) -> bool:
        """True when the Docker CLI is installed and its daemon answers. Never raises."""
        try:
            self.client.version()
            return True
        except (DockerException, ClientNotFoundError) as e:
            logger.debug(f"Docker engine not reachable: {e}")
            return False

    def print_info(self) -> None:
        """Log client/server versions and a short system summary."""
        try:
            version = self.client.version()
            info = self.client.system.info()
        except DockerException as e:
            logger.warning(f"Cannot read Docker info: {e}")
            return
        if version.client is not None:
            logger.info(f"Client: {version.client.version} (API {version.client.api_version})")
        if version.server is not None:
            logger.info(f"Server: {version.server.version} (API {version.server.api_version})")
        logger.info(
            f"OS: {info.operating_system}, kernel {info.kernel_version}, "
            f"{info.n_cpu} CPUs, storage driver {info.driver}"
        )

    def install_buildx(self) -> None:
        """Make `docker build` an alias of `docker buildx build`."""
        try:
            self.client.buildx.install()
        except DockerException as e:
            raise ExternalCommandError(
                f"'docker buildx install' failed: {e}",
                exit_code=getattr(e, "return_code", None),
                stderr=getattr(e, "stderr", "") or "",
            ) from e

    def buildkit_version(self, container: str) -> str:
        """'<image> => <buildkitd --version>' for a BuildKit container."""
        try:
            image = self.client.container.inspect(container).config.image
        except DockerException as e:
            raise DiagnosticError(f"Cannot inspect {container}: {e}") from e
        if not image:
            raise DiagnosticError(f"No image recorded for {container}")
        try:
            out = self.client.run(image, ["--version"], remove=True)
        except DockerException as e:
            raise DiagnosticError(f"Cannot run {image} --version: {e}") from e
        return f"{image} => {(out or '').strip()}"

    def container_logs(self, container: str) -> Tuple[bool, str]:
        """(ok, text): the container's logs, or the error text when they can't be read."""
        try:
            return True, self.client.container.logs(container)
        except DockerException as e:
            return False, (getattr(e, "stderr", None) or str(e)).strip()
