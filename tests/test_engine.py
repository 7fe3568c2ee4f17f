import logging
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from python_on_whales.client_config import ClientNotFoundError
from python_on_whales.components.system.models import SystemInfo
from python_on_whales.exceptions import DockerException

from buildxsetup.engine import DockerEngine
from buildxsetup.exceptions import DiagnosticError, ExternalCommandError


def docker_error(stderr="Cannot connect to the Docker daemon"):
    return DockerException(["docker", "version"], 1, stdout=b"", stderr=stderr.encode())


@pytest.fixture
def client():
    return MagicMock()


class TestAvailability:

    def test_available(self, client):
        assert DockerEngine(client).is_available() is True

    def test_daemon_down(self, client):
        client.version.side_effect = docker_error()
        assert DockerEngine(client).is_available() is False

    def test_no_cli(self, client):
        client.version.side_effect = ClientNotFoundError()
        assert DockerEngine(client).is_available() is False


class TestInstall:

    def test_install(self, client):
        DockerEngine(client).install_buildx()
        client.buildx.install.assert_called_once_with()

    def test_install_failure(self, client):
        client.buildx.install.side_effect = docker_error("unknown command")
        with pytest.raises(ExternalCommandError):
            DockerEngine(client).install_buildx()


class TestDiagnostics:

    def test_buildkit_version(self, client):
        client.container.inspect.return_value.config.image = "moby/buildkit:buildx-stable-1"
        client.run.return_value = "buildkitd github.com/moby/buildkit v0.10.4 a2ba6869\n"

        version = DockerEngine(client).buildkit_version("buildx_buildkit_b0")

        assert version == "moby/buildkit:buildx-stable-1 => buildkitd github.com/moby/buildkit v0.10.4 a2ba6869"
        client.run.assert_called_once_with("moby/buildkit:buildx-stable-1", ["--version"], remove=True)

    def test_buildkit_version_no_container(self, client):
        client.container.inspect.side_effect = docker_error("No such container")
        with pytest.raises(DiagnosticError):
            DockerEngine(client).buildkit_version("buildx_buildkit_b0")

    def test_logs(self, client):
        client.container.logs.return_value = "started"
        assert DockerEngine(client).container_logs("c") == (True, "started")

    def test_logs_failure(self, client):
        client.container.logs.side_effect = docker_error("No such container: c")
        ok, text = DockerEngine(client).container_logs("c")
        assert ok is False
        assert text

    def test_print_info(self, client, caplog):
        client.version.return_value = SimpleNamespace(
            client=SimpleNamespace(version="24.0.7", api_version="1.43"),
            server=SimpleNamespace(version="24.0.7", api_version="1.43"),
        )
        client.system.info.return_value = SystemInfo(
            OperatingSystem="Ubuntu 22.04", KernelVersion="6.5", NCPU=4, Driver="overlay2",
        )

        with caplog.at_level(logging.INFO):
            DockerEngine(client).print_info()

        messages = [r.getMessage() for r in caplog.records]
        assert "Server: 24.0.7 (API 1.43)" in messages
        assert "OS: Ubuntu 22.04, kernel 6.5, 4 CPUs, storage driver overlay2" in messages

    def test_print_info_tolerates_errors(self, client):
        client.system.info.side_effect = docker_error()
        DockerEngine(client).print_info()
