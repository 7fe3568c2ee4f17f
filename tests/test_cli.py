import pytest
from click.testing import CliRunner

from buildxsetup import cli as cli_module
from buildxsetup.cli import cli
from buildxsetup.state import StateStore

from conftest import FakeEngine, FakeExecutor


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli_module, "setup_logging", lambda *args, **kwargs: None)
    for name in ("INPUT_VERSION", "INPUT_DRIVER", "INPUT_INSTALL", "INPUT_USE", "GITHUB_STATE", "GITHUB_OUTPUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def wire(monkeypatch, make_lifecycle):
    """Make the CLI build its lifecycle from fakes and the state file given with -s."""
    def _wire(**kwargs):
        def build(ctx):
            return make_lifecycle(state=StateStore(ctx.obj["state_file"], env={}), **kwargs)
        monkeypatch.setattr(cli_module, "build_lifecycle", build)
    return _wire


class TestCli:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "buildxsetup" in result.output

    def test_setup(self, runner, wire, state_file):
        executor = FakeExecutor()
        wire(executor=executor)

        result = runner.invoke(cli, ["-s", str(state_file), "setup"])

        assert result.exit_code == 0, result.output
        assert "create" in executor.subcommands()

    def test_run_without_subcommand_dispatches(self, runner, wire, state_file):
        first = FakeExecutor()
        wire(executor=first)
        assert runner.invoke(cli, ["-s", str(state_file)]).exit_code == 0

        second = FakeExecutor()
        wire(executor=second)
        assert runner.invoke(cli, ["-s", str(state_file)]).exit_code == 0
        assert second.subcommands() == ["rm"]

    def test_configuration_error_exits_1(self, runner, wire, state_file, tmp_path):
        executor = FakeExecutor()
        wire(executor=executor, engine=FakeEngine(available=False))
        inputs = tmp_path / "inputs.yml"
        inputs.write_text("install: true\n")

        result = runner.invoke(cli, ["-s", str(state_file), "-i", str(inputs), "setup"])

        assert result.exit_code == 1
        assert executor.commands == []

    def test_invalid_inputs_exit_1(self, runner, wire, state_file, tmp_path):
        wire()
        inputs = tmp_path / "inputs.yml"
        inputs.write_text("use: maybe\n")

        result = runner.invoke(cli, ["-s", str(state_file), "-i", str(inputs), "setup"])
        assert result.exit_code == 1

    def test_cleanup_never_fails(self, runner, monkeypatch):
        def boom(ctx):
            raise RuntimeError("no docker here")
        monkeypatch.setattr(cli_module, "build_lifecycle", boom)

        result = runner.invoke(cli, ["cleanup"])
        assert result.exit_code == 0
