import logging

import pytest

from buildxsetup.utils.logger import _normalize_module_name, log_group, parse_module_levels, runner_debug


class TestModuleLevels:

    def test_parse(self):
        assert parse_module_levels("lc=debug, tool=INFO,broken,") == {"lc": "DEBUG", "tool": "INFO"}
        assert parse_module_levels("") is None
        assert parse_module_levels(None) is None

    @pytest.mark.parametrize("name, expected", [
        ("lc", "buildxsetup.lifecycle"),
        ("tool", "buildxsetup.buildx.tool"),
        ("buildx.*", "buildxsetup.buildx"),
        ("state", "buildxsetup.state"),
        ("buildxsetup.engine", "buildxsetup.engine"),
        ("urllib3", "urllib3"),
    ])
    def test_normalize(self, name, expected):
        assert _normalize_module_name(name) == expected


class TestRunnerIntegration:

    def test_runner_debug(self, monkeypatch):
        monkeypatch.setenv("RUNNER_DEBUG", "1")
        assert runner_debug() is True
        monkeypatch.setenv("RUNNER_DEBUG", "0")
        assert runner_debug() is False

    def test_group_in_actions(self, monkeypatch, capsys):
        monkeypatch.setenv("GITHUB_ACTIONS", "true")
        with log_group("Booting builder"):
            print("inside")
        assert capsys.readouterr().out == "::group::Booting builder\ninside\n::endgroup::\n"

    def test_group_closed_on_error(self, monkeypatch, capsys):
        monkeypatch.setenv("GITHUB_ACTIONS", "true")
        with pytest.raises(RuntimeError):
            with log_group("Inspect builder"):
                raise RuntimeError("boom")
        assert capsys.readouterr().out.endswith("::endgroup::\n")

    def test_group_outside_actions(self, monkeypatch, caplog, capsys):
        monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
        with caplog.at_level(logging.INFO):
            with log_group("Docker info"):
                pass
        assert capsys.readouterr().out == ""
        assert any(r.getMessage() == "--- Docker info" for r in caplog.records)
