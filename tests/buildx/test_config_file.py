import pytest

from buildxsetup.buildx import get_config_file, get_config_inline
from buildxsetup.exceptions import ConfigFileMissingError


class TestConfigFile:

    def test_path_passes_through(self, tmp_path):
        config = tmp_path / "buildkitd.toml"
        config.write_text("debug = true\n")
        assert get_config_file(str(config)) == str(config)

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigFileMissingError):
            get_config_file(str(tmp_path / "missing.toml"))

    def test_directory_is_not_a_config(self, tmp_path):
        with pytest.raises(ConfigFileMissingError):
            get_config_file(str(tmp_path))

    def test_inline(self, tmp_path):
        content = "[registry.\"docker.io\"]\n  mirrors = [\"mirror.gcr.io\"]\n"
        first = get_config_inline(content, tmp_path)
        second = get_config_inline(content, tmp_path)

        assert first != second
        with open(first) as f:
            assert f.read() == content
