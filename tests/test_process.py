import sys

import pytest

from buildxsetup.exceptions import ExternalCommandError
from buildxsetup.utils.process import Command, ExecResult, Executor


class TestExecResult:

    def test_failure_text(self):
        assert ExecResult(0, "", "warning").failure_text() == ""
        assert ExecResult(1, "", "").failure_text() == ""
        assert ExecResult(1, "", "  boom\n").failure_text() == "boom"


class TestExecutor:

    def test_captures_output(self):
        res = Executor().exec(Command(sys.executable, ["-c", "print('hi')"]))
        assert res.ok
        assert res.stdout == "hi\n"

    def test_nonzero_raises(self):
        cmd = Command(sys.executable, ["-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"])
        with pytest.raises(ExternalCommandError) as exc:
            Executor().exec(cmd)
        assert exc.value.exit_code == 3
        assert exc.value.stderr == "bad"

    def test_nonzero_ignored(self):
        cmd = Command(sys.executable, ["-c", "import sys; sys.exit(2)"])
        res = Executor().exec(cmd, ignore_return_code=True)
        assert res.exit_code == 2

    def test_missing_program(self):
        res = Executor().exec(Command("buildx-does-not-exist", ["version"]), ignore_return_code=True)
        assert res.exit_code == 127
        assert res.failure_text()
