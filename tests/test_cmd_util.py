import sys

import pytest

from podrome.utils.cmd.cmd_util import exec_command
from podrome.utils.errors import CommandError, RomeError


def test_output_is_captured() -> None:
    code, output = exec_command([sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)"])

    assert code == 0
    assert output.split() == ["out", "err"]


def test_failure_raises_with_output_tail() -> None:
    with pytest.raises(CommandError) as excinfo:
        exec_command([sys.executable, "-c", "print('** BUILD FAILED **'); raise SystemExit(65)"])

    assert excinfo.value.returncode == 65
    assert "** BUILD FAILED **" in excinfo.value.output


def test_failure_is_returned_without_check() -> None:
    code, _ = exec_command([sys.executable, "-c", "raise SystemExit(3)"], check=False)

    assert code == 3


def test_missing_executable_is_a_command_error() -> None:
    with pytest.raises(RomeError) as excinfo:
        exec_command(["podrome-no-such-tool", "-version"])

    assert isinstance(excinfo.value, CommandError)
    assert excinfo.value.returncode == 127
    assert "Command failed with exit code 127: podrome-no-such-tool -version" in str(excinfo.value)
