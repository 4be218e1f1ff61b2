#
# Copyright 2024 podrome Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

import subprocess

from podrome.utils.errors import CommandError

# lines of tool output kept in the error message of a failed command
ERROR_OUTPUT_TAIL_LINES = 40


def decode_bytes(data: bytes) -> str:
    try:
        return bytes.decode(data, "UTF-8")
    except UnicodeDecodeError:
        return bytes.decode(data, "latin-1")


def exec_command(command, check=True, cwd=None):
    """
    Run an external tool and wait for it to exit.

    Args:
        command: Argument list, the first item is the executable
        check: Raise CommandError when the exit code is not zero
        cwd: Working directory for the process

    Returns:
        tuple: (exit_code, output) where output is stdout and stderr combined

    Raises:
        CommandError: If the executable is missing (exit code 127), or on a
            non-zero exit code when check is set
    """
    command = [str(x) for x in command]
    try:
        compile_popen = subprocess.run(
            command,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except FileNotFoundError as e:
        raise CommandError(command, 127, str(e))
    err_code = compile_popen.returncode
    err_msg = decode_bytes(compile_popen.stdout or b"")
    if check and err_code != 0:
        tail = "\n".join(err_msg.splitlines()[-ERROR_OUTPUT_TAIL_LINES:])
        raise CommandError(command, err_code, tail)
    return err_code, err_msg
