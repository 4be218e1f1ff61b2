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

"""Exceptions raised by podrome build steps."""


class RomeError(Exception):
    """Base exception for every podrome failure"""
    pass


class BuildError(RomeError):
    """Exception raised when a build step cannot produce its artifacts"""
    pass


class ConfigError(RomeError):
    """Exception raised for an unreadable or malformed Rome.toml"""
    pass


class SimulatorError(RomeError):
    """Exception raised when no simulator can satisfy a destination"""
    pass


class CommandError(RomeError):
    """Exception raised when an external tool exits with a non-zero status"""

    def __init__(self, command, returncode: int, output: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Command failed with exit code {returncode}: {' '.join(self.command)}"
        )
