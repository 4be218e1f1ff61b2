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

"""
Simulator lookup through `xcrun simctl`.

Used to pick a concrete `-destination` for simulator builds so that
xcodebuild does not fall back to a generic destination.
"""

import json
import re
from typing import List, Optional, Tuple
from dataclasses import dataclass

from podrome.utils.cmd import cmd_util
from podrome.utils.errors import SimulatorError

# runtime identifiers look like "com.apple.CoreSimulator.SimRuntime.iOS-17-2",
# older Xcode versions report "iOS 12.1"
RUNTIME_PATTERN = re.compile(r"(iOS|tvOS|watchOS|xrOS)[- ](\d+)(?:[-.](\d+))?(?:[-.](\d+))?$")


def parse_version(version: Optional[str]) -> Tuple[int, ...]:
    if not version:
        return (0,)
    parts = []
    for part in str(version).split('.'):
        match = re.match(r"\d+", part)
        parts.append(int(match.group(0)) if match else 0)
    return tuple(parts)


def version_key(version: Tuple[int, ...]) -> Tuple[int, ...]:
    """Comparison key where 15.0 and 15.0.0 are the same version."""
    parts = list(version)
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


@dataclass
class Simulator:
    """An available simulator device."""
    udid: str
    name: str
    os_name: str
    os_version: Tuple[int, ...]


class SimControl:
    """Query installed simulators."""

    def list_simulators(self) -> List[Simulator]:
        _, output = cmd_util.exec_command(["xcrun", "simctl", "list", "-j", "devices"])
        try:
            data = json.loads(output)
        except ValueError as e:
            raise SimulatorError(f"Unable to parse simctl output: {e}")

        simulators = []
        for runtime, devices in data.get("devices", {}).items():
            match = RUNTIME_PATTERN.search(runtime)
            if not match:
                continue
            os_name = match.group(1)
            os_version = tuple(int(x) for x in match.groups()[1:] if x is not None)
            for device in devices:
                # "availability" is the pre Xcode 10.1 spelling
                available = device.get("isAvailable", device.get("availability") == "(available)")
                if not available:
                    continue
                simulators.append(Simulator(
                    udid=device["udid"],
                    name=device.get("name", ""),
                    os_name=os_name,
                    os_version=os_version,
                ))
        return simulators

    def usable_simulators(self, os_name: str, minimum_version: Optional[str] = None) -> List[Simulator]:
        minimum = version_key(parse_version(minimum_version))
        return [
            sim for sim in self.list_simulators()
            if sim.os_name == os_name and version_key(sim.os_version) >= minimum
        ]

    def destination(self, sim_filter: str, os_name: str, minimum_version: Optional[str] = None) -> List[str]:
        """
        Build the xcodebuild destination arguments for a simulator.

        Args:
            sim_filter: "oldest" or "newest" runtime among the usable simulators
            os_name: Display name of the platform (iOS, tvOS, watchOS)
            minimum_version: Deployment target the runtime must satisfy

        Returns:
            list: ["-destination", "id=<udid>"]
        """
        simulators = self.usable_simulators(os_name, minimum_version)
        if not simulators:
            raise SimulatorError(
                f"Can't find a simulator for {os_name} {minimum_version or ''}".rstrip()
                + ". Install one with Xcode."
            )
        if sim_filter == "oldest":
            simulator = min(simulators, key=lambda sim: sim.os_version)
        elif sim_filter == "newest":
            simulator = max(simulators, key=lambda sim: sim.os_version)
        else:
            raise SimulatorError(f"Unknown simulator filter '{sim_filter}'")
        return ["-destination", f"id={simulator.udid}"]
