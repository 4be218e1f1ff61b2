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
Resolved install state handed to the post-install hook.

These types mirror what the dependency manager knows after resolution:
the Pods sandbox, the umbrella targets and the specs each target owns.
They are read-only inputs for the build steps.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, field

SUPPORTED_PLATFORMS = ['ios', 'osx', 'tvos', 'watchos']

# spec attributes that hold file patterns relative to the pod directory
FILE_PATTERN_ATTRIBUTES = ['vendored_libraries', 'vendored_frameworks', 'resources']


def c99_identifier(name: str) -> str:
    """Turn a pod name into the module name Xcode derives from it."""
    identifier = re.sub(r"[^A-Za-z0-9_]", "_", name)
    if identifier and identifier[0].isdigit():
        identifier = "_" + identifier
    return identifier


def expand_braces(pattern: str) -> List[str]:
    """
    Expand shell-style alternatives, "*.{png,xib}" -> ["*.png", "*.xib"].

    Nested groups are expanded too. A pattern without a complete group is
    returned unchanged.
    """
    start = pattern.find('{')
    if start == -1:
        return [pattern]
    depth = 0
    options = []
    option_start = start + 1
    for index in range(start, len(pattern)):
        char = pattern[index]
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                options.append(pattern[option_start:index])
                prefix = pattern[:start]
                suffixes = expand_braces(pattern[index + 1:])
                expanded = []
                for option in options:
                    for head in expand_braces(prefix + option):
                        expanded += [head + suffix for suffix in suffixes]
                return expanded
        elif char == ',' and depth == 1:
            options.append(pattern[option_start:index])
            option_start = index + 1
    return [pattern]


@dataclass
class SpecConsumer:
    """File patterns of a spec as seen by one platform."""
    platform_name: str
    vendored_libraries: List[str] = field(default_factory=list)
    vendored_frameworks: List[str] = field(default_factory=list)
    resources: List[str] = field(default_factory=list)


@dataclass
class PodSpec:
    """A resolved spec or subspec owned by an umbrella target."""
    name: str  # "Root" or "Root/Subspec"
    module_name: str = ""
    vendored_libraries: List[str] = field(default_factory=list)
    vendored_frameworks: List[str] = field(default_factory=list)
    resources: List[str] = field(default_factory=list)
    # platform name -> {attribute: [patterns]}, replaces the common value
    platform_overrides: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.module_name:
            self.module_name = c99_identifier(self.root_name)

    @property
    def root_name(self) -> str:
        return self.name.split('/', 1)[0]

    def consumer(self, platform_name: str) -> SpecConsumer:
        overrides = self.platform_overrides.get(platform_name, {})
        values = {}
        for attribute in FILE_PATTERN_ATTRIBUTES:
            values[attribute] = list(overrides.get(attribute, getattr(self, attribute)))
        return SpecConsumer(platform_name=platform_name, **values)


@dataclass
class UmbrellaTarget:
    """An aggregate target of the Pods project, built as one scheme."""
    label: str
    platform_name: str
    deployment_target: Optional[str] = None
    specs: List[PodSpec] = field(default_factory=list)

    def spec_names(self) -> List[tuple]:
        """Distinct (root name, module name) pairs, in spec order."""
        names = []
        for spec in self.specs:
            pair = (spec.root_name, spec.module_name)
            if pair not in names:
                names.append(pair)
        return names


class Sandbox:
    """The Pods directory and the project generated inside it."""

    def __init__(self, root, project_path=None):
        self.root = Path(root)
        if project_path is None:
            project_path = self.root / "Pods.xcodeproj"
        self.project_path = Path(project_path)

    def pod_dir(self, name: str) -> Path:
        return self.root / name

    def __repr__(self):
        return f"Sandbox(root={self.root}, project_path={self.project_path})"


class FileAccessor:
    """Expand the file patterns of a spec consumer inside its pod directory."""

    def __init__(self, path_root, consumer: SpecConsumer):
        self.path_root = Path(path_root)
        self.consumer = consumer

    def _expand(self, patterns: List[str]) -> List[Path]:
        paths = []
        for pattern in patterns:
            for alternative in expand_braces(pattern):
                for path in sorted(self.path_root.glob(alternative)):
                    if path not in paths:
                        paths.append(path)
        return paths

    @property
    def vendored_libraries(self) -> List[Path]:
        return self._expand(self.consumer.vendored_libraries)

    @property
    def vendored_frameworks(self) -> List[Path]:
        return self._expand(self.consumer.vendored_frameworks)

    @property
    def resources(self) -> List[Path]:
        return self._expand(self.consumer.resources)


@dataclass
class InstallContext:
    """What the post-install hook and the user callbacks receive."""
    sandbox_root: Path
    sandbox: Sandbox
    umbrella_targets: List[UmbrellaTarget] = field(default_factory=list)
