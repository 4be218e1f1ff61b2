"""Shared test fixtures.

The Apple toolchain is replaced by FakeToolchain, which records every command
and writes the files xcodebuild, lipo and simctl would produce.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from podrome.build_scripts import build_dsym
from podrome.utils.apple.pods import InstallContext, Sandbox
from podrome.utils.cmd import cmd_util
from podrome.utils.errors import CommandError

SDK_ARCHS = {
    "iphoneos": ["arm64"],
    "iphonesimulator": ["x86_64"],
    "appletvos": ["arm64"],
    "appletvsimulator": ["x86_64"],
    "watchos": ["arm64_32", "armv7k"],
    "watchsimulator": ["x86_64"],
    "macosx": ["arm64", "x86_64"],
}

SLICE_NAMES = {
    "iphoneos": "ios-arm64",
    "iphonesimulator": "ios-x86_64-simulator",
    "appletvos": "tvos-arm64",
    "appletvsimulator": "tvos-x86_64-simulator",
    "watchos": "watchos-arm64_32_armv7k",
    "watchsimulator": "watchos-x86_64-simulator",
    "macosx": "macos-arm64_x86_64",
}

SIMULATORS = {
    "devices": {
        "com.apple.CoreSimulator.SimRuntime.iOS-17-2": [
            {"udid": "IOS-17", "name": "iPhone 15", "isAvailable": True},
        ],
        "com.apple.CoreSimulator.SimRuntime.iOS-15-5": [
            {"udid": "IOS-15", "name": "iPhone 8", "isAvailable": True},
        ],
        "com.apple.CoreSimulator.SimRuntime.iOS-12-4": [
            {"udid": "IOS-12", "name": "iPhone 6", "isAvailable": True},
        ],
        "com.apple.CoreSimulator.SimRuntime.iOS-16-0": [
            {"udid": "IOS-16", "name": "iPhone 14", "isAvailable": False},
        ],
        "com.apple.CoreSimulator.SimRuntime.tvOS-17-0": [
            {"udid": "TV-17", "name": "Apple TV", "isAvailable": True},
        ],
        "com.apple.CoreSimulator.SimRuntime.watchOS-10-0": [
            {"udid": "WATCH-10", "name": "Apple Watch", "isAvailable": True},
        ],
    }
}


def _arg(command, flag):
    return command[command.index(flag) + 1]


def read_archs(binary: Path) -> set:
    return set(binary.read_text(encoding="utf-8").split())


class FakeToolchain:
    """Stands in for cmd_util.exec_command."""

    def __init__(self, build_dir: Path) -> None:
        self.build_dir = build_dir
        self.calls = []
        # scheme -> [(root name, module name)]
        self.products = {}
        self.failing_sdks = set()
        self.simulators = SIMULATORS

    def __call__(self, command, check=True, cwd=None):
        command = [str(x) for x in command]
        self.calls.append(command)
        code, output = self._run(command)
        if check and code != 0:
            raise CommandError(command, code, output)
        return code, output

    def builds(self):
        """(scheme, sdk) of each xcodebuild build, in order."""
        return [
            (_arg(c, "-scheme"), _arg(c, "-sdk"))
            for c in self.calls
            if c[0] == "xcodebuild" and "-scheme" in c
        ]

    def _run(self, command):
        tool = command[0]
        if tool == "xcrun":
            return 0, json.dumps(self.simulators)
        if tool == "lipo":
            return self._lipo(command)
        if tool == "xcodebuild":
            if "-create-xcframework" in command:
                return self._create_xcframework(command)
            return self._build(command)
        return 127, f"{tool}: command not found"

    def _build(self, command):
        sdk = _arg(command, "-sdk")
        configuration = _arg(command, "-configuration")
        scheme = _arg(command, "-scheme")
        if sdk in self.failing_sdks:
            return 65, "** BUILD FAILED **"

        sdk_dir = self.build_dir / (configuration if sdk == "macosx" else f"{configuration}-{sdk}")
        for root_name, module_name in self.products.get(scheme, []):
            framework = sdk_dir / root_name / f"{module_name}.framework"
            framework.mkdir(parents=True, exist_ok=True)
            (framework / module_name).write_text(" ".join(SDK_ARCHS[sdk]), encoding="utf-8")
            (framework / "Info.plist").write_text(sdk, encoding="utf-8")
            if sdk == "iphoneos":
                dsym = sdk_dir / root_name / f"{module_name}.framework.dSYM" / "Contents"
                dsym.mkdir(parents=True, exist_ok=True)
                (dsym / "Info.plist").write_text(module_name, encoding="utf-8")
        # the aggregate target framework that must never be collected
        aggregate = sdk_dir / scheme / f"{scheme.replace('-', '_')}.framework"
        aggregate.mkdir(parents=True, exist_ok=True)
        return 0, "** BUILD SUCCEEDED **"

    def _lipo(self, command):
        output = Path(_arg(command, "-output"))
        inputs = command[command.index("-output") + 2:]
        archs = set()
        for binary in inputs:
            archs |= read_archs(Path(binary))
        output.write_text(" ".join(sorted(archs)), encoding="utf-8")
        return 0, ""

    def _create_xcframework(self, command):
        output = Path(_arg(command, "-output"))
        frameworks = [command[i + 1] for i, arg in enumerate(command) if arg == "-framework"]
        output.mkdir(parents=True)
        for framework in frameworks:
            framework = Path(framework)
            sdk_dir_name = framework.parent.parent.name
            sdk = sdk_dir_name.split("-", 1)[1] if "-" in sdk_dir_name else "macosx"
            shutil.copytree(framework, output / SLICE_NAMES[sdk] / framework.name)
        (output / "Info.plist").write_text("XFWK", encoding="utf-8")
        return 0, f"xcframework successfully written out to: {output}"


class FakeXcodeProject:
    """Stands in for pbxproj.XcodeProject."""

    loaded = []

    def __init__(self, path):
        self.path = path
        self.flags = []
        self.saved = False

    @classmethod
    def load(cls, path):
        project = cls(path)
        cls.loaded.append(project)
        return project

    def set_flags(self, flag_name, flags, target_name=None, configuration_name=None):
        self.flags.append((flag_name, flags, configuration_name))

    def save(self, path=None):
        self.saved = True


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A project directory holding an installed Pods sandbox."""
    root = tmp_path / "App"
    project = root / "Pods" / "Pods.xcodeproj"
    project.mkdir(parents=True)
    (project / "project.pbxproj").write_text("// !$*UTF8*$!\n{\n}\n", encoding="utf-8")
    return root


@pytest.fixture
def toolchain(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> FakeToolchain:
    fake = FakeToolchain(workspace / "build")
    monkeypatch.setattr(cmd_util, "exec_command", fake)
    return fake


@pytest.fixture
def xcodeproject(monkeypatch: pytest.MonkeyPatch):
    FakeXcodeProject.loaded = []
    monkeypatch.setattr(build_dsym, "XcodeProject", FakeXcodeProject)
    return FakeXcodeProject


@pytest.fixture
def make_context(workspace: Path):
    def _make(targets):
        sandbox_root = workspace / "Pods"
        return InstallContext(
            sandbox_root=sandbox_root,
            sandbox=Sandbox(sandbox_root),
            umbrella_targets=list(targets),
        )

    return _make
