#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_apple.py
# podrome
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
Framework build steps for Apple platforms.

Each umbrella target of the Pods project is built with xcodebuild:
- iOS, tvOS and watchOS: once for the device SDK, then once for the simulator SDK
- macOS: once for the macosx SDK

The per-SDK frameworks are then merged either into a universal (fat)
framework with lipo, or into an XCFramework.

Output (relative to the build directory):
    - Per-SDK frameworks: {configuration}-{sdk}/{root}/{module}.framework
    - Fat frameworks: {module}.framework
    - XCFrameworks: {module}.xcframework
"""

import os
from pathlib import Path

from podrome.build_scripts.build_utils import (
    lipo_libs,
    make_xcframework,
    move_path,
    remove_path,
)
from podrome.utils.apple.simctl import SimControl
from podrome.utils.cmd import cmd_util
from podrome.utils.errors import BuildError

# simulator SDK -> platform name used by simctl runtimes
PLATFORMS = {
    "iphonesimulator": "iOS",
    "appletvsimulator": "tvOS",
    "watchsimulator": "watchOS",
}

# platform tag -> (device SDK, simulator SDK), None means a desktop build
SDK_PAIRS = {
    "ios": ("iphoneos", "iphonesimulator"),
    "osx": ("macosx", None),
    "tvos": ("appletvos", "appletvsimulator"),
    "watchos": ("watchos", "watchsimulator"),
}


def sdk_pair_for_platform(platform_name):
    """
    Look up the SDKs used to build a target.

    Args:
        platform_name: Platform tag of the target (ios, osx, tvos, watchos)

    Returns:
        tuple: (device_sdk, simulator_sdk), simulator_sdk is None for osx

    Raises:
        BuildError: If the platform tag is unknown
    """
    try:
        return SDK_PAIRS[platform_name]
    except KeyError:
        raise BuildError(f"Unknown platform '{platform_name}'")


def sdk_build_dir(build_dir, configuration, sdk):
    """Directory xcodebuild writes the products of one SDK to."""
    # macosx products have no SDK suffix
    if sdk == "macosx":
        return Path(build_dir) / configuration
    return Path(build_dir) / f"{configuration}-{sdk}"


def xcodebuild(sandbox, target, sdk="macosx", deployment_target=None, flags=None,
               configuration="Debug"):
    """
    Build one scheme of the Pods project for one SDK.

    Args:
        sandbox: Sandbox holding the Pods project
        target: Scheme name (the umbrella target label)
        sdk: SDK name passed to -sdk
        deployment_target: Minimum OS version a simulator destination must run
        flags: Extra arguments appended verbatim
        configuration: Build configuration name

    Raises:
        CommandError: If xcodebuild exits with a non-zero status
    """
    project_path = os.path.realpath(sandbox.project_path)
    args = [
        "-project", project_path,
        "-scheme", target,
        "-configuration", configuration,
        "-sdk", sdk,
    ]
    if flags:
        args += list(flags)
    platform = PLATFORMS.get(sdk)
    if platform is not None:
        args += SimControl().destination("oldest", platform, deployment_target)

    print(f"xcodebuild {' '.join(args)}")
    cmd_util.exec_command(["xcodebuild"] + args)


def build_universal_framework(device_lib, simulator_lib, build_dir, destination, module_name):
    """
    Merge a device and a simulator framework into one fat framework.

    The merged binary replaces the device binary, and the device framework
    is then moved to the top of the build directory.

    Args:
        device_lib: Device framework path
        simulator_lib: Simulator framework path
        build_dir: Build directory the merged framework is moved into
        destination: Temporary path for the lipo output
        module_name: Name of the framework binary

    Returns:
        Path: Location of the merged framework

    Raises:
        BuildError: If either framework binary is missing, or lipo fails
    """
    device_executable = Path(device_lib) / module_name
    simulator_executable = Path(simulator_lib) / module_name

    if not (device_executable.is_file() and simulator_executable.is_file()):
        raise BuildError("Framework executables were not found in the expected location.")

    device_framework_lib = device_executable.parent
    lipo_log = lipo_libs([device_executable, simulator_executable], destination)
    if not os.path.exists(destination):
        print(lipo_log)
        raise BuildError(f"lipo did not produce {destination}")

    os.replace(destination, device_executable)
    return move_path(device_framework_lib, build_dir)


def build_xcframework(frameworks, build_dir, module_name):
    """
    Wrap per-platform frameworks into {module_name}.xcframework.

    Nothing happens when the XCFramework already exists, or when one of the
    input frameworks is missing.

    Returns:
        Path or None: The XCFramework path, None if it was not created
    """
    output = Path(build_dir) / f"{module_name}.xcframework"
    if output.exists():
        return output

    for framework in frameworks:
        if not os.path.exists(framework):
            # TODO: raise once every supported platform is known to produce all slices
            print(f"   ⚠️  Warning: {framework} not found, skipping XCFramework for {module_name}")
            return None

    print(f"Building XCFramework for {module_name}")
    make_xcframework(frameworks, output)
    return output


def build_for_iosish_platform(sandbox, build_dir, target, device, simulator, flags,
                              configuration, build_xcframework_enabled=False):
    """
    Build a target for a device SDK and its simulator SDK and merge the results.

    The device build runs before the simulator build and the merged bundle
    takes the device framework's place, so the device Info.plist wins.

    Args:
        sandbox: Sandbox holding the Pods project
        build_dir: Build directory (xcodebuild SYMROOT)
        target: UmbrellaTarget to build
        device: Device SDK name (e.g. iphoneos)
        simulator: Simulator SDK name (e.g. iphonesimulator)
        flags: Extra xcodebuild arguments
        configuration: Build configuration name
        build_xcframework_enabled: Produce XCFrameworks instead of fat frameworks
    """
    deployment_target = target.deployment_target
    target_label = target.label

    xcodebuild(sandbox, target_label, device, deployment_target, flags, configuration)
    xcodebuild(sandbox, target_label, simulator, deployment_target, flags, configuration)

    for root_name, module_name in target.spec_names():
        device_lib = sdk_build_dir(build_dir, configuration, device) / root_name / f"{module_name}.framework"
        simulator_lib = sdk_build_dir(build_dir, configuration, simulator) / root_name / f"{module_name}.framework"

        if build_xcframework_enabled:
            build_xcframework([device_lib, simulator_lib], build_dir, module_name)
        else:
            executable_path = Path(build_dir) / root_name
            build_universal_framework(device_lib, simulator_lib, build_dir, executable_path, module_name)
            remove_path(simulator_lib)


def build_for_macos_platform(sandbox, build_dir, target, flags, configuration,
                             build_xcframework_enabled=False):
    """
    Build a macOS target. Fat frameworks are left where xcodebuild put them.
    """
    xcodebuild(sandbox, target.label, "macosx", None, flags, configuration)

    if not build_xcframework_enabled:
        return
    for root_name, module_name in target.spec_names():
        framework = sdk_build_dir(build_dir, configuration, "macosx") / root_name / f"{module_name}.framework"
        build_xcframework([framework], build_dir, module_name)


def build_target(sandbox, build_dir, target, flags, configuration, build_xcframework_enabled=False):
    """Dispatch a target to the platform build matching its platform tag."""
    device, simulator = sdk_pair_for_platform(target.platform_name)
    print(f"==================build {target.label} ({target.platform_name})========================")
    if simulator is None:
        build_for_macos_platform(sandbox, build_dir, target, flags, configuration, build_xcframework_enabled)
    else:
        build_for_iosish_platform(
            sandbox, build_dir, target, device, simulator, flags, configuration, build_xcframework_enabled
        )
