#!/usr/bin/env python3
# -- coding: utf-8 --
#
# post_install.py
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
Post-install hook: prebuild every pod into binary frameworks.

Runs once after the dependency manager has resolved and installed the pods:
1. Optionally switches the Pods project to emit dSYMs
2. Builds each umbrella target for its platform
3. Merges the per-SDK frameworks (fat frameworks or XCFrameworks)
4. Copies the frameworks, vendored libraries and resources to Rome/
5. Optionally places the device dSYMs inside the XCFrameworks

Output:
    - {sandbox parent}/Rome/{module}.xcframework (or .framework)
    - {sandbox parent}/Rome/ vendored libraries, frameworks and resources
"""

import os
import re
import time
from pathlib import Path

from podrome.build_scripts.build_apple import build_target
from podrome.build_scripts.build_dsym import copy_dsym_files, enable_debug_information
from podrome.build_scripts.build_utils import copy_file, pluralize, remove_path, uniq
from podrome.utils.apple.config import RomeOptions
from podrome.utils.apple.pods import FileAccessor
from podrome.utils.errors import BuildError

BUILD_DIR_NAME = "build"
DESTINATION_DIR_NAME = "Rome"


def build_dir_for(sandbox_root):
    return Path(sandbox_root).parent / BUILD_DIR_NAME


def destination_for(sandbox_root):
    return Path(sandbox_root).parent / DESTINATION_DIR_NAME


def collect_built_frameworks(build_dir, build_type):
    """
    Find the frameworks produced in build_dir.

    Nested per-SDK frameworks come first and the merged top-level ones last,
    so that copying in order lets the merged (device) framework win.
    Aggregate Pods-* targets are ignored.

    Args:
        build_dir: Build directory
        build_type: "xcframework" or "framework"

    Returns:
        list: Framework paths
    """
    build_dir = Path(build_dir)
    pods_pattern = re.compile(rf"Pods[^.]+\.{build_type}")
    frameworks = sorted(build_dir.glob(f"*/*/*.{build_type}"))
    frameworks += sorted(build_dir.glob(f"*.{build_type}"))
    return [f for f in frameworks if not pods_pattern.search(f.relative_to(build_dir).as_posix())]


def collect_vendored_files(installer_context):
    """
    Gather the vendored libraries, frameworks and resources of every spec.

    Returns:
        tuple: (vendored library and framework paths, resource paths)
    """
    sandbox = installer_context.sandbox
    vendored = []
    resources = []
    for umbrella in installer_context.umbrella_targets:
        for spec in umbrella.specs:
            consumer = spec.consumer(umbrella.platform_name)
            file_accessor = FileAccessor(sandbox.pod_dir(spec.root_name), consumer)
            vendored += file_accessor.vendored_libraries
            vendored += file_accessor.vendored_frameworks
            resources += file_accessor.resources
    return vendored, resources


def post_install(installer_context, user_options=None):
    """
    Build all pods of an install into binary frameworks.

    Args:
        installer_context: InstallContext of the finished install
        user_options: Mapping with the keys dsym, configuration, xcframework,
            flags, pre_compile and post_compile

    Returns:
        list: Paths copied into the destination directory

    Raises:
        BuildError: On an unknown platform, a missing framework binary or a
            missing build directory
        CommandError: If xcodebuild fails

    Note:
        A failure leaves the build directory in place for inspection.
    """
    before_time = time.time()
    options = RomeOptions.from_user_options(user_options)
    flags = options.build_flags()
    configuration = options.configuration

    if options.pre_compile:
        options.pre_compile(installer_context)

    sandbox_root = Path(installer_context.sandbox_root)
    sandbox = installer_context.sandbox

    if options.dsym:
        enable_debug_information(sandbox.project_path, configuration)

    build_dir = build_dir_for(sandbox_root)
    destination = destination_for(sandbox_root)

    print("Building frameworks")

    remove_path(build_dir)

    targets = [t for t in installer_context.umbrella_targets if t.specs]
    for target in targets:
        build_target(sandbox, build_dir, target, flags, configuration, options.xcframework)

    if not build_dir.is_dir():
        raise BuildError("The build directory was not found in the expected location.")

    build_type = "xcframework" if options.xcframework else "framework"
    frameworks = collect_built_frameworks(build_dir, build_type)

    print(f"Built {len(frameworks)} {pluralize(len(frameworks), 'framework')}")

    remove_path(destination)

    vendored, resources = collect_vendored_files(installer_context)
    frameworks = uniq(frameworks + vendored)
    resources = uniq(resources)

    relative_destination = os.path.relpath(destination, os.getcwd())
    print(f"Copying {len(frameworks)} {pluralize(len(frameworks), 'framework')} to `{relative_destination}`")

    destination.mkdir(parents=True, exist_ok=True)
    copied = []
    for path in frameworks + resources:
        copied.append(copy_file(path, destination))

    if options.dsym:
        copy_dsym_files(build_dir, destination, configuration)

    remove_path(build_dir)

    if options.post_compile:
        options.post_compile(installer_context)

    print(f"use time: {int(time.time() - before_time)} s")
    return copied
