#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_dsym.py
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
dSYM generation and packaging.

Before the build, the Pods project is switched to emit dSYM bundles for
every architecture. After the XCFrameworks are copied to their destination,
the device dSYMs are placed inside the matching XCFramework slice.
"""

import shutil
from pathlib import Path

from pbxproj import XcodeProject

from podrome.build_scripts.build_utils import remove_path

DEBUG_INFORMATION_FLAGS = {
    "DEBUG_INFORMATION_FORMAT": "dwarf-with-dsym",
    "ONLY_ACTIVE_ARCH": "NO",
}

# SDKs whose dSYMs are copied into XCFrameworks
DSYM_PLATFORMS = ["iphoneos"]

DEVICE_SLICE_MARKER = "ios-arm64"
EXCLUDED_SLICE_MARKERS = ["-simulator", "-maccatalyst"]


def enable_debug_information(project_path, configuration):
    """
    Turn on dSYM generation for all targets of an Xcode project.

    Sets DEBUG_INFORMATION_FORMAT=dwarf-with-dsym and ONLY_ACTIVE_ARCH=NO on
    every target build configuration named `configuration` and saves the
    project file in place.

    Args:
        project_path: Path to the .xcodeproj bundle
        configuration: Build configuration name (e.g. Debug, Release)
    """
    pbxproj_path = Path(project_path) / "project.pbxproj"
    project = XcodeProject.load(str(pbxproj_path))
    for flag_name, value in DEBUG_INFORMATION_FLAGS.items():
        project.set_flags(flag_name, value, configuration_name=configuration)
    project.save()


def is_device_slice(name):
    """Whether an XCFramework slice directory holds the arm64 device binary."""
    if DEVICE_SLICE_MARKER not in name:
        return False
    return not any(marker in name for marker in EXCLUDED_SLICE_MARKERS)


def copy_dsym_files(build_dir, destination, configuration):
    """
    Copy device dSYM bundles into the XCFrameworks found in destination.

    dSYMs whose XCFramework is not in destination are skipped.

    Args:
        build_dir: Build directory holding {configuration}-{sdk} products
        destination: Directory holding the final XCFrameworks
        configuration: Build configuration name

    Returns:
        list: Paths of the copied dSYM bundles
    """
    print("Copying dSYMs to XCFrameworks")

    copied = []
    for platform in DSYM_PLATFORMS:
        platform_dir = Path(build_dir) / f"{configuration}-{platform}"
        for dsym in sorted(platform_dir.glob("**/*.dSYM")):
            dsym_basename = dsym.name
            if dsym_basename.endswith(".framework.dSYM"):
                dsym_basename = dsym_basename[: -len(".framework.dSYM")]
            xcframework_path = Path(destination) / f"{dsym_basename}.xcframework"

            if not xcframework_path.is_dir():
                continue

            for sub_directory in sorted(xcframework_path.iterdir()):
                if not sub_directory.is_dir():
                    continue
                if not is_device_slice(sub_directory.name):
                    continue

                dsym_destination = sub_directory / "dSYMs" / dsym.name
                dsym_destination.parent.mkdir(parents=True, exist_ok=True)
                remove_path(dsym_destination)
                shutil.copytree(dsym, dsym_destination, symlinks=True)
                copied.append(dsym_destination)
    return copied
