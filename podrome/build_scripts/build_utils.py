#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_utils.py
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
Build utility functions shared by the podrome build steps.

This module wraps the Apple tools and file operations used while turning
per-SDK frameworks into distributable bundles:
- Universal binary creation (lipo)
- XCFramework creation (xcodebuild -create-xcframework)
- Copying and removing bundle directories
"""

import os
import shutil
from pathlib import Path

from podrome.utils.cmd import cmd_util


def lipo_libs(src_libs, dst_lib):
    """
    Create a universal (fat) binary from architecture-specific binaries.

    The exit status of lipo is not checked here, callers look at whether
    dst_lib was produced.

    Args:
        src_libs: List of binaries to combine
        dst_lib: Destination path for the universal binary

    Returns:
        str: Output printed by lipo

    Example:
        lipo_libs(['device/Foo', 'simulator/Foo'], 'build/Foo')
    """
    cmd = ["lipo", "-create", "-output", str(dst_lib)] + [str(x) for x in src_libs]
    _, output = cmd_util.exec_command(cmd, check=False)
    return output


def make_xcframework(frameworks, dst_framework):
    """
    Create an XCFramework from several platform frameworks.

    Args:
        frameworks: Framework bundle paths, one per platform variant
        dst_framework: Destination XCFramework path (.xcframework)

    Raises:
        CommandError: If xcodebuild exits with a non-zero status

    Note:
        Requires Xcode command-line tools to be installed.
    """
    cmd = ["xcodebuild", "-create-xcframework", "-output", str(dst_framework)]
    for framework in frameworks:
        cmd += ["-framework", str(framework)]
    cmd_util.exec_command(cmd)


def remove_path(path):
    """Remove a file, a symlink or a whole directory tree if it exists."""
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def move_path(src, dst_dir):
    """
    Move src into dst_dir, replacing an entry with the same name.

    Returns:
        Path: New location of src
    """
    src = Path(src)
    dst = Path(dst_dir) / src.name
    remove_path(dst)
    os.makedirs(dst_dir, exist_ok=True)
    shutil.move(str(src), str(dst))
    return dst


def copy_file(src, dst_dir):
    """
    Copy a file or directory into dst_dir, replacing an existing copy.

    Args:
        src: Source file or directory path
        dst_dir: Destination directory

    Returns:
        Path: Path of the copy
    """
    src = Path(src)
    dst = Path(dst_dir) / src.name
    remove_path(dst)
    if src.is_dir():
        shutil.copytree(src, dst, symlinks=True)
    else:
        shutil.copy2(src, dst)
    return dst


def uniq(items):
    """Drop duplicates, keeping the first occurrence."""
    seen = set()
    result = []
    for item in items:
        key = str(item)
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result


def pluralize(count, word):
    return word if count == 1 else word + "s"
