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

"""Apple toolchain helpers for podrome."""

from .config import RomeOptions, RomeManifest, load_rome_manifest
from .pods import FileAccessor, InstallContext, PodSpec, Sandbox, UmbrellaTarget
from .simctl import SimControl

__all__ = [
    "FileAccessor",
    "InstallContext",
    "PodSpec",
    "RomeManifest",
    "RomeOptions",
    "Sandbox",
    "SimControl",
    "UmbrellaTarget",
    "load_rome_manifest",
]
