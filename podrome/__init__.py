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

"""Prebuild CocoaPods dependencies into XCFrameworks or fat frameworks."""

from podrome.build_scripts.post_install import post_install

__version__ = "1.0.0"

__all__ = ["post_install"]
