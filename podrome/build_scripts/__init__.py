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

"""Build steps of the post-install hook."""

__all__ = [
    "build_apple",
    "build_dsym",
    "build_utils",
    "post_install",
]
