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

import os
import argparse

from podrome.utils.context.namespace import CliNameSpace
from podrome.utils.context.context import CliContext
from podrome.utils.context.command import CliCommand
from podrome.utils.apple.config import MANIFEST_FILE_NAME, load_rome_manifest
from podrome.build_scripts.post_install import post_install


class Build(CliCommand):
    def description(self) -> str:
        return f"""Build all pods of an installed Pods project.

Reads {MANIFEST_FILE_NAME} (sandbox location, resolved targets and options),
runs xcodebuild for every target and collects the frameworks into Rome/.

EXAMPLES:
    podrome build
    podrome build --manifest path/to/{MANIFEST_FILE_NAME}
    podrome build --configuration Release --no-dsym
    podrome build --framework             # fat frameworks via lipo
    podrome build --flag=-quiet --flag=BUILD_LIBRARY_FOR_DISTRIBUTION=YES

Command line options override the [rome] table of the manifest.
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="podrome build",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--manifest",
            default=MANIFEST_FILE_NAME,
            help=f"Path to {MANIFEST_FILE_NAME} or its directory (default: ./{MANIFEST_FILE_NAME})",
        )
        parser.add_argument(
            "--configuration",
            help="Build configuration name (default: Debug)",
        )
        parser.add_argument(
            "--no-dsym",
            dest="dsym",
            action="store_false",
            default=None,
            help="Do not generate and package dSYMs",
        )
        parser.add_argument(
            "--framework",
            dest="xcframework",
            action="store_false",
            default=None,
            help="Build fat frameworks instead of XCFrameworks",
        )
        parser.add_argument(
            "--flag",
            dest="flags",
            action="append",
            default=None,
            help="Extra xcodebuild argument, may be repeated",
        )
        return parser.parse_args(argv, namespace=CliNameSpace())

    def user_options(self, manifest_options, args: CliNameSpace) -> dict:
        options = dict(manifest_options)
        if args.configuration:
            options["configuration"] = args.configuration
        if args.dsym is not None:
            options["dsym"] = args.dsym
        if args.xcframework is not None:
            options["xcframework"] = args.xcframework
        if args.flags:
            options["flags"] = list(options.get("flags", [])) + args.flags
        return options

    def exec(self, context: CliContext, args: CliNameSpace):
        manifest_path = os.path.join(context.work_dir, args.manifest)
        manifest = load_rome_manifest(manifest_path)
        print(f"==================podrome build ({manifest.path})========================")
        return post_install(manifest.context, self.user_options(manifest.user_options, args))
