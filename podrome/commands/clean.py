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
from podrome.build_scripts.build_utils import remove_path
from podrome.build_scripts.post_install import build_dir_for, destination_for


class Clean(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to clean build artifacts.

        Cleans the following directories next to the Pods sandbox:
        - build/    # xcodebuild products left by a failed build
        - Rome/     # Collected frameworks

        Examples:
            podrome clean              # Clean build/ and Rome/
            podrome clean --dry-run    # Preview what will be cleaned
            podrome clean --build-only # Keep Rome/
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="podrome clean",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--manifest",
            default=MANIFEST_FILE_NAME,
            help=f"Path to {MANIFEST_FILE_NAME} or its directory (default: ./{MANIFEST_FILE_NAME})",
        )
        parser.add_argument(
            "--build-only",
            action="store_true",
            help="Clean only the build directory",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be cleaned without actually deleting",
        )
        return parser.parse_args(argv, namespace=CliNameSpace())

    def exec(self, context: CliContext, args: CliNameSpace):
        manifest = load_rome_manifest(os.path.join(context.work_dir, args.manifest))
        sandbox_root = manifest.context.sandbox_root

        paths = [build_dir_for(sandbox_root)]
        if not args.build_only:
            paths.append(destination_for(sandbox_root))

        removed = []
        for path in paths:
            if not path.exists():
                continue
            if args.dry_run:
                print(f"   Would remove: {path}")
            else:
                remove_path(path)
                print(f"   Removed: {path}")
            removed.append(path)

        if not removed:
            print("Nothing to clean.")
        return removed
