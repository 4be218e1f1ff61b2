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
import sys
import importlib
import argparse

from podrome.utils.context.namespace import CliNameSpace
from podrome.utils.context.context import CliContext
from podrome.utils.context.command import CliCommand
from podrome.utils.errors import RomeError

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]
PACKAGE_NAME = os.path.basename(SCRIPT_PATH)


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """podrome - Prebuilt frameworks for CocoaPods projects

Builds every pod of an installed Pods project into XCFrameworks (or fat
frameworks) and collects them, with vendored libraries and resources,
into a Rome/ directory next to the Pods sandbox.

USAGE:
    podrome <command> [options]

COMMANDS:
    build       Build all pods described by Rome.toml
    clean       Remove the build/ and Rome/ directories

EXAMPLES:
    podrome build                        # Build with the options of Rome.toml
    podrome build --configuration Release
    podrome build --framework            # Fat frameworks instead of XCFrameworks
    podrome clean --dry-run

For more information on a specific command:
    podrome <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in sorted(os.listdir(os.path.join(SCRIPT_PATH, "commands"))):
            if not command.startswith("_") and command.endswith(".py"):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return arr

    def _parser(self, add_help=True) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="podrome",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=add_help,
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            nargs='?',
            choices=self.get_command_list(),
        )
        return parser

    def cli(self, argv=None) -> CliNameSpace:
        if argv is None:
            argv = sys.argv[1:]
        # "podrome --help" shows the root help, "podrome build --help" is left to the subcommand
        if len(argv) == 1 and argv[0] in ['--help', '-h']:
            self._parser().print_help()
            sys.exit(0)

        if not argv or argv[0].startswith('-'):
            return CliNameSpace(subcommand=None, sub_argv=list(argv))
        # only the subcommand is parsed here, the rest belongs to the subcommand parser
        args = self._parser(add_help=False).parse_args(argv[:1], namespace=CliNameSpace())
        args.sub_argv = list(argv[1:])
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if not args.subcommand:
            print("ERROR: No command specified\n")
            self._parser().print_help()
            sys.exit(1)

        # get module name
        module_name = f"{PACKAGE_NAME}.commands.{args.subcommand}"
        # get class name
        class_name = args.subcommand.capitalize()
        module = importlib.import_module(module_name)
        klass = getattr(module, class_name)
        sub_cmd = klass()
        try:
            return sub_cmd.exec(context, sub_cmd.cli(args.sub_argv))
        except RomeError as e:
            print(f"ERROR: {e}")
            output = getattr(e, "output", "")
            if output:
                print(output)
            sys.exit(1)


def main(argv=None):
    cmd = Cli()
    cmd.exec(CliContext(), cmd.cli(argv))


if __name__ == "__main__":
    main()
