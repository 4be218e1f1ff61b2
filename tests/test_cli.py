from pathlib import Path

import pytest

from podrome.cli import Cli, main
from podrome.commands.build import Build

MANIFEST = """
[rome]
configuration = "Release"
flags = ["-quiet"]

[[targets]]
label = "Pods-App"
platform = "ios"
deployment_target = "13.0"

[[targets.specs]]
name = "Alamofire"
"""


@pytest.fixture
def manifest(workspace: Path) -> Path:
    path = workspace / "Rome.toml"
    path.write_text(MANIFEST, encoding="utf-8")
    return path


def test_root_command_lists_subcommands() -> None:
    assert Cli().get_command_list() == ["build", "clean"]


def test_root_command_splits_subcommand_arguments() -> None:
    args = Cli().cli(["build", "--manifest", "x/Rome.toml", "--no-dsym"])

    assert args.subcommand == "build"
    assert args.sub_argv == ["--manifest", "x/Rome.toml", "--no-dsym"]


def test_missing_subcommand_exits(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 1
    assert "No command specified" in capsys.readouterr().out


def test_build_command_overrides_manifest_options(manifest: Path) -> None:
    command = Build()
    args = command.cli(["--framework", "--no-dsym", "--flag=A=B", "--configuration", "Debug"])

    options = command.user_options({"configuration": "Release", "flags": ["-quiet"]}, args)

    assert options == {
        "configuration": "Debug",
        "dsym": False,
        "xcframework": False,
        "flags": ["-quiet", "A=B"],
    }


def test_build_command_keeps_manifest_options_by_default() -> None:
    command = Build()

    options = command.user_options({"dsym": False, "xcframework": True}, command.cli([]))

    assert options == {"dsym": False, "xcframework": True}


def test_build_end_to_end(workspace: Path, manifest: Path, toolchain) -> None:
    toolchain.products["Pods-App"] = [("Alamofire", "Alamofire")]

    main(["build", "--manifest", str(manifest), "--no-dsym", "--framework"])

    rome = workspace / "Rome"
    assert [p.name for p in rome.iterdir()] == ["Alamofire.framework"]
    assert all("-quiet" in c for c in toolchain.calls if "-scheme" in c)
    assert toolchain.builds() == [("Pods-App", "iphoneos"), ("Pods-App", "iphonesimulator")]


def test_build_failure_reports_error(workspace: Path, manifest: Path, toolchain, capsys) -> None:
    toolchain.products["Pods-App"] = [("Alamofire", "Alamofire")]
    toolchain.failing_sdks.add("iphoneos")

    with pytest.raises(SystemExit) as excinfo:
        main(["build", "--manifest", str(manifest), "--no-dsym"])

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "ERROR: Command failed with exit code 65" in out
    assert "** BUILD FAILED **" in out


def test_missing_manifest_reports_error(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["build", "--manifest", str(tmp_path / "Rome.toml")])

    assert excinfo.value.code == 1
    assert "Rome.toml not found" in capsys.readouterr().out


def test_clean_command(workspace: Path, manifest: Path) -> None:
    (workspace / "build" / "Debug-iphoneos").mkdir(parents=True)
    (workspace / "Rome").mkdir()

    main(["clean", "--manifest", str(manifest), "--dry-run"])
    assert (workspace / "build").exists()
    assert (workspace / "Rome").exists()

    main(["clean", "--manifest", str(manifest), "--build-only"])
    assert not (workspace / "build").exists()
    assert (workspace / "Rome").exists()

    main(["clean", "--manifest", str(manifest)])
    assert not (workspace / "Rome").exists()
