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
Configuration handler for podrome.

Hook options come either from the options mapping passed by the dependency
manager or from the [rome] table of a Rome.toml manifest. The manifest also
describes the sandbox and the resolved targets for standalone runs.
"""

import importlib
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from podrome.utils.apple.pods import (
    FILE_PATTERN_ATTRIBUTES,
    InstallContext,
    PodSpec,
    Sandbox,
    SUPPORTED_PLATFORMS,
    UmbrellaTarget,
)
from podrome.utils.errors import ConfigError

MANIFEST_FILE_NAME = "Rome.toml"

DEFAULT_CONFIGURATION = "Debug"


@dataclass
class RomeOptions:
    """Options read from the hook's user options."""
    dsym: bool = True
    configuration: str = DEFAULT_CONFIGURATION
    xcframework: bool = True
    flags: List[str] = field(default_factory=list)
    pre_compile: Optional[Callable] = None
    post_compile: Optional[Callable] = None

    @classmethod
    def from_user_options(cls, user_options: Optional[Mapping[str, Any]]) -> "RomeOptions":
        user_options = user_options or {}
        flags = user_options.get('flags') or []
        if isinstance(flags, str):
            flags = [flags]
        return cls(
            dsym=user_options.get('dsym', True),
            configuration=user_options.get('configuration', DEFAULT_CONFIGURATION),
            xcframework=user_options.get('xcframework', True),
            flags=list(flags),
            pre_compile=user_options.get('pre_compile'),
            post_compile=user_options.get('post_compile'),
        )

    def build_flags(self) -> List[str]:
        """Flags passed to every xcodebuild invocation."""
        flags = []
        # SKIP_INSTALL=NO keeps the built frameworks in the build directory
        # instead of Xcode's derived data folder
        if self.xcframework:
            flags.append('SKIP_INSTALL=NO')
        flags += self.flags
        return flags


@dataclass
class RomeManifest:
    """A parsed Rome.toml."""
    path: Path
    context: InstallContext
    user_options: Dict[str, Any] = field(default_factory=dict)


def resolve_callable(reference: str) -> Callable:
    """Resolve a "package.module:function" reference."""
    module_name, sep, attr = reference.partition(':')
    if not sep or not module_name or not attr:
        raise ConfigError(f"Invalid hook reference '{reference}', expected 'module:function'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import hook module '{module_name}': {e}")
    try:
        func = getattr(module, attr)
    except AttributeError:
        raise ConfigError(f"Hook '{attr}' not found in module '{module_name}'")
    if not callable(func):
        raise ConfigError(f"Hook '{reference}' is not callable")
    return func


def _string_list(value, where: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(x, str) for x in value):
        raise ConfigError(f"{where} must be a string or a list of strings")
    return list(value)


def _parse_spec(data: Dict[str, Any], where: str) -> PodSpec:
    if not isinstance(data, dict) or not data.get('name'):
        raise ConfigError(f"{where} needs a 'name'")

    overrides = {}
    for platform in SUPPORTED_PLATFORMS:
        platform_data = data.get(platform)
        if platform_data is None:
            continue
        if not isinstance(platform_data, dict):
            raise ConfigError(f"{where}.{platform} must be a table")
        overrides[platform] = {
            attribute: _string_list(platform_data[attribute], f"{where}.{platform}.{attribute}")
            for attribute in FILE_PATTERN_ATTRIBUTES
            if attribute in platform_data
        }

    return PodSpec(
        name=data['name'],
        module_name=data.get('module_name', ""),
        vendored_libraries=_string_list(data.get('vendored_libraries'), f"{where}.vendored_libraries"),
        vendored_frameworks=_string_list(data.get('vendored_frameworks'), f"{where}.vendored_frameworks"),
        resources=_string_list(data.get('resources'), f"{where}.resources"),
        platform_overrides=overrides,
    )


def _parse_target(data: Dict[str, Any], index: int) -> UmbrellaTarget:
    where = f"targets[{index}]"
    if not isinstance(data, dict) or not data.get('label'):
        raise ConfigError(f"{where} needs a 'label'")
    platform = data.get('platform')
    if not platform:
        raise ConfigError(f"{where} needs a 'platform'")
    deployment_target = data.get('deployment_target')
    if deployment_target is not None and not isinstance(deployment_target, str):
        # a TOML float drops digits, 13.10 reads as 13.1
        raise ConfigError(f"{where}.deployment_target must be a quoted version string")
    specs = [
        _parse_spec(spec, f"{where}.specs[{i}]")
        for i, spec in enumerate(data.get('specs', []))
    ]
    # unknown platforms are rejected by the build, not here
    return UmbrellaTarget(
        label=data['label'],
        platform_name=str(platform).lower(),
        deployment_target=deployment_target,
        specs=specs,
    )


def load_rome_manifest(manifest_path) -> RomeManifest:
    """
    Load a Rome.toml manifest.

    Args:
        manifest_path: Path to the manifest or to the directory holding it

    Returns:
        RomeManifest with the install context and the hook options

    Raises:
        ConfigError: If the file is missing or malformed
    """
    manifest_path = Path(manifest_path)
    if manifest_path.is_dir():
        manifest_path = manifest_path / MANIFEST_FILE_NAME
    if not manifest_path.is_file():
        raise ConfigError(f"{MANIFEST_FILE_NAME} not found at {manifest_path}")

    try:
        with open(manifest_path, "rb") as f:
            toml_data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Error reading {manifest_path}: {e}")

    base_dir = manifest_path.resolve().parent

    sandbox_config = toml_data.get('sandbox', {})
    sandbox_root = base_dir / sandbox_config.get('root', 'Pods')
    project_path = sandbox_config.get('project')
    project_path = base_dir / project_path if project_path else None
    sandbox = Sandbox(sandbox_root, project_path)

    targets = [
        _parse_target(target, i)
        for i, target in enumerate(toml_data.get('targets', []))
    ]

    user_options = dict(toml_data.get('rome', {}))
    for hook in ('pre_compile', 'post_compile'):
        if isinstance(user_options.get(hook), str):
            user_options[hook] = resolve_callable(user_options[hook])
    if 'flags' in user_options:
        user_options['flags'] = _string_list(user_options['flags'], "rome.flags")

    context = InstallContext(
        sandbox_root=sandbox_root,
        sandbox=sandbox,
        umbrella_targets=targets,
    )
    return RomeManifest(path=manifest_path, context=context, user_options=user_options)
