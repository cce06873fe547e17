#!/usr/bin/env python3
"""Bundle settings loaded from a project's Cargo manifest."""

from __future__ import annotations

import glob
import logging
import os
import platform
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional

from .category import Category, parse_category
from .utils import SettingsError, ValidationError

MANIFEST_NAME = "Cargo.toml"
GLOB_CHARS = ("*", "?", "[")

HOST_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "x86",
    "i586": "x86",
    "i686": "x86",
    "armv7l": "arm",
    "armv6l": "arm",
}

logger = logging.getLogger("binbundle.settings")


@dataclass(frozen=True)
class BuildArtifact:
    """Which target of the project gets bundled."""

    kind: str = "main"
    name: Optional[str] = None

    @classmethod
    def main(cls) -> BuildArtifact:
        return cls()

    @classmethod
    def bin(cls, name: str) -> BuildArtifact:
        return cls("bin", name)

    @classmethod
    def example(cls, name: str) -> BuildArtifact:
        return cls("example", name)


@dataclass(frozen=True)
class BundleOptions:
    """Command-line choices that shape the settings."""

    artifact: BuildArtifact = field(default_factory=BuildArtifact.main)
    package_formats: tuple[str, ...] = ()
    profile: str = "dev"
    target_triple: Optional[str] = None
    features: Optional[str] = None
    all_features: bool = False
    no_default_features: bool = False


@dataclass(frozen=True)
class Settings:
    """Read-only description of one bundle run."""

    project_dir: Path
    package_name: str
    version: str
    binary_name: str
    binary_path: Path
    bundle_name: str
    identifier: Optional[str] = None
    authors: tuple[str, ...] = ()
    homepage: str = ""
    short_description: str = ""
    long_description: Optional[str] = None
    copyright: Optional[str] = None
    category: Optional[Category] = None
    deb_depends: tuple[str, ...] = ()
    icon_patterns: tuple[str, ...] = ()
    resource_patterns: tuple[str, ...] = ()
    package_formats: tuple[str, ...] = ()
    build_artifact: BuildArtifact = field(default_factory=BuildArtifact.main)
    build_profile: str = "dev"
    target_triple: Optional[str] = None
    features: Optional[str] = None
    all_features: bool = False
    no_default_features: bool = False
    target_dir: Optional[Path] = None

    @property
    def binary_arch(self) -> str:
        """Architecture of the bundled binary, in target-triple spelling."""
        if self.target_triple:
            return self.target_triple.split("-", 1)[0]
        machine = platform.machine().lower()
        return HOST_ARCH_ALIASES.get(machine, machine)

    @property
    def project_out_directory(self) -> Path:
        """Directory holding the build output for the selected target and profile."""
        return _out_directory(
            self.project_dir, self.target_dir, self.target_triple, self.build_profile
        )

    def authors_comma_separated(self) -> str:
        return ", ".join(self.authors)

    def resource_files(self) -> Iterator[Path]:
        """Yield declared resource paths, relative to the project when declared so."""
        yield from self._expand_patterns(self.resource_patterns, "resource")

    def icon_files(self) -> Iterator[Path]:
        """Yield declared icon paths, relative to the project when declared so."""
        yield from self._expand_patterns(self.icon_patterns, "icon")

    def _expand_patterns(self, patterns: tuple[str, ...], kind: str) -> Iterator[Path]:
        for pattern in patterns:
            if not any(char in pattern for char in GLOB_CHARS):
                candidate = self.project_dir / pattern
                if not candidate.exists() and not candidate.is_symlink():
                    raise SettingsError(f"{kind.capitalize()} path does not exist: {pattern}")
                yield Path(pattern)
                continue

            matches = sorted(glob.glob(pattern, root_dir=self.project_dir, recursive=True))
            if not matches:
                logger.warning("%s pattern matched no files: %s", kind.capitalize(), pattern)
            for match in matches:
                yield Path(match)


def profile_dir_name(profile: str) -> str:
    if profile == "dev":
        return "debug"
    return profile


def _out_directory(
    project_dir: Path,
    target_dir: Optional[Path],
    target_triple: Optional[str],
    profile: str,
) -> Path:
    out_dir = target_dir or project_dir / "target"
    if target_triple:
        out_dir = out_dir / target_triple
    return out_dir / profile_dir_name(profile)


def _string_list(table: dict[str, Any], key: str) -> tuple[str, ...]:
    value = table.get(key, [])
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise SettingsError(f"`{key}` must be a string or a list of strings")
    return tuple(value)


def _optional_string(table: dict[str, Any], key: str) -> Optional[str]:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise SettingsError(f"`{key}` must be a string")
    return value


def read_manifest(project_dir: Path) -> dict[str, Any]:
    manifest_path = project_dir / MANIFEST_NAME
    try:
        with manifest_path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise SettingsError(f"No {MANIFEST_NAME} found in {project_dir}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"Invalid {MANIFEST_NAME}: {exc}") from exc


def _bundle_table(package: dict[str, Any], artifact: BuildArtifact) -> dict[str, Any]:
    """Merge the per-target bundle table over the base one."""
    metadata = package.get("metadata", {})
    base = dict(metadata.get("bundle", {}))
    overrides = base.pop("bin", {}), base.pop("example", {})

    if artifact.kind == "bin":
        base.update(overrides[0].get(artifact.name, {}))
    elif artifact.kind == "example":
        base.update(overrides[1].get(artifact.name, {}))
    return base


def load_settings(project_dir: Path, options: Optional[BundleOptions] = None) -> Settings:
    """Build :class:`Settings` from ``Cargo.toml`` in ``project_dir``.

    The category string is resolved here, so an invalid one fails before any
    staging happens.
    """
    options = options or BundleOptions()
    project_dir = project_dir.expanduser().resolve()

    if options.profile == "debug":
        raise ValidationError("`debug` profile is reserved")

    manifest = read_manifest(project_dir)
    package = manifest.get("package")
    if not isinstance(package, dict):
        raise SettingsError(f"{MANIFEST_NAME} has no [package] table")

    package_name = _optional_string(package, "name")
    version = _optional_string(package, "version")
    if not package_name:
        raise SettingsError("[package] is missing `name`")
    if not version:
        raise SettingsError("[package] is missing `version`")

    bundle = _bundle_table(package, options.artifact)

    binary_name = options.artifact.name or package_name
    target_dir_env = os.environ.get("CARGO_TARGET_DIR")
    target_dir = Path(target_dir_env) if target_dir_env else None

    category_text = _optional_string(bundle, "category")
    category = parse_category(category_text) if category_text else None

    out_dir = _out_directory(project_dir, target_dir, options.target_triple, options.profile)
    if options.artifact.kind == "example":
        out_dir = out_dir / "examples"
    binary_path = out_dir / (binary_name + (".exe" if os.name == "nt" else ""))

    settings = Settings(
        project_dir=project_dir,
        package_name=package_name,
        version=_optional_string(bundle, "version") or version,
        binary_name=binary_name,
        binary_path=binary_path,
        bundle_name=_optional_string(bundle, "name") or package_name,
        identifier=_optional_string(bundle, "identifier"),
        authors=_string_list(package, "authors"),
        homepage=_optional_string(package, "homepage") or "",
        short_description=(
            _optional_string(bundle, "short_description")
            or _optional_string(package, "description")
            or ""
        ),
        long_description=_optional_string(bundle, "long_description"),
        copyright=_optional_string(bundle, "copyright"),
        category=category,
        deb_depends=_string_list(bundle, "deb_depends"),
        icon_patterns=_string_list(bundle, "icon"),
        resource_patterns=_string_list(bundle, "resources"),
        package_formats=options.package_formats,
        build_artifact=options.artifact,
        build_profile=options.profile,
        target_triple=options.target_triple,
        features=options.features,
        all_features=options.all_features,
        no_default_features=options.no_default_features,
        target_dir=target_dir,
    )

    logger.debug("Loaded settings for %s %s", package_name, settings.version)
    return settings
