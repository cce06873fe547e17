"""Shared fixtures: a throwaway project directory with a fake built binary."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path

import pytest

from binbundle.archive import ArchiveMember
from binbundle.settings import Settings

TRIPLE = "x86_64-unknown-linux-gnu"

CARGO_TOML = """\
[package]
name = "foo"
version = "1.2.3"
authors = ["Ferris <ferris@example.com>"]
description = "A friendly crab"
homepage = "https://example.com/foo"

[package.metadata.bundle]
name = "Foo App"
identifier = "com.example.foo"
category = "Developer Tool"
resources = ["data/icon.png"]
deb_depends = ["libc6 (>= 2.31)", "libgtk-3-0"]
long_description = \"\"\"
Foo does things.

It does them well.
\"\"\"

[package.metadata.bundle.bin.foo-cli]
name = "Foo CLI"
category = "Utility"
"""


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project with ``Cargo.toml``, one resource and a built binary."""
    root = tmp_path / "project"
    (root / "data").mkdir(parents=True)
    (root / "data" / "icon.png").write_bytes(b"not really a png")
    (root / "Cargo.toml").write_text(CARGO_TOML, encoding="utf-8")

    binary = root / "target" / TRIPLE / "debug" / "foo"
    binary.parent.mkdir(parents=True)
    binary.write_bytes(b"\x7fELF fake binary\n")
    binary.chmod(0o755)
    return root


@pytest.fixture
def make_settings(project_dir: Path):
    """Build :class:`Settings` for ``project_dir`` with selected overrides."""

    def _make(**overrides) -> Settings:
        values = dict(
            project_dir=project_dir,
            package_name="foo",
            version="1.2.3",
            binary_name="foo",
            binary_path=project_dir / "target" / TRIPLE / "debug" / "foo",
            bundle_name="foo",
            target_triple=TRIPLE,
            resource_patterns=("data/icon.png",),
            package_formats=("deb",),
        )
        values.update(overrides)
        return Settings(**values)

    return _make


def open_member_tar(member: ArchiveMember) -> tarfile.TarFile:
    return tarfile.open(fileobj=io.BytesIO(member.data), mode="r:gz")
