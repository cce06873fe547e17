#!/usr/bin/env python3
"""Assemble Debian ``.deb`` packages from a built binary and its resources.

A ``.deb`` is an ``ar`` archive holding, in this order:

    debian-binary       format version, ``2.0``
    control.tar.gz      ``control`` metadata and ``md5sums``
    data.tar.gz         files to install:
        usr/bin/<binary>
        usr/lib/<binary>/...                       resources
        usr/share/applications/<binary>.desktop
        usr/share/icons/hicolor/...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from .archive import create_ar_archive, tar_and_gzip_dir
from .checksum import md5_hexdigest
from .desktop import generate_desktop_file, generate_icon_files
from .file import copy_file, copy_tree, create_file, iter_tree, resource_relpath, total_dir_size
from .settings import Settings
from .utils import BundleError, LogCallback, remove_dir

DEBIAN_BINARY_VERSION = "2.0\n"
PLACEHOLDER_DESCRIPTION = "(none)"

DEB_ARCH_MAP = {
    "x86": "i386",
    "x86_64": "amd64",
    # armel is not supported, so armhf is the only reasonable choice.
    "arm": "armhf",
    "aarch64": "arm64",
}


def map_architecture(arch: str) -> str:
    """Translate a target-triple architecture into Debian's spelling."""
    return DEB_ARCH_MAP.get(arch, arch)


def debian_package_name(name: str) -> str:
    return name.replace(" ", "-").lower()


def installed_size_kib(total_bytes: int) -> int:
    """Installed-Size is measured in KiB, rounded up."""
    return (total_bytes + 1023) // 1024


def _description_lines(short_description: str, long_description: Optional[str]) -> list[str]:
    short = short_description.strip() or PLACEHOLDER_DESCRIPTION
    long = (long_description or "").strip() or PLACEHOLDER_DESCRIPTION

    lines = [f"Description: {short}"]
    for line in long.splitlines():
        line = line.strip()
        lines.append(f" {line}" if line else " .")
    return lines


def render_control(
    package: str,
    version: str,
    arch: str,
    installed_size: int,
    maintainer: str = "",
    homepage: str = "",
    depends: Sequence[str] = (),
    short_description: str = "",
    long_description: Optional[str] = None,
) -> str:
    """Render a binary package ``control`` file.

    See https://www.debian.org/doc/debian-policy/ch-controlfields.html
    """
    lines = [
        f"Package: {debian_package_name(package)}",
        f"Version: {version}",
        f"Architecture: {arch}",
        f"Installed-Size: {installed_size}",
        f"Maintainer: {maintainer}",
    ]
    if homepage:
        lines.append(f"Homepage: {homepage}")
    if depends:
        lines.append(f"Depends: {', '.join(depends)}")
    lines.extend(_description_lines(short_description, long_description))
    return "\n".join(lines) + "\n"


def generate_control_file(settings: Settings, arch: str, control_dir: Path, data_dir: Path) -> Path:
    control = render_control(
        package=settings.bundle_name,
        version=settings.version,
        arch=arch,
        installed_size=installed_size_kib(total_dir_size(data_dir)),
        maintainer=settings.authors_comma_separated(),
        homepage=settings.homepage,
        depends=settings.deb_depends,
        short_description=settings.short_description,
        long_description=settings.long_description,
    )
    return create_file(control_dir / "control", control)


def generate_md5sums(control_dir: Path, data_dir: Path) -> Path:
    """Write ``md5sums`` listing every regular file under ``data_dir``."""
    lines: list[str] = []
    for entry in iter_tree(data_dir):
        if entry.is_symlink() or not entry.is_file():
            continue
        rel_path = entry.relative_to(data_dir).as_posix()
        try:
            rel_path.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise BundleError(f"Non-UTF-8 path: {rel_path!r}") from exc
        lines.append(f"{md5_hexdigest(entry)}  {rel_path}\n")

    return create_file(control_dir / "md5sums", "".join(lines))


def parse_control_fields(control_text: str) -> dict[str, str]:
    """Parse a control file into ``{field: value}``, keys lowercased.

    Continuation lines are joined onto the previous field with newlines.
    """
    fields: dict[str, str] = {}
    current_key: Optional[str] = None

    for line in control_text.splitlines():
        if not line.strip():
            continue

        if line[0].isspace() and current_key:
            fields[current_key] = f"{fields[current_key]}\n{line[1:]}"
            continue

        if ":" not in line:
            continue

        key, value = line.split(":", 1)
        current_key = key.strip().lower()
        fields[current_key] = value.strip()

    return fields


class DebBundler:
    """Build a ``.deb`` from bundle settings."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("binbundle.deb")

    def package_base_name(self, settings: Settings) -> str:
        arch = map_architecture(settings.binary_arch)
        return f"{settings.binary_name}_{settings.version}_{arch}"

    def bundle_project(self, settings: Settings, log_callback: LogCallback = None) -> list[Path]:
        """Assemble the package and return the path of the produced ``.deb``.

        The staging directory is wiped first and left in place afterwards.
        """
        arch = map_architecture(settings.binary_arch)
        package_base_name = self.package_base_name(settings)
        package_name = f"{package_base_name}.deb"
        base_dir = settings.project_out_directory / "bundle" / "deb"
        package_dir = base_dir / package_base_name
        package_path = base_dir / package_name

        self.logger.info("Bundling %s", package_name)
        if log_callback:
            log_callback(f"Bundling {package_name}")

        if package_dir.exists():
            self.logger.debug("Removing stale staging directory %s", package_dir)
            remove_dir(package_dir, self.logger)

        data_dir = package_dir / "data"
        copy_file(settings.binary_path, data_dir / "usr" / "bin" / settings.binary_name)
        self.transfer_resource_files(settings, data_dir)
        generate_icon_files(settings, data_dir, self.logger)
        generate_desktop_file(settings, data_dir)

        control_dir = package_dir / "control"
        generate_control_file(settings, arch, control_dir, data_dir)
        generate_md5sums(control_dir, data_dir)

        debian_binary_path = create_file(package_dir / "debian-binary", DEBIAN_BINARY_VERSION)

        control_tar_gz_path = tar_and_gzip_dir(control_dir)
        data_tar_gz_path = tar_and_gzip_dir(data_dir)

        create_ar_archive([debian_binary_path, control_tar_gz_path, data_tar_gz_path], package_path)
        self.logger.info("Created %s", package_path)
        return [package_path]

    def transfer_resource_files(self, settings: Settings, data_dir: Path) -> list[Path]:
        """Copy declared resources under ``usr/lib/<binary>/``."""
        resource_dir = data_dir / "usr" / "lib" / settings.binary_name
        copied: list[Path] = []

        for rel_src in settings.resource_files():
            src = settings.project_dir / rel_src
            dest = resource_dir / resource_relpath(rel_src)
            if src.is_dir():
                copy_tree(src, dest, dirs_exist_ok=True)
            else:
                copy_file(src, dest)
            self.logger.debug("Copied resource %s -> %s", rel_src, dest)
            copied.append(dest)

        return copied
