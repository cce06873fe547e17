#!/usr/bin/env python3
"""Filesystem helpers used while staging package contents."""

from __future__ import annotations

import os
import shutil
from pathlib import Path, PurePath
from typing import Iterator, Union

PathLike = Union[str, os.PathLike]

ROOT_SEGMENT = "_root_"
PARENT_SEGMENT = "_up_"


def resource_relpath(path: PathLike) -> PurePath:
    """Map a declared resource path to a relative path under the resource root.

    A leading root becomes ``_root_``, every ``..`` becomes ``_up_`` and ``.``
    segments are dropped, so the result never escapes the resource root and
    distinct inputs stay distinct. Drive prefixes are ignored.
    """
    pure = path if isinstance(path, PurePath) else PurePath(os.fspath(path))

    parts: list[str] = []
    if pure.root:
        parts.append(ROOT_SEGMENT)

    components = pure.parts[1:] if pure.anchor else pure.parts
    for component in components:
        if component == "..":
            parts.append(PARENT_SEGMENT)
        elif component == ".":
            continue
        else:
            parts.append(component)

    return type(pure)(*parts)


def iter_tree(root: Path) -> Iterator[Path]:
    """Yield every entry below ``root`` in a deterministic, pre-order walk.

    Entries of a directory are visited sorted by name and each directory is
    yielded before its contents. Symbolic links are yielded but never followed.
    """
    with os.scandir(root) as scanner:
        entries = sorted(scanner, key=lambda entry: entry.name)

    for entry in entries:
        path = Path(entry.path)
        yield path
        if entry.is_dir(follow_symlinks=False):
            yield from iter_tree(path)


def create_file(path: Path, data: Union[str, bytes]) -> Path:
    """Write ``data`` to ``path``, creating missing parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, str):
        data = data.encode("utf-8")
    path.write_bytes(data)
    return path


def copy_file(src: Path, dst: Path) -> Path:
    """Copy a regular file, creating any missing parents of ``dst``.

    Fails if ``src`` is missing or is a directory. An existing ``dst`` is
    overwritten, and a symbolic link at ``dst`` is replaced rather than
    written through.
    """
    if not src.exists():
        raise FileNotFoundError(f"Source file does not exist: {src}")
    if src.is_dir():
        raise IsADirectoryError(f"Expected a file but found a directory: {src}")

    dst.parent.mkdir(parents=True, exist_ok=True)
    if dst.is_symlink():
        dst.unlink()
    shutil.copy(src, dst)
    return dst


def copy_tree(src: Path, dst: Path, dirs_exist_ok: bool = False) -> Path:
    """Recursively copy a directory, recreating symbolic links verbatim.

    Fails if ``src`` is not a directory. An existing ``dst`` is an error
    unless ``dirs_exist_ok`` is set, in which case the tree is merged into it
    and colliding files and links are overwritten.
    """
    if not src.is_dir():
        raise NotADirectoryError(f"Expected a directory: {src}")
    if not dirs_exist_ok and (dst.exists() or dst.is_symlink()):
        raise FileExistsError(f"Destination already exists: {dst}")

    dst.mkdir(parents=True, exist_ok=dirs_exist_ok)

    for entry in iter_tree(src):
        target = dst / entry.relative_to(src)
        if entry.is_symlink():
            if target.is_symlink() or target.is_file():
                target.unlink()
            link_target = os.readlink(entry)
            target.symlink_to(link_target, target_is_directory=entry.is_dir())
        elif entry.is_dir():
            if target.is_symlink():
                target.unlink()
            target.mkdir(exist_ok=dirs_exist_ok)
        else:
            if target.is_symlink():
                target.unlink()
            shutil.copy(entry, target)

    return dst


def total_dir_size(root: Path) -> int:
    """Return the summed size in bytes of the regular files below ``root``."""
    total = 0
    for entry in iter_tree(root):
        if entry.is_file() and not entry.is_symlink():
            total += entry.stat().st_size
    return total
