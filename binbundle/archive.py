#!/usr/bin/env python3
"""Tree (tar.gz) and container (ar) archive serialization."""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Sequence

from .file import iter_tree
from .utils import BundleError

GZIP_COMPRESSLEVEL = 6
TREE_ARCHIVE_SUFFIX = ".tar.gz"

AR_MAGIC = b"!<arch>\n"
AR_FMAG = b"`\n"
AR_HEADER_SIZE = 60
AR_NAME_LIMIT = 16
BSD_LONG_NAME_PREFIX = "#1/"
PARTIAL_SUFFIX = ".partial"

logger = logging.getLogger("binbundle.archive")


@dataclass(frozen=True)
class ArchiveMember:
    """One named blob stored in a container archive."""

    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def _normalize_owner(tarinfo: tarfile.TarInfo) -> tarfile.TarInfo:
    tarinfo.uid = 0
    tarinfo.gid = 0
    tarinfo.uname = "root"
    tarinfo.gname = "root"
    return tarinfo


def tar_and_gzip_dir(src_dir: Path) -> Path:
    """Pack ``src_dir`` into ``<src_dir>.tar.gz`` and remove the directory.

    Entries are stored relative to ``src_dir`` in the same order as
    :func:`binbundle.file.iter_tree`. Symbolic links are stored as links and
    file modes are kept.
    """
    dest = src_dir.with_name(src_dir.name + TREE_ARCHIVE_SUFFIX)

    try:
        with tarfile.open(
            dest,
            mode="w:gz",
            compresslevel=GZIP_COMPRESSLEVEL,
            format=tarfile.GNU_FORMAT,
        ) as tar:
            for entry in iter_tree(src_dir):
                arcname = entry.relative_to(src_dir).as_posix()
                tar.add(entry, arcname=arcname, recursive=False, filter=_normalize_owner)
    except tarfile.TarError as exc:
        raise BundleError(f"Failed to create {dest.name}: {exc}") from exc

    shutil.rmtree(src_dir)
    logger.debug("Packed %s", dest)
    return dest


def _ar_header(name: str, size: int, mtime: int, mode: int) -> bytes:
    encoded = name.encode("utf-8")
    if len(encoded) > AR_NAME_LIMIT:
        raise BundleError(f"Archive member name too long ({AR_NAME_LIMIT} bytes max): {name}")

    header = b"".join(
        [
            encoded.ljust(16, b" "),
            str(mtime).encode().ljust(12, b" "),
            b"0".ljust(6, b" "),
            b"0".ljust(6, b" "),
            format(mode, "o").encode().ljust(8, b" "),
            str(size).encode().ljust(10, b" "),
            AR_FMAG,
        ]
    )
    if len(header) != AR_HEADER_SIZE:
        raise BundleError(f"Invalid ar header for member: {name}")
    return header


def _write_ar_member(archive: BinaryIO, name: str, data: bytes, mtime: int, mode: int) -> None:
    archive.write(_ar_header(name, len(data), mtime, mode))
    archive.write(data)
    if len(data) % 2 == 1:
        archive.write(b"\n")


def create_ar_archive(srcs: Sequence[Path], dest: Path) -> Path:
    """Write ``srcs`` into an ``ar`` container at ``dest`` in the given order.

    Each member is stored under the file's basename, uncompressed. The
    container is written to a sibling file and moved onto ``dest`` only once
    every member is in place, so a failed write never leaves ``dest`` behind.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    partial = dest.with_name(dest.name + PARTIAL_SUFFIX)
    try:
        with partial.open("wb") as archive:
            archive.write(AR_MAGIC)
            for src in srcs:
                info = src.stat()
                _write_ar_member(archive, src.name, src.read_bytes(), int(info.st_mtime), info.st_mode)
        os.replace(partial, dest)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    logger.debug("Wrote container %s with %d members", dest, len(srcs))
    return dest


def read_ar_archive(path: Path) -> list[ArchiveMember]:
    """Read the members of an ``ar`` container in on-disk order."""
    raw = path.read_bytes()
    if not raw.startswith(AR_MAGIC):
        raise BundleError(f"Not an ar archive (missing ar header): {path}")

    members: list[ArchiveMember] = []
    offset = len(AR_MAGIC)

    while offset < len(raw):
        header = raw[offset : offset + AR_HEADER_SIZE]
        if len(header) < AR_HEADER_SIZE or header[58:60] != AR_FMAG:
            raise BundleError(f"Truncated or corrupt ar header at offset {offset} in {path}")

        name = header[:16].decode("utf-8").rstrip(" ")
        try:
            size = int(header[48:58].decode("ascii").strip())
        except ValueError as exc:
            raise BundleError(f"Invalid member size at offset {offset} in {path}") from exc

        start = offset + AR_HEADER_SIZE
        data = raw[start : start + size]
        if len(data) != size:
            raise BundleError(f"Truncated member {name!r} in {path}")

        if name.startswith(BSD_LONG_NAME_PREFIX):
            try:
                name_length = int(name[len(BSD_LONG_NAME_PREFIX) :])
            except ValueError as exc:
                raise BundleError(f"Invalid long member name at offset {offset} in {path}") from exc
            if not 0 <= name_length <= size:
                raise BundleError(f"Invalid long member name at offset {offset} in {path}")
            name = data[:name_length].decode("utf-8").rstrip("\0")
            data = data[name_length:]
        elif name.endswith("/") and name != "/":
            name = name[:-1]

        members.append(ArchiveMember(name=name, data=data))
        offset = start + size + (size % 2)

    return members
