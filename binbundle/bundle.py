#!/usr/bin/env python3
"""Package format registry and the top-level bundling entry point."""

from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

from .deb import DebBundler
from .settings import Settings
from .utils import LogCallback, ValidationError


class PackageFormat(Enum):
    DEB = "deb"

    @classmethod
    def from_short_name(cls, name: str) -> PackageFormat:
        for package_format in cls:
            if package_format.value == name:
                return package_format
        raise ValidationError(f"unsupported bundle format: {name}")

    @classmethod
    def platform_default(cls, platform: Optional[str] = None) -> PackageFormat:
        platform = platform or sys.platform
        if platform.startswith("linux"):
            return cls.DEB
        raise ValidationError(f"OS not supported: {platform}")


BUNDLERS = {
    PackageFormat.DEB: DebBundler,
}


def requested_formats(settings: Settings) -> list[PackageFormat]:
    if not settings.package_formats:
        return [PackageFormat.platform_default()]
    return [PackageFormat.from_short_name(name) for name in settings.package_formats]


def run(
    settings: Settings,
    logger: Optional[logging.Logger] = None,
    log_callback: LogCallback = None,
) -> list[Path]:
    """Bundle every requested format, one after another, returning all artifacts."""
    formats = requested_formats(settings)
    paths: list[Path] = []
    for package_format in formats:
        bundler = BUNDLERS[package_format](logger)
        paths.extend(bundler.bundle_project(settings, log_callback=log_callback))
    return paths
