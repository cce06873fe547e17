#!/usr/bin/env python3
"""Freedesktop icon and desktop-entry generation for Linux packages."""

from __future__ import annotations

import logging
from pathlib import Path, PurePath
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .file import copy_file, create_file
from .settings import Settings
from .utils import IconError

ICON_THEME_DIR = Path("usr/share/icons/hicolor")
APPLICATIONS_DIR = Path("usr/share/applications")

logger = logging.getLogger("binbundle.desktop")


def is_retina(path: PurePath) -> bool:
    """Return True when the file stem marks a high-density (``@2x``) icon."""
    return path.stem.endswith("@2x")


def icon_dest(data_dir: Path, binary_name: str, width: int, height: int, retina: bool) -> Path:
    size_dir = f"{width}x{height}{'@2x' if retina else ''}"
    return data_dir / ICON_THEME_DIR / size_dir / "apps" / f"{binary_name}.png"


def generate_icon_files(
    settings: Settings,
    data_dir: Path,
    logger: Optional[logging.Logger] = None,
) -> list[Path]:
    """Install every decodable declared icon under the hicolor theme.

    PNG files are copied as they are, other formats are converted. The first
    icon seen for a given size wins.
    """
    logger = logger or logging.getLogger("binbundle.desktop")

    declared = 0
    installed: dict[tuple[int, int, bool], Path] = {}

    for icon_path in settings.icon_files():
        declared += 1
        src = settings.project_dir / icon_path
        try:
            with Image.open(src) as image:
                width, height = image.size
                retina = is_retina(icon_path)
                key = (width, height, retina)
                if key in installed:
                    logger.debug("Skipping duplicate %dx%d icon: %s", width, height, icon_path)
                    continue

                dest = icon_dest(data_dir, settings.binary_name, width, height, retina)
                if image.format == "PNG":
                    copy_file(src, dest)
                else:
                    dest.parent.mkdir(parents=True, exist_ok=True)
                    image.convert("RGBA").save(dest, format="PNG")
        except UnidentifiedImageError:
            logger.warning("Skipping unreadable icon file: %s", icon_path)
            continue
        except (Image.DecompressionBombError, ValueError, SyntaxError) as exc:
            raise IconError(f"Failed to decode icon {icon_path}: {exc}") from exc

        installed[key] = dest

    if declared and not installed:
        raise IconError("no usable icon files found")

    return list(installed.values())


def render_desktop_entry(settings: Settings) -> str:
    lines = ["[Desktop Entry]", "Encoding=UTF-8"]
    if settings.category is not None:
        lines.append(f"Categories={settings.category.gnome_desktop_categories()}")
    if settings.short_description.strip():
        lines.append(f"Comment={settings.short_description.strip()}")
    lines.extend(
        [
            f"Exec={settings.binary_name}",
            f"Icon={settings.binary_name}",
            f"Name={settings.bundle_name}",
            "Terminal=false",
            "Type=Application",
        ]
    )
    return "\n".join(lines) + "\n"


def generate_desktop_file(settings: Settings, data_dir: Path) -> Path:
    """Write ``usr/share/applications/<binary>.desktop`` under ``data_dir``."""
    dest = data_dir / APPLICATIONS_DIR / f"{settings.binary_name}.desktop"
    create_file(dest, render_desktop_entry(settings))
    logger.debug("Wrote desktop entry %s", dest)
    return dest
