#!/usr/bin/env python3
"""Utility helpers for binbundle."""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Optional

LogCallback = Optional[Callable[[str], None]]
ANSI_ESCAPE_RE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~]|[\(\)][0-9A-Za-z])")


class BinBundleError(Exception):
    """Base exception for all binbundle errors."""


class ValidationError(BinBundleError):
    """Raised when input validation fails."""


class SettingsError(ValidationError):
    """Raised when the project manifest cannot be turned into settings."""


class CategoryError(ValidationError):
    """Raised when a category string does not name a known category."""

    def __init__(self, value: str, suggestion: Optional[str] = None) -> None:
        self.value = value
        self.suggestion = suggestion
        if suggestion:
            message = f'invalid category "{value}" (did you mean "{suggestion}"?)'
        else:
            message = f'invalid category "{value}"'
        super().__init__(message)


class CommandExecutionError(BinBundleError):
    """Raised when a subprocess returns a non-zero exit status."""


class BundleError(BinBundleError):
    """Raised when package assembly fails."""


class IconError(BundleError):
    """Raised when declared icons cannot be turned into icon files."""


def setup_logging(name: str = "binbundle", level: int | str = logging.INFO) -> logging.Logger:
    """Create and configure a logger with consistent formatting."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger.setLevel(level)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
    logger.addHandler(stream_handler)
    return logger


def remove_dir(path: Path, logger: Optional[logging.Logger] = None) -> None:
    """Remove a directory tree, doing nothing if it is already gone."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    if logger:
        logger.debug("Removed %s", path)


def strip_ansi_escapes(text: str) -> str:
    """Remove ANSI terminal escape codes from a log line."""
    return ANSI_ESCAPE_RE.sub("", text)


def run_command(
    cmd: list[str],
    logger: logging.Logger,
    cwd: Optional[Path] = None,
    env: Optional[dict[str, str]] = None,
    log_callback: LogCallback = None,
    check: bool = True,
) -> tuple[int, list[str]]:
    """Run a command and stream combined stdout/stderr line-by-line."""
    logger.debug("Running command: %s", " ".join(cmd))

    process_env = os.environ.copy()
    if env:
        process_env.update(env)

    try:
        process = subprocess.Popen(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=process_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
        )
    except OSError as exc:
        raise CommandExecutionError(f"Failed to start {cmd[0]}: {exc}") from exc

    output_lines: list[str] = []
    assert process.stdout is not None

    for line in iter(process.stdout.readline, ""):
        stripped = strip_ansi_escapes(line.rstrip("\n")).strip()
        output_lines.append(stripped)
        if stripped:
            logger.info(stripped)
            if log_callback:
                log_callback(stripped)

    process.wait()

    if check and process.returncode != 0:
        joined = "\n".join(output_lines)
        raise CommandExecutionError(
            f"Command failed with exit code {process.returncode}: {' '.join(cmd)}\n{joined}"
        )

    return process.returncode, output_lines
