#!/usr/bin/env python3
"""Invoke cargo to produce the binary before it is bundled."""

from __future__ import annotations

import logging
import os
from typing import Optional

from .settings import Settings
from .utils import LogCallback, run_command

SKIP_BUILD_ENV = "BINBUNDLE_SKIP_BUILD"


def cargo_build_command(settings: Settings) -> list[str]:
    cmd = [os.environ.get("CARGO", "cargo"), "build"]

    if settings.target_triple:
        cmd.append(f"--target={settings.target_triple}")
    if settings.features:
        cmd.append(f"--features={settings.features}")

    artifact = settings.build_artifact
    if artifact.kind == "bin":
        cmd.append(f"--bin={artifact.name}")
    elif artifact.kind == "example":
        cmd.append(f"--example={artifact.name}")

    if settings.build_profile == "release":
        cmd.append("--release")
    elif settings.build_profile != "dev":
        cmd.extend(["--profile", settings.build_profile])

    if settings.all_features:
        cmd.append("--all-features")
    if settings.no_default_features:
        cmd.append("--no-default-features")
    return cmd


def build_project_if_unbuilt(
    settings: Settings,
    logger: Optional[logging.Logger] = None,
    log_callback: LogCallback = None,
) -> None:
    """Run ``cargo build`` unless ``BINBUNDLE_SKIP_BUILD`` is set."""
    logger = logger or logging.getLogger("binbundle.builder")
    if SKIP_BUILD_ENV in os.environ:
        logger.debug("%s is set, skipping build", SKIP_BUILD_ENV)
        return

    run_command(
        cargo_build_command(settings),
        logger,
        cwd=settings.project_dir,
        log_callback=log_callback,
    )
