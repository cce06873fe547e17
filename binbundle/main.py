#!/usr/bin/env python3
"""Entry point for binbundle."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .builder import build_project_if_unbuilt
from .bundle import PackageFormat, run
from .settings import BuildArtifact, BundleOptions, load_settings
from .utils import BinBundleError, setup_logging


def _print_finished(output_paths: list[Path]) -> None:
    noun = "bundle" if len(output_paths) == 1 else "bundles"
    print(f"    Finished {len(output_paths)} {noun} at:")
    for path in output_paths:
        print(f"        {path}")


def _options_from_args(args: argparse.Namespace) -> BundleOptions:
    if args.bin:
        artifact = BuildArtifact.bin(args.bin)
    elif args.example:
        artifact = BuildArtifact.example(args.example)
    else:
        artifact = BuildArtifact.main()

    if args.release:
        profile = "release"
    else:
        profile = args.profile or "dev"

    return BundleOptions(
        artifact=artifact,
        package_formats=(args.format,) if args.format else (),
        profile=profile,
        target_triple=args.target,
        features=args.features,
        all_features=args.all_features,
        no_default_features=args.no_default_features,
    )


def run_bundle(args: argparse.Namespace) -> int:
    """Load settings, build the binary and bundle it."""
    logger = setup_logging("binbundle", os.environ.get("BINBUNDLE_LOG_LEVEL", "INFO"))

    try:
        settings = load_settings(Path(args.project_dir), _options_from_args(args))
        build_project_if_unbuilt(settings, logger)
        output_paths = run(settings, logger, log_callback=lambda line: print(f"    {line}"))
    except (BinBundleError, OSError) as exc:
        logger.error("Bundling failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    _print_finished(output_paths)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build command-line parser."""
    parser = argparse.ArgumentParser(
        prog="binbundle",
        description="Bundle compiled executables into native packages.",
    )
    parser.add_argument("--version", action="version", version=f"binbundle {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    bundle = subparsers.add_parser("bundle", help="Bundle an executable into an OS package")
    target = bundle.add_mutually_exclusive_group()
    target.add_argument("--bin", metavar="NAME", help="Bundle the specified binary")
    target.add_argument("--example", metavar="NAME", help="Bundle the specified example")
    bundle.add_argument(
        "--format",
        choices=[package_format.value for package_format in PackageFormat],
        help="Which bundle format to produce",
    )
    profile = bundle.add_mutually_exclusive_group()
    profile.add_argument(
        "--release",
        action="store_true",
        help="Build a bundle from a target built in release mode",
    )
    profile.add_argument(
        "--profile",
        metavar="NAME",
        help="Build a bundle from a target built using the given profile",
    )
    bundle.add_argument("--target", metavar="TRIPLE", help="Build a bundle for the target triple")
    bundle.add_argument(
        "--features",
        metavar="FEATURES",
        help='Set crate features for the bundle, e.g. --features "f1 f2"',
    )
    bundle.add_argument(
        "--all-features",
        action="store_true",
        help="Build a bundle with all crate features",
    )
    bundle.add_argument(
        "--no-default-features",
        action="store_true",
        help="Build a bundle without the default crate features",
    )
    bundle.add_argument(
        "--project-dir",
        default=".",
        metavar="DIR",
        help="Directory containing Cargo.toml (default: current directory)",
    )
    bundle.set_defaults(handler=run_bundle)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Program entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
