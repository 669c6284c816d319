"""Command-line interface for the HSV inspector."""

from __future__ import annotations

import argparse
import signal
from pathlib import Path
from typing import List, Optional

from hsv_inspector.config import InspectorConfig
from hsv_inspector.controls import OpenCVSurface
from hsv_inspector.display import DisplayLoop
from hsv_inspector.frame_source import AttachError, FrameSource
from hsv_inspector.utils.logging_utils import diag, log_event

PROG = "hsv-inspector"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROG, add_help=True)
    parser.add_argument("--name", help="name of the shared memory area to attach")
    parser.add_argument("--width", help="width of the frame")
    parser.add_argument("--height", help="height of the frame")
    parser.add_argument(
        "--poll-ms", type=int, default=InspectorConfig.poll_interval_ms, help="wait per iteration"
    )
    parser.add_argument(
        "--clamp-after-subtract",
        action="store_true",
        help="floor at 0 between the subtractive and additive bias",
    )
    parser.add_argument("--no-status", action="store_true", help="hide the fps/range overlay")
    parser.add_argument(
        "--log", type=Path, default=None, help="append session events to this JSONL file"
    )
    return parser


def print_usage() -> None:
    """Print usage to stderr.

    @return None
    """
    lines = [
        f"{PROG} attaches to a shared memory area containing an ARGB image and "
        "transforms it to HSV color space for inspection.",
        f"Usage:   {PROG} --name=<name of shared memory area> --width=<W> --height=<H>",
        "         --name:   name of the shared memory area to attach",
        "         --width:  width of the frame",
        "         --height: height of the frame",
        f"Example: {PROG} --name=img.argb --width=640 --height=480",
    ]
    diag("\n".join(lines))


def parse_dimension(value: Optional[str]) -> Optional[int]:
    """Return ``value`` as a positive int, or None if it is missing or invalid.

    @param value Raw command-line value.
    @return Parsed dimension or None.
    """
    if value is None:
        return None
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint.

    @param argv Arguments (defaults to sys.argv[1:]).
    @return Process exit status.
    """
    args = build_parser().parse_args(argv)

    if not args.name or args.width is None or args.height is None:
        print_usage()
        return 1
    width = parse_dimension(args.width)
    height = parse_dimension(args.height)
    if width is None or height is None:
        diag(f"{PROG}: --width and --height must be positive integers")
        print_usage()
        return 1

    config = InspectorConfig(
        poll_interval_ms=max(1, args.poll_ms),
        show_status=not args.no_status,
        clamp_after_subtract=args.clamp_after_subtract,
        events_log_path=args.log,
    )

    try:
        source = FrameSource.attach(args.name, width, height)
    except AttachError as exc:
        diag(f"{PROG}: {exc}")
        return 1

    try:
        diag(f"[ATTACH] attached to shared memory '{source.name}' ({source.size} bytes)")
        log_event(
            config.events_log_path,
            "attach",
            name=source.name,
            size=source.size,
            width=width,
            height=height,
        )
        surface = OpenCVSurface(config.control_window)
        loop = DisplayLoop(source, surface, config)
        previous = signal.signal(signal.SIGINT, lambda *_: loop.cancel("interrupt"))
        try:
            loop.run()
        finally:
            signal.signal(signal.SIGINT, previous)
            surface.close()
        print(f"[LOOP] stopped after {loop.frames} frames ({loop.exit_reason})")
    finally:
        source.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
