#!/usr/bin/env python3
"""Human-readable YM file inspector.

Prints the decoded header, any header warnings, the digi-drum table and
an optional register dump of the first frames.  LHA-packed files need the
``lhafile`` package.
"""

from __future__ import annotations

import argparse
import glob
from pathlib import Path
import sys
from typing import Iterable, List

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ym import DecodeError, DecodedFile, MissingDigiDrum, decode_file  # noqa: E402


def collect_paths(patterns: Iterable[str]) -> List[Path]:
    paths: List[Path] = []
    for pattern in patterns:
        matches = sorted(Path(p) for p in glob.glob(pattern, recursive=True))
        if matches:
            paths.extend(matches)
        else:
            candidate = Path(pattern)
            if candidate.exists():
                paths.append(candidate)
    return paths


def format_report(song: DecodedFile, frames: int) -> List[str]:
    header = song.header
    lines = [
        f"version      : {header.variant}",
        f"title        : {header.title}",
        f"author       : {header.author}",
        f"comment      : {header.comment}",
        f"frames       : {header.frame_count} ({song.duration_seconds:.1f}s)",
        f"chip clock   : {header.chip_clock_hz} Hz",
        f"frame rate   : {header.frame_rate_hz} Hz",
        f"loop frame   : {header.loop_frame}" + ("" if header.has_loop else " (no loop)"),
        f"attributes   : 0x{int(header.attributes):X}",
    ]
    if header.created is not None:
        lines.append(f"created      : {header.created.isoformat()}")
    for sample in song.digidrums:
        lines.append(f"digi-drum {sample.index:2d} : {len(sample)} bytes")

    if frames:
        lines.append("")
        lines.append("frame  " + " ".join(f"r{r:<2d}" for r in range(16)) + "  effects")
        seq = song.sequence()
        for step in seq:
            if step.frame >= frames or seq.loops:
                break
            regs = " ".join(f"{v:02X} " for v in step.snapshot.registers)
            fx = ", ".join(
                f"{e.fx.name.lower()}@{'ABC'[e.channel]}/{e.frequency_hz:.0f}Hz"
                for e in step.effects
            )
            if isinstance(step.digidrum, MissingDigiDrum):
                fx += f" [{step.digidrum}]"
            lines.append(f"{step.frame:5d}  {regs} {fx}")
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Show the header and frames of YM files.")
    parser.add_argument(
        "paths",
        nargs="+",
        help="File paths or glob patterns (quotes recommended for wildcards).",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=0,
        help="Dump the registers of the first N frames.",
    )
    args = parser.parse_args(argv)

    targets = collect_paths(args.paths)
    if not targets:
        parser.error("No files matched the provided paths/patterns.")

    status = 0
    for path in targets:
        print(f"== {path}")
        try:
            song = decode_file(path)
        except DecodeError as err:
            print(f"ERR {err}", file=sys.stderr)
            status = 1
            continue
        for warning in song.header.warnings:
            print(f"warning: {warning}", file=sys.stderr)
        print("\n".join(format_report(song, args.frames)))
    return status


if __name__ == "__main__":
    raise SystemExit(main())
