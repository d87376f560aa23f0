"""Command-line entry point for the uCPU model.

Assembles a source file (or loads a hex image), clocks the core for a fixed
number of cycles after reset and prints the resulting architectural state.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pyucpu.loader import (
    AssemblerError,
    ImageFormatError,
    ProgramImage,
    assemble_from_path,
    load_hex_from_path,
    save_hex,
    write_listing,
    write_listing_lines,
)
from pyucpu.system import MachineConfig, create_machine


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run.py",
        description="uCPU pipelined core model",
    )
    parser.add_argument(
        "source",
        type=Path,
        help="Assembler source, or a hex image when --hex is given or the suffix is .hex",
    )
    parser.add_argument(
        "--hex",
        action="store_true",
        help="Treat SOURCE as a hex image instead of assembler source",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=256,
        help="Number of clock cycles to run after reset (default: 256)",
    )
    parser.add_argument(
        "--listing",
        type=Path,
        help="Write the assembler listing to this path",
    )
    parser.add_argument(
        "--hex-out",
        type=Path,
        help="Write the assembled hex image to this path",
    )
    parser.add_argument(
        "--trace",
        type=int,
        default=0,
        metavar="N",
        help="Print the last N cycles of the pipeline trace",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the non-zero bytes of data memory after the run",
    )
    return parser


def load_program(path: Path, *, as_hex: bool) -> ProgramImage:
    if as_hex or path.suffix.lower() == ".hex":
        return load_hex_from_path(path)
    return assemble_from_path(path)


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if not args.source.exists():
        parser.error(f"source file not found: {args.source}")
    if args.cycles < 0:
        parser.error("--cycles must not be negative")

    try:
        program = load_program(args.source, as_hex=args.hex)
    except AssemblerError as exc:
        for message in exc.errors:
            print(message, file=sys.stderr)
        if args.listing:
            write_listing_lines(args.listing, exc.listing)
        parser.exit(1, f"run.py: {exc}\n")
    except ImageFormatError as exc:
        parser.exit(1, f"run.py: {exc}\n")

    for message in program.warnings + program.errors:
        print(message, file=sys.stderr)
    if args.listing:
        write_listing(args.listing, program)
    if args.hex_out:
        save_hex(args.hex_out, program.words)

    machine = create_machine(MachineConfig(rom_image=program.words, trace_capacity=max(args.trace, 0)))
    machine.run(args.cycles)

    print(machine.format_state())
    if args.dump:
        for address, value in enumerate(machine.ram.snapshot()):
            if value:
                print(f"  [{address:02X}] = {value:02X}")
    if machine.trace is not None:
        for line in machine.trace.format_entries(args.trace):
            print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
