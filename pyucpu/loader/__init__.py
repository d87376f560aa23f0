"""Assembler and image loaders for uCPU programs."""

from __future__ import annotations

from .assembler import (
    AssemblerError,
    assemble,
    assemble_from_path,
    assemble_source,
    write_listing,
    write_listing_lines,
)
from .hexfile import ImageFormatError, format_hex, load_hex, load_hex_from_path, parse_hex, save_hex
from .program import ROM_WORDS, AddressRegion, ProgramImage

__all__ = [
    "ROM_WORDS",
    "AddressRegion",
    "ProgramImage",
    "AssemblerError",
    "ImageFormatError",
    "assemble",
    "assemble_source",
    "assemble_from_path",
    "write_listing",
    "write_listing_lines",
    "format_hex",
    "parse_hex",
    "load_hex",
    "load_hex_from_path",
    "save_hex",
]
