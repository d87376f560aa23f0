"""Hex dump format for uCPU ROM images.

The image is written as 16 lines of 16 words; every word is three upper-case
hex digits right-aligned in a four-column field, e.g. ``" D05 E10 ..."``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, TextIO

from .program import ROM_WORDS, ProgramImage

WORDS_PER_LINE = 16
WORD_MAX = 0xFFF


class ImageFormatError(RuntimeError):
    """Raised when a hex image is malformed."""


def format_hex(words: Sequence[int]) -> str:
    if len(words) != ROM_WORDS:
        raise ImageFormatError(f"image must hold {ROM_WORDS} words, got {len(words)}")
    lines: list[str] = []
    for row in range(0, ROM_WORDS, WORDS_PER_LINE):
        lines.append("".join(f"{word:03X}".rjust(4) for word in words[row : row + WORDS_PER_LINE]))
    return "\n".join(lines) + "\n"


def parse_hex(lines: Iterable[str]) -> List[int]:
    words: List[int] = []
    for number, line in enumerate(lines, start=1):
        for token in line.split():
            try:
                word = int(token, 16)
            except ValueError as exc:
                raise ImageFormatError(f"line {number}: invalid hex word {token!r}") from exc
            if not 0 <= word <= WORD_MAX:
                raise ImageFormatError(f"line {number}: word {token} is wider than 12 bits")
            words.append(word)
    if len(words) != ROM_WORDS:
        raise ImageFormatError(f"image must hold {ROM_WORDS} words, got {len(words)}")
    return words


def load_hex(handle: TextIO, *, name: str = "") -> ProgramImage:
    """Read a hex dump from ``handle`` into a ``ProgramImage``."""

    return ProgramImage(name=name, words=parse_hex(handle))


def load_hex_from_path(path: Path) -> ProgramImage:
    with path.open("r", encoding="ascii") as handle:
        return load_hex(handle, name=path.stem)


def save_hex(path: Path, words: Sequence[int]) -> None:
    path.write_text(format_hex(words), encoding="ascii")
