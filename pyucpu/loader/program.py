"""Program image structures shared by the assembler and the hex loader."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

ROM_WORDS = 0x100


@dataclass
class AddressRegion:
    """Contiguous range of assembled instruction addresses."""

    start: int
    end: int
    comment: str = ""

    def length(self) -> int:
        return self.end - self.start + 1


@dataclass
class ProgramImage:
    """A 256-word ROM image with the diagnostics produced while building it."""

    name: str = ""
    words: List[int] = field(default_factory=lambda: [0] * ROM_WORDS)
    regions: List[AddressRegion] = field(default_factory=list)
    listing: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_region(self, start: int, end: int, comment: str = "") -> None:
        self.regions.append(AddressRegion(start, end, comment))

    @property
    def ok(self) -> bool:
        return not self.errors
