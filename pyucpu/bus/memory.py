"""Instruction and data memories consumed by the uCPU core.

The core follows a Harvard layout: a 256-word instruction ROM holding 12-bit
words and a separate 256-byte data RAM. Both are plain backing stores; the
clocking discipline (combinational reads, writes applied at the clock edge)
is enforced by the core, which hands writes back instead of performing them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from pyucpu.utils import debug_enabled, debug_log

ADDRESS_SPACE = 0x100
WORD_MASK = 0xFFF


def _mask8(value: int) -> int:
    """Clamp ``value`` to the 8-bit address space of both memories."""

    return value & 0xFF


class MemoryError(Exception):
    """Raised when a memory is misconfigured or used incorrectly."""


class Addressable:
    """Interface for the backing stores addressed by the core."""

    def get_start_address(self) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    def get_end_address(self) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    def _offset(self, address: int) -> int:
        start = self.get_start_address()
        end = self.get_end_address()
        if not start <= address <= end:
            raise MemoryError(f"address {address:#04x} outside region {start:#04x}-{end:#04x}")
        return address - start


@dataclass
class DataMemory(Addressable):
    """Byte-addressable data RAM."""

    length: int = ADDRESS_SPACE

    def __post_init__(self) -> None:
        if not 0 < self.length <= ADDRESS_SPACE:
            raise MemoryError(f"data memory length {self.length} out of range (1-256)")
        self._data = bytearray(self.length)

    def get_start_address(self) -> int:
        return 0x00

    def get_end_address(self) -> int:
        return self.length - 1

    def load8(self, address: int) -> int:
        return self._data[self._offset(address)]

    def store8(self, address: int, value: int) -> None:
        offset = self._offset(address)
        if debug_enabled("memory"):
            debug_log("memory", "store8: addr=%02x val=%02x", address, _mask8(value))
        self._data[offset] = _mask8(value)

    def load_image(self, data: bytes | Iterable[int]) -> None:
        values = list(data)
        if len(values) > self.length:
            raise MemoryError(f"data image of {len(values)} bytes exceeds {self.length}-byte memory")
        for address, value in enumerate(values):
            if not 0 <= value <= 0xFF:
                raise MemoryError(f"value {value:#x} at {address:#04x} is wider than 8 bits")
        self._data[: len(values)] = bytes(values)

    def clear(self) -> None:
        self._data = bytearray(self.length)

    def snapshot(self) -> bytes:
        return bytes(self._data)


@dataclass
class InstructionMemory(Addressable):
    """Read-only program store of 12-bit instruction words."""

    length: int = ADDRESS_SPACE

    def __post_init__(self) -> None:
        if not 0 < self.length <= ADDRESS_SPACE:
            raise MemoryError(f"instruction memory length {self.length} out of range (1-256)")
        self._words: List[int] = [0] * self.length

    def get_start_address(self) -> int:
        return 0x00

    def get_end_address(self) -> int:
        return self.length - 1

    def load12(self, address: int) -> int:
        return self._words[self._offset(address)]

    def load_image(self, words: Iterable[int]) -> None:
        image = list(words)
        if len(image) > self.length:
            raise MemoryError(f"program image of {len(image)} words exceeds {self.length}-word memory")
        for address, word in enumerate(image):
            if not 0 <= word <= WORD_MASK:
                raise MemoryError(f"word {word:#x} at {address:#04x} is wider than 12 bits")
        self._words[: len(image)] = image

    def snapshot(self) -> tuple[int, ...]:
        return tuple(self._words)
