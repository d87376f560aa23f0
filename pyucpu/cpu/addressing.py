"""Operand addressing modes and the IX/IY index register engine.

Operands 0xF8-0xFF of register-addressed instructions name the index
registers instead of a plain data-memory location::

    F8 %IX   F9 %IY     index register, direct (store target)
    FA @IX   FB @IY     memory at the address held in the register
    FC @IX+  FD @IY+    same, then the register is incremented
    FE @-IX  FF @-IY    register decremented first, then memory at it

Bit 0 selects IX/IY, bit 2 enables the automatic update and bit 1 then picks
pre-decrement over post-increment. Updates wrap modulo 256.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum, auto
from typing import Final, Mapping

INDEX_PREFIX: Final[int] = 0xF8
IX_DIRECT: Final[int] = 0xF8
IY_DIRECT: Final[int] = 0xF9

OPERAND_NAMES: Final[Mapping[int, str]] = {
    0xF8: "%IX",
    0xF9: "%IY",
    0xFA: "@IX",
    0xFB: "@IY",
    0xFC: "@IX+",
    0xFD: "@IY+",
    0xFE: "@-IX",
    0xFF: "@-IY",
}


class AddressingMode(Enum):
    """How a register operand turns into an executive address."""

    DIRECT = auto()
    INDIRECT = auto()
    POST_INCREMENT = auto()
    PRE_DECREMENT = auto()


class IndexRegister(IntEnum):
    IX = 0
    IY = 1


def increment(value: int) -> int:
    return (value + 1) & 0xFF


def decrement(value: int) -> int:
    return (value - 1) & 0xFF


def addressing_mode(operand: int) -> AddressingMode:
    operand &= 0xFF
    if operand & INDEX_PREFIX != INDEX_PREFIX or not operand & 0b110:
        return AddressingMode.DIRECT
    if not operand & 0b100:
        return AddressingMode.INDIRECT
    if operand & 0b010:
        return AddressingMode.PRE_DECREMENT
    return AddressingMode.POST_INCREMENT


def index_register(operand: int) -> IndexRegister:
    return IndexRegister(operand & 0b1)


def direct_index_target(operand: int) -> IndexRegister | None:
    """Return the index register a store to ``operand`` writes, if any."""

    if operand & 0xFF in (IX_DIRECT, IY_DIRECT):
        return index_register(operand)
    return None


@dataclass(frozen=True)
class IndexRegisters:
    """Value snapshot of the two index registers."""

    ix: int = 0x00
    iy: int = 0x00

    def get(self, register: IndexRegister) -> int:
        return self.ix if register is IndexRegister.IX else self.iy

    def with_value(self, register: IndexRegister, value: int) -> "IndexRegisters":
        if register is IndexRegister.IX:
            return replace(self, ix=value & 0xFF)
        return replace(self, iy=value & 0xFF)


@dataclass(frozen=True)
class Resolution:
    """Executive address of an operand plus the index registers it leaves behind."""

    address: int
    mode: AddressingMode
    registers: IndexRegisters


def resolve(operand: int, registers: IndexRegisters) -> Resolution:
    """Resolve a register-addressed ``operand`` against ``registers``.

    Post-increment uses the current register value as the address and only
    the returned register snapshot carries the incremented value.
    Pre-decrement forms the address from the already decremented value.
    """

    operand &= 0xFF
    mode = addressing_mode(operand)
    if mode is AddressingMode.DIRECT:
        return Resolution(operand, mode, registers)

    register = index_register(operand)
    current = registers.get(register)
    if mode is AddressingMode.INDIRECT:
        return Resolution(current, mode, registers)
    if mode is AddressingMode.POST_INCREMENT:
        return Resolution(current, mode, registers.with_value(register, increment(current)))
    updated = decrement(current)
    return Resolution(updated, mode, registers.with_value(register, updated))


def store_index(operand: int, value: int, registers: IndexRegisters) -> IndexRegisters:
    """Apply a store to ``%IX``/``%IY``; other operands leave ``registers`` alone."""

    target = direct_index_target(operand)
    if target is None:
        return registers
    return registers.with_value(target, value)
