"""Instruction word layout, control signals and the 16-entry opcode table.

A 12-bit instruction word is laid out as::

    11  9   8   7       0
    +----+-----+--------+
    | op | imm | operand|
    +----+-----+--------+

The three opcode bits together with the immediate bit select one of sixteen
instructions; the decoder reduces each to a ``ControlWord`` that travels
with the instruction from decode into execute.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Final, Iterable, List, Mapping, Sequence

from .addressing import OPERAND_NAMES, INDEX_PREFIX
from .alu import AluOp

WORD_MASK: Final[int] = 0xFFF
OPERAND_MASK: Final[int] = 0xFF
CODE_SHIFT: Final[int] = 8


class Opcode(IntEnum):
    AND = 0b000
    XOR = 0b001
    ADD = 0b010
    SUB = 0b011
    BRANCH = 0b100
    JUMP = 0b101
    LOAD = 0b110
    STORE = 0b111


class OperandKind(Enum):
    """How the assembler writes, and the core interprets, the operand field."""

    REGISTER = auto()
    IMMEDIATE = auto()
    LABEL = auto()


class Condition(Enum):
    """Decode-time redirect condition of an instruction."""

    NEVER = auto()
    ALWAYS = auto()
    CARRY_CLEAR = auto()
    ZERO_CLEAR = auto()


@dataclass(frozen=True)
class ControlWord:
    """Control signals latched at decode and consumed by execute."""

    alu_op: AluOp = AluOp.AND
    immediate: bool = False
    register_jump: bool = False
    load: bool = False
    store: bool = False
    acc_write: bool = False
    zf_write: bool = False
    cf_write: bool = False


NOP_CONTROL: Final[ControlWord] = ControlWord()


def derive_control(code: int) -> ControlWord:
    """Derive the control word for a 4-bit opcode/immediate ``code``."""

    opcode = Opcode(code >> 1)
    immediate = bool(code & 0b1)
    arithmetic = opcode <= Opcode.SUB
    compare = opcode is Opcode.SUB and immediate
    load = opcode is Opcode.LOAD
    return ControlWord(
        alu_op=AluOp(opcode & 0b11),
        immediate=immediate,
        register_jump=opcode is Opcode.JUMP and not immediate,
        load=load,
        store=opcode is Opcode.STORE and not immediate,
        acc_write=load or (arithmetic and not compare),
        zf_write=arithmetic,
        cf_write=opcode in (Opcode.ADD, Opcode.SUB),
    )


@dataclass(frozen=True)
class Instruction:
    """Metadata describing one of the sixteen instruction codes."""

    code: int
    mnemonic: str
    operand_kind: OperandKind
    condition: Condition = Condition.NEVER
    reserved: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.code <= 0xF:
            raise ValueError(f"instruction code out of range: {self.code}")
        if len(self.mnemonic) != 3:
            raise ValueError(f"mnemonic must have three letters: {self.mnemonic!r}")

    @property
    def opcode(self) -> Opcode:
        return Opcode(self.code >> 1)

    @property
    def immediate(self) -> bool:
        return bool(self.code & 0b1)

    @property
    def control(self) -> ControlWord:
        if self.reserved:
            return NOP_CONTROL
        return derive_control(self.code)

    @property
    def uses_index_registers(self) -> bool:
        """Whether 0xF8-0xFF operands select the index register modes."""

        return self.operand_kind is OperandKind.REGISTER and not self.reserved

    def encode(self, operand: int) -> int:
        return (self.code << CODE_SHIFT) | (operand & OPERAND_MASK)


class InstructionTable:
    """Builder for the 16-entry instruction lookup table."""

    _TABLE_SIZE: Final[int] = 0x10

    def __init__(self) -> None:
        self._table: List[Instruction | None] = [None] * self._TABLE_SIZE

    def register(self, instruction: Instruction) -> None:
        existing = self._table[instruction.code]
        if existing is not None:
            raise ValueError(
                f"code {instruction.code:#03x} already registered as {existing.mnemonic}")
        self._table[instruction.code] = instruction

    def register_all(self, instructions: Iterable[Instruction]) -> None:
        for instruction in instructions:
            self.register(instruction)

    def freeze(self) -> Sequence[Instruction]:
        missing = [code for code, entry in enumerate(self._table) if entry is None]
        if missing:
            raise ValueError(f"instruction codes without an entry: {missing}")
        return tuple(self._table)  # type: ignore[arg-type]


def build_instruction_table(instructions: Iterable[Instruction]) -> Sequence[Instruction]:
    table = InstructionTable()
    table.register_all(instructions)
    return table.freeze()


DEFAULT_INSTRUCTIONS: Sequence[Instruction] = (
    Instruction(0x0, "ANA", OperandKind.REGISTER),
    Instruction(0x1, "ANI", OperandKind.IMMEDIATE),
    Instruction(0x2, "XRA", OperandKind.REGISTER),
    Instruction(0x3, "XRI", OperandKind.IMMEDIATE),
    Instruction(0x4, "ADA", OperandKind.REGISTER),
    Instruction(0x5, "ADI", OperandKind.IMMEDIATE),
    Instruction(0x6, "SBA", OperandKind.REGISTER),
    # Compare: flags only, the accumulator is left untouched.
    Instruction(0x7, "SBI", OperandKind.IMMEDIATE),
    Instruction(0x8, "BNC", OperandKind.LABEL, Condition.CARRY_CLEAR),
    Instruction(0x9, "BNZ", OperandKind.LABEL, Condition.ZERO_CLEAR),
    Instruction(0xA, "JPR", OperandKind.REGISTER),
    Instruction(0xB, "JMP", OperandKind.LABEL, Condition.ALWAYS),
    Instruction(0xC, "LDA", OperandKind.REGISTER),
    Instruction(0xD, "LDI", OperandKind.IMMEDIATE),
    Instruction(0xE, "STA", OperandKind.REGISTER),
    Instruction(0xF, "STX", OperandKind.REGISTER, reserved=True),
)


INSTRUCTION_TABLE: Sequence[Instruction] = build_instruction_table(DEFAULT_INSTRUCTIONS)

MNEMONIC_TABLE: Mapping[str, Instruction] = {
    instruction.mnemonic: instruction for instruction in INSTRUCTION_TABLE
}


def decode(word: int) -> Instruction:
    return INSTRUCTION_TABLE[(word & WORD_MASK) >> CODE_SHIFT]


def operand_field(word: int) -> int:
    return word & OPERAND_MASK


def format_operand(instruction: Instruction, operand: int) -> str:
    operand &= OPERAND_MASK
    if instruction.operand_kind is OperandKind.REGISTER:
        if operand & INDEX_PREFIX == INDEX_PREFIX:
            return OPERAND_NAMES[operand]
        return f"%{operand:02X}"
    return f"{operand:02X}"


def disassemble(word: int) -> str:
    """Render ``word`` in assembler syntax, e.g. ``0xEFC`` -> ``STA @IX+``."""

    instruction = decode(word)
    return f"{instruction.mnemonic} {format_operand(instruction, operand_field(word))}"
