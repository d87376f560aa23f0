"""Two-pass assembler for uCPU source files.

Source line syntax (tokens separated by white space, case-insensitive)::

    [$label] [MNEMONIC OPERAND] [comment]
    [$label] ; comment

Labels are ``$`` followed by a decimal number of up to four digits. Operands
are two-digit hex immediates (``0A``), registers (``%0A``), the index forms
``%IX %IY @IX @IY @IX+ @IY+ @-IX @-IY`` or, for BNC/BNZ/JMP, label references.
``ORG hh`` moves the location counter. Anything after the operand is comment.

The first pass checks syntax and assigns addresses to labels; the second
encodes operands, so labels may be referenced before they are defined.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO, Union

from pyucpu.cpu.addressing import OPERAND_NAMES
from pyucpu.cpu.decoder import MNEMONIC_TABLE, Instruction, OperandKind
from pyucpu.utils import debug_enabled, debug_log

from .program import ROM_WORDS, ProgramImage


class AssemblerError(RuntimeError):
    """Raised when a source file has syntax errors; no image is produced."""

    def __init__(self, errors: List[str], listing: List[str]) -> None:
        super().__init__(f"{len(errors)} syntax error(s), image not generated")
        self.errors = errors
        self.listing = listing


ORG = "ORG"
MAX_LABEL_DIGITS = 4

_LABEL = re.compile(r"^\$(\d{1,%d})$" % MAX_LABEL_DIGITS)
_HEX_BYTE = re.compile(r"^[0-9A-F]{1,2}$")
_TOKEN = re.compile(r"\S+")
_INDEX_OPERANDS = {name: code for code, name in OPERAND_NAMES.items()}

COLUMN_WORD = 12
COLUMN_LABEL = 24
COLUMN_MNEMONIC = 32
COLUMN_OPERAND = 40
COLUMN_COMMENT = 48


class _LineError(Exception):
    def __init__(self, message: str, token: str) -> None:
        super().__init__(message)
        self.message = message
        self.token = token


@dataclass
class _SourceLine:
    number: int
    text: str
    label: Optional[int] = None
    mnemonic: Optional[str] = None
    instruction: Optional[Instruction] = None
    value: Optional[int] = None
    reference: Optional[int] = None
    comment: Optional[str] = None
    address: int = 0

    @property
    def is_org(self) -> bool:
        return self.mnemonic == ORG


def assemble(handle: TextIO, *, name: str = "<source>") -> ProgramImage:
    """Assemble the source read from ``handle``.

    Raises ``AssemblerError`` on syntax errors. Undefined labels and duplicate
    label definitions do not abort; they are reported in the returned image's
    ``errors`` and ``warnings``.
    """

    return _Assembler(name).assemble(handle)


def assemble_source(source: str, *, name: str = "<source>") -> ProgramImage:
    return assemble(io.StringIO(source), name=name)


def assemble_from_path(path: Path) -> ProgramImage:
    with path.open("r", encoding="utf-8") as handle:
        image = assemble(handle, name=path.name)
    image.name = path.stem
    return image


def write_listing(path: Path, image: ProgramImage) -> None:
    write_listing_lines(path, image.listing)


def write_listing_lines(path: Path, lines: List[str]) -> None:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


class _Assembler:
    def __init__(self, name: str) -> None:
        self._name = name
        self._labels: dict[int, int] = {}

    def assemble(self, handle: TextIO) -> ProgramImage:
        lines: List[_SourceLine] = []
        entries: List[Union[_SourceLine, str]] = []
        syntax_errors: List[str] = []
        for number, raw in enumerate(handle, start=1):
            text = raw.rstrip("\r\n")
            try:
                line = self._parse(number, text)
            except _LineError as exc:
                message = (
                    f"Syntax error: {exc.message} \"{exc.token}\". The source line is ignored.\n"
                    f"{number:4d}:\t\t\t{text}"
                )
                syntax_errors.append(message)
                entries.append(message)
                continue
            lines.append(line)
            entries.append(line)

        if syntax_errors:
            raise AssemblerError(syntax_errors, self._first_pass_listing(lines, entries))

        image = ProgramImage(name=self._name)
        self._first_pass(lines, image)
        self._second_pass(lines, image)
        if debug_enabled("asm"):
            debug_log("asm", "%s: %d warning(s), %d error(s)", self._name, len(image.warnings), len(image.errors))
        return image

    # ------------------------------------------------------------------
    # Parsing

    def _parse(self, number: int, text: str) -> _SourceLine:
        line = _SourceLine(number, text)
        tokens = list(_TOKEN.finditer(text))
        index = 0

        if index < len(tokens) and tokens[index].group().startswith("$"):
            token = tokens[index].group()
            line.label = self._parse_label(token, "incorrect label")
            index += 1

        if index >= len(tokens):
            return line
        token = tokens[index].group().upper()
        if token.startswith(";"):
            line.comment = text[tokens[index].start() :]
            return line
        if token == ORG:
            line.mnemonic = ORG
            kind = OperandKind.IMMEDIATE
        elif token in MNEMONIC_TABLE:
            line.instruction = MNEMONIC_TABLE[token]
            line.mnemonic = token
            kind = line.instruction.operand_kind
        else:
            raise _LineError("unexpected token", tokens[index].group())
        index += 1

        if index >= len(tokens):
            raise _LineError("missing operand after", tokens[index - 1].group())
        self._parse_operand(line, kind, tokens[index].group())
        index += 1

        if index < len(tokens):
            line.comment = text[tokens[index].start() :]
        return line

    def _parse_operand(self, line: _SourceLine, kind: OperandKind, raw: str) -> None:
        token = raw.upper()
        if token.startswith("$"):
            if kind is not OperandKind.LABEL:
                raise _LineError("incorrect operand", raw)
            line.reference = self._parse_label(token, "incorrect label operand")
            return
        if token in _INDEX_OPERANDS:
            if kind is not OperandKind.REGISTER:
                raise _LineError("not allowed indexed mode operand", raw)
            line.value = _INDEX_OPERANDS[token]
            return
        if token.startswith("%"):
            if kind is not OperandKind.REGISTER:
                raise _LineError("not allowed reg operand", raw)
            token = token[1:]
        elif kind is OperandKind.REGISTER:
            raise _LineError('reg operand required, possibly add "%" prefix to', raw)
        if not _HEX_BYTE.match(token):
            raise _LineError("incorrect operand", raw)
        line.value = int(token, 16)

    @staticmethod
    def _parse_label(token: str, message: str) -> int:
        match = _LABEL.match(token)
        if match is None:
            raise _LineError(message, token)
        return int(match.group(1))

    # ------------------------------------------------------------------
    # Passes

    def _first_pass(self, lines: List[_SourceLine], image: ProgramImage) -> None:
        pc = 0
        region_start: Optional[int] = None
        region_end = 0
        for line in lines:
            line.address = pc
            if line.label is not None:
                if line.label in self._labels:
                    image.warnings.append(
                        f"Warning: multiple definitions of label \"${line.label}\", the last definition wins."
                    )
                self._labels[line.label] = pc
            if line.is_org:
                if region_start is not None:
                    self._close_region(image, region_start, region_end)
                    region_start = None
                # listed at the new location
                pc = line.value or 0
                line.address = pc
            elif line.instruction is not None:
                if region_start is None:
                    region_start = pc
                region_end = pc
                pc = (pc + 1) % ROM_WORDS
        if region_start is not None:
            self._close_region(image, region_start, region_end)

    def _close_region(self, image: ProgramImage, start: int, end: int) -> None:
        image.add_region(start, end)
        if debug_enabled("asm"):
            region = image.regions[-1]
            debug_log("asm", "%s: region %02x-%02x, %d word(s)", self._name, start, end, region.length())

    def _first_pass_listing(self, lines: List[_SourceLine], entries: List[Union[_SourceLine, str]]) -> List[str]:
        """Listing of the accepted lines with the syntax errors in source order."""

        self._first_pass(lines, ProgramImage(name=self._name))
        listing = [f" ---- Source file: {self._name}. First pass assembler listing. ----", ""]
        for entry in entries:
            if isinstance(entry, str):
                listing.extend(entry.split("\n"))
                continue
            word = None
            if entry.instruction is not None:
                operand = entry.value
                if entry.reference is not None:
                    operand = self._labels.get(entry.reference)
                word = entry.instruction.encode(operand or 0)
            listing.append(self._listing_line(entry, word))
        return listing

    def _second_pass(self, lines: List[_SourceLine], image: ProgramImage) -> None:
        image.listing.append(f" ---- Source file: {self._name}. Second pass assembler listing. ----")
        image.listing.append("")
        for line in lines:
            word: Optional[int] = None
            if line.instruction is not None:
                operand = line.value
                if line.reference is not None:
                    operand = self._labels.get(line.reference)
                    if operand is None:
                        message = f"Error: label \"${line.reference}\" is not defined. Operand left uninitialized."
                        image.errors.append(message)
                        image.listing.append(message)
                word = line.instruction.encode(operand or 0)
                image.words[line.address] = word
            image.listing.append(self._listing_line(line, word))

    # ------------------------------------------------------------------
    # Listing

    def _listing_line(self, line: _SourceLine, word: Optional[int]) -> str:
        text = f"{line.number:4d}:   {line.address:02X}"
        if word is not None:
            text = _place(text, COLUMN_WORD, f"{word:03X}")
        if line.label is not None:
            text = _place(text, COLUMN_LABEL, f"${line.label}")
        if line.mnemonic is not None:
            text = _place(text, COLUMN_MNEMONIC, line.mnemonic)
            text = _place(text, COLUMN_OPERAND, self._format_operand(line))
        if line.comment is not None:
            text = _place(text, COLUMN_COMMENT, line.comment)
        return text

    @staticmethod
    def _format_operand(line: _SourceLine) -> str:
        if line.reference is not None:
            return f"${line.reference}"
        value = line.value or 0
        if line.instruction is not None and line.instruction.operand_kind is OperandKind.REGISTER:
            return f"%{value:02X}"
        return f"{value:02X}".rjust(3)


def _place(text: str, column: int, field: str) -> str:
    if len(text) < column:
        return text.ljust(column) + field
    return f"{text} {field}"
