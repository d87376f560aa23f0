"""Per-cycle execution trace buffer for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .debug import debug_log


@dataclass
class TraceEntry:
    cycle: int
    pc: int
    ir: int
    mnemonic: str
    acc: int
    ix: int
    iy: int
    ea: int
    cf: bool
    zf: bool
    skip: str
    decode_suppressed: bool
    execute_suppressed: bool
    write_address: int | None = None
    write_value: int | None = None
    note: str = ""


class TraceRecorder:
    """Ring buffer holding the most recent pipeline cycles."""

    def __init__(self, capacity: int = 256) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: List[TraceEntry | None] = [None] * capacity
        self._index = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def record_cycle(
        self,
        cycle: int,
        core_state,
        *,
        mnemonic: str = "",
        decode_suppressed: bool = False,
        execute_suppressed: bool = False,
        write: tuple[int, int] | None = None,
        note: str = "",
    ) -> None:
        """Store the pre-tick ``core_state`` of ``cycle`` with its pipeline events."""

        entry = TraceEntry(
            cycle=cycle,
            pc=core_state.pc & 0xFF,
            ir=core_state.ir & 0xFFF,
            mnemonic=mnemonic,
            acc=core_state.acc & 0xFF,
            ix=core_state.ix & 0xFF,
            iy=core_state.iy & 0xFF,
            ea=core_state.ea & 0xFF,
            cf=bool(core_state.cf),
            zf=bool(core_state.zf),
            skip=getattr(core_state.skip, "name", str(core_state.skip)),
            decode_suppressed=decode_suppressed,
            execute_suppressed=execute_suppressed,
            write_address=None if write is None else write[0] & 0xFF,
            write_value=None if write is None else write[1] & 0xFF,
            note=note,
        )
        self._append(entry)

    def entries(self, limit: int | None = None) -> Iterable[TraceEntry]:
        count = self._size if limit is None else min(self._size, max(limit, 0))
        for offset in range(count):
            index = (self._index - count + offset) % self._capacity
            entry = self._entries[index]
            if entry is not None:
                yield entry

    def last_entry(self) -> TraceEntry | None:
        if self._size == 0:
            return None
        index = (self._index - 1) % self._capacity
        return self._entries[index]

    def clear(self) -> None:
        self._entries = [None] * self._capacity
        self._index = 0
        self._size = 0

    def format_entries(self, limit: int | None = None) -> Sequence[str]:
        lines: list[str] = []
        for entry in self.entries(limit):
            flags: list[str] = []
            if entry.decode_suppressed:
                flags.append("S2")
            if entry.execute_suppressed:
                flags.append("S3")
            if entry.write_address is not None:
                flags.append(f"W[{entry.write_address:02X}]={entry.write_value:02X}")
            if entry.note:
                flags.append(entry.note)
            flag_repr = ",".join(flags) if flags else "-"
            mnemonic = entry.mnemonic or "?"
            line = (
                f"cyc={entry.cycle:05d} pc={entry.pc:02X} ir={entry.ir:03X} {mnemonic:<9} "
                f"ACC={entry.acc:02X} IX={entry.ix:02X} IY={entry.iy:02X} EA={entry.ea:02X} "
                f"CF={int(entry.cf)} ZF={int(entry.zf)} skip={entry.skip} flags={flag_repr}"
            )
            lines.append(line)
        return lines

    def dump(self, category: str, limit: int | None = None) -> None:
        for line in self.format_entries(limit):
            debug_log(category, line)

    def _append(self, entry: TraceEntry) -> None:
        self._entries[self._index] = entry
        self._index = (self._index + 1) % self._capacity
        if self._size < self._capacity:
            self._size += 1
