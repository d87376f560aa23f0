"""uCPU machine assembly: memories, core and optional trace."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from pyucpu.bus import DataMemory, InstructionMemory
from pyucpu.cpu import UCPU, CoreState
from pyucpu.utils import TraceRecorder


@dataclass
class MachineConfig:
    """Runtime configuration for a uCPU machine."""

    rom_image: Optional[Sequence[int]] = None
    ram_image: Optional[bytes] = None
    trace_capacity: int = 0


@dataclass
class Machine:
    """Aggregates the core with its memories."""

    cpu: UCPU
    rom: InstructionMemory
    ram: DataMemory
    trace: TraceRecorder | None = None

    @property
    def state(self) -> CoreState:
        return self.cpu.state

    def run(self, cycles: int) -> int:
        return self.cpu.run(cycles)

    def format_state(self) -> str:
        state = self.cpu.state
        return (
            f"cycles={self.cpu.cycle_count} PC={state.pc:02X} ACC={state.acc:02X} "
            f"IX={state.ix:02X} IY={state.iy:02X} CF={int(state.cf)} ZF={int(state.zf)}"
        )


def create_machine(config: MachineConfig) -> Machine:
    """Instantiate a machine with the requested images and hold it in reset."""

    rom = InstructionMemory()
    if config.rom_image is not None:
        rom.load_image(config.rom_image)

    ram = DataMemory()
    if config.ram_image is not None:
        ram.load_image(config.ram_image)

    trace = TraceRecorder(config.trace_capacity) if config.trace_capacity > 0 else None
    cpu = UCPU(rom, ram, trace=trace)
    cpu.reset()

    return Machine(cpu=cpu, rom=rom, ram=ram, trace=trace)
